"""
Tests for verify_all.

Core claims:
    - Results come back in source order, one per selected $p
    - fail_fast stops at the first failure
    - begin/stop labels select a half-open range of the source
    - A process pool gives exactly the sequential results
"""

from pathlib import Path

import pytest

from mmcheck import Failed, UnknownLabel, Verified, VerifyOptions
from mmcheck import runner
from mmcheck.reader import load_database, load_file
from mmcheck.report import summarize
from mmcheck.runner import _chunks, select_theorems, verify_all


CORPUS = Path(__file__).parent / "corpus"

MIXED = """
$c |- T U $.
ax $a |- T $.
ok1 $p |- T $= ax $.
bad1 $p |- U $= ax $.
ok2 $p |- T $= ax $.
bad2 $p |- T $= ax ax $.
ok3 $p |- T $= ax $.
"""


@pytest.fixture
def mixed():
    return load_database(MIXED, "mixed.mm")


class TestVerifyAll:
    def test_source_order(self, mixed):
        results = verify_all(mixed)
        assert [label for label, _ in results] == ["ok1", "bad1", "ok2", "bad2", "ok3"]
        assert [r.ok for _, r in results] == [True, False, True, False, True]

    def test_failure_kinds(self, mixed):
        results = dict(verify_all(mixed))
        assert results["ok1"] == Verified()
        assert isinstance(results["bad1"], Failed)
        assert results["bad1"].kind == "StackShapeMismatch"
        assert "2 formulas" in results["bad2"].reason

    def test_fail_fast(self, mixed):
        results = verify_all(mixed, fail_fast=True)
        assert [label for label, _ in results] == ["ok1", "bad1"]

    def test_no_theorems(self):
        db = load_file(CORPUS / "no-theorems.mm")
        assert verify_all(db) == []

    def test_idempotent(self, mixed):
        assert verify_all(mixed) == verify_all(mixed)

    def test_options_object(self, mixed):
        results = verify_all(mixed, options=VerifyOptions(fail_fast=True))
        assert len(results) == 2

    def test_verbose_output(self, mixed, capsys):
        verify_all(mixed, verbose=True)
        out = capsys.readouterr().out
        assert "[verified] ok1" in out
        assert "[FAILED] bad1: StackShapeMismatch" in out


class TestSelection:
    def test_begin_label(self, mixed):
        assert select_theorems(mixed, begin_label="ok2") == ["ok2", "bad2", "ok3"]

    def test_stop_label_excluded(self, mixed):
        assert select_theorems(mixed, stop_label="ok2") == ["ok1", "bad1"]

    def test_range(self, mixed):
        results = verify_all(mixed, begin_label="bad1", stop_label="ok3")
        assert [label for label, _ in results] == ["bad1", "ok2", "bad2"]

    def test_begin_at_non_theorem(self, mixed):
        assert select_theorems(mixed, begin_label="ax") == [
            "ok1", "bad1", "ok2", "bad2", "ok3"]

    def test_unknown_label(self, mixed):
        with pytest.raises(UnknownLabel):
            verify_all(mixed, begin_label="nothing")


class TestWorkers:
    def test_chunks_cover_everything_in_order(self):
        labels = [f"t{i}" for i in range(10)]
        chunks = _chunks(labels, 4)
        assert [l for chunk in chunks for l in chunk] == labels
        assert len(chunks) <= 4

    def test_chunks_more_than_labels(self):
        assert _chunks(["a", "b"], 8) == [["a"], ["b"]]

    def test_worker_keeps_database(self, mixed, monkeypatch):
        monkeypatch.setattr(runner, "_worker_db", None)
        runner._init_worker(mixed)
        chunk = runner._verify_chunk(["ok1", "bad1"])
        assert chunk[0] == ("ok1", Verified())
        assert chunk[1][1].kind == "StackShapeMismatch"

    def test_pool_matches_sequential(self, mixed):
        assert verify_all(mixed, workers=2) == verify_all(mixed)

    def test_pool_fail_fast(self, mixed):
        results = verify_all(mixed, workers=2, fail_fast=True)
        assert [label for label, _ in results] == ["ok1", "bad1"]

    def test_pool_on_corpus(self):
        db = load_file(CORPUS / "dummy-dv.mm")
        results = verify_all(db, workers=2)
        assert [label for label, _ in results] == ["thd", "thdum", "thdumc"]
        assert all(r.ok for _, r in results)


class TestSummary:
    def test_summarize(self, mixed):
        summary = summarize(verify_all(mixed))
        assert summary == {
            "theorems": 5,
            "verified": 3,
            "failed": 2,
            "by_kind": {"StackShapeMismatch": 2},
        }
