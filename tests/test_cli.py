"""Tests for the command-line entry point."""

import io
from pathlib import Path

from mmcheck.__main__ import EXIT_FAILED, EXIT_LOAD_ERROR, EXIT_OK, main, parse_args


CORPUS = Path(__file__).parent / "corpus"


def run(capsys, *argv):
    code = main([str(a) for a in argv])
    out, err = capsys.readouterr()
    return code, out, err


class TestExitCodes:
    def test_verified(self, capsys):
        code, out, _ = run(capsys, CORPUS / "demo0.mm")
        assert code == EXIT_OK
        assert "Loaded demo0.mm: 1 theorems" in out
        assert "[verified] th1" in out
        assert "Failed:   0" in out

    def test_failed_proof(self, capsys):
        code, out, _ = run(capsys, CORPUS / "dv-violation.mm")
        assert code == EXIT_FAILED
        assert "DisjointViolation: 1" in out
        assert "thbad" in out

    def test_load_error(self, capsys):
        code, _, err = run(capsys, CORPUS / "unclosed-comment.mm")
        assert code == EXIT_LOAD_ERROR
        assert "unclosed-comment.mm:3" in err

    def test_missing_file(self, capsys, tmp_path):
        code, _, err = run(capsys, tmp_path / "missing.mm")
        assert code == EXIT_LOAD_ERROR
        assert err.startswith("error:")

    def test_unknown_begin_label(self, capsys):
        code, _, err = run(capsys, CORPUS / "demo0.mm", "-b", "nothing")
        assert code == EXIT_LOAD_ERROR
        assert "nothing" in err


class TestOptions:
    def test_defaults(self):
        args = parse_args(["set.mm"])
        assert args.database == "set.mm"
        assert args.workers == 1
        assert not args.fail_fast
        assert args.begin_label is None

    def test_quiet(self, capsys):
        code, out, _ = run(capsys, CORPUS / "demo0.mm", "--quiet")
        assert code == EXIT_OK
        assert "Loaded" not in out
        assert "[verified]" not in out
        assert "Verified: 1" in out

    def test_stop_label_skips_everything(self, capsys):
        code, out, _ = run(capsys, CORPUS / "stack-shape.mm", "-s", "th")
        assert code == EXIT_OK
        assert "Theorems checked: 0" in out

    def test_workers(self, capsys):
        code, out, _ = run(capsys, CORPUS / "nested-scopes.mm", "--workers", "2")
        assert code == EXIT_OK
        assert "Verified: 3" in out

    def test_stdin(self, capsys, monkeypatch):
        source = (CORPUS / "demo0.mm").read_bytes()
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(source)))
        code, out, _ = run(capsys)
        assert code == EXIT_OK
        assert "Loaded <stdin>" in out
