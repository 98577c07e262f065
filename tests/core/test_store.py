"""
Unit tests for the statement store and mandatory frames.

Core claims:
    - Labels are unique forever, even after their scope closes
    - Every visible $e is mandatory; a $f only when its variable is used
    - Mandatory hypotheses keep declaration order, $f and $e interleaved
    - Only $d pairs between mandatory variables are mandatory
"""

import pytest

from mmcheck.core.errors import DuplicateLabel, UnknownLabel
from mmcheck.core.scope import ScopeStack
from mmcheck.core.state import (
    AXIOM, ESSENTIAL, FLOATING, THEOREM, Assertion, Hypothesis, Proof,
)
from mmcheck.core.store import StatementStore


def _setup(*variables):
    store = StatementStore()
    scopes = ScopeStack()
    for v in variables:
        scopes.add_variable(v)
    return store, scopes


class TestDeclare:
    def test_declare_and_lookup(self):
        store, scopes = _setup("x")
        store.declare(FLOATING, "wx", ("wff", "x"), scopes)
        hyp = store.lookup("wx")
        assert isinstance(hyp, Hypothesis)
        assert hyp.variable == "x"
        assert hyp.index == 0

    def test_indexes_follow_declaration_order(self):
        store, scopes = _setup("x")
        store.declare(FLOATING, "wx", ("wff", "x"), scopes)
        store.declare(AXIOM, "ax", ("|-", "x"), scopes)
        assert [s.index for s in store] == [0, 1]
        assert [s.label for s in store] == ["wx", "ax"]

    def test_duplicate_label(self):
        store, scopes = _setup("x")
        store.declare(FLOATING, "wx", ("wff", "x"), scopes)
        with pytest.raises(DuplicateLabel):
            store.declare(AXIOM, "wx", ("|-", "x"), scopes)

    def test_label_reserved_after_scope_closes(self):
        store, scopes = _setup()
        scopes.open()
        scopes.add_variable("x")
        store.declare(FLOATING, "wx", ("wff", "x"), scopes)
        scopes.close()
        with pytest.raises(DuplicateLabel):
            store.declare(AXIOM, "wx", ("wff",), scopes)
        # still retrievable, just not visible
        assert store.lookup("wx").label == "wx"
        assert "wx" not in scopes.visible_labels()

    def test_unknown_label(self):
        store, _ = _setup()
        with pytest.raises(UnknownLabel):
            store.lookup("nothing")

    def test_hypothesis_pushed_on_scope(self):
        store, scopes = _setup("x")
        store.declare(FLOATING, "wx", ("wff", "x"), scopes)
        store.declare(ESSENTIAL, "h", ("|-", "x"), scopes)
        assert [h.label for h in scopes.hypotheses()] == ["wx", "h"]


class TestMandatoryFrame:
    def test_unused_floating_not_mandatory(self):
        store, scopes = _setup("x", "y")
        store.declare(FLOATING, "wx", ("wff", "x"), scopes)
        store.declare(FLOATING, "wy", ("wff", "y"), scopes)
        ax = store.declare(AXIOM, "ax", ("|-", "x"), scopes)
        assert isinstance(ax, Assertion)
        assert [h.label for h in ax.hypotheses] == ["wx"]

    def test_essential_always_mandatory(self):
        store, scopes = _setup("x", "y")
        store.declare(FLOATING, "wx", ("wff", "x"), scopes)
        store.declare(FLOATING, "wy", ("wff", "y"), scopes)
        scopes.open()
        store.declare(ESSENTIAL, "h", ("|-", "y"), scopes)
        ax = store.declare(AXIOM, "ax", ("|-", "x"), scopes)
        # y only occurs in the essential hypothesis but is still needed
        assert [h.label for h in ax.hypotheses] == ["wx", "wy", "h"]
        assert [h.label for h in ax.essential] == ["h"]
        assert [h.label for h in ax.floating] == ["wx", "wy"]

    def test_interleaved_declaration_order(self):
        store, scopes = _setup("x", "y")
        store.declare(FLOATING, "wx", ("wff", "x"), scopes)
        store.declare(ESSENTIAL, "h", ("|-", "x"), scopes)
        store.declare(FLOATING, "wy", ("wff", "y"), scopes)
        ax = store.declare(AXIOM, "ax", ("|-", "x", "y"), scopes)
        assert [h.label for h in ax.hypotheses] == ["wx", "h", "wy"]

    def test_closed_scope_hypotheses_not_mandatory(self):
        store, scopes = _setup("x")
        store.declare(FLOATING, "wx", ("wff", "x"), scopes)
        scopes.open()
        store.declare(ESSENTIAL, "h", ("|-", "x"), scopes)
        scopes.close()
        ax = store.declare(AXIOM, "ax", ("|-", "T"), scopes)
        assert ax.hypotheses == ()

    def test_mandatory_disjoint_pairs(self):
        store, scopes = _setup("x", "y", "z")
        for v in "xyz":
            store.declare(FLOATING, "w" + v, ("set", v), scopes)
        scopes.add_disjoint(["x", "y", "z"])
        ax = store.declare(AXIOM, "ax", ("|-", "x", "=", "y"), scopes)
        assert ax.disjoint == frozenset({("x", "y")})

    def test_theorem_keeps_proof(self):
        store, scopes = _setup()
        proof = Proof(())
        th = store.declare(THEOREM, "th", ("|-", "T"), scopes, proof=proof)
        assert th.is_theorem
        assert th.proof is proof
