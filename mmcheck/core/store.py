"""
Statement store: the append-only label table.

Every labelled statement ($f, $e, $a, $p) lands here exactly once, in
source order. Labels are reserved forever: a hypothesis that went out of
scope still blocks its label from being reused.
"""

from typing import Optional

from .errors import DuplicateLabel, Position, UnknownLabel
from .scope import ScopeStack
from .state import (
    AXIOM, ESSENTIAL, FLOATING, THEOREM,
    Assertion, Hypothesis, Proof, Statement,
)


class StatementStore:

    def __init__(self):
        self._by_label = {}

    def __len__(self):
        return len(self._by_label)

    def __iter__(self):
        return iter(self._by_label.values())

    def __contains__(self, label):
        return label in self._by_label

    @property
    def next_index(self) -> int:
        return len(self._by_label)

    def declare(self, kind: str, label: str, formula: tuple,
                scopes: Optional[ScopeStack] = None,
                proof: Optional[Proof] = None,
                position: Optional[Position] = None) -> Statement:
        """
        Record a new statement and return it.

        Hypotheses are also pushed onto the innermost scope. Assertions
        get their mandatory frame computed from the visible scope.
        """
        if label in self._by_label:
            raise DuplicateLabel(f"label {label!r} already declared", position)
        scopes = scopes if scopes is not None else ScopeStack()
        index = self.next_index

        if kind in (FLOATING, ESSENTIAL):
            stmt = Hypothesis(label, kind, tuple(formula), index, scopes.depth, position)
            scopes.add_hypothesis(stmt)
        elif kind in (AXIOM, THEOREM):
            hyps, dvs = mandatory_frame(tuple(formula), scopes)
            stmt = Assertion(label, kind, tuple(formula), hyps, dvs,
                             index, proof, position)
        else:
            raise ValueError(f"not a labelled statement kind: {kind!r}")

        self._by_label[label] = stmt
        return stmt

    def lookup(self, label: str) -> Statement:
        try:
            return self._by_label[label]
        except KeyError:
            raise UnknownLabel(f"unknown label {label!r}") from None

    def get(self, label: str) -> Optional[Statement]:
        return self._by_label.get(label)


def mandatory_frame(conclusion: tuple, scopes: ScopeStack) -> tuple:
    """
    The mandatory hypotheses and disjointness pairs of an assertion.

    All visible essential hypotheses are mandatory. A visible floating
    hypothesis is mandatory when its variable occurs in the conclusion
    or in one of those essential hypotheses. A disjointness pair is
    mandatory when both of its variables are. Hypotheses keep their
    declaration order.
    """
    visible = scopes.hypotheses()
    essential = [h for h in visible if not h.is_floating]
    used = set(conclusion[1:])
    for hyp in essential:
        used.update(hyp.formula[1:])

    hyps = tuple(
        h for h in visible
        if not h.is_floating or h.variable in used
    )
    mandatory_vars = {h.variable for h in hyps if h.is_floating}
    dvs = frozenset(
        (x, y) for x, y in scopes.active_disjoint()
        if x in mandatory_vars and y in mandatory_vars
    )
    return hyps, dvs
