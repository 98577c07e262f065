"""
Scope manager: an explicit stack of frames for ${ ... $} blocks.

Each frame holds what was introduced since its ${: variables, floating
and essential hypotheses, disjointness pairs. Closing a frame makes all
of that invisible again; the labels themselves stay reserved in the
statement store. Frame 0 is the whole database and is never closed.
"""

import itertools
from dataclasses import dataclass, field
from typing import Optional

from .errors import (
    MalformedStatement, Position, UnbalancedScope, UnclosedScope,
)
from .state import Hypothesis, disjoint_pair


@dataclass
class Frame:
    variables: set = field(default_factory=set)
    floating: dict = field(default_factory=dict)      # var -> Hypothesis
    hypotheses: list = field(default_factory=list)    # $f and $e, in order
    disjoint: set = field(default_factory=set)
    opened_at: Optional[Position] = None


class ScopeStack:
    """Frames from outermost (index 0) to innermost."""

    def __init__(self):
        self.frames = [Frame()]

    @property
    def depth(self) -> int:
        return len(self.frames) - 1

    @property
    def top(self) -> Frame:
        return self.frames[-1]

    def open(self, position: Optional[Position] = None):
        self.frames.append(Frame(opened_at=position))

    def close(self, position: Optional[Position] = None) -> Frame:
        if len(self.frames) == 1:
            raise UnbalancedScope("'$}' without a matching '${'", position)
        return self.frames.pop()

    def finish(self):
        """End of input: every ${ must have been closed."""
        if len(self.frames) > 1:
            raise UnclosedScope(
                f"{self.depth} block(s) still open at end of input",
                self.frames[1].opened_at)

    # ── declarations ─────────────────────────────────────────────────────

    def add_variable(self, var: str, position: Optional[Position] = None):
        if self.is_active_variable(var):
            raise MalformedStatement(f"variable {var!r} already declared and active", position)
        self.top.variables.add(var)

    def add_hypothesis(self, hyp: Hypothesis):
        if hyp.is_floating:
            var = hyp.variable
            if not self.is_active_variable(var):
                raise MalformedStatement(f"variable {var!r} in $f is not active", hyp.position)
            if self.floating_for(var) is not None:
                raise MalformedStatement(
                    f"variable {var!r} already typed by an active $f "
                    f"({self.floating_for(var).label})", hyp.position)
            self.top.floating[var] = hyp
        self.top.hypotheses.append(hyp)

    def add_disjoint(self, variables, position: Optional[Position] = None):
        """$d x y z $. declares every pair among the listed variables."""
        for var in variables:
            if not self.is_active_variable(var):
                raise MalformedStatement(f"{var!r} in $d is not an active variable", position)
        if len(set(variables)) != len(variables):
            raise MalformedStatement("repeated variable in $d", position)
        self.top.disjoint.update(
            disjoint_pair(x, y)
            for x, y in itertools.combinations(variables, 2))

    # ── queries ──────────────────────────────────────────────────────────

    def is_active_variable(self, symbol: str) -> bool:
        return any(symbol in fr.variables for fr in self.frames)

    def floating_for(self, var: str) -> Optional[Hypothesis]:
        for frame in self.frames:
            if var in frame.floating:
                return frame.floating[var]
        return None

    def hypotheses(self) -> list:
        """Visible hypotheses in declaration order."""
        return [h for fr in self.frames for h in fr.hypotheses]

    def visible_labels(self) -> frozenset:
        return frozenset(h.label for h in self.hypotheses())

    def active_disjoint(self) -> frozenset:
        return frozenset(p for fr in self.frames for p in fr.disjoint)

    def is_disjoint(self, x: str, y: str) -> bool:
        pair = disjoint_pair(x, y)
        return any(pair in fr.disjoint for fr in self.frames)
