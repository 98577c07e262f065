"""
Core data structures: Hypothesis, Assertion, Proof, Database, Result.

These are the atoms of the whole system. Nothing in here depends on
parsing, scoping or proof checking.

Symbols and formulas:
    Symbols are plain strings: "|-", "wff", "ph", "(".
    Whether a symbol is a constant or a variable is recorded in the
    Database (db.constants / db.variables); the two sets never overlap.
    A formula is a tuple of symbols whose first element is a type code:
        ("wff", "ph")             floating hypothesis "wff ph"
        ("|-", "(", "ph", "->", "ps", ")")

Substitutions are plain dicts from variable to formula body (no type
code):  {"ph": ("(", "ps", "->", "ch", ")")}

Everything here is immutable once the reader has built it, so a loaded
Database can be shared with worker processes without locking.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from .errors import Position


FLOATING = "$f"
ESSENTIAL = "$e"
AXIOM = "$a"
THEOREM = "$p"

Formula = tuple


def format_formula(formula) -> str:
    return " ".join(formula)


def disjoint_pair(x: str, y: str) -> tuple:
    """Disjointness is unordered; store every pair as (min, max)."""
    return (x, y) if x < y else (y, x)


@dataclass(frozen=True)
class Hypothesis:
    """
    A $f or $e statement.

    index is the global declaration order, which fixes the hypothesis'
    slot when it becomes mandatory for an assertion.
    depth is the scope depth it was declared at (0 = outermost).
    """
    label: str
    kind: str
    formula: Formula
    index: int = 0
    depth: int = 0
    position: Optional[Position] = field(default=None, compare=False)

    @property
    def is_floating(self) -> bool:
        return self.kind == FLOATING

    @property
    def variable(self) -> Optional[str]:
        """The variable a floating hypothesis types."""
        return self.formula[1] if self.is_floating else None

    @property
    def typecode(self) -> str:
        return self.formula[0]

    @property
    def name(self):
        return f"{self.label} {self.kind} {format_formula(self.formula)} $."

    def __repr__(self):
        return f"Hypothesis({self.name})"


# ── Proof steps ──────────────────────────────────────────────────────────────

REF = "ref"          # push a hypothesis or apply an assertion
SAVE = "save"        # compressed 'Z': remember the top of the stack
RECALL = "recall"    # compressed backreference to a saved formula
UNKNOWN = "?"        # placeholder step in an incomplete proof


@dataclass(frozen=True)
class Step:
    op: str
    label: str = ""
    index: int = 0

    def __repr__(self):
        if self.op == REF:
            return f"Step({self.label})"
        if self.op == RECALL:
            return f"Step(recall {self.index})"
        return f"Step({self.op})"


@dataclass(frozen=True)
class Proof:
    """
    A decoded proof, ready to replay.

    steps:     the stack-machine program
    compressed: which encoding it was decoded from (informational only)
    disjoint:  every disjointness pair active at the theorem's position,
               needed to check dummy variables introduced by the proof
    """
    steps: tuple
    compressed: bool = False
    disjoint: frozenset = frozenset()


@dataclass(frozen=True)
class Assertion:
    """
    An $a or $p statement with its frame.

    hypotheses are the mandatory hypotheses in declaration order; they
    are the positional slots a proof step must fill from the stack.
    disjoint are the mandatory disjointness pairs.
    """
    label: str
    kind: str
    conclusion: Formula
    hypotheses: tuple = ()
    disjoint: frozenset = frozenset()
    index: int = 0
    proof: Optional[Proof] = field(default=None, compare=False)
    position: Optional[Position] = field(default=None, compare=False)

    @property
    def is_theorem(self) -> bool:
        return self.kind == THEOREM

    @property
    def floating(self) -> tuple:
        return tuple(h for h in self.hypotheses if h.is_floating)

    @property
    def essential(self) -> tuple:
        return tuple(h for h in self.hypotheses if not h.is_floating)

    @property
    def name(self):
        return f"{self.label} {self.kind} {format_formula(self.conclusion)}"

    def __repr__(self):
        return f"Assertion({self.name})"


Statement = Union[Hypothesis, Assertion]


@dataclass
class Database:
    """
    A loaded database: symbol tables plus the statement store.

    Built by one forward pass of the reader and never mutated after;
    every verification call takes it explicitly.
    """
    name: str
    constants: frozenset
    variables: frozenset
    store: "StatementStore"  # noqa: F821  (mmcheck.core.store)

    @property
    def theorems(self) -> list:
        return [s for s in self.store if isinstance(s, Assertion) and s.is_theorem]

    def lookup(self, label: str) -> Statement:
        return self.store.lookup(label)

    def __len__(self):
        return len(self.store)

    def __repr__(self):
        return (f"Database({self.name!r}, {len(self.constants)} constants, "
                f"{len(self.variables)} variables, {len(self.store)} statements)")


# ── Results ──────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Verified:
    ok = True

    def __str__(self):
        return "verified"


@dataclass(frozen=True)
class Failed:
    """kind is the VerificationError class name, reason its message."""
    kind: str
    reason: str
    ok = False

    def __str__(self):
        return f"{self.kind}: {self.reason}"


Result = Union[Verified, Failed]
