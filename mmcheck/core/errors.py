"""
Error taxonomy.

Two families, matching the two phases of a run:

    LoadError          structural, raised while reading the database.
                       Always fatal to the load; carries a Position.
    VerificationError  semantic, raised while replaying one proof.
                       Fatal only to that theorem; the runner turns it
                       into a Failed result.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Position:
    """Where a token came from: file name, 1-based line, token text."""
    file: str
    line: int
    token: str = ""

    def __str__(self):
        where = f"{self.file}:{self.line}"
        if self.token:
            where += f" (at {self.token!r})"
        return where


class MetamathError(Exception):
    """Base class of every error raised by mmcheck."""


# ── Structural ───────────────────────────────────────────────────────────────

class LoadError(MetamathError):
    """A database that cannot be loaded at all."""

    def __init__(self, message: str, position: Optional[Position] = None):
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self):
        if self.position is None:
            return self.message
        return f"{self.position}: {self.message}"


class MalformedComment(LoadError):
    """Unterminated or nested $( ... $) comment."""


class MalformedProof(LoadError):
    """A proof that cannot be decoded into steps."""


class MalformedStatement(LoadError):
    """Anything else wrong with the grammar of a statement."""


class DuplicateLabel(LoadError):
    pass


class UnknownLabel(LoadError):
    """A reference to a label that is not declared or not visible here."""


class UnknownSymbol(UnknownLabel):
    """A math symbol that is not an active constant or variable."""


class UnbalancedScope(LoadError):
    """$} with no matching ${."""


class UnclosedScope(LoadError):
    """End of input with a ${ still open."""


# ── Semantic ─────────────────────────────────────────────────────────────────

class VerificationError(MetamathError):
    """A proof that does not prove what it claims."""

    @property
    def kind(self) -> str:
        return type(self).__name__


class Mismatch(VerificationError):
    pass


class InconsistentSubstitution(VerificationError):
    pass


class DisjointViolation(VerificationError):
    pass


class StackUnderflow(VerificationError):
    pass


class StackShapeMismatch(VerificationError):
    pass


class IncompleteProof(VerificationError):
    """The proof contains '?' placeholder steps."""
