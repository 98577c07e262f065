"""
mmcheck: a proof verifier for the Metamath language.

Reads a .mm database in one forward pass, then replays every $p proof
(normal or compressed) on a stack machine and reports, per theorem,
Verified or Failed(kind, reason).

Usage:
    python -m mmcheck set.mm
    python -m mmcheck set.mm --workers 4 --fail-fast

    >>> from mmcheck import load_file, verify_all
    >>> db = load_file("set.mm")
    >>> failures = [(l, r) for l, r in verify_all(db) if not r.ok]
"""

from .core.errors import (
    MetamathError, LoadError, VerificationError,
    MalformedComment, MalformedProof, MalformedStatement,
    DuplicateLabel, UnknownLabel, UnknownSymbol, UnbalancedScope, UnclosedScope,
    Mismatch, InconsistentSubstitution, DisjointViolation,
    StackUnderflow, StackShapeMismatch, IncompleteProof,
)
from .core.state import Database, Verified, Failed
from .core.engine import verify_proof, verify_statement
from .reader import load_database, load_file
from .runner import VerifyOptions, verify_all
from .report import summarize, print_summary

__all__ = [
    "MetamathError", "LoadError", "VerificationError",
    "MalformedComment", "MalformedProof", "MalformedStatement",
    "DuplicateLabel", "UnknownLabel", "UnknownSymbol", "UnbalancedScope", "UnclosedScope",
    "Mismatch", "InconsistentSubstitution", "DisjointViolation",
    "StackUnderflow", "StackShapeMismatch", "IncompleteProof",
    "Database", "Verified", "Failed",
    "verify_proof", "verify_statement",
    "load_database", "load_file",
    "VerifyOptions", "verify_all",
    "summarize", "print_summary",
]
