from .errors import (
    Position, MetamathError,
    LoadError, MalformedComment, MalformedProof, MalformedStatement,
    DuplicateLabel, UnknownLabel, UnknownSymbol, UnbalancedScope, UnclosedScope,
    VerificationError, Mismatch, InconsistentSubstitution, DisjointViolation,
    StackUnderflow, StackShapeMismatch, IncompleteProof,
)
from .state import Hypothesis, Assertion, Proof, Step, Database, Verified, Failed
from .tokens import Token, tokenize
from .scope import ScopeStack
from .store import StatementStore, mandatory_frame
from .unification import is_variable, variables_in, unify, infer
from .proof import decode, decode_normal, decode_compressed, compress
from .engine import verify_proof, verify_statement

__all__ = [
    "Position", "MetamathError",
    "LoadError", "MalformedComment", "MalformedProof", "MalformedStatement",
    "DuplicateLabel", "UnknownLabel", "UnknownSymbol", "UnbalancedScope", "UnclosedScope",
    "VerificationError", "Mismatch", "InconsistentSubstitution", "DisjointViolation",
    "StackUnderflow", "StackShapeMismatch", "IncompleteProof",
    "Hypothesis", "Assertion", "Proof", "Step", "Database", "Verified", "Failed",
    "Token", "tokenize",
    "ScopeStack",
    "StatementStore", "mandatory_frame",
    "is_variable", "variables_in", "unify", "infer",
    "decode", "decode_normal", "decode_compressed", "compress",
    "verify_proof", "verify_statement",
]
