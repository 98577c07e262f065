"""
The proof stack machine.

A proof is replayed against an initially empty stack of formulas:
a hypothesis step pushes its formula, an assertion step pops one
formula per mandatory hypothesis, works out the substitution, checks
disjointness, and pushes the substituted conclusion. At the end exactly
one formula must remain, and it must be the theorem's statement.

This loop knows nothing about how the proof was encoded: normal and
compressed proofs arrive as the same kind of Step tuple.
"""

from .errors import (
    DisjointViolation, IncompleteProof, StackShapeMismatch,
    StackUnderflow, VerificationError,
)
from .state import (
    RECALL, REF, SAVE, UNKNOWN,
    Assertion, Database, Failed, Verified, disjoint_pair, format_formula,
)
from .unification import infer, unify, variables_in


def match_hypotheses(db: Database, assertion: Assertion, args: list) -> dict:
    """
    The substitution under which assertion's hypotheses become args.

    Floating hypotheses are matched first (they bind the variables), then
    essential hypotheses are checked against those bindings. Errors are
    re-raised with the hypothesis and assertion labels prepended.
    """
    sub = {}
    pairs = list(zip(assertion.hypotheses, args))
    ordered = ([p for p in pairs if p[0].is_floating] +
               [p for p in pairs if not p[0].is_floating])
    for hyp, formula in ordered:
        try:
            sub = infer(hyp.formula, formula, db.variables, sub)
        except VerificationError as exc:
            raise type(exc)(
                f"hypothesis {hyp.label} of {assertion.label}: {exc}") from None
    return sub


def check_disjoint(db: Database, assertion: Assertion, sub: dict, context: frozenset):
    """
    Every $d x y of the assertion must survive the substitution: no
    variable may occur in both substituted formulas, and each pair of
    variables drawn from them must be disjoint in the proving context.
    """
    for x, y in sorted(assertion.disjoint):
        xs = sorted(variables_in(sub.get(x, ()), db.variables))
        ys = sorted(variables_in(sub.get(y, ()), db.variables))
        for a in xs:
            for b in ys:
                if a == b:
                    raise DisjointViolation(
                        f"{assertion.label} requires $d {x} {y}, but both "
                        f"substitutions contain {a}")
                if disjoint_pair(a, b) not in context:
                    raise DisjointViolation(
                        f"{assertion.label} requires $d {x} {y}, but {a} and {b} "
                        f"are not declared disjoint")


def apply_assertion(db: Database, assertion: Assertion, stack: list, context: frozenset):
    n = len(assertion.hypotheses)
    if n > len(stack):
        raise StackUnderflow(
            f"{assertion.label} needs {n} hypotheses but the stack holds {len(stack)}")
    args = stack[len(stack) - n:]
    sub = match_hypotheses(db, assertion, args)
    check_disjoint(db, assertion, sub, context)
    del stack[len(stack) - n:]
    stack.append(unify(assertion.conclusion, sub))


def treat_step(db: Database, step, stack: list, saved: list, context: frozenset):
    """Execute one step, modifying stack and saved in place."""
    if step.op == REF:
        stmt = db.lookup(step.label)
        if isinstance(stmt, Assertion):
            apply_assertion(db, stmt, stack, context)
        else:
            stack.append(stmt.formula)
    elif step.op == SAVE:
        if not stack:
            raise StackUnderflow("nothing on the stack to save")
        saved.append(stack[-1])
    elif step.op == RECALL:
        stack.append(saved[step.index])
    else:
        raise ValueError(f"unknown proof step {step!r}")


def run_proof(db: Database, theorem: Assertion) -> list:
    """Replay theorem's proof and return the final stack."""
    proof = theorem.proof
    if any(step.op == UNKNOWN for step in proof.steps):
        raise IncompleteProof(f"proof of {theorem.label} contains unknown steps ('?')")
    stack = []
    saved = []
    for step in proof.steps:
        treat_step(db, step, stack, saved, proof.disjoint)
    return stack


def verify_proof(db: Database, theorem: Assertion) -> tuple:
    """
    Check theorem's proof; return the proven formula.

    Raises a VerificationError subclass describing the first problem.
    """
    stack = run_proof(db, theorem)
    if len(stack) != 1:
        raise StackShapeMismatch(
            f"proof of {theorem.label} leaves {len(stack)} formulas on the "
            f"stack instead of 1")
    if stack[0] != theorem.conclusion:
        raise StackShapeMismatch(
            f"proof of {theorem.label} proves '{format_formula(stack[0])}' but "
            f"the statement is '{format_formula(theorem.conclusion)}'")
    return stack[0]


def verify_statement(db: Database, label: str):
    """Verified() or Failed(kind, reason) for one $p statement. Never raises
    VerificationError."""
    theorem = db.lookup(label)
    if not isinstance(theorem, Assertion) or not theorem.is_theorem:
        raise ValueError(f"{label!r} is not a $p statement")
    try:
        verify_proof(db, theorem)
    except VerificationError as exc:
        return Failed(exc.kind, str(exc))
    return Verified()
