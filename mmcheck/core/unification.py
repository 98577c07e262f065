"""
Substitution engine: matching a hypothesis against a formula.

Metamath substitution is plain string rewriting. A hypothesis
(pattern) matches a formula (target) when each variable of the pattern
can be replaced by a contiguous run of target symbols so that the two
become identical. There is no occurs check and no two-sided unification:
only the pattern has variables.

Formulas:      tuples of symbols, ("|-", "(", "ph", "->", "ps", ")")
Variables:     any container answering `symbol in variables`
Substitutions: plain dicts from variable to a tuple of symbols,
               {"ph": ("(", "ps", "->", "ch", ")")}
"""

from typing import Iterator, Optional

from .errors import InconsistentSubstitution, Mismatch
from .state import format_formula


def is_variable(symbol, variables) -> bool:
    return symbol in variables


def variables_in(formula, variables) -> set:
    """The variables occurring in a formula."""
    return {s for s in formula if is_variable(s, variables)}


def unify(pattern, sub: dict) -> tuple:
    """
    Apply a substitution to a formula.

    Every bound variable is replaced, in place, by its formula; symbols
    without a binding are kept as they are. One pass, no chains: the
    substitution is simultaneous.
    """
    result = []
    for sym in pattern:
        if sym in sub:
            result.extend(sub[sym])
        else:
            result.append(sym)
    return tuple(result)


def _describe(formula) -> str:
    return f"'{format_formula(formula)}'" if formula else "(nothing)"


def _search(pattern, target, sub, variables) -> Iterator[dict]:
    """Every way of matching pattern against target that extends sub."""
    if not pattern:
        if not target:
            yield sub
        return
    sym, rest = pattern[0], pattern[1:]
    if is_variable(sym, variables):
        if sym in sub:
            body = sub[sym]
            if tuple(target[:len(body)]) == body:
                yield from _search(rest, target[len(body):], sub, variables)
            return
        # The last symbol of the pattern takes whatever is left.
        splits = [len(target)] if not rest else range(len(target) + 1)
        for k in splits:
            extended = dict(sub)
            extended[sym] = tuple(target[:k])
            yield from _search(rest, target[k:], extended, variables)
    elif target and target[0] == sym:
        yield from _search(rest, target[1:], sub, variables)


def infer(hypothesis, target, variables, sub: Optional[dict] = None) -> dict:
    """
    Find the substitution that turns hypothesis into target.

    sub holds bindings made earlier in the same proof step; they are
    respected and the returned dict extends a copy of it. Raises
    InconsistentSubstitution when an earlier binding does not fit here,
    Mismatch when constants disagree or no (or more than one) way of
    splitting the target exists. The error names the first position in
    the target where matching broke down.
    """
    sub = dict(sub) if sub else {}
    target = tuple(target)

    # Walk constants and already-bound variables left to right; this
    # settles every hypothesis whose variables are all bound.
    i = j = 0
    while i < len(hypothesis):
        sym = hypothesis[i]
        if is_variable(sym, variables):
            if sym not in sub:
                break
            body = sub[sym]
            found = target[j:j + len(body)]
            if found != body:
                raise InconsistentSubstitution(
                    f"variable {sym} already stands for {_describe(body)} "
                    f"but position {j} of {_describe(target)} has {_describe(found)}")
            j += len(body)
        else:
            if j >= len(target):
                raise Mismatch(
                    f"{_describe(target)} ends at position {j} where "
                    f"{_describe(hypothesis)} expects {sym!r}")
            if target[j] != sym:
                raise Mismatch(
                    f"position {j} of {_describe(target)} is {target[j]!r} where "
                    f"{_describe(hypothesis)} expects {sym!r}")
            j += 1
        i += 1
    else:
        if j != len(target):
            raise Mismatch(
                f"{_describe(target)} has extra symbols from position {j} "
                f"not covered by {_describe(hypothesis)}")
        return sub

    solutions = _search(hypothesis[i:], target[j:], sub, variables)
    first = next(solutions, None)
    if first is None:
        raise Mismatch(
            f"no substitution makes {_describe(hypothesis)} equal to "
            f"{_describe(target)} (from position {j})")
    if next(solutions, None) is not None:
        raise Mismatch(
            f"ambiguous substitution of {_describe(hypothesis)} into "
            f"{_describe(target)} (from position {j})")
    return first
