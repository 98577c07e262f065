"""
Proof encodings.

A proof arrives in one of two forms:

    normal:      $= l1 l2 l3 ... $.
                 each label is a hypothesis to push or an assertion to
                 apply; '?' marks an unknown step
    compressed:  $= ( b1 b2 ... ) ABUCZDE... $.
                 the numbers index the list [mandatory hypotheses of the
                 theorem] + [b1, b2, ...] + [saved formulas]; 'Z' saves
                 the formula just produced for later reuse

Both decode to the same kind of program: a tuple of Step. Decoding is
purely syntactic. Whether each label exists and is visible is the
reader's business.

Compressed numbers: a run of 'U'..'Y' digits (base 5, 1-based) followed
by one 'A'..'T' digit (base 20); the result is 0-based.
    A = 0, T = 19, UA = 20, UT = 39, VA = 40, YT = 119, UUA = 120
"""

from collections import Counter
from typing import Callable, Optional

from .errors import MalformedProof
from .state import RECALL, REF, SAVE, UNKNOWN, Step


def decode_normal(tokens) -> tuple:
    steps = []
    for tok in tokens:
        text = str(tok)
        if text == "?":
            steps.append(Step(UNKNOWN))
        elif text in ("(", ")"):
            raise MalformedProof(f"unexpected {text!r} in proof",
                                 getattr(tok, "position", None))
        else:
            steps.append(Step(REF, text))
    return tuple(steps)


def is_compressed(tokens) -> bool:
    return bool(tokens) and str(tokens[0]) == "("


def split_compressed(tokens) -> tuple:
    """(label-block tokens, letter tokens) of a compressed proof."""
    texts = [str(t) for t in tokens]
    try:
        close = texts.index(")")
    except ValueError:
        raise MalformedProof("compressed proof label list has no ')'",
                             getattr(tokens[0], "position", None)) from None
    return tokens[1:close], tokens[close + 1:]


def letters_to_numbers(letters: str, position=None) -> list:
    """
    Decode the letter part of a compressed proof.

    Returns 0-based numbers, with -1 for 'Z' and None for '?'.
    """
    numbers = []
    cur = 0
    pending = False
    for ch in letters:
        if "A" <= ch <= "T":
            numbers.append(20 * cur + ord(ch) - ord("A"))
            cur = 0
            pending = False
        elif "U" <= ch <= "Y":
            cur = 5 * cur + ord(ch) - ord("U") + 1
            pending = True
        elif ch == "Z":
            if pending:
                raise MalformedProof("'Z' inside a compressed number", position)
            numbers.append(-1)
        elif ch == "?":
            if pending:
                raise MalformedProof("'?' inside a compressed number", position)
            numbers.append(None)
        else:
            raise MalformedProof(f"invalid character {ch!r} in compressed proof", position)
    if pending:
        raise MalformedProof("compressed proof ends in the middle of a number", position)
    return numbers


def number_to_letters(n: int) -> str:
    """Inverse of letters_to_numbers for a single non-negative number."""
    letters = chr(ord("A") + n % 20)
    cur = n // 20
    while cur > 0:
        letters = chr(ord("U") + (cur - 1) % 5) + letters
        cur = (cur - 1) // 5
    return letters


def decode_compressed(tokens, mandatory_labels) -> tuple:
    """
    Turn a compressed proof into steps.

    mandatory_labels are the labels of the theorem's mandatory
    hypotheses, in order; they are the implicit start of the label list.
    """
    block, letter_toks = split_compressed(tokens)
    mandatory = list(mandatory_labels)
    for tok in block:
        if str(tok) in mandatory:
            raise MalformedProof(
                f"mandatory hypothesis {str(tok)!r} listed in the label block",
                getattr(tok, "position", None))
    labels = mandatory + [str(t) for t in block]
    label_end = len(labels)

    position = getattr(letter_toks[0], "position", None) if letter_toks else None
    letters = "".join(str(t) for t in letter_toks)
    steps = []
    saved = 0
    for n in letters_to_numbers(letters, position):
        if n is None:
            steps.append(Step(UNKNOWN))
        elif n == -1:
            if not steps or steps[-1].op == SAVE:
                raise MalformedProof("'Z' does not follow a proof step", position)
            steps.append(Step(SAVE))
            saved += 1
        elif n < label_end:
            steps.append(Step(REF, labels[n]))
        elif n < label_end + saved:
            steps.append(Step(RECALL, index=n - label_end))
        else:
            raise MalformedProof(
                f"reference to saved step {n - label_end + 1} but only "
                f"{saved} saved so far", position)
    return tuple(steps)


def compress(labels, mandatory_labels, arity: Callable[[str], int]) -> list:
    """
    Encode a normal proof (list of labels) as compressed proof tokens.

    arity(label) is the number of mandatory hypotheses of the labelled
    statement (0 for hypotheses). Subproofs that occur more than once
    are saved with 'Z' the first time and recalled afterwards. Returns
    the tokens that go between $= and $. .
    """
    # Rebuild the proof tree; each node is (label, children).
    stack = []
    for label in labels:
        if label == "?":
            raise MalformedProof("cannot compress an incomplete proof")
        n = arity(label)
        if n > len(stack):
            raise MalformedProof(f"{label!r} needs {n} hypotheses, stack has {len(stack)}")
        children = tuple(stack[len(stack) - n:]) if n else ()
        del stack[len(stack) - n:]
        stack.append((label, children))

    counts = Counter()

    def count(node):
        counts[node] += 1
        if counts[node] == 1:
            for child in node[1]:
                count(child)

    for root in stack:
        count(root)

    mandatory = list(mandatory_labels)
    block = []
    for label in labels:
        if label not in mandatory and label not in block:
            block.append(label)
    index = {label: i for i, label in enumerate(mandatory + block)}
    label_end = len(index)

    letters = []
    saved = {}

    def emit(node):
        if node in saved:
            letters.append(number_to_letters(label_end + saved[node]))
            return
        for child in node[1]:
            emit(child)
        letters.append(number_to_letters(index[node[0]]))
        if node[1] and counts[node] > 1:
            letters.append("Z")
            saved[node] = len(saved)

    for root in stack:
        emit(root)
    return ["("] + block + [")"] + wrap_letters("".join(letters))


def wrap_letters(letters: str, width: int = 79) -> list:
    return [letters[i:i + width] for i in range(0, len(letters), width)]


def decode(tokens, mandatory_labels: Optional[list] = None) -> tuple:
    """Decode either encoding. Returns (steps, compressed)."""
    if is_compressed(tokens):
        return decode_compressed(tokens, mandatory_labels or []), True
    return decode_normal(tokens), False
