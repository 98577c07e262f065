"""
Reading a database: one forward pass over the token stream.

The reader is the single writer. It feeds declarations to the scope
stack and the statement store in source order, checks every
structural rule on the way, and for each $p statement freezes what its
proof will need (mandatory hypotheses, active disjointness pairs, the
decoded proof). Nothing is verified here; see runner.verify_all.

Any structural problem aborts the load with a LoadError that points at
the offending token.
"""

import pathlib
import string
from typing import Optional, Union

from .core.errors import (
    DuplicateLabel, MalformedStatement, UnknownLabel, UnknownSymbol,
)
from .core.proof import decode, split_compressed
from .core.scope import ScopeStack
from .core.state import (
    AXIOM, ESSENTIAL, FLOATING, REF, THEOREM,
    Database, Hypothesis, Proof,
)
from .core.store import StatementStore, mandatory_frame
from .core.tokens import TokenStream, decode_source


LABELLED = (FLOATING, ESSENTIAL, AXIOM, THEOREM)
UNLABELLED = ("$c", "$v", "$d", "${", "$}")
LABEL_CHARS = frozenset(string.ascii_letters + string.digits + "-_.")


class Reader:
    """Holds the mutable state of one load. Use read() once."""

    def __init__(self, name: str = "<source>"):
        self.name = name
        self.constants = set()
        self.variables = set()
        self.scopes = ScopeStack()
        self.store = StatementStore()

    # ── token helpers ────────────────────────────────────────────────────

    def _statement(self, toks: TokenStream, opener, end: str = "$.") -> list:
        """Tokens up to (not including) end. Keywords inside are errors."""
        body = []
        for tok in toks:
            if tok.text == end:
                return body
            if "$" in tok.text:
                raise MalformedStatement(
                    f"unexpected {tok.text!r} inside {opener.text} statement "
                    f"(expected {end!r})", tok.position)
            body.append(tok)
        raise MalformedStatement(
            f"{opener.text} statement not closed with {end!r} before end of input",
            opener.position)

    def _formula(self, kind: str, label, body: list) -> tuple:
        """Check the symbols of a $e/$a/$p/$f body and return the formula."""
        if not body:
            raise MalformedStatement(f"{kind} statement {label.text} is empty", label.position)
        for tok in body:
            sym = tok.text
            if sym in self.constants:
                continue
            if self.scopes.is_active_variable(sym):
                if kind != FLOATING and self.scopes.floating_for(sym) is None:
                    raise MalformedStatement(
                        f"variable {sym!r} in {kind} statement {label.text} is not "
                        f"typed by an active $f", tok.position)
                continue
            raise UnknownSymbol(
                f"{sym!r} in {kind} statement {label.text} is not an active "
                f"constant or variable", tok.position)
        if body[0].text not in self.constants:
            raise MalformedStatement(
                f"{kind} statement {label.text} must start with a constant type code",
                body[0].position)
        return tuple(tok.text for tok in body)

    def _math_symbol(self, tok):
        if "$" in tok.text:
            raise MalformedStatement(f"math symbol {tok.text!r} contains '$'", tok.position)
        if tok.text in self.store:
            raise MalformedStatement(
                f"math symbol {tok.text!r} is already a statement label", tok.position)

    # ── statements ───────────────────────────────────────────────────────

    def read_c(self, toks, opener):
        if self.scopes.depth:
            raise MalformedStatement("$c statement inside a ${ ... $} block", opener.position)
        body = self._statement(toks, opener)
        if not body:
            raise MalformedStatement("empty $c statement", opener.position)
        for tok in body:
            self._math_symbol(tok)
            if tok.text in self.constants:
                raise MalformedStatement(f"constant {tok.text!r} already declared", tok.position)
            if tok.text in self.variables:
                raise MalformedStatement(
                    f"{tok.text!r} already declared as a variable", tok.position)
            self.constants.add(tok.text)

    def read_v(self, toks, opener):
        body = self._statement(toks, opener)
        if not body:
            raise MalformedStatement("empty $v statement", opener.position)
        for tok in body:
            self._math_symbol(tok)
            if tok.text in self.constants:
                raise MalformedStatement(
                    f"{tok.text!r} already declared as a constant", tok.position)
            self.scopes.add_variable(tok.text, tok.position)
            self.variables.add(tok.text)

    def read_d(self, toks, opener):
        body = self._statement(toks, opener)
        if len(body) < 2:
            raise MalformedStatement("$d statement needs at least two variables", opener.position)
        for tok in body:
            if tok.text not in self.constants and not self.scopes.is_active_variable(tok.text):
                raise UnknownSymbol(f"{tok.text!r} in $d is not an active variable", tok.position)
        self.scopes.add_disjoint([tok.text for tok in body], opener.position)

    def read_f(self, toks, opener, label):
        body = self._statement(toks, opener)
        if len(body) != 2:
            raise MalformedStatement(
                f"$f statement {label.text} must have exactly two symbols, "
                f"has {len(body)}", label.position)
        formula = self._formula(FLOATING, label, body)
        if not self.scopes.is_active_variable(formula[1]):
            raise MalformedStatement(
                f"$f statement {label.text} must type a variable, not {formula[1]!r}",
                body[1].position)
        self.store.declare(FLOATING, label.text, formula, self.scopes,
                           position=label.position)

    def read_e(self, toks, opener, label):
        formula = self._formula(ESSENTIAL, label, self._statement(toks, opener))
        self.store.declare(ESSENTIAL, label.text, formula, self.scopes,
                           position=label.position)

    def read_a(self, toks, opener, label):
        formula = self._formula(AXIOM, label, self._statement(toks, opener))
        self.store.declare(AXIOM, label.text, formula, self.scopes,
                           position=label.position)

    def read_p(self, toks, opener, label):
        formula = self._formula(THEOREM, label, self._statement(toks, opener, end="$="))
        proof_toks = self._statement(toks, opener)
        hyps, _ = mandatory_frame(formula, self.scopes)
        steps, compressed = decode(proof_toks, [h.label for h in hyps])
        self._check_references(label, steps, proof_toks, compressed)
        proof = Proof(steps, compressed, self.scopes.active_disjoint())
        self.store.declare(THEOREM, label.text, formula, self.scopes,
                           proof=proof, position=label.position)

    def _check_references(self, label, steps, proof_toks, compressed=False):
        """
        Every label a proof uses must be declared earlier and visible here.
        In a compressed proof that includes every label of the block, used
        or not.
        """
        where = {}
        for tok in proof_toks:
            where.setdefault(tok.text, tok.position)
        refs = [step.label for step in steps if step.op == REF]
        if compressed:
            block, _ = split_compressed(proof_toks)
            refs.extend(tok.text for tok in block)
        visible = None
        checked = set()
        for ref in refs:
            if ref in checked:
                continue
            checked.add(ref)
            pos = where.get(ref, label.position)
            stmt = self.store.get(ref)
            if stmt is None:
                raise UnknownLabel(
                    f"proof of {label.text} references unknown label {ref!r}", pos)
            if isinstance(stmt, Hypothesis):
                if visible is None:
                    visible = self.scopes.visible_labels()
                if ref not in visible:
                    raise UnknownLabel(
                        f"proof of {label.text} references hypothesis {ref!r}, "
                        f"which is out of scope", pos)

    # ── main loop ────────────────────────────────────────────────────────

    def read(self, toks: TokenStream) -> Database:
        label = None
        for tok in toks:
            text = tok.text
            if text in LABELLED:
                if label is None:
                    raise MalformedStatement(f"{text} statement needs a label", tok.position)
                getattr(self, "read_" + text[1])(toks, tok, label)
                label = None
            elif text in UNLABELLED:
                if label is not None:
                    raise MalformedStatement(
                        f"label {label.text!r} must be followed by $f, $e, $a or $p",
                        label.position)
                if text == "${":
                    self.scopes.open(tok.position)
                elif text == "$}":
                    self.scopes.close(tok.position)
                else:
                    getattr(self, "read_" + text[1])(toks, tok)
            elif text.startswith("$"):
                raise MalformedStatement(f"unknown keyword {text!r}", tok.position)
            else:
                if label is not None:
                    raise MalformedStatement(
                        f"label {label.text!r} must be followed by $f, $e, $a or $p",
                        label.position)
                if not set(text) <= LABEL_CHARS:
                    raise MalformedStatement(
                        f"invalid label {text!r} (allowed: letters, digits, '-', '_', '.')",
                        tok.position)
                if text in self.constants or text in self.variables:
                    raise MalformedStatement(
                        f"label {text!r} is already a math symbol", tok.position)
                if text in self.store:
                    raise DuplicateLabel(f"label {text!r} already declared", tok.position)
                label = tok
        if label is not None:
            raise MalformedStatement(
                f"label {label.text!r} at end of input", label.position)
        self.scopes.finish()
        return Database(
            self.name,
            frozenset(self.constants),
            frozenset(self.variables),
            self.store,
        )


def load_database(source: Union[bytes, str], name: str = "<source>",
                  base_dir: Optional[Union[str, pathlib.Path]] = None) -> Database:
    """
    Load a database from bytes or text.

    $[ file $] inclusions are only allowed when base_dir is given.
    Raises a LoadError subclass on the first structural problem.
    """
    if base_dir is not None:
        base_dir = pathlib.Path(base_dir)
    text = decode_source(source, name)
    return Reader(name).read(TokenStream(text, name, base_dir))


def load_file(path: Union[str, pathlib.Path]) -> Database:
    """Load a .mm file, resolving inclusions relative to its directory."""
    path = pathlib.Path(path)
    return load_database(path.read_bytes(), path.name, path.parent)
