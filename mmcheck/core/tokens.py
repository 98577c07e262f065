"""
Tokenizer.

A Metamath source is a stream of whitespace-separated tokens. This
module turns raw bytes into Token objects that remember where they came
from, skipping $( ... $) comments and expanding $[ file $] inclusions.

The stream is lazy and finite: iterate it once, build a new one to
start over.
"""

import pathlib
import re
from dataclasses import dataclass
from typing import Iterator, Optional, Union

from .errors import MalformedComment, MalformedStatement, Position


@dataclass(frozen=True)
class Token:
    text: str
    file: str
    line: int

    @property
    def position(self) -> Position:
        return Position(self.file, self.line, self.text)

    def __str__(self):
        return self.text


# Metamath whitespace; every other character below 32 is illegal.
WHITESPACE = " \t\r\n\f"
_SPACES = re.compile(r"[ \t\r\f]+")


def decode_source(source: Union[bytes, str], name: str = "<source>") -> str:
    """Metamath databases are printable 7-bit ASCII plus whitespace."""
    if isinstance(source, str):
        text = source
    else:
        try:
            text = source.decode("ascii")
        except UnicodeDecodeError as exc:
            line = source[:exc.start].count(b"\n") + 1
            raise MalformedStatement(
                f"non-ASCII byte 0x{source[exc.start]:02x} in source",
                Position(name, line),
            ) from None
    for lineno, line in enumerate(text.split("\n"), start=1):
        bad = next((c for c in line
                    if ord(c) > 126 or (ord(c) < 32 and c not in WHITESPACE)), None)
        if bad is not None:
            raise MalformedStatement(
                f"illegal character {bad!r} in source", Position(name, lineno))
    return text


def split_tokens(text: str, name: str = "<source>") -> Iterator[Token]:
    """Raw whitespace split, one line at a time. No comment handling."""
    for lineno, line in enumerate(text.split("\n"), start=1):
        for word in _SPACES.split(line):
            if word:
                yield Token(word, name, lineno)


def strip_comments(tokens: Iterator[Token]) -> Iterator[Token]:
    """
    Drop $( ... $) comments.

    Comments do not nest: a token inside a comment that contains "$(" or
    "$)" is an error, as is end of input before the closing "$)".
    """
    for tok in tokens:
        if tok.text != "$(":
            if tok.text == "$)":
                raise MalformedComment("'$)' outside of a comment", tok.position)
            yield tok
            continue
        opened = tok
        for inner in tokens:
            if inner.text == "$)":
                break
            if "$(" in inner.text or "$)" in inner.text:
                raise MalformedComment(
                    f"comment contains {inner.text!r}; comments do not nest",
                    inner.position)
        else:
            raise MalformedComment("unterminated comment", opened.position)


class TokenStream:
    """
    The token source the reader pulls from.

    Wraps strip_comments() over one or more files. When base_dir is set,
    $[ path $] inclusions are expanded in place (each file at most once);
    without a base directory an inclusion is a MalformedStatement.
    """

    def __init__(self, text: str, name: str = "<source>",
                 base_dir: Optional[pathlib.Path] = None):
        self.base_dir = base_dir
        self.included = set()
        if base_dir is not None and name != "<source>":
            self.included.add((base_dir / name).resolve())
        self._stack = [strip_comments(split_tokens(text, name))]
        self.last: Optional[Token] = None

    def __iter__(self):
        return self

    def __next__(self) -> Token:
        tok = self.next()
        if tok is None:
            raise StopIteration
        return tok

    def _raw(self) -> Optional[Token]:
        while self._stack:
            tok = next(self._stack[-1], None)
            if tok is not None:
                return tok
            self._stack.pop()
        return None

    def next(self) -> Optional[Token]:
        """Next token after comments and inclusions; None at end of input."""
        tok = self._raw()
        while tok is not None and tok.text == "$[":
            self._include(tok)
            tok = self._raw()
        if tok is not None:
            self.last = tok
        return tok

    def _include(self, opener: Token):
        path_tok = self._raw()
        close_tok = self._raw()
        if path_tok is None or close_tok is None or close_tok.text != "$]":
            raise MalformedStatement("inclusion not closed with '$]'", opener.position)
        if self.base_dir is None:
            raise MalformedStatement(
                f"cannot include {path_tok.text!r}: source has no directory",
                path_tok.position)
        path = (self.base_dir / path_tok.text).resolve()
        if path in self.included:
            return
        try:
            raw = path.read_bytes()
        except OSError as exc:
            raise MalformedStatement(
                f"cannot include {path_tok.text!r}: {exc.strerror}",
                path_tok.position) from None
        self.included.add(path)
        text = decode_source(raw, path_tok.text)
        self._stack.append(strip_comments(split_tokens(text, path_tok.text)))


def tokenize(source: Union[bytes, str], name: str = "<source>") -> Iterator[Token]:
    """Lazy token sequence for a single in-memory source (no inclusions)."""
    return TokenStream(decode_source(source, name), name)
