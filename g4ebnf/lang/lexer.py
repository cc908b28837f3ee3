"""Lexical analyzer (tokenizer) for EBNF and ANTLR grammar text.

Converts source text into a lossless stream of classified tokens. Every
character of the input ends up in exactly one token, so joining the
``text`` of all tokens reproduces the source. Unterminated literals,
classes, comments and action blocks run to the end of input instead of
raising.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple


class TokenKind(Enum):
    """Token categories produced by the lexer."""

    WHITESPACE = "whitespace"
    IDENTIFIER = "identifier"
    STRING = "quoted-literal"
    CHAR_CLASS = "character-class"
    OPERATOR = "operator"
    COMMENT = "comment"
    # Only produced by the ANTLR dialect
    ACTION = "action"


class Dialect(Enum):
    """Grammar notations understood by the lexer."""

    EBNF = "ebnf"
    ANTLR = "antlr"


@dataclass(frozen=True)
class Token:
    """A single token with position information."""

    kind: TokenKind
    text: str
    line: int = 1
    column: int = 1

    @property
    def is_trivia(self) -> bool:
        return self.kind in (TokenKind.WHITESPACE, TokenKind.COMMENT)

    def is_op(self, *texts: str) -> bool:
        """Return True for an operator token matching any of ``texts``."""
        return self.kind == TokenKind.OPERATOR and self.text in texts

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.text!r}, {self.line}:{self.column})"


WHITESPACE_CHARS = frozenset(" \t\n\r")

# Longest first within each dialect
MULTI_CHAR_OPERATORS = {
    Dialect.EBNF: ("::=",),
    Dialect.ANTLR: ("->", "+=", "..", "::"),
}

SINGLE_CHAR_OPERATORS = {
    Dialect.EBNF: frozenset("|()?,;+*"),
    Dialect.ANTLR: frozenset("|()?,;+*:=~#@.<>!"),
}


def _is_identifier_start(char: str) -> bool:
    return char == "_" or ("a" <= char <= "z") or ("A" <= char <= "Z")


def _is_identifier_char(char: str) -> bool:
    return _is_identifier_start(char) or ("0" <= char <= "9")


class Lexer:
    """Tokenizer for grammar source text."""

    def __init__(self, source: str, dialect: Dialect = Dialect.EBNF):
        """Initialize lexer with source text."""
        self.source = source
        self.dialect = dialect
        self.pos = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []
        self._multi_ops = MULTI_CHAR_OPERATORS[dialect]
        self._single_ops = SINGLE_CHAR_OPERATORS[dialect]

    def peek(self, offset: int = 0) -> Optional[str]:
        """Peek at character without consuming."""
        pos = self.pos + offset
        if pos < len(self.source):
            return self.source[pos]
        return None

    def startswith(self, text: str) -> bool:
        return self.source.startswith(text, self.pos)

    def add_token(self, kind: TokenKind, end: int) -> None:
        """Emit ``source[pos:end]`` as a token and move past it."""
        end = min(end, len(self.source))
        text = self.source[self.pos:end]
        self.tokens.append(Token(kind=kind, text=text, line=self.line, column=self.column))
        newlines = text.count("\n")
        if newlines:
            self.line += newlines
            self.column = len(text) - text.rfind("\n")
        else:
            self.column += len(text)
        self.pos = end

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source."""
        while self.pos < len(self.source):
            kind, end = self._next_span()
            self.add_token(kind, end)
        return self.tokens

    def _next_span(self) -> Tuple[TokenKind, int]:
        char = self.source[self.pos]

        end = self._match_comment()
        if end is not None:
            return TokenKind.COMMENT, end

        if char in ("'", '"'):
            return TokenKind.STRING, self._scan_quoted(self.pos)

        if char == "[":
            return TokenKind.CHAR_CLASS, self._scan_class(self.pos)

        if char == "{" and self.dialect == Dialect.ANTLR:
            return TokenKind.ACTION, self._scan_action(self.pos)

        for op in self._multi_ops:
            if self.startswith(op):
                return TokenKind.OPERATOR, self.pos + len(op)

        if char in self._single_ops:
            return TokenKind.OPERATOR, self.pos + 1

        if _is_identifier_start(char):
            end = self.pos + 1
            while end < len(self.source) and _is_identifier_char(self.source[end]):
                end += 1
            return TokenKind.IDENTIFIER, end

        if char in WHITESPACE_CHARS:
            end = self.pos + 1
            while end < len(self.source) and self.source[end] in WHITESPACE_CHARS:
                end += 1
            return TokenKind.WHITESPACE, end

        # Anything else stays in the stream as a one-character identifier
        return TokenKind.IDENTIFIER, self.pos + 1

    def _match_comment(self) -> Optional[int]:
        if self.startswith("(*") and self.dialect == Dialect.EBNF:
            return self._find_close("*)", self.pos + 2)
        if self.startswith("/*"):
            return self._find_close("*/", self.pos + 2)
        if self.startswith("//"):
            end = self.source.find("\n", self.pos + 2)
            return len(self.source) if end == -1 else end
        return None

    def _find_close(self, marker: str, start: int) -> int:
        end = self.source.find(marker, start)
        return len(self.source) if end == -1 else end + len(marker)

    def _scan_quoted(self, start: int) -> int:
        quote = self.source[start]
        i = start + 1
        size = len(self.source)
        while i < size:
            char = self.source[i]
            if char == "\\":
                i += 2
                continue
            i += 1
            if char == quote:
                return i
        return size

    def _scan_class(self, start: int) -> int:
        depth = 1
        i = start + 1
        size = len(self.source)
        while i < size and depth > 0:
            char = self.source[i]
            if char == "\\":
                i += 2
                continue
            if char == "[":
                depth += 1
            elif char == "]":
                depth -= 1
            i += 1
        return min(i, size)

    def _scan_action(self, start: int) -> int:
        depth = 1
        i = start + 1
        size = len(self.source)
        while i < size and depth > 0:
            char = self.source[i]
            if char in ("'", '"'):
                i = self._scan_quoted(i)
                continue
            if char == "\\":
                i += 2
                continue
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
            i += 1
        return min(i, size)


def tokenize(source: str, dialect: Dialect = Dialect.EBNF) -> List[Token]:
    """Tokenize grammar source text."""
    lexer = Lexer(source, dialect)
    return lexer.tokenize()


def significant(tokens) -> List[Token]:
    """Drop whitespace and comment tokens."""
    return [token for token in tokens if not token.is_trivia]


__all__ = ["Token", "TokenKind", "Dialect", "Lexer", "tokenize", "significant"]
