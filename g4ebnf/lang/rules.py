"""Rule extraction and alternative splitting for EBNF token streams."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Sequence, Tuple

from .lexer import Token, TokenKind, tokenize

logger = logging.getLogger(__name__)

TERMINAL_NAME = re.compile(r"^[A-Z_][A-Z0-9_]*$")
STRUCTURAL_NAME = re.compile(r"^[a-z_]\w*$")


class RuleKind(Enum):
    """Naming-convention classification of a rule."""

    TERMINAL = "terminal"
    STRUCTURAL = "structural"
    MIXED = "mixed"


def is_terminal_name(name: str) -> bool:
    return bool(TERMINAL_NAME.match(name))


def is_structural_name(name: str) -> bool:
    return bool(STRUCTURAL_NAME.match(name))


@dataclass(frozen=True)
class Alternative:
    """One top-level branch of a rule's right-hand side."""

    tokens: Tuple[Token, ...]
    index: int = 0

    @property
    def significant_tokens(self) -> List[Token]:
        return [token for token in self.tokens if not token.is_trivia]

    @property
    def is_empty(self) -> bool:
        return not self.significant_tokens

    @property
    def text(self) -> str:
        return "".join(token.text for token in self.tokens)

    @property
    def summary(self) -> str:
        """Source text with whitespace runs collapsed, for messages."""
        parts = [" " if token.kind == TokenKind.WHITESPACE else token.text for token in self.tokens]
        return "".join(parts).strip()


@dataclass(frozen=True)
class Rule:
    """A grammar production ``name ::= rhs ;``."""

    name: str
    rhs: Tuple[Token, ...] = ()
    leading_comments: Tuple[str, ...] = ()
    line: int = 1
    column: int = 1

    @property
    def kind(self) -> RuleKind:
        if is_terminal_name(self.name):
            return RuleKind.TERMINAL
        if is_structural_name(self.name):
            return RuleKind.STRUCTURAL
        return RuleKind.MIXED

    def alternatives(self) -> List[Alternative]:
        return split_alternatives(self.rhs)


def _skip_whitespace(tokens: Sequence[Token], index: int) -> int:
    while index < len(tokens) and tokens[index].kind == TokenKind.WHITESPACE:
        index += 1
    return index


def _collect_comments(tokens: Sequence[Token], index: int, pending: List[str]) -> int:
    """Gather comment tokens, each with the whitespace right after it."""
    while True:
        probe = _skip_whitespace(tokens, index)
        if probe >= len(tokens) or tokens[probe].kind != TokenKind.COMMENT:
            return index
        text = tokens[probe].text
        index = probe + 1
        if index < len(tokens) and tokens[index].kind == TokenKind.WHITESPACE:
            text += tokens[index].text
            index += 1
        pending.append(text)


def _starts_rule(tokens: Sequence[Token], index: int) -> bool:
    if tokens[index].kind != TokenKind.IDENTIFIER:
        return False
    following = _skip_whitespace(tokens, index + 1)
    return following < len(tokens) and tokens[following].is_op("::=")


def extract_rules(tokens: Sequence[Token]) -> List[Rule]:
    """
    Recover ``name ::= rhs ;`` productions from a token stream.

    Stray tokens and fragments missing ``::=`` are skipped. The rule body
    ends at the first ``;`` outside parentheses. A body missing its ``;``
    stops where the next ``name ::=`` begins outside parentheses, or at the
    end of the stream.

    Args:
        tokens: Output of :func:`tokenize`

    Returns:
        Rules in declaration order
    """
    rules: List[Rule] = []
    pending: List[str] = []
    index = 0
    size = len(tokens)

    while index < size:
        index = _collect_comments(tokens, index, pending)
        index = _skip_whitespace(tokens, index)
        if index >= size:
            break

        name_token = tokens[index]
        if name_token.kind != TokenKind.IDENTIFIER:
            index += 1
            continue
        index = _skip_whitespace(tokens, index + 1)
        if index >= size or not tokens[index].is_op("::="):
            continue
        index += 1

        rhs: List[Token] = []
        depth = 0
        while index < size:
            token = tokens[index]
            if token.is_op("("):
                depth += 1
            elif token.is_op(")"):
                depth = max(0, depth - 1)
            elif token.is_op(";") and depth == 0:
                index += 1
                break
            elif depth == 0 and _starts_rule(tokens, index):
                # Terminator missing; trailing comments go to the next rule
                while rhs and rhs[-1].kind in (TokenKind.WHITESPACE, TokenKind.COMMENT):
                    rhs.pop()
                    index -= 1
                logger.debug("Rule '%s' has no terminating ';'", name_token.text)
                break
            rhs.append(token)
            index += 1

        rules.append(Rule(
            name=name_token.text,
            rhs=tuple(rhs),
            leading_comments=tuple(pending),
            line=name_token.line,
            column=name_token.column,
        ))
        pending = []

    logger.debug("Extracted %d rules from %d tokens", len(rules), size)
    return rules


def split_alternatives(rhs: Sequence[Token]) -> List[Alternative]:
    """Split a right-hand side at ``|`` operators outside parentheses."""
    alternatives: List[Alternative] = []
    current: List[Token] = []
    depth = 0
    for token in rhs:
        if token.is_op("("):
            depth += 1
        elif token.is_op(")"):
            depth = max(0, depth - 1)
        elif token.is_op("|") and depth == 0:
            alternatives.append(Alternative(tuple(current), len(alternatives)))
            current = []
            continue
        current.append(token)
    alternatives.append(Alternative(tuple(current), len(alternatives)))
    return alternatives


def parse_rules(source: str) -> List[Rule]:
    """Tokenize EBNF text and extract its rules."""
    return extract_rules(tokenize(source))


__all__ = [
    "Alternative",
    "Rule",
    "RuleKind",
    "extract_rules",
    "split_alternatives",
    "parse_rules",
    "is_terminal_name",
    "is_structural_name",
]
