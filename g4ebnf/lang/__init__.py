"""Tokenizer and rule model for the EBNF notation."""

from .lexer import Dialect, Lexer, Token, TokenKind, significant, tokenize
from .rules import (
    Alternative,
    Rule,
    RuleKind,
    extract_rules,
    is_structural_name,
    is_terminal_name,
    parse_rules,
    split_alternatives,
)

__all__ = [
    # Tokens
    "Dialect",
    "Lexer",
    "Token",
    "TokenKind",
    "significant",
    "tokenize",
    # Rules
    "Alternative",
    "Rule",
    "RuleKind",
    "extract_rules",
    "split_alternatives",
    "parse_rules",
    "is_terminal_name",
    "is_structural_name",
]
