"""
g4ebnf: ANTLR4 grammar conversion and EBNF tooling.

The package scans and extracts rules from the ``Name ::= rhs ;`` notation,
re-serializes them with a fixed layout, and statically checks a grammar
for duplicate, undefined, unreachable and left-recursive rules.
"""

__version__ = "1.0.0"

from .errors import ConfigError, G4EbnfError, GrammarSourceError
from .lang import Dialect, Rule, Token, TokenKind, extract_rules, parse_rules, tokenize
from .linter import GrammarLinter, LintResult, analyze
from .formatting import EbnfFormatter, FormattingOptions, render
from .converter import GrammarSource, convert_grammars

__all__ = [
    "__version__",
    # Errors
    "G4EbnfError",
    "GrammarSourceError",
    "ConfigError",
    # Scanning and extraction
    "Dialect",
    "Token",
    "TokenKind",
    "Rule",
    "tokenize",
    "extract_rules",
    "parse_rules",
    # Analysis
    "GrammarLinter",
    "LintResult",
    "analyze",
    # Layout
    "EbnfFormatter",
    "FormattingOptions",
    "render",
    # Conversion
    "GrammarSource",
    "convert_grammars",
]
