"""
Layout renderer for EBNF grammars.

This module re-serializes extracted rules into readable text:
1. Splits each rule into its top-level alternatives
2. Normalizes spacing with a fixed adjacency table
3. Aligns multi-line alternatives and soft-wraps long ones
4. Preserves leading comments verbatim
"""

from __future__ import annotations

__all__ = [
    "EbnfFormatter",
    "FormattingOptions",
    "FormattedResult",
    "DefaultFormattingRules",
    "join_tokens",
    "render",
]

from .core import EbnfFormatter, FormattingOptions, FormattedResult, join_tokens, render
from .rules import DefaultFormattingRules
