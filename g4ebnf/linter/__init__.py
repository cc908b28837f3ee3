"""
Static analysis for EBNF grammars.

Builds a dependency graph over extracted rules and reports duplicate
definitions, unbalanced delimiters, undefined references, unreachable
rules and direct left recursion.
"""

from __future__ import annotations

__all__ = [
    "GrammarLinter",
    "LintRule",
    "LintResult",
    "LintFinding",
    "LintSeverity",
    "DependencyGraph",
    "analyze",
    "get_default_rules",
]

from .core import GrammarLinter, LintFinding, LintResult, LintSeverity, analyze
from .graph import DependencyGraph
from .rules import LintRule
from .builtin_rules import get_default_rules
