"""Core grammar linter infrastructure."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence
import logging

from g4ebnf.lang.rules import Alternative, Rule, is_structural_name, parse_rules
from .graph import DependencyGraph
from .rules import LintRule


class LintSeverity(Enum):
    """Severity levels for lint findings."""
    ERROR = "error"
    WARNING = "warning"


@dataclass
class LintFinding:
    """A single lint finding."""
    rule_id: str
    message: str
    severity: LintSeverity
    line: Optional[int] = None
    rule_name: Optional[str] = None
    rule_index: Optional[int] = None
    alternative_index: Optional[int] = None
    suggestion: Optional[str] = None

    def sort_key(self):
        rule_index = -1 if self.rule_index is None else self.rule_index
        alternative_index = -1 if self.alternative_index is None else self.alternative_index
        return (rule_index, alternative_index)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rule_id": self.rule_id,
            "message": self.message,
            "severity": self.severity.value,
            "line": self.line,
            "rule": self.rule_name,
            "suggestion": self.suggestion,
        }


@dataclass
class LintResult:
    """Result of grammar linting."""
    findings: List[LintFinding]
    errors: List[str]
    warnings: List[str]
    start_rule: Optional[str] = None

    def success(self) -> bool:
        """Check if linting completed without errors."""
        return len(self.errors) == 0

    def has_issues(self) -> bool:
        """Check if any issues were found."""
        return len(self.findings) > 0

    def error_count(self) -> int:
        """Count of error-level findings."""
        return sum(1 for f in self.findings if f.severity == LintSeverity.ERROR)

    def warning_count(self) -> int:
        """Count of warning-level findings."""
        return sum(1 for f in self.findings if f.severity == LintSeverity.WARNING)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_rule": self.start_rule,
            "success": self.success(),
            "errors": list(self.errors),
            "warnings": list(self.warnings),
            "findings": [finding.to_dict() for finding in self.findings],
        }


def infer_start_rule(rules: Sequence[Rule], override: Optional[str] = None) -> Optional[str]:
    """
    Pick the rule reachability is measured from.

    An explicit override always wins. Otherwise the first rule with a
    lower-case name is used, falling back to the first rule of the file.
    """
    if override:
        return override
    for rule in rules:
        if is_structural_name(rule.name):
            return rule.name
    if rules:
        return rules[0].name
    return None


@dataclass
class LintContext:
    """Context provided to lint rules for analysis."""
    rules: List[Rule]
    graph: DependencyGraph
    start_rule: Optional[str] = None
    start_overridden: bool = False
    _alternatives: Dict[int, List[Alternative]] = field(default_factory=dict, repr=False)

    @classmethod
    def build(cls, rules: Sequence[Rule], start_rule: Optional[str] = None) -> "LintContext":
        rules = list(rules)
        return cls(
            rules=rules,
            graph=DependencyGraph.build(rules),
            start_rule=infer_start_rule(rules, start_rule),
            start_overridden=bool(start_rule),
        )

    @property
    def defined_names(self) -> set:
        return {rule.name for rule in self.rules}

    def alternatives(self, index: int) -> List[Alternative]:
        """Alternatives of the rule at ``index``, split once per context."""
        if index not in self._alternatives:
            self._alternatives[index] = self.rules[index].alternatives()
        return self._alternatives[index]


class GrammarLinter:
    """
    Static analyzer for EBNF grammars.

    This linter analyzes extracted rules for:
    - Duplicate definitions
    - Unbalanced parentheses and character classes, empty alternatives
    - References to undefined rules and tokens
    - Direct left recursion
    - Rules unreachable from the start rule
    """

    def __init__(self, rules: Optional[List[LintRule]] = None):
        if rules is None:
            from .builtin_rules import get_default_rules
            rules = get_default_rules()
        self.rules = rules
        self.logger = logging.getLogger(__name__)

    def analyze(self, grammar_rules: Sequence[Rule], start_rule: Optional[str] = None) -> LintResult:
        """
        Run every lint rule over the given grammar rules.

        Args:
            grammar_rules: Rules in declaration order
            start_rule: Optional explicit start rule

        Returns:
            LintResult with ordered errors and warnings
        """
        context = LintContext.build(grammar_rules, start_rule)
        findings: List[LintFinding] = []
        warnings: List[str] = []

        for rule in self.rules:
            try:
                findings.extend(rule.check(context))
            except Exception as exc:
                self.logger.warning(f"Rule {rule.rule_id} failed: {exc}")
                warnings.append(f"Rule {rule.rule_id} encountered an error: {str(exc)}")

        findings.sort(key=LintFinding.sort_key)
        errors = [f.message for f in findings if f.severity == LintSeverity.ERROR]
        warnings = [f.message for f in findings if f.severity == LintSeverity.WARNING] + warnings

        self.logger.debug(
            "Analyzed %d rules (start=%s): %d errors, %d warnings",
            len(context.rules), context.start_rule, len(errors), len(warnings),
        )
        return LintResult(
            findings=findings,
            errors=errors,
            warnings=warnings,
            start_rule=context.start_rule,
        )

    def lint_document(self, source_text: str, start_rule: Optional[str] = None) -> LintResult:
        """Tokenize, extract and analyze EBNF source text."""
        return self.analyze(parse_rules(source_text), start_rule)


def analyze(rules: Sequence[Rule], start_rule: Optional[str] = None) -> LintResult:
    """Analyze rules with the default rule set."""
    return GrammarLinter().analyze(rules, start_rule)
