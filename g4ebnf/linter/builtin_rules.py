"""Built-in lint rules for EBNF grammars."""

from __future__ import annotations

from typing import Dict, List, Tuple

from g4ebnf.lang.lexer import TokenKind
from g4ebnf.lang.rules import Alternative, Rule, is_structural_name, is_terminal_name
from .core import LintContext, LintFinding, LintSeverity
from .graph import leading_identifier, referenced_identifiers
from .rules import LintRule


def _prefix(rule: Rule) -> str:
    return f"Rule '{rule.name}' line {rule.line}"


class DuplicateRuleRule(LintRule):
    """Report every definition of a name after the first one."""

    def __init__(self):
        super().__init__(
            rule_id="duplicate-rule",
            description="Detect rules defined more than once"
        )

    def check(self, context: LintContext) -> List[LintFinding]:
        findings = []
        first_lines: Dict[str, int] = {}
        for index, rule in enumerate(context.rules):
            if rule.name not in first_lines:
                first_lines[rule.name] = rule.line
                continue
            findings.append(LintFinding(
                rule_id=self.rule_id,
                message=(
                    f"Duplicate rule '{rule.name}' at line {rule.line} "
                    f"(first at line {first_lines[rule.name]})"
                ),
                severity=LintSeverity.ERROR,
                line=rule.line,
                rule_name=rule.name,
                rule_index=index,
                suggestion=f"Merge the alternatives into the first definition of '{rule.name}'",
            ))
        return findings


def _class_depth(text: str) -> int:
    depth = 0
    index = 0
    while index < len(text):
        char = text[index]
        if char == "\\":
            index += 2
            continue
        if char == "[":
            depth += 1
        elif char == "]":
            depth -= 1
        index += 1
    return depth


def delimiter_balance(alternative: Alternative) -> Tuple[bool, bool]:
    """
    Check parenthesis and character-class nesting of an alternative.

    Quoted literals and comments are ignored; a character class counts its
    own nested brackets. A closer seen before its opener is unbalanced
    even when the totals match.

    Returns:
        ``(parentheses_ok, classes_ok)``
    """
    parens = brackets = 0
    parens_ok = brackets_ok = True
    for token in alternative.tokens:
        if token.kind in (TokenKind.STRING, TokenKind.COMMENT, TokenKind.WHITESPACE):
            continue
        if token.kind == TokenKind.CHAR_CLASS:
            brackets += _class_depth(token.text)
        elif token.is_op("("):
            parens += 1
        elif token.is_op(")"):
            parens -= 1
        elif token.text == "]":
            brackets -= 1
        parens_ok = parens_ok and parens >= 0
        brackets_ok = brackets_ok and brackets >= 0
    return parens_ok and parens == 0, brackets_ok and brackets == 0


class DelimiterBalanceRule(LintRule):
    """Detect unbalanced delimiters and empty alternatives."""

    def __init__(self):
        super().__init__(
            rule_id="unbalanced-delimiters",
            description="Detect unbalanced parentheses, character classes and empty alternatives"
        )

    def check(self, context: LintContext) -> List[LintFinding]:
        findings = []
        for index, rule in enumerate(context.rules):
            for alternative in context.alternatives(index):
                if alternative.is_empty:
                    problems = ["empty alternative"]
                else:
                    parens_ok, classes_ok = delimiter_balance(alternative)
                    problems = []
                    if not parens_ok:
                        problems.append("unbalanced parentheses")
                    if not classes_ok:
                        problems.append("unbalanced character class")
                for problem in problems:
                    findings.append(LintFinding(
                        rule_id=self.rule_id,
                        message=f"{_prefix(rule)}: {problem}",
                        severity=LintSeverity.ERROR,
                        line=rule.line,
                        rule_name=rule.name,
                        rule_index=index,
                        alternative_index=alternative.index,
                    ))
        return findings


class UndefinedReferenceRule(LintRule):
    """
    Resolve every referenced identifier against the defined rules.

    Upper-case names are tolerated with a warning since literals may stand
    in for a lexer rule; any other missing name is an error. Each missing
    name is reported once per rule, at its first alternative.
    """

    def __init__(self):
        super().__init__(
            rule_id="undefined-reference",
            description="Detect references to rules that are never defined"
        )

    def check(self, context: LintContext) -> List[LintFinding]:
        findings = []
        for index, rule in enumerate(context.rules):
            missing = set(context.graph.dangling.get(rule.name, ()))
            if not missing:
                continue
            reported = set()
            for alternative in context.alternatives(index):
                for name in referenced_identifiers(alternative):
                    if name not in missing or name in reported:
                        continue
                    reported.add(name)
                    if is_terminal_name(name):
                        findings.append(LintFinding(
                            rule_id="undefined-token",
                            message=f"{_prefix(rule)}: token '{name}' referenced but not defined as a lexer rule",
                            severity=LintSeverity.WARNING,
                            line=rule.line,
                            rule_name=rule.name,
                            rule_index=index,
                            alternative_index=alternative.index,
                        ))
                    else:
                        findings.append(LintFinding(
                            rule_id=self.rule_id,
                            message=f"{_prefix(rule)}: reference to undefined rule '{name}'",
                            severity=LintSeverity.ERROR,
                            line=rule.line,
                            rule_name=rule.name,
                            rule_index=index,
                            alternative_index=alternative.index,
                            suggestion=f"Define '{name}' or fix the spelling of the reference",
                        ))
        return findings


class LeftRecursionRule(LintRule):
    """Detect alternatives that start with their own rule (direct form only)."""

    def __init__(self):
        super().__init__(
            rule_id="left-recursion",
            description="Detect direct left recursion"
        )

    def check(self, context: LintContext) -> List[LintFinding]:
        findings = []
        for index, rule in enumerate(context.rules):
            for alternative in context.alternatives(index):
                if leading_identifier(alternative) != rule.name:
                    continue
                findings.append(LintFinding(
                    rule_id=self.rule_id,
                    message=f"{_prefix(rule)}: direct left recursion in alternative '{alternative.summary}'",
                    severity=LintSeverity.WARNING,
                    line=rule.line,
                    rule_name=rule.name,
                    rule_index=index,
                    alternative_index=alternative.index,
                    suggestion="Rewrite the alternative with repetition, e.g. E ::= T ('+' T)*",
                ))
        return findings


class ReachabilityRule(LintRule):
    """Detect lower-case rules that cannot be reached from the start rule."""

    def __init__(self):
        super().__init__(
            rule_id="unreachable-rule",
            description="Detect parser rules unreachable from the start rule"
        )

    def check(self, context: LintContext) -> List[LintFinding]:
        start = context.start_rule
        if start is None:
            return [LintFinding(
                rule_id="start-rule",
                message="No start rule inferred (file has no rules).",
                severity=LintSeverity.WARNING,
            )]

        findings = []
        if context.start_overridden and start not in context.defined_names:
            findings.append(LintFinding(
                rule_id="start-rule",
                message=f"Start rule '{start}' is not defined",
                severity=LintSeverity.WARNING,
            ))

        reachable = context.graph.reachable_from(start)
        reported = set()
        for index, rule in enumerate(context.rules):
            if rule.name in reachable or rule.name in reported:
                continue
            if not is_structural_name(rule.name):
                continue
            reported.add(rule.name)
            findings.append(LintFinding(
                rule_id=self.rule_id,
                message=f"Parser rule '{rule.name}' at line {rule.line} is not reachable from start '{start}'",
                severity=LintSeverity.WARNING,
                line=rule.line,
                rule_name=rule.name,
                rule_index=index,
            ))
        return findings


def get_default_rules() -> List[LintRule]:
    """Get the default set of lint rules."""
    return [
        DuplicateRuleRule(),
        DelimiterBalanceRule(),
        UndefinedReferenceRule(),
        LeftRecursionRule(),
        ReachabilityRule(),
    ]
