"""Core formatting infrastructure for EBNF rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Sequence
import logging
import re

from g4ebnf.lang.lexer import Token, TokenKind, tokenize
from g4ebnf.lang.rules import Rule, extract_rules, split_alternatives

logger = logging.getLogger(__name__)


@dataclass
class FormattingOptions:
    """Configuration options for EBNF formatting."""

    # Line settings
    max_line_length: int = 100
    insert_final_newline: bool = True
    trim_trailing_whitespace: bool = True

    # Rule layout
    join_short_rules: bool = True
    blank_lines_between_rules: int = 1


@dataclass
class FormattedResult:
    """Result of a formatting operation."""

    formatted_text: str
    is_changed: bool
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    rule_count: int = 0

    def success(self) -> bool:
        """Check if formatting was successful."""
        return len(self.errors) == 0


def _is_punctuation(token: Token) -> bool:
    """Stray one-character tokens such as ``~`` or ``.``."""
    return token.kind == TokenKind.IDENTIFIER and not (token.text[:1].isalpha() or token.text[:1] == "_")


def needs_space(prev: Optional[Token], token: Token) -> bool:
    """Adjacency table: whether ``token`` is separated from ``prev`` by a space."""
    if prev is None:
        return False
    if token.is_op(")", "?", "*", "+", ","):
        return False
    if prev.is_op("("):
        return False
    # Keeps runs like '..' intact
    if _is_punctuation(prev) and _is_punctuation(token):
        return False
    return True


def layout_lines(tokens: Sequence[Token]) -> List[List[str]]:
    """
    Group tokens into lines of space-separated words.

    Source whitespace is dropped. Tokens that need no separating space are
    glued into one word, so a line break never lands inside ``x?`` or
    ``(a``. Each comment sits on a line of its own.
    """
    lines: List[List[str]] = [[]]
    prev: Optional[Token] = None
    for token in tokens:
        if token.kind == TokenKind.WHITESPACE:
            continue
        if token.kind == TokenKind.COMMENT:
            if lines[-1]:
                lines.append([])
            lines[-1].append(token.text.rstrip())
            lines.append([])
            prev = None
            continue
        if lines[-1] and not needs_space(prev, token):
            lines[-1][-1] += token.text
        else:
            lines[-1].append(token.text)
        prev = token
    return [line for line in lines if line]


def join_tokens(tokens: Sequence[Token]) -> str:
    """Render tokens with normalized spacing."""
    return "\n".join(" ".join(words) for words in layout_lines(tokens))


def _ends_with_line_comment(tokens: Sequence[Token]) -> bool:
    for token in reversed(tokens):
        if token.kind == TokenKind.WHITESPACE:
            continue
        return token.kind == TokenKind.COMMENT and token.text.startswith("//")
    return False


class EbnfFormatter:
    """
    Formatter for EBNF grammars.

    Each rule is rendered as ``name ::= alternatives ;``. A rule that fits
    within ``max_line_length`` stays on one line; otherwise every top-level
    alternative goes on its own line with ``|`` aligned so that the
    alternatives line up under the first one. A single long alternative is
    soft-wrapped at word boundaries instead. Leading comments are emitted
    verbatim before the rule.
    """

    def __init__(self, options: Optional[FormattingOptions] = None):
        self.options = options or FormattingOptions()

    def format_document(self, source_text: str) -> FormattedResult:
        """
        Format a complete EBNF document.

        Args:
            source_text: The grammar text to format

        Returns:
            FormattedResult with formatted text and status
        """
        errors: List[str] = []
        warnings: List[str] = []

        try:
            rules = extract_rules(tokenize(source_text))
            if rules:
                separator = "\n" * (self.options.blank_lines_between_rules + 1)
                formatted_text = separator.join(self.format_rule(rule) for rule in rules)
            else:
                warnings.append("No rules found; only whitespace was normalized")
                formatted_text = self._normalize_whitespace(source_text)

            formatted_text = self._apply_text_cleanup(formatted_text)
            logger.debug("Formatted %d rules", len(rules))

            return FormattedResult(
                formatted_text=formatted_text,
                is_changed=formatted_text != source_text,
                errors=errors,
                warnings=warnings,
                rule_count=len(rules),
            )
        except Exception as e:
            logger.exception("Formatting failed")
            errors.append(f"Formatting error: {str(e)}")
            return FormattedResult(
                formatted_text=source_text,  # Return original on unexpected error
                is_changed=False,
                errors=errors,
                warnings=warnings,
            )

    def format_rule(self, rule: Rule) -> str:
        """Render one rule, preceded by its leading comments."""
        alternatives = [alt.tokens for alt in split_alternatives(rule.rhs)]
        return "".join(rule.leading_comments) + self._format_body(rule.name, alternatives)

    def _format_body(self, name: str, alternatives: List[Sequence[Token]]) -> str:
        prefix = f"{name} ::="
        laid_out = [layout_lines(tokens) for tokens in alternatives]

        comment_ended = any(_ends_with_line_comment(tokens) for tokens in alternatives)
        if not comment_ended and all(len(lines) <= 1 for lines in laid_out):
            words: List[str] = []
            for index, lines in enumerate(laid_out):
                if index:
                    words.append("|")
                words.extend(lines[0] if lines else [])
            one_line = " ".join([prefix, *words, ";"])
            fits = len(one_line) <= self.options.max_line_length
            if len(laid_out) == 1:
                return one_line if fits else self._wrap(prefix, words)
            if fits and self.options.join_short_rules:
                return one_line

        return self._format_block(prefix, laid_out, _ends_with_line_comment(alternatives[-1]))

    def _format_block(self, prefix: str, laid_out: List[List[List[str]]], line_comment_last: bool) -> str:
        bar_indent = " " * (len(prefix) - 1)
        hanging_indent = " " * (len(prefix) + 1)
        out: List[str] = []
        for index, lines in enumerate(laid_out):
            lead = f"{prefix} " if index == 0 else f"{bar_indent}| "
            if not lines:
                out.append(lead.rstrip())
                continue
            for number, words in enumerate(lines):
                out.append((lead if number == 0 else hanging_indent) + " ".join(words))

        if line_comment_last:
            out.append(f"{hanging_indent};")
        else:
            out[-1] += " ;"
        return "\n".join(out)

    def _wrap(self, prefix: str, words: List[str]) -> str:
        """Greedy soft wrap of a single alternative."""
        units = words[:-1] + [f"{words[-1]} ;"] if words else [";"]
        hanging_indent = " " * (len(prefix) + 1)
        lines: List[str] = []
        current = prefix
        has_word = False
        for unit in units:
            if has_word and len(current) + 1 + len(unit) > self.options.max_line_length:
                lines.append(current)
                current = hanging_indent + unit
            else:
                current = f"{current} {unit}"
            has_word = True
        lines.append(current)
        return "\n".join(lines)

    def _normalize_whitespace(self, text: str) -> str:
        text = re.sub(r"[ \t]+", " ", text)
        return re.sub(r" +\n", "\n", text).strip()

    def _apply_text_cleanup(self, text: str) -> str:
        """Apply final text cleanup operations."""
        if self.options.trim_trailing_whitespace:
            text = "\n".join(line.rstrip() for line in text.split("\n"))
        if self.options.insert_final_newline and text and not text.endswith("\n"):
            text += "\n"
        return text


def render(rule: Rule, width: int = 100) -> str:
    """Render a single rule with the given soft-wrap width."""
    return EbnfFormatter(FormattingOptions(max_line_length=width)).format_rule(rule)
