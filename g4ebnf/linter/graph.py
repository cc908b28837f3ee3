"""Dependency graph over extracted rules."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set

from g4ebnf.lang.lexer import Token, TokenKind
from g4ebnf.lang.rules import Alternative, Rule

REFERENCE_NAME = re.compile(r"^[A-Za-z_]\w*$")


def is_reference(token: Token) -> bool:
    """True for identifier tokens that can name a rule."""
    return token.kind == TokenKind.IDENTIFIER and bool(REFERENCE_NAME.match(token.text))


def referenced_identifiers(alternative: Alternative) -> List[str]:
    """Identifiers referenced by an alternative, in order of appearance.

    Quoted literals and character classes are separate tokens, so their
    contents never show up here.
    """
    return [token.text for token in alternative.tokens if is_reference(token)]


def leading_identifier(alternative: Alternative) -> Optional[str]:
    """
    First identifier of an alternative after its leading literals.

    Leading quoted literals, character classes and whole parenthesized
    groups are skipped; the first identifier after them is returned.
    """
    tokens = alternative.significant_tokens
    index = 0
    while index < len(tokens):
        token = tokens[index]
        if token.kind in (TokenKind.STRING, TokenKind.CHAR_CLASS):
            index += 1
            continue
        if token.is_op("("):
            depth = 1
            index += 1
            while index < len(tokens) and depth > 0:
                if tokens[index].is_op("("):
                    depth += 1
                elif tokens[index].is_op(")"):
                    depth -= 1
                index += 1
            continue
        break

    for token in tokens[index:]:
        if is_reference(token):
            return token.text
    return None


@dataclass
class DependencyGraph:
    """Directed graph ``rule -> rules it references``.

    ``dangling`` maps each referencing rule to the names it uses that are
    not defined anywhere. Rules defined more than once contribute the
    edges of every definition.
    """

    edges: Dict[str, List[str]] = field(default_factory=dict)
    dangling: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def build(cls, rules: Sequence[Rule]) -> "DependencyGraph":
        defined = {rule.name for rule in rules}
        graph = cls()
        for rule in rules:
            targets = graph.edges.setdefault(rule.name, [])
            for alternative in rule.alternatives():
                for name in referenced_identifiers(alternative):
                    if name in defined:
                        if name not in targets:
                            targets.append(name)
                    else:
                        missing = graph.dangling.setdefault(rule.name, [])
                        if name not in missing:
                            missing.append(name)
        return graph

    def dependencies(self, name: str) -> List[str]:
        return list(self.edges.get(name, ()))

    def reachable_from(self, start: str) -> Set[str]:
        """Names reachable from ``start``, including ``start`` itself."""
        reachable: Set[str] = set()
        stack = [start]
        while stack:
            current = stack.pop()
            if current in reachable:
                continue
            reachable.add(current)
            stack.extend(dep for dep in self.edges.get(current, ()) if dep not in reachable)
        return reachable
