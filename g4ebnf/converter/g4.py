"""ANTLR4 grammar (.g4) to EBNF conversion.

The converter reads ANTLR-dialect tokens and drops the spans that have no
EBNF counterpart: headers, option blocks, actions, predicates, lexer
commands, labels and rule parameters. Since actions and literals are
whole tokens, braces or quotes nested inside them never confuse the
reader.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Tuple
import logging

from g4ebnf.errors import GrammarSourceError
from g4ebnf.formatting import EbnfFormatter, FormattingOptions, join_tokens
from g4ebnf.lang.lexer import Dialect, Token, TokenKind, tokenize

logger = logging.getLogger(__name__)

HEADER_BLOCKS = frozenset({"options", "tokens", "channels"})
RULE_MODIFIERS = frozenset({"public", "private", "protected", "fragment"})
NO_RULES_NOTE = "(* No rules were found after stripping ANTLR-specific constructs. *)"


class GrammarKind(Enum):
    """What kind of rules a grammar file holds."""
    PARSER = "parser"
    LEXER = "lexer"
    COMBINED = "combined"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class GrammarSource:
    """Grammar text together with the path it was read from."""
    path: str
    text: str

    @classmethod
    def read(cls, path: str) -> "GrammarSource":
        """
        Read a grammar file as UTF-8 text.

        Raises:
            GrammarSourceError: If the file cannot be read or decoded
        """
        try:
            return cls(path=path, text=Path(path).read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as exc:
            raise GrammarSourceError(f"Cannot read grammar file: {exc}", path=path) from exc


@dataclass(frozen=True)
class G4Rule:
    """A rule recovered from an ANTLR grammar, with ANTLR-only syntax removed."""
    name: str
    rhs: Tuple[Token, ...]
    is_fragment: bool = False
    line: int = 1

    @property
    def is_lexer(self) -> bool:
        return self.name[:1].isupper()

    def to_ebnf(self) -> str:
        rhs = join_tokens(self.rhs)
        text = f"{self.name} ::= {rhs} ;" if rhs else f"{self.name} ::= ;"
        return f"(* fragment *) {text}" if self.is_fragment else text


@dataclass
class ConvertedGrammar:
    """Rules read from a single grammar file."""
    path: str
    kind: GrammarKind
    rules: List[G4Rule] = field(default_factory=list)


@dataclass
class ConversionResult:
    """EBNF text produced from one or more grammar files."""
    text: str
    grammars: List[ConvertedGrammar]

    @property
    def parser_rules(self) -> List[G4Rule]:
        return [rule for grammar in self.grammars for rule in grammar.rules if not rule.is_lexer]

    @property
    def lexer_rules(self) -> List[G4Rule]:
        return [rule for grammar in self.grammars for rule in grammar.rules if rule.is_lexer]


class G4Reader:
    """Statement reader over ANTLR-dialect tokens."""

    def __init__(self, source: str, path: str = ""):
        self.path = path
        self.tokens = tokenize(source, Dialect.ANTLR)
        self.pos = 0
        self.header_kind: Optional[GrammarKind] = None

    # ------------------------------------------------------------------
    # Token management
    # ------------------------------------------------------------------

    def skip_trivia(self) -> None:
        while self.pos < len(self.tokens) and self.tokens[self.pos].is_trivia:
            self.pos += 1

    def current(self) -> Optional[Token]:
        """Next significant token, without consuming it."""
        self.skip_trivia()
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def peek_significant(self, offset: int = 1) -> Optional[Token]:
        """Significant token ``offset`` places after the current one."""
        self.skip_trivia()
        seen = 0
        for token in self.tokens[self.pos:]:
            if token.is_trivia:
                continue
            if seen == offset:
                return token
            seen += 1
        return None

    def advance(self) -> Optional[Token]:
        token = self.current()
        if token is not None:
            self.pos += 1
        return token

    def match_word(self, *words: str) -> bool:
        token = self.current()
        return token is not None and token.kind == TokenKind.IDENTIFIER and token.text in words

    def skip_through_semicolon(self) -> None:
        while True:
            token = self.advance()
            if token is None or token.is_op(";"):
                return

    def skip_named_action(self) -> None:
        """Skip ``@name {...}`` or ``@scope::name {...}``."""
        self.advance()
        while self.current() is not None and (
            self.current().kind == TokenKind.IDENTIFIER or self.current().is_op("::")
        ):
            self.advance()
        if self.current() is not None and self.current().kind == TokenKind.ACTION:
            self.advance()

    def skip_parenthesized(self) -> None:
        depth = 0
        while True:
            token = self.advance()
            if token is None:
                return
            if token.is_op("("):
                depth += 1
            elif token.is_op(")"):
                depth -= 1
                if depth <= 0:
                    return

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def read(self) -> List[G4Rule]:
        """Read every rule of the grammar."""
        rules: List[G4Rule] = []
        while self.current() is not None:
            rule = self.read_statement()
            if rule is not None:
                rules.append(rule)
        return rules

    def read_statement(self) -> Optional[G4Rule]:
        token = self.current()
        if token.is_op("@"):
            self.skip_named_action()
            return None
        if token.kind != TokenKind.IDENTIFIER:
            self.advance()
            return None

        following = self.peek_significant()
        if token.text in ("lexer", "parser") and following is not None and following.text == "grammar":
            self.header_kind = GrammarKind.LEXER if token.text == "lexer" else GrammarKind.PARSER
            self.skip_through_semicolon()
            return None
        if token.text in ("grammar", "import", "mode") and not (following is not None and following.is_op(":")):
            self.skip_through_semicolon()
            return None
        if token.text in HEADER_BLOCKS and following is not None and following.kind == TokenKind.ACTION:
            self.advance()
            self.advance()
            if self.current() is not None and self.current().is_op(";"):
                self.advance()
            return None
        return self.read_rule()

    def read_rule(self) -> Optional[G4Rule]:
        is_fragment = False
        while self.match_word(*RULE_MODIFIERS):
            is_fragment = is_fragment or self.current().text == "fragment"
            self.advance()

        name_token = self.advance()
        if name_token is None or name_token.kind != TokenKind.IDENTIFIER:
            return None

        # Rule prequel: arguments, returns, locals, throws, options, actions
        while True:
            token = self.current()
            if token is None:
                return None
            if token.is_op(":"):
                self.advance()
                break
            if token.kind == TokenKind.CHAR_CLASS:
                self.advance()
            elif self.match_word("returns", "locals"):
                self.advance()
                if self.current() is not None and self.current().kind == TokenKind.CHAR_CLASS:
                    self.advance()
            elif self.match_word("throws"):
                self.advance()
                while self.current() is not None and (
                    self.current().kind == TokenKind.IDENTIFIER or self.current().is_op(",", ".")
                ):
                    self.advance()
            elif self.match_word("options") and self.peek_significant() is not None \
                    and self.peek_significant().kind == TokenKind.ACTION:
                self.advance()
                self.advance()
            elif token.is_op("@"):
                self.skip_named_action()
            else:
                logger.debug("%s:%d: '%s' is not followed by ':'", self.path, name_token.line, name_token.text)
                return None

        rhs = self.read_body(parser_rule=not name_token.text[:1].isupper())
        return G4Rule(name=name_token.text, rhs=rhs, is_fragment=is_fragment, line=name_token.line)

    def read_body(self, parser_rule: bool) -> Tuple[Token, ...]:
        """Collect a rule body up to the ``;`` outside parentheses."""
        body: List[Token] = []
        depth = 0
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]

            if token.kind == TokenKind.COMMENT:
                self.pos += 1
            elif token.kind == TokenKind.ACTION:
                # {...} action or {...}? predicate
                self.pos += 1
                if self.pos < len(self.tokens) and self.tokens[self.pos].is_op("?"):
                    self.pos += 1
            elif token.is_op("->"):
                self._skip_lexer_commands()
            elif token.is_op("#"):
                self.pos += 1
                if self.current() is not None and self.current().kind == TokenKind.IDENTIFIER:
                    self.advance()
            elif token.is_op("<"):
                self._skip_element_options()
            elif token.kind == TokenKind.IDENTIFIER and self._is_element_label():
                self.advance()
                self.advance()
            elif token.kind == TokenKind.CHAR_CLASS and parser_rule and body \
                    and body[-1].kind == TokenKind.IDENTIFIER:
                # name[args]
                self.pos += 1
            elif token.is_op(";") and depth == 0:
                self.pos += 1
                break
            else:
                if token.is_op("("):
                    depth += 1
                elif token.is_op(")"):
                    depth = max(0, depth - 1)
                body.append(token)
                self.pos += 1

        while body and (body[-1].kind == TokenKind.WHITESPACE or body[-1].is_op("|")):
            body.pop()
        return tuple(body)

    def _is_element_label(self) -> bool:
        following = self.peek_significant()
        return following is not None and following.is_op("=", "+=")

    def _skip_lexer_commands(self) -> None:
        """Skip ``-> skip``, ``-> channel(HIDDEN)``, ``-> pushMode(M), more``."""
        self.pos += 1
        while True:
            if self.current() is None or self.current().kind != TokenKind.IDENTIFIER:
                return
            self.advance()
            if self.current() is not None and self.current().is_op("("):
                self.skip_parenthesized()
            if self.current() is None or not self.current().is_op(","):
                return
            self.advance()

    def _skip_element_options(self) -> None:
        """Skip ``<assoc=right>`` style element options."""
        while self.pos < len(self.tokens):
            token = self.tokens[self.pos]
            if token.is_op(";"):
                return
            self.pos += 1
            if token.is_op(">"):
                return


def infer_kind(header_kind: Optional[GrammarKind], rules: Sequence[G4Rule]) -> GrammarKind:
    """Grammar kind from the header, else from the mix of rule names."""
    if header_kind is not None:
        return header_kind
    has_lexer = any(rule.is_lexer for rule in rules)
    has_parser = any(not rule.is_lexer for rule in rules)
    if has_lexer and has_parser:
        return GrammarKind.COMBINED
    if has_lexer:
        return GrammarKind.LEXER
    if has_parser:
        return GrammarKind.PARSER
    return GrammarKind.UNKNOWN


def convert_grammar(text: str, path: str = "") -> ConvertedGrammar:
    """Read the rules of one ANTLR grammar."""
    reader = G4Reader(text, path)
    rules = reader.read()
    kind = infer_kind(reader.header_kind, rules)
    logger.debug("Converted %s: %d rules (%s grammar)", path or "<string>", len(rules), kind.value)
    return ConvertedGrammar(path=path, kind=kind, rules=rules)


def _banner(title: str) -> List[str]:
    rule = f"(* {'=' * len(title)} *)"
    return [rule, f"(* {title} *)", rule, ""]


def _posix(path: str) -> str:
    return path.replace("\\", "/")


def convert_grammars(
    sources: Sequence[GrammarSource],
    *,
    format_output: bool = False,
    width: int = 100,
) -> ConversionResult:
    """
    Convert ANTLR grammars into a single EBNF document.

    Parser rules from every source are emitted first, then lexer rules,
    each section introduced by a banner naming the files it came from.

    Args:
        sources: Grammar files in command-line order
        format_output: Run the EBNF formatter over the result
        width: Soft-wrap width used when formatting

    Returns:
        ConversionResult with the EBNF text and the rules per file
    """
    grammars = [convert_grammar(source.text, source.path) for source in sources]
    paths = [_posix(source.path) for source in sources]

    lines: List[str] = []
    if len(paths) == 1:
        lines.append(f"(* Source file: {paths[0]} *)")
    else:
        lines.append(f"(* Source files: {' , '.join(paths)} *)")
    lines.append("")

    sections = [
        ("Parser", [(g, r) for g in grammars for r in g.rules if not r.is_lexer]),
        ("Lexer", [(g, r) for g in grammars for r in g.rules if r.is_lexer]),
    ]
    for label, entries in sections:
        if not entries:
            continue
        origins = list(dict.fromkeys(_posix(grammar.path) for grammar, _ in entries))
        lines.extend(_banner(f"{label} rules from: {', '.join(origins)}"))
        lines.extend(rule.to_ebnf() for _, rule in entries)
        lines.append("")

    if not any(grammar.rules for grammar in grammars):
        lines.append(NO_RULES_NOTE)

    text = "\n".join(lines)
    if format_output:
        formatter = EbnfFormatter(FormattingOptions(max_line_length=width))
        text = formatter.format_document(text).formatted_text

    return ConversionResult(text=text, grammars=grammars)
