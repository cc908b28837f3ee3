"""Tests for the grammar tokenizer."""

import pytest

from g4ebnf.lang import Dialect, Lexer, TokenKind, significant, tokenize


def kinds_and_texts(source, dialect=Dialect.EBNF):
    return [(t.kind, t.text) for t in tokenize(source, dialect) if t.kind != TokenKind.WHITESPACE]


class TestLossless:
    """Joining token texts reproduces the input exactly."""

    @pytest.mark.parametrize("source", [
        "",
        "expr ::= term ( '+' term )* ;",
        "a ::= 'unterminated",
        "a ::= [abc",
        "(* never closed",
        "/* block */ x ::= y ; // trailing",
        "weird ::= $ % ^ & ~ ;\r\n\tnext ::= 'it\\'s' ;",
        "nested ::= [a[b]c] \"q\\\"uote\" ;",
    ])
    def test_roundtrip(self, source):
        tokens = tokenize(source)
        assert "".join(t.text for t in tokens) == source

    def test_antlr_action_roundtrip(self):
        source = "a : {if (x) { y(\"}\"); }} b -> skip ;"
        tokens = tokenize(source, Dialect.ANTLR)
        assert "".join(t.text for t in tokens) == source


class TestTokenKinds:
    """Classification of individual spans."""

    def test_simple_rule(self):
        assert kinds_and_texts("expr ::= term ;") == [
            (TokenKind.IDENTIFIER, "expr"),
            (TokenKind.OPERATOR, "::="),
            (TokenKind.IDENTIFIER, "term"),
            (TokenKind.OPERATOR, ";"),
        ]

    def test_operators(self):
        texts = [text for _, text in kinds_and_texts("| ( ) ? , ; + *")]
        assert texts == ["|", "(", ")", "?", ",", ";", "+", "*"]
        assert all(kind == TokenKind.OPERATOR for kind, _ in kinds_and_texts("| ( ) ? , ; + *"))

    def test_quoted_literal_with_escape(self):
        tokens = kinds_and_texts("x ::= 'a\\'b' ;")
        assert tokens[2] == (TokenKind.STRING, "'a\\'b'")

    def test_double_quoted_literal(self):
        tokens = kinds_and_texts('x ::= "a|b" ;')
        assert tokens[2] == (TokenKind.STRING, '"a|b"')

    def test_character_class_nesting(self):
        tokens = kinds_and_texts("x ::= [a[b]c] ;")
        assert tokens[2] == (TokenKind.CHAR_CLASS, "[a[b]c]")

    def test_character_class_escaped_bracket(self):
        tokens = kinds_and_texts("x ::= [\\]a] ;")
        assert tokens[2] == (TokenKind.CHAR_CLASS, "[\\]a]")

    def test_comment_forms(self):
        source = "(* one *) /* two */ // three\nx"
        comments = [t.text for t in tokenize(source) if t.kind == TokenKind.COMMENT]
        assert comments == ["(* one *)", "/* two */", "// three"]

    def test_line_comment_excludes_newline(self):
        tokens = tokenize("// note\nx")
        assert tokens[0].text == "// note"
        assert tokens[1].kind == TokenKind.WHITESPACE
        assert tokens[1].text == "\n"

    def test_unknown_character_is_single_identifier(self):
        tokens = kinds_and_texts("$$")
        assert tokens == [(TokenKind.IDENTIFIER, "$"), (TokenKind.IDENTIFIER, "$")]

    def test_identifier_with_digits_and_underscores(self):
        assert kinds_and_texts("_rule_2") == [(TokenKind.IDENTIFIER, "_rule_2")]

    def test_whitespace_runs_are_one_token(self):
        tokens = tokenize("a \t\n  b")
        assert [t.kind for t in tokens] == [
            TokenKind.IDENTIFIER,
            TokenKind.WHITESPACE,
            TokenKind.IDENTIFIER,
        ]


class TestPrecedence:
    """Earlier forms win when spans start at the same position."""

    def test_comment_beats_parenthesis(self):
        tokens = kinds_and_texts("(* c *)")
        assert tokens == [(TokenKind.COMMENT, "(* c *)")]

    def test_quote_inside_comment_is_not_literal(self):
        tokens = kinds_and_texts("(* don't *) x")
        assert tokens[0] == (TokenKind.COMMENT, "(* don't *)")
        assert tokens[1] == (TokenKind.IDENTIFIER, "x")

    def test_comment_marker_inside_literal(self):
        tokens = kinds_and_texts("'(*' x")
        assert tokens[0] == (TokenKind.STRING, "'(*'")

    def test_assignment_operator_is_one_token(self):
        tokens = kinds_and_texts("a::=b")
        assert tokens[1] == (TokenKind.OPERATOR, "::=")

    def test_lone_colon_is_fallback(self):
        tokens = kinds_and_texts("a : b")
        assert tokens[1] == (TokenKind.IDENTIFIER, ":")


class TestUnterminated:
    """Unterminated spans run to end of input without raising."""

    def test_literal(self):
        tokens = tokenize("x ::= 'abc")
        assert tokens[-1].kind == TokenKind.STRING
        assert tokens[-1].text == "'abc"

    def test_literal_ending_in_backslash(self):
        tokens = tokenize("'abc\\")
        assert len(tokens) == 1
        assert tokens[0].text == "'abc\\"

    def test_class(self):
        tokens = tokenize("[a-z")
        assert tokens[0].kind == TokenKind.CHAR_CLASS
        assert tokens[0].text == "[a-z"

    def test_block_comment(self):
        tokens = tokenize("x (* open")
        assert tokens[-1].kind == TokenKind.COMMENT
        assert tokens[-1].text == "(* open"


class TestPositions:
    """Line and column tracking."""

    def test_line_and_column(self):
        tokens = significant(tokenize("a ::= b ;\n  c ::= d ;"))
        c = tokens[4]
        assert c.text == "c"
        assert (c.line, c.column) == (2, 3)

    def test_multiline_comment_advances_lines(self):
        tokens = [t for t in tokenize("(* one\ntwo *) x") if t.kind != TokenKind.WHITESPACE]
        assert tokens[1].text == "x"
        assert tokens[1].line == 2
        assert tokens[1].column == 8


class TestAntlrDialect:
    """ANTLR-only token forms."""

    def test_paren_star_is_not_comment(self):
        tokens = kinds_and_texts("( *", Dialect.ANTLR)
        assert tokens == [(TokenKind.OPERATOR, "("), (TokenKind.OPERATOR, "*")]
        assert kinds_and_texts("(*x", Dialect.ANTLR)[0] == (TokenKind.OPERATOR, "(")

    def test_action_with_nested_braces_and_strings(self):
        tokens = kinds_and_texts("{ a { '}' } } b", Dialect.ANTLR)
        assert tokens[0] == (TokenKind.ACTION, "{ a { '}' } }")
        assert tokens[1] == (TokenKind.IDENTIFIER, "b")

    def test_antlr_operators(self):
        texts = [text for _, text in kinds_and_texts("-> += .. :: : = ~ # @ < > !", Dialect.ANTLR)]
        assert texts == ["->", "+=", "..", "::", ":", "=", "~", "#", "@", "<", ">", "!"]

    def test_brace_in_ebnf_is_fallback(self):
        tokens = kinds_and_texts("{ }")
        assert tokens == [(TokenKind.IDENTIFIER, "{"), (TokenKind.IDENTIFIER, "}")]


def test_lexer_is_reusable_per_source():
    lexer = Lexer("a ::= b ;")
    first = lexer.tokenize()
    assert tokenize("a ::= b ;") == first
