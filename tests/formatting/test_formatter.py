"""Tests for the EBNF layout renderer."""

import pytest

from g4ebnf.formatting import (
    DefaultFormattingRules,
    EbnfFormatter,
    FormattingOptions,
    join_tokens,
    render,
)
from g4ebnf.lang import parse_rules, tokenize


def render_source(source, width=100):
    return render(parse_rules(source)[0], width)


class TestRender:
    """Rendering of a single rule."""

    def test_alternatives_on_one_line(self):
        assert render_source("name ::= A|B|C ;") == "name ::= A | B | C ;"

    def test_alternatives_aligned_when_too_wide(self):
        assert render_source("name ::= A | B | C ;", width=15) == (
            "name ::= A\n"
            "       | B\n"
            "       | C ;"
        )

    def test_single_alternative_soft_wraps(self):
        assert render_source("rule ::= alpha beta gamma delta ;", width=20) == (
            "rule ::= alpha beta\n"
            "         gamma\n"
            "         delta ;"
        )

    def test_wrapped_line_holds_at_least_one_word(self):
        rendered = render_source("r ::= an_extremely_long_identifier_name other ;", width=10)
        assert rendered.split("\n")[0] == "r ::= an_extremely_long_identifier_name"

    def test_spacing_table(self):
        assert render_source("x ::= ( a|b )*c , d ? ;") == "x ::= (a | b)* c, d? ;"

    def test_quantifier_followed_by_space(self):
        assert render_source("x ::= a?b ;") == "x ::= a? b ;"

    def test_punctuation_runs_stay_together(self):
        assert render_source("r ::= 'a'..'z' ;") == "r ::= 'a' .. 'z' ;"

    def test_literals_are_verbatim(self):
        assert render_source("r ::= '  (  ' \"|\" [ a-z ] ;") == "r ::= '  (  ' \"|\" [ a-z ] ;"

    def test_empty_rhs(self):
        assert render_source("a ::= ;") == "a ::= ;"

    def test_empty_alternative(self):
        assert render_source("a ::= b | ;") == "a ::= b | ;"

    def test_leading_comment_preserved(self):
        assert render_source("(* about a *)\na ::= b ;") == "(* about a *)\na ::= b ;"

    def test_comment_inside_rhs(self):
        assert render_source("a ::= b (* note *) c ;") == (
            "a ::= b\n"
            "      (* note *)\n"
            "      c ;"
        )

    def test_trailing_line_comment_keeps_terminator(self):
        assert render_source("a ::= b // tail\n;") == (
            "a ::= b\n"
            "      // tail\n"
            "      ;"
        )

    def test_comment_only_alternative_keeps_terminator(self):
        assert render_source("a ::= b | // note\n;") == (
            "a ::= b\n"
            "    | // note\n"
            "      ;"
        )

    def test_comment_only_rhs_keeps_terminator(self):
        assert render_source("a ::= // only\n;") == "a ::= // only\n      ;"

    def test_block_with_wrapped_alternative_comment(self):
        rendered = render_source("a ::= b // first\n | c ;")
        assert rendered == (
            "a ::= b\n"
            "      // first\n"
            "    | c ;"
        )


class TestEbnfFormatter:
    """Formatting whole documents."""

    def test_rules_separated_by_blank_line(self):
        result = EbnfFormatter().format_document("a::=b;c::=d;")

        assert result.success()
        assert result.is_changed
        assert result.formatted_text == "a ::= b ;\n\nc ::= d ;\n"
        assert result.rule_count == 2

    def test_already_formatted(self, calculator_source):
        result = EbnfFormatter().format_document(calculator_source)

        assert result.formatted_text == calculator_source
        assert not result.is_changed

    def test_no_rules_normalizes_whitespace(self):
        result = EbnfFormatter().format_document("  just   some\t text  \n\n")

        assert result.formatted_text == "just some text\n"
        assert result.warnings
        assert result.rule_count == 0

    def test_stray_tokens_between_rules_are_dropped(self):
        result = EbnfFormatter().format_document("junk a ::= b ; more junk")
        assert result.formatted_text == "a ::= b ;\n"

    @pytest.mark.parametrize("source", [
        "a::=b|c;d::=(e|f)*g;",
        "(* head *)\n\n\na ::= b // tail\n;\n// about c\nc ::= 'x'..'y' , z ;",
        "long ::= aaaa bbbb cccc dddd eeee ffff gggg hhhh iiii jjjj kkkk ;",
        "r ::= alpha | beta (* c *) | gamma ;",
        "a ::= b | // note\n;\nc ::= d ;",
        "a ::= // only\n;\nc ::= d ;",
        "nothing here",
    ])
    def test_idempotent(self, source):
        formatter = EbnfFormatter(FormattingOptions(max_line_length=40))
        once = formatter.format_document(source).formatted_text
        twice = formatter.format_document(once)

        assert twice.formatted_text == once
        assert not twice.is_changed

    def test_width_option(self):
        formatter = EbnfFormatter(FormattingOptions(max_line_length=15))
        result = formatter.format_document("name ::= A | B | C ;")
        assert result.formatted_text == "name ::= A\n       | B\n       | C ;\n"


class TestFormattingPresets:
    """Preset option sets."""

    def test_standard(self):
        options = DefaultFormattingRules.standard()
        assert options.max_line_length == 100
        assert options.join_short_rules

    def test_compact_has_no_blank_lines(self):
        formatter = EbnfFormatter(DefaultFormattingRules.compact())
        assert formatter.format_document("a ::= b ; c ::= d ;").formatted_text == "a ::= b ;\nc ::= d ;\n"

    def test_expanded_breaks_alternatives(self):
        formatter = EbnfFormatter(DefaultFormattingRules.expanded())
        result = formatter.format_document("a ::= b | c ; d ::= e ;")
        assert result.formatted_text == "a ::= b\n    | c ;\n\nd ::= e ;\n"

    def test_by_name(self):
        assert DefaultFormattingRules.by_name("compact").blank_lines_between_rules == 0
        with pytest.raises(KeyError):
            DefaultFormattingRules.by_name("fancy")


def test_join_tokens():
    assert join_tokens(tokenize(" a  ( b ) + ")) == "a (b)+"


@pytest.mark.parametrize("source", [
    "a ::= b | // note\n;\nc ::= d ;",
    "a ::= // only\n;\nc ::= d ;",
])
def test_line_comment_alternative_keeps_following_rules(source):
    formatted = EbnfFormatter().format_document(source).formatted_text
    assert [rule.name for rule in parse_rules(formatted)] == ["a", "c"]
