"""Tests for rule extraction and alternative splitting."""

from g4ebnf.lang import RuleKind, TokenKind, parse_rules, split_alternatives, tokenize


def names(rules):
    return [rule.name for rule in rules]


class TestExtractRules:
    """Recovering productions from a token stream."""

    def test_rules_in_order_with_lines(self):
        rules = parse_rules("a ::= b ;\n\nb ::= 'x' ;\nc ::= a b ;")
        assert names(rules) == ["a", "b", "c"]
        assert [rule.line for rule in rules] == [1, 3, 4]

    def test_rhs_excludes_terminator(self):
        rule = parse_rules("a ::= b c ;")[0]
        texts = [t.text for t in rule.rhs if t.kind != TokenKind.WHITESPACE]
        assert texts == ["b", "c"]

    def test_semicolon_inside_parentheses_does_not_end_rule(self):
        rules = parse_rules("a ::= ( b ; c ) ; d ::= e ;")
        assert names(rules) == ["a", "d"]
        texts = [t.text for t in rules[0].rhs if t.kind != TokenKind.WHITESPACE]
        assert texts == ["(", "b", ";", "c", ")"]

    def test_semicolon_inside_literal_does_not_end_rule(self):
        rules = parse_rules("a ::= ';' b ; c ::= d ;")
        assert names(rules) == ["a", "c"]

    def test_unclosed_group_runs_to_end(self):
        rules = parse_rules("a ::= ( b ; c ::= d ;")
        assert names(rules) == ["a"]

    def test_missing_terminator_runs_to_end(self):
        rules = parse_rules("a ::= b c")
        assert names(rules) == ["a"]
        assert [t.text for t in rules[0].rhs if t.kind != TokenKind.WHITESPACE] == ["b", "c"]

    def test_missing_terminator_stops_at_next_rule(self):
        rules = parse_rules("a ::= b c\n(* about d *)\nd ::= e ;\nf ::= g ;")
        assert names(rules) == ["a", "d", "f"]
        assert [t.text for t in rules[0].rhs if t.kind != TokenKind.WHITESPACE] == ["b", "c"]
        assert rules[1].leading_comments == ("(* about d *)\n",)

    def test_next_rule_inside_group_is_not_a_boundary(self):
        rules = parse_rules("a ::= ( b\nd ::= e ;")
        assert names(rules) == ["a"]

    def test_empty_rhs(self):
        rule = parse_rules("a ::= ;")[0]
        assert all(t.kind == TokenKind.WHITESPACE for t in rule.rhs)

    def test_fragment_without_assignment_is_skipped(self):
        rules = parse_rules("stray words here\na ::= b ;")
        assert names(rules) == ["a"]

    def test_non_identifier_tokens_are_skipped(self):
        rules = parse_rules("'lit' ; ) a ::= b ;")
        assert names(rules) == ["a"]

    def test_no_rules(self):
        assert parse_rules("") == []
        assert parse_rules("(* only a comment *)") == []

    def test_extraction_never_raises_on_garbage(self):
        rules = parse_rules("::= ::= ; ; ) ) ( [ '")
        assert rules == []


class TestLeadingComments:
    """Comments before a rule are attached to it."""

    def test_comment_attached_to_next_rule(self):
        rules = parse_rules("(* header *)\na ::= b ;\n// about c\nc ::= d ;")
        assert rules[0].leading_comments == ("(* header *)\n",)
        assert rules[1].leading_comments == ("// about c\n",)

    def test_several_comments(self):
        rule = parse_rules("/* one */ (* two *)\n\na ::= b ;")[0]
        assert rule.leading_comments == ("/* one */ ", "(* two *)\n\n")

    def test_comment_inside_rhs_stays_in_rhs(self):
        rule = parse_rules("a ::= b (* note *) c ;")[0]
        assert rule.leading_comments == ()
        assert any(t.kind == TokenKind.COMMENT for t in rule.rhs)

    def test_trailing_comment_is_dropped(self):
        rules = parse_rules("a ::= b ;\n(* dangling *)")
        assert len(rules) == 1
        assert rules[0].leading_comments == ()


class TestSplitAlternatives:
    """Splitting a right-hand side at top-level bars."""

    def split(self, source):
        return split_alternatives(tokenize(source))

    def test_top_level_bars(self):
        alternatives = self.split("A | B | C")
        assert [alt.summary for alt in alternatives] == ["A", "B", "C"]
        assert [alt.index for alt in alternatives] == [0, 1, 2]

    def test_bars_inside_groups_are_kept(self):
        alternatives = self.split("( A | B ) C | D")
        assert [alt.summary for alt in alternatives] == ["( A | B ) C", "D"]

    def test_bar_inside_literal_is_not_a_separator(self):
        alternatives = self.split("'|' A")
        assert len(alternatives) == 1

    def test_empty_input_yields_one_empty_alternative(self):
        alternatives = self.split("")
        assert len(alternatives) == 1
        assert alternatives[0].is_empty

    def test_empty_branches(self):
        alternatives = self.split("A | | B |")
        assert [alt.is_empty for alt in alternatives] == [False, True, False, True]

    def test_stray_close_paren_does_not_go_negative(self):
        alternatives = self.split(") A | B")
        assert len(alternatives) == 2


class TestRuleKind:
    """Naming-convention classification."""

    def test_kinds(self):
        rules = parse_rules("ID ::= 'a' ; expr ::= ID ; MixedCase ::= expr ; _X ::= ID ;")
        assert [rule.kind for rule in rules] == [
            RuleKind.TERMINAL,
            RuleKind.STRUCTURAL,
            RuleKind.MIXED,
            RuleKind.TERMINAL,
        ]
