"""Test configuration and fixtures for linter tests."""

import pytest

from g4ebnf.lang import parse_rules
from g4ebnf.linter.core import LintContext


# Sample grammars for various linting scenarios
CLEAN_GRAMMAR = '''program ::= statement* ;
statement ::= assignment | 'print' expr ';' ;
assignment ::= ID '=' expr ';' ;
expr ::= ID | NUMBER ;
ID ::= [a-z]+ ;
NUMBER ::= [0-9]+ ;
'''

PROBLEMATIC_GRAMMAR = '''program ::= stmt* ;
stmt ::= assign | block ;
block ::= '{' stmt* ;
block ::= '{' stmt* '}' ;
orphan ::= 'x' ;
list ::= list ',' item | item ;
item ::= ( NAME ;
'''


@pytest.fixture
def clean_grammar():
    """Grammar with no findings."""
    return CLEAN_GRAMMAR


@pytest.fixture
def problematic_grammar():
    """Grammar with several problems."""
    return PROBLEMATIC_GRAMMAR


@pytest.fixture
def make_context():
    """Build a lint context from EBNF source."""
    def _make(source, start_rule=None):
        return LintContext.build(parse_rules(source), start_rule)
    return _make
