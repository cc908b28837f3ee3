import textwrap

import pytest


def pytest_configure(config):
    """Register markers for pytest."""
    config.addinivalue_line("markers", "integration: mark test as integration test")


CALCULATOR_EBNF = textwrap.dedent('''\
    (* Arithmetic expressions *)
    expr ::= term (('+' | '-') term)* ;

    term ::= factor (('*' | '/') factor)* ;

    factor ::= NUMBER | '(' expr ')' ;

    NUMBER ::= [0-9]+ ;
''')


@pytest.fixture
def calculator_source():
    """A small grammar with no findings."""
    return CALCULATOR_EBNF


@pytest.fixture
def write_file(tmp_path):
    """Write ``content`` to ``tmp_path / name`` and return the path."""
    def _write(name, content):
        path = tmp_path / name
        path.write_text(content, encoding="utf-8")
        return path
    return _write
