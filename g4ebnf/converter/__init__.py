"""Conversion of ANTLR4 grammars into the EBNF notation."""

from .g4 import (
    ConversionResult,
    ConvertedGrammar,
    G4Reader,
    G4Rule,
    GrammarKind,
    GrammarSource,
    convert_grammar,
    convert_grammars,
    infer_kind,
)

__all__ = [
    "ConversionResult",
    "ConvertedGrammar",
    "G4Reader",
    "G4Rule",
    "GrammarKind",
    "GrammarSource",
    "convert_grammar",
    "convert_grammars",
    "infer_kind",
]
