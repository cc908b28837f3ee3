"""Default formatting rules for EBNF grammars."""

from __future__ import annotations

from .core import FormattingOptions


class DefaultFormattingRules:
    """Formatting presets."""

    @classmethod
    def standard(cls) -> FormattingOptions:
        """Standard layout: 100 columns, short rules kept on one line."""
        return FormattingOptions(
            max_line_length=100,
            insert_final_newline=True,
            trim_trailing_whitespace=True,
            join_short_rules=True,
            blank_lines_between_rules=1,
        )

    @classmethod
    def compact(cls) -> FormattingOptions:
        """Compact layout with no blank lines between rules."""
        return FormattingOptions(
            max_line_length=120,
            insert_final_newline=True,
            trim_trailing_whitespace=True,
            join_short_rules=True,
            blank_lines_between_rules=0,
        )

    @classmethod
    def expanded(cls) -> FormattingOptions:
        """Expanded layout: every alternative on its own line."""
        return FormattingOptions(
            max_line_length=80,
            insert_final_newline=True,
            trim_trailing_whitespace=True,
            join_short_rules=False,
            blank_lines_between_rules=1,
        )

    @classmethod
    def by_name(cls, name: str) -> FormattingOptions:
        presets = {
            "standard": cls.standard,
            "compact": cls.compact,
            "expanded": cls.expanded,
        }
        if name not in presets:
            raise KeyError(f"Unknown formatting style '{name}'")
        return presets[name]()
