"""
Command handlers for the g4ebnf CLI.

Each handler takes the parsed ``argparse.Namespace`` (with ``settings``
attached by ``main``) and returns the process exit status.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List

from g4ebnf.converter import GrammarSource, convert_grammars
from g4ebnf.formatting import DefaultFormattingRules, EbnfFormatter, FormattingOptions
from g4ebnf.linter import GrammarLinter

from .errors import CLIFileError, CLIFileNotFoundError, CLIValidationError, wrap_exception
from .output import check_report_json, make_console, print_check_report

logger = logging.getLogger(__name__)


def _display_path(path: Path) -> str:
    try:
        return os.path.relpath(path)
    except ValueError:
        # Different drive on Windows
        return str(path)


def _read_source(path: Path) -> GrammarSource:
    """
    Read a grammar file.

    Raises:
        CLIFileNotFoundError: If the file does not exist
        GrammarSourceError: If the file cannot be read or decoded
    """
    if not path.exists():
        raise CLIFileNotFoundError(
            f"File '{path}' does not exist",
            context={"path": str(path)},
        )
    return GrammarSource.read(str(path))


def _write_text(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as exc:
        raise wrap_exception(
            exc,
            message=f"Cannot write '{path}'",
            context={"path": str(path)},
        ) from exc


def cmd_convert(args: argparse.Namespace) -> int:
    """
    Handle the 'convert' subcommand: ANTLR4 grammars to EBNF.

    Args:
        args: Parsed command-line arguments containing:
            - files: One or more .g4 grammar files
            - format: Run the formatter over the result
            - width: Optional soft-wrap width override
            - output: Optional output file (stdout otherwise)

    Examples:
        $ g4ebnf convert MyLexer.g4 MyParser.g4 --format --width 80
    """
    settings = args.settings.merged(width=args.width)
    sources: List[GrammarSource] = []
    for name in args.files:
        path = Path(name)
        source = _read_source(path)
        if path.suffix != ".g4":
            print(f"Warning: File '{name}' does not have .g4 extension", file=sys.stderr)
        sources.append(source)

    result = convert_grammars(sources, format_output=args.format, width=settings.width)
    logger.debug(
        "Converted %d parser and %d lexer rules",
        len(result.parser_rules),
        len(result.lexer_rules),
    )
    text = result.text if result.text.endswith("\n") else result.text + "\n"

    if args.output:
        _write_text(Path(args.output), text)
        print(f"Generated EBNF written to: {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(text)
    return 0


def _formatting_options(args: argparse.Namespace) -> FormattingOptions:
    if args.style:
        options = DefaultFormattingRules.by_name(args.style)
        if args.width is not None:
            options.max_line_length = args.settings.merged(width=args.width).width
        return options

    settings = args.settings.merged(width=args.width)
    return FormattingOptions(
        max_line_length=settings.width,
        join_short_rules=settings.join_short_rules,
    )


def cmd_format(args: argparse.Namespace) -> int:
    """
    Handle the 'format' subcommand: reformat an EBNF file.

    Prints the formatted grammar, rewrites the file with ``--inplace``,
    or with ``--check`` only reports whether the file would change
    (exit status 1 if it would).
    """
    if args.inplace and args.check:
        raise CLIValidationError(
            "--inplace and --check cannot be used together",
            hint="Use --check in CI and --inplace locally",
        )

    path = Path(args.file)
    source = _read_source(path).text
    result = EbnfFormatter(_formatting_options(args)).format_document(source)
    if not result.success():
        raise CLIFileError(
            f"Could not format '{args.file}'",
            context={"errors": "; ".join(result.errors)},
        )
    for warning in result.warnings:
        logger.warning("%s: %s", args.file, warning)

    if args.check:
        if result.is_changed:
            print(f"would reformat {_display_path(path)}")
            return 1
        print(f"{_display_path(path)} is already formatted")
        return 0

    if args.inplace:
        _write_text(path, result.formatted_text)
        print(f"Formatted {path.name} ({result.rule_count} rules).")
    else:
        sys.stdout.write(result.formatted_text)
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """
    Handle the 'check' subcommand: validate an EBNF file.

    Exit status is 1 exactly when the report contains errors; warnings
    alone do not fail the check.
    """
    path = Path(args.file)
    source = _read_source(path).text
    start_rule = args.start or args.settings.start_rule

    result = GrammarLinter().lint_document(source, start_rule=start_rule)
    display_path = _display_path(path)
    if args.json:
        print(check_report_json(result, display_path))
    else:
        print_check_report(result, display_path, make_console())
    return 0 if result.success() else 1


__all__ = ["cmd_convert", "cmd_format", "cmd_check"]
