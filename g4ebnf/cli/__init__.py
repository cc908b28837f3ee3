"""
Command-line interface for g4ebnf.

Subcommands:
    convert   ANTLR4 .g4 grammars to EBNF
    format    Reformat an EBNF grammar
    check     Validate an EBNF grammar

Settings come from ``g4ebnf.toml``, ``.g4ebnfrc`` or ``[tool.g4ebnf]`` in
``pyproject.toml``; command-line flags take precedence.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from g4ebnf import __version__
from g4ebnf.config import load_settings
from g4ebnf.errors import ConfigError, G4EbnfError

from .commands import cmd_check, cmd_convert, cmd_format
from .errors import (
    CLIConfigError,
    CLIError,
    cli_reraise_enabled,
    cli_verbose_enabled,
    format_cli_error,
)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2


def _configure_logging(args) -> None:
    """Configure the g4ebnf logger from --log-level or G4EBNF_LOG_LEVEL."""
    log_level = (
        getattr(args, 'log_level', None) or
        os.getenv('G4EBNF_LOG_LEVEL', 'warn')
    ).lower()

    level_map = {
        'debug': logging.DEBUG,
        'info': logging.INFO,
        'warn': logging.WARNING,
        'warning': logging.WARNING,
        'error': logging.ERROR,
    }

    numeric_level = level_map.get(log_level, logging.WARNING)

    package_logger = logging.getLogger('g4ebnf')
    package_logger.setLevel(numeric_level)

    if not package_logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)
        # Prevent propagation to root logger to avoid duplicate messages
        package_logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Convert ANTLR4 grammars to EBNF, then format and validate them",
        prog="g4ebnf"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        '--config',
        default=None,
        help='Path to a g4ebnf.toml or .g4ebnfrc configuration file'
    )
    parser.add_argument(
        '--verbose',
        action='store_true',
        help='Print full tracebacks and detailed CLI errors (or set G4EBNF_VERBOSE=1)'
    )
    parser.add_argument(
        '--log-level',
        choices=['debug', 'info', 'warn', 'error'],
        default=None,
        help='Set logging level (or set G4EBNF_LOG_LEVEL)'
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    convert_parser = subparsers.add_parser(
        'convert',
        help='Convert ANTLR4 grammars to EBNF',
        description='Convert one or more ANTLR4 grammar files into a single EBNF document.'
    )
    convert_parser.add_argument('files', nargs='+', metavar='GRAMMAR', help='ANTLR4 grammar files (.g4)')
    convert_parser.add_argument(
        '--format', '--prettify',
        dest='format',
        action='store_true',
        help='Format the output EBNF for better readability'
    )
    convert_parser.add_argument('--width', type=int, default=None, help='Line width for formatting (default: 100)')
    convert_parser.add_argument('--output', '-o', default=None, help='Write output to file instead of stdout')
    convert_parser.set_defaults(func=cmd_convert)

    format_parser = subparsers.add_parser(
        'format',
        help='Reformat an EBNF grammar',
        description='Re-serialize every rule with normalized spacing and aligned alternatives.'
    )
    format_parser.add_argument('file', help='EBNF grammar file')
    format_parser.add_argument('--width', type=int, default=None, help='Soft-wrap width (minimum 40)')
    format_parser.add_argument('--inplace', '-i', action='store_true', help='Rewrite the file in place')
    format_parser.add_argument(
        '--check',
        action='store_true',
        help='Exit with status 1 if the file is not already formatted'
    )
    format_parser.add_argument(
        '--style',
        choices=['standard', 'compact', 'expanded'],
        default=None,
        help='Formatting preset'
    )
    format_parser.set_defaults(func=cmd_format)

    check_parser = subparsers.add_parser(
        'check',
        help='Validate an EBNF grammar',
        description='Report duplicate, undefined, unreachable and left-recursive rules.'
    )
    check_parser.add_argument('file', help='EBNF grammar file')
    check_parser.add_argument('--start', default=None, metavar='RULE', help='Start rule for reachability')
    check_parser.add_argument('--json', action='store_true', help='Emit the report as JSON')
    check_parser.set_defaults(func=cmd_check)

    return parser


def main(argv: Optional[list] = None) -> int:
    """
    Main CLI entrypoint.

    Args:
        argv: Command-line arguments (None uses sys.argv[1:])

    Returns:
        Exit status: 0 on success, 1 on validation errors or failures,
        2 on usage errors

    Examples:
        >>> main(['check', 'calc.ebnf', '--start', 'expr'])  # doctest: +SKIP
        ✔ calc.ebnf looks good (start = expr).
        0
    """
    if argv is None:
        argv = sys.argv[1:]

    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, 'func'):
        parser.print_help()
        return EXIT_USAGE

    _configure_logging(args)
    verbose = cli_verbose_enabled(args.verbose)

    try:
        try:
            args.settings = load_settings(
                Path.cwd(),
                Path(args.config) if args.config else None,
            )
        except ConfigError as exc:
            raise CLIConfigError(
                f"{exc.message} ({exc.location.describe()})",
                hint=exc.hint or "Check the g4ebnf settings file",
                context={"path": exc.path},
            ) from exc
        return args.func(args)
    except (CLIError, G4EbnfError) as exc:
        if cli_reraise_enabled():
            raise
        print(format_cli_error(exc, verbose=verbose, include_traceback=verbose), file=sys.stderr)
        return EXIT_FAILURE


__all__ = ["main", "build_parser"]
