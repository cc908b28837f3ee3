"""
Output formatting for CLI operations.

This module renders validation reports produced by the grammar linter,
either as a console report or as JSON.
"""

import json
from typing import Optional

from rich.console import Console
from rich.text import Text

from g4ebnf.linter import LintResult


def make_console(stderr: bool = False) -> Console:
    """Console that prints grammar text as-is: no markup, no wrapping."""
    return Console(
        stderr=stderr,
        markup=False,
        highlight=False,
        emoji=False,
        soft_wrap=True,
    )


def _start_suffix(result: LintResult) -> str:
    return f" (start = {result.start_rule})" if result.start_rule else ""


def print_check_report(result: LintResult, display_path: str, console: Optional[Console] = None) -> None:
    """
    Print a validation report for one grammar file.

    Examples:
        >>> print_check_report(result, "calc.ebnf")  # doctest: +SKIP
        calc.ebnf validation results: (start = expr)

        Warnings:
          - Parser rule 'unused' at line 9 is not reachable from start 'expr'

        No blocking errors; only warnings. ✅
    """
    console = console or make_console()
    suffix = _start_suffix(result)

    if not result.errors and not result.warnings:
        console.print(Text(f"✔ {display_path} looks good{suffix}.", style="green"))
        return

    console.print(Text(f"{display_path} validation results:{suffix}", style="bold"))
    if result.errors:
        console.print()
        console.print(Text("Errors:", style="bold red"))
        for message in result.errors:
            console.print(Text(f"  - {message}"))
    if result.warnings:
        console.print()
        console.print(Text("Warnings:", style="bold yellow"))
        for message in result.warnings:
            console.print(Text(f"  - {message}"))
    if not result.errors:
        console.print()
        console.print(Text("No blocking errors; only warnings. ✅", style="green"))


def check_report_json(result: LintResult, display_path: str) -> str:
    payload = {"file": display_path, **result.to_dict()}
    return json.dumps(payload, indent=2)


__all__ = ["make_console", "print_check_report", "check_report_json"]
