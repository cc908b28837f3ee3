"""
Error handling for the g4ebnf command line.

Commands raise ``CLIError`` subclasses carrying an error code and an
optional hint; ``main`` formats them on stderr and maps them to an exit
status.
"""

import os
import traceback
from typing import Any, Dict, Optional

from g4ebnf.errors import G4EbnfError


# Maximum length for traceback output in CLI
_CLI_TRACE_LIMIT = 4000


class CLIError(Exception):
    """
    Base exception for all CLI operations.

    Attributes:
        message: Human-readable error description
        code: Machine-readable error code
        hint: Optional suggestion for resolving the error
        context: Additional metadata about the error
    """

    def __init__(
        self,
        message: str,
        *,
        code: str,
        hint: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.hint = hint
        self.context = context or {}

    def __str__(self) -> str:
        return self.message


class CLIConfigError(CLIError):
    """Configuration file is unreadable or holds invalid values."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('code', 'CLI_CONFIG_ERROR')
        super().__init__(message, **kwargs)


class CLIValidationError(CLIError):
    """
    Invalid command arguments or options.

    Raised when:
    - An option value is out of range
    - Incompatible options are used together
    """

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('code', 'CLI_VALIDATION_ERROR')
        super().__init__(message, **kwargs)


class CLIFileNotFoundError(CLIError):
    """An input grammar file does not exist."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('code', 'CLI_FILE_NOT_FOUND')
        super().__init__(message, **kwargs)


class CLIFileError(CLIError):
    """An input or output file cannot be read or written."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault('code', 'CLI_FILE_ERROR')
        super().__init__(message, **kwargs)


def _traceback_excerpt() -> str:
    trace = traceback.format_exc().strip()
    if len(trace) <= _CLI_TRACE_LIMIT:
        return trace
    return f"{trace[:_CLI_TRACE_LIMIT - 3]}..."


def format_cli_error(
    exc: BaseException,
    *,
    verbose: bool = False,
    include_traceback: bool = False
) -> str:
    """
    Render an error for stderr.

    ``CLIError`` shows its code and hint, plus its context when ``verbose``.
    ``G4EbnfError`` uses its own ``format()``. The traceback of the
    exception being handled is appended when ``include_traceback`` is set.

    Examples:
        >>> format_cli_error(CLIValidationError("Bad width", hint="Use a number"))
        'Error [CLI_VALIDATION_ERROR]: Bad width\\nHint: Use a number'
    """
    if isinstance(exc, CLIError):
        lines = [f"Error [{exc.code}]: {exc.message}"]
        if exc.hint:
            lines.append(f"Hint: {exc.hint}")
        if verbose and exc.context:
            lines.append("\nContext:")
            lines.extend(f"  {key}: {value}" for key, value in exc.context.items())
    elif isinstance(exc, G4EbnfError):
        lines = [f"Error: {exc.format()}"]
    else:
        lines = [f"Error: {type(exc).__name__}: {exc}"]

    if include_traceback:
        lines.append(f"\nTraceback:\n{_traceback_excerpt()}")
    return "\n".join(lines)


def wrap_exception(
    exc: BaseException,
    *,
    message: str,
    error_class: type = CLIFileError,
    hint: Optional[str] = None,
    context: Optional[Dict[str, Any]] = None
) -> CLIError:
    """Build ``error_class`` for ``exc``; the original type and text go into a copy of ``context``."""
    details = dict(context or {})
    details["original_exception"] = str(exc)
    details["original_type"] = type(exc).__name__
    return error_class(message, hint=hint, context=details)


def _env_flag(name: str) -> bool:
    val = os.getenv(name)
    if val is None:
        return False
    return val.strip().lower() in {"1", "true", "yes", "on"}


def cli_verbose_enabled(verbose_flag: bool = False) -> bool:
    """Verbose output is on via ``--verbose`` or G4EBNF_VERBOSE / G4EBNF_DEBUG."""
    return verbose_flag or _env_flag("G4EBNF_VERBOSE") or _env_flag("G4EBNF_DEBUG")


def cli_reraise_enabled() -> bool:
    """Whether exceptions should propagate instead of being reported (G4EBNF_DEBUG)."""
    return _env_flag("G4EBNF_DEBUG")


__all__ = [
    "CLIError",
    "CLIConfigError",
    "CLIValidationError",
    "CLIFileNotFoundError",
    "CLIFileError",
    "format_cli_error",
    "wrap_exception",
    "cli_verbose_enabled",
    "cli_reraise_enabled",
]
