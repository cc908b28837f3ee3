"""Configuration file support for the g4ebnf tools."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older interpreters
    tomllib = None  # type: ignore

MIN_WIDTH = 40
CONFIG_FILENAMES = ("g4ebnf.toml", ".g4ebnfrc", "pyproject.toml")


class ToolSettings(BaseModel):
    """
    Settings shared by the convert, format and check commands.

    Configuration:
        - extra="forbid": Reject unknown keys so typos surface early
        - width below ``MIN_WIDTH`` is clamped rather than rejected
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    width: int = Field(100, description="Soft-wrap width for formatted output")
    start_rule: Optional[str] = Field(None, description="Rule reachability is measured from")
    join_short_rules: bool = Field(True, description="Keep rules that fit on one line")

    @field_validator("width")
    @classmethod
    def clamp_width(cls, value: int) -> int:
        return max(MIN_WIDTH, value)

    @field_validator("start_rule")
    @classmethod
    def blank_start_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not value.strip():
            return None
        return value

    def merged(self, **overrides: Any) -> "ToolSettings":
        """Copy with non-None overrides applied (command-line flags)."""
        updates = {key: value for key, value in overrides.items() if value is not None}
        return ToolSettings.model_validate({**self.model_dump(), **updates})


def _read_json_config(path: Path) -> Dict[str, Any]:
    content = path.read_text(encoding="utf-8")
    return json.loads(content)


def _read_toml_config(path: Path) -> Dict[str, Any]:
    if tomllib is None:
        raise RuntimeError("TOML parsing requires Python 3.11 or later.")
    with path.open("rb") as handle:
        return tomllib.load(handle)


def _section(path: Path, data: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ConfigError("Config file must hold a table of settings", path=str(path))
    if path.name == "pyproject.toml":
        return (data.get("tool") or {}).get("g4ebnf") or {}
    return data.get("g4ebnf", data)


def locate_config_file(root: Path, explicit: Optional[Path] = None) -> Optional[Path]:
    if explicit is not None:
        return explicit if explicit.exists() else None
    for candidate in CONFIG_FILENAMES:
        path = root / candidate
        if not path.exists():
            continue
        if candidate == "pyproject.toml" and not _section(path, _read_toml_config(path)):
            continue
        return path
    return None


def load_settings(root: Path, explicit: Optional[Path] = None) -> ToolSettings:
    """
    Load settings from the first config file found under ``root``.

    Args:
        root: Directory searched for ``g4ebnf.toml``, ``.g4ebnfrc`` (JSON)
            or a ``[tool.g4ebnf]`` table in ``pyproject.toml``
        explicit: Config file given on the command line

    Returns:
        Validated settings, defaults when no file is found

    Raises:
        ConfigError: The file cannot be parsed or holds invalid values
    """
    if explicit is not None and not explicit.exists():
        raise ConfigError(f"Config file '{explicit}' does not exist", path=str(explicit))

    try:
        config_path = locate_config_file(root.resolve(), explicit)
        if config_path is None:
            return ToolSettings()
        if config_path.suffix == ".toml":
            data = _read_toml_config(config_path)
        else:
            data = _read_json_config(config_path)
    except (ValueError, OSError) as exc:
        raise ConfigError(f"Cannot read config file: {exc}", path=str(explicit or root)) from exc

    try:
        return ToolSettings.model_validate(_section(config_path, data))
    except ValidationError as exc:
        problems = "; ".join(
            f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
            for error in exc.errors()
        )
        raise ConfigError(
            f"Invalid configuration: {problems}",
            path=str(config_path),
            hint="Supported keys are width, start_rule and join_short_rules",
        ) from exc


__all__ = ["ToolSettings", "locate_config_file", "load_settings", "MIN_WIDTH"]
