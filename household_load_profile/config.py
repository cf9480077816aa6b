"""
Configuration loader for load-profile runs.
"""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, cast

import yaml

from household_load_profile.serial_dates import parse_date_origin


@dataclass(frozen=True)
class LoadProfileSettings:
    """Resolved, validated settings for one pipeline run."""

    input_path: Path
    sheet_name: str | None
    date_origin: date
    expected_days: int | None
    strict: bool
    focus_date: date | None
    output_dir: Path | None
    show: bool


def default_config_path() -> Path:
    # config/load_profile.yaml relative to project root
    return Path(__file__).parent.parent / "config" / "load_profile.yaml"


_ENV_REF = re.compile(r"\$\{(\w+)\}")


def _expand_env(value: Any) -> Any:
    """Expand ${VAR} references in every string of a parsed YAML tree; unset variables stay as written."""
    if isinstance(value, dict):
        return {key: _expand_env(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_expand_env(item) for item in value]
    if isinstance(value, str):
        return _ENV_REF.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    return value


def _is_unresolved(value: Any) -> bool:
    return isinstance(value, str) and _ENV_REF.search(value) is not None


def load_config(config_path: Path | str | None = None) -> dict[str, Any]:
    """
    Read a load-profile YAML file (default: config/load_profile.yaml) and expand ${VAR} references.

    An empty file yields an empty dict.

    Raises:
        FileNotFoundError: If the config file does not exist
        ValueError: If the YAML root is not a mapping
    """
    path = Path(config_path) if config_path is not None else default_config_path()
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")

    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")
    return cast(dict[str, Any], _expand_env(data))


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Config section '{name}' must be a mapping, got {type(value).__name__}")
    return value


def _as_date(value: Any, *, key: str) -> date | None:
    if value is None or value == "":
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError:
        raise ValueError(f"{key} must be an ISO date (YYYY-MM-DD), got {value!r}") from None


def _as_bool(value: Any, *, key: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {"true", "yes", "1"}:
        return True
    if text in {"false", "no", "0"}:
        return False
    raise ValueError(f"{key} must be a boolean, got {value!r}")


def get_settings(config: dict[str, Any] | None = None) -> LoadProfileSettings:
    """
    Extract run settings from a config dict.

    Args:
        config: Config dict. If None, loads default config.

    Returns:
        LoadProfileSettings

    Raises:
        ValueError: If input.path is missing or a value has the wrong shape
    """
    if config is None:
        config = load_config()

    inp = _section(config, "input")
    reshape = _section(config, "reshape")
    charts = _section(config, "charts")

    raw_path = inp.get("path")
    if not raw_path or _is_unresolved(raw_path):
        raise ValueError("input.path is not set (config file or --input)")

    expected_days = reshape.get("expected_days")
    if expected_days is not None:
        expected_days = int(expected_days)
        if expected_days <= 0:
            raise ValueError(f"reshape.expected_days must be positive, got {expected_days}")

    output_dir = charts.get("output_dir")

    return LoadProfileSettings(
        input_path=Path(str(raw_path)),
        sheet_name=None if _is_unresolved(inp.get("sheet")) else (inp.get("sheet") or None),
        date_origin=parse_date_origin(str(reshape.get("date_origin", "1900"))),
        expected_days=expected_days,
        strict=_as_bool(reshape.get("strict", True), key="reshape.strict"),
        focus_date=_as_date(charts.get("focus_date"), key="charts.focus_date"),
        output_dir=Path(str(output_dir)) if output_dir else None,
        show=_as_bool(charts.get("show", True), key="charts.show"),
    )
