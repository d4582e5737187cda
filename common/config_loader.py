from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional
import logging

import yaml

from common.errors import InputFileError, SettingsError

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_PATH = "config/settings.yaml"

def load_yaml(path: str | Path) -> Dict[str, Any]:
    p = Path(path)
    with p.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}

@dataclass(frozen=True)
class Settings:
    base_url: str = "https://api.tiingo.com/tiingo/daily"
    timeout_seconds: float = 10.0
    max_workers: int = 8
    log_level: str = "WARNING"

def _positive_number(section: Dict[str, Any], key: str, default: float, cast) -> Any:
    raw = section.get(key, default)
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise SettingsError(f"{key} must be a number, got {raw!r}")
    value = cast(raw)
    if value <= 0:
        raise SettingsError(f"{key} must be positive, got {raw!r}")
    return value

def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    section = raw.get(name) or {}
    if not isinstance(section, dict):
        raise SettingsError(f"{name} must be a mapping, got {section!r}")
    return section

def settings_from_dict(raw: Dict[str, Any]) -> Settings:
    """Build Settings from the parsed YAML mapping, filling in defaults."""
    defaults = Settings()
    if not isinstance(raw, dict):
        raise SettingsError("settings file must contain a mapping")
    tiingo = _section(raw, "tiingo")
    fetch = _section(raw, "fetch")
    log_cfg = _section(raw, "logging")

    base_url = tiingo.get("base_url", defaults.base_url)
    if not isinstance(base_url, str) or not base_url.strip():
        raise SettingsError(f"tiingo.base_url must be a non-empty string, got {base_url!r}")

    max_workers = fetch.get("max_workers", defaults.max_workers)
    if isinstance(max_workers, float) and not max_workers.is_integer():
        raise SettingsError(f"max_workers must be an integer, got {max_workers!r}")

    level = str(log_cfg.get("level", defaults.log_level)).upper()
    if not isinstance(logging.getLevelName(level), int):
        raise SettingsError(f"logging.level {level!r} is not a logging level")

    return Settings(
        base_url=base_url.strip().rstrip("/"),
        timeout_seconds=_positive_number(tiingo, "timeout_seconds", defaults.timeout_seconds, float),
        max_workers=_positive_number(fetch, "max_workers", defaults.max_workers, int),
        log_level=level,
    )

def load_settings(path: Optional[str | Path] = None) -> Settings:
    """Load settings from ``path``.

    With no explicit path the default location is tried and built-in
    defaults are used when it does not exist. An explicit path must exist.
    """
    target = Path(path) if path is not None else Path(DEFAULT_SETTINGS_PATH)
    try:
        raw = load_yaml(target)
    except FileNotFoundError as exc:
        if path is None:
            logger.debug("No settings file at %s, using defaults", target)
            return Settings()
        raise InputFileError(f"There was an error opening '{target}': {exc.strerror}") from exc
    except OSError as exc:
        raise InputFileError(f"There was an error opening '{target}': {exc}") from exc
    except yaml.YAMLError as exc:
        raise SettingsError(f"Could not parse settings file '{target}': {exc}") from exc
    return settings_from_dict(raw)

def read_api_key(path: str | Path) -> str:
    """Return the first line of ``path`` with surrounding whitespace removed."""
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            first = f.readline()
    except OSError as exc:
        raise InputFileError(f"There was an error opening '{p}': {exc.strerror or exc}") from exc
    return first.strip()
