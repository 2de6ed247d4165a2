"""Configuration manager for tsgraph using TOML files."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List

import toml

from .config import (
    BASE_DIR,
    DEFAULT_FILE_CONTENT_LIMIT,
    DEFAULT_SYMBOL_CONTENT_LIMIT,
)

logger = logging.getLogger(__name__)

CONFIG_FILE = BASE_DIR / "config.toml"
SECTION = "analyzer"


@dataclass
class AnalyzerSettings:
    """Tunable knobs of the extraction engine."""
    file_content_limit: int = DEFAULT_FILE_CONTENT_LIMIT
    symbol_content_limit: int = DEFAULT_SYMBOL_CONTENT_LIMIT
    extra_skip_dirs: List[str] = field(default_factory=list)
    extra_skip_extensions: List[str] = field(default_factory=list)

    def validate(self) -> "AnalyzerSettings":
        """Check value types.

        Raises:
            TypeError: if a limit is not an int or a list holds non-strings.
            ValueError: if a limit is not positive.
        """
        for name in ("file_content_limit", "symbol_content_limit"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{name} must be an integer, got {value!r}")
            if value <= 0:
                raise ValueError(f"{name} must be positive, got {value}")
        for name in ("extra_skip_dirs", "extra_skip_extensions"):
            value = getattr(self, name)
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise TypeError(f"{name} must be a list of strings, got {value!r}")
        return self

    @classmethod
    def from_mapping(cls, raw: Dict[str, Any]) -> "AnalyzerSettings":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(raw) - known)
        if unknown:
            logger.warning("Ignoring unknown [%s] keys: %s", SECTION, ", ".join(unknown))
        return cls(**{k: v for k, v in raw.items() if k in known}).validate()


def load_full_config() -> Dict[str, Any]:
    """Load the entire TOML config (all sections)."""
    if not CONFIG_FILE.exists():
        return {}
    try:
        with open(CONFIG_FILE, "r", encoding="utf-8") as f:
            return toml.load(f)
    except (OSError, toml.TomlDecodeError) as exc:
        logger.warning("Could not read %s: %s", CONFIG_FILE, exc)
        return {}


def _save_full_config(config: Dict[str, Any]) -> bool:
    """Write entire config dict to TOML file, preserving all sections."""
    try:
        CONFIG_FILE.parent.mkdir(parents=True, exist_ok=True)
        with open(CONFIG_FILE, "w", encoding="utf-8") as f:
            toml.dump(config, f)
        return True
    except OSError as exc:
        logger.warning("Could not write %s: %s", CONFIG_FILE, exc)
        return False


def load_settings() -> AnalyzerSettings:
    """Load analyzer settings from the ``[analyzer]`` section.

    Falls back to defaults when the file is missing or unreadable.
    """
    section = load_full_config().get(SECTION, {})
    try:
        return AnalyzerSettings.from_mapping(section)
    except (TypeError, ValueError) as exc:
        logger.warning("Invalid [%s] section, using defaults: %s", SECTION, exc)
        return AnalyzerSettings()


def save_settings(settings: AnalyzerSettings) -> bool:
    """Save analyzer settings, preserving other sections in the file."""
    config = load_full_config()
    config[SECTION] = asdict(settings)
    return _save_full_config(config)


def update_setting(key: str, value: str) -> AnalyzerSettings:
    """Set a single setting from its string form and persist it.

    Integer settings are parsed with ``int``; list settings take a
    comma-separated value (empty string clears the list).

    Raises:
        KeyError: if *key* is not a known setting.
        ValueError: if *value* cannot be converted.
    """
    if key not in {f.name for f in fields(AnalyzerSettings)}:
        raise KeyError(key)
    settings = load_settings()
    current = getattr(settings, key)

    if isinstance(current, list):
        converted: Any = [item.strip() for item in value.split(",") if item.strip()]
    else:
        converted = int(value)
        if converted <= 0:
            raise ValueError(f"{key} must be positive")

    setattr(settings, key, converted)
    if not save_settings(settings):
        raise OSError(f"Could not write {CONFIG_FILE}")
    return settings
