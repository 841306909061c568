"""Configuration settings for classdict."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path

import yaml

from classdict.store.boundary import BoundaryRules
from classdict.text.diacritics import Language

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when a configuration file cannot be used."""

    def __init__(self, message: str, path: Path | None = None):
        self.path = path
        full_message = f"{path}: {message}" if path else message
        super().__init__(full_message)


def _default_data_root() -> Path:
    env_root = os.environ.get("CLASSDICT_DATA_ROOT")
    if env_root:
        return Path(env_root).expanduser()
    return Path.home() / ".classdict"


@dataclass(frozen=True)
class Settings:
    """Application settings, fixed for the duration of an invocation."""

    # Dictionary files live here unless a path is given explicitly
    data_root: Path = field(default_factory=_default_data_root)

    # Entry boundary heuristic
    max_headword_length_latin: int = 15
    max_headword_length_greek: int = 20

    # Result sizes
    suggestion_limit: int = 5
    max_results: int = 10

    # Morphological analyzer (Morpheus cruncher)
    lemmatizer_command: str = "cruncher"
    lemmatizer_stemlib: Path | None = None
    lemmatizer_timeout: float | None = None

    # Output
    pager: bool = True

    def boundary_rules(self, language: Language) -> BoundaryRules:
        """Boundary thresholds for a corpus language."""
        if language is Language.GREEK:
            limit = self.max_headword_length_greek
        else:
            limit = self.max_headword_length_latin
        return BoundaryRules.for_language(language, limit)

    @classmethod
    def load(cls, path: Path | str | None = None) -> "Settings":
        """Load settings, overlaying an optional YAML file on the defaults.

        Args:
            path: Config file. If None, uses:
                  1. CLASSDICT_CONFIG env var
                  2. config.yaml under the data root (skipped if absent)

        Returns:
            Settings

        Raises:
            ConfigError: If the file is not a mapping or has bad values
        """
        defaults = cls()

        explicit = path is not None or "CLASSDICT_CONFIG" in os.environ
        if path is None:
            path = os.environ.get("CLASSDICT_CONFIG") or defaults.data_root / "config.yaml"
        path = Path(path).expanduser()

        if not path.exists():
            if explicit:
                raise ConfigError("Config file not found", path)
            return defaults

        try:
            with open(path, "r", encoding="utf-8") as f:
                raw_data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML: {e}", path)

        if not isinstance(raw_data, dict):
            raise ConfigError("Config must be a YAML mapping", path)

        known = {f.name: f for f in fields(cls)}
        overrides = {}
        for key, value in raw_data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown config key '{key}' in {path}")
                continue
            overrides[key] = _coerce(key, value, defaults, path)

        # Environment beats the file for the data root
        if os.environ.get("CLASSDICT_DATA_ROOT"):
            overrides.pop("data_root", None)

        logger.debug(f"Loaded settings from {path}: {sorted(overrides)}")
        return replace(defaults, **overrides)


def _coerce(key: str, value, defaults: Settings, path: Path):
    if key in ("data_root", "lemmatizer_stemlib"):
        if value is None and key == "lemmatizer_stemlib":
            return None
        if not isinstance(value, str):
            raise ConfigError(f"'{key}' must be a path string", path)
        return Path(value).expanduser()

    if key == "lemmatizer_timeout":
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ConfigError(f"'{key}' must be a number of seconds", path)
        return float(value)

    expected = type(getattr(defaults, key))
    if expected is int and (isinstance(value, bool) or not isinstance(value, int)):
        raise ConfigError(f"'{key}' must be an integer", path)
    if expected is int and value < 1:
        raise ConfigError(f"'{key}' must be positive", path)
    if expected is bool and not isinstance(value, bool):
        raise ConfigError(f"'{key}' must be true or false", path)
    if expected is str and not isinstance(value, str):
        raise ConfigError(f"'{key}' must be a string", path)
    return value
