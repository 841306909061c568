"""Dictionary catalog loading and validation.

Loads dictionaries.yaml (packaged beside this module, CLASSDICT_CATALOG_PATH
env override). Every dictionary requires name, language and file; index,
smart_quotes and default are optional.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from classdict.text.diacritics import Language

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "dictionaries.yaml"


class CatalogValidationError(Exception):
    """Raised when catalog validation fails."""

    def __init__(self, message: str, dictionary_key: str | None = None):
        self.dictionary_key = dictionary_key
        full_message = f"[{dictionary_key}] {message}" if dictionary_key else message
        super().__init__(full_message)


@dataclass
class DictionarySpec:
    """A single dictionary from the catalog.

    Required fields:
        key: Unique identifier (e.g., "lewis-short")
        name: Human-readable name
        language: latin or greek
        file: Flat-text corpus file name (relative to the data root)

    Optional fields:
        index: SQLite index file name (relative to the data root)
        smart_quotes: True for the curly-quote edition of a corpus
        default: True for the preferred dictionary of its language
    """

    key: str
    name: str
    language: Language
    file: str
    index: str = ""
    smart_quotes: bool = False
    default: bool = False

    @classmethod
    def from_dict(cls, key: str, data: dict) -> "DictionarySpec":
        """Create DictionarySpec from catalog entry dict."""
        for required in ("name", "language", "file"):
            if not data.get(required):
                raise CatalogValidationError(f"Missing required field: {required}", key)

        try:
            language = Language(data["language"])
        except ValueError:
            valid = [lang.value for lang in Language]
            raise CatalogValidationError(
                f"Invalid language '{data['language']}'. Must be one of: {valid}",
                key,
            )

        return cls(
            key=key,
            name=data["name"],
            language=language,
            file=data["file"],
            index=data.get("index", ""),
            smart_quotes=bool(data.get("smart_quotes", False)),
            default=bool(data.get("default", False)),
        )

    def file_path(self, data_root: Path) -> Path:
        return data_root / self.file

    def index_path(self, data_root: Path) -> Path | None:
        return data_root / self.index if self.index else None

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {
            "key": self.key,
            "name": self.name,
            "language": self.language.value,
            "file": self.file,
            "index": self.index,
            "smart_quotes": self.smart_quotes,
            "default": self.default,
        }


@dataclass
class DictionaryCatalog:
    """Container for all known dictionaries."""

    dictionaries: dict[str, DictionarySpec] = field(default_factory=dict)
    path: Path | None = None

    def get(self, key: str) -> DictionarySpec | None:
        """Get dictionary by key."""
        return self.dictionaries.get(key)

    def for_language(
        self, language: Language, smart_quotes: bool = False
    ) -> DictionarySpec | None:
        """Pick the dictionary for a language.

        With smart_quotes, the curly-quote edition is preferred when the
        catalog has one; otherwise the language's default (or first)
        dictionary is returned.
        """
        candidates = [d for d in self.dictionaries.values() if d.language is language]
        if not candidates:
            return None

        if smart_quotes:
            for spec in candidates:
                if spec.smart_quotes:
                    return spec

        plain = [d for d in candidates if not d.smart_quotes] or candidates
        for spec in plain:
            if spec.default:
                return spec
        return plain[0]

    @classmethod
    def load(cls, path: Path | str | None = None) -> "DictionaryCatalog":
        """Load catalog from YAML file.

        Args:
            path: Path to dictionaries.yaml. If None, uses:
                  1. CLASSDICT_CATALOG_PATH env var
                  2. the packaged dictionaries.yaml

        Returns:
            Loaded DictionaryCatalog

        Raises:
            CatalogValidationError: If catalog is invalid
            FileNotFoundError: If catalog file not found
        """
        if path is None:
            path = os.environ.get("CLASSDICT_CATALOG_PATH") or DEFAULT_CATALOG_PATH

        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Catalog not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            raw_data = yaml.safe_load(f)

        if not isinstance(raw_data, dict):
            raise CatalogValidationError("Catalog must be a YAML mapping")

        dictionaries = {}
        for key, value in raw_data.items():
            # Skip comment-only keys and special keys
            if str(key).startswith("_") or not isinstance(value, dict):
                continue
            dictionaries[key] = DictionarySpec.from_dict(key, value)

        return cls(dictionaries=dictionaries, path=path)
