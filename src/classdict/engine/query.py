"""Lookup request value."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field

from classdict.text.diacritics import Language, detect_language


@dataclass(frozen=True)
class Query:
    """Immutable per-invocation lookup request.

    ``language`` None means auto-detect from the word's script. The
    detected language is fixed at construction in ``resolved_language``
    and never revisited.
    """

    raw_word: str
    language: Language | None = None
    exact_match: bool = False
    suggest: bool = False
    multiple: int | None = None  # max results; None for single-match mode
    lemmatize: bool = False
    resolved_language: Language = field(init=False)

    def __post_init__(self):
        if not self.raw_word or not self.raw_word.strip():
            raise ValueError("Query word must not be empty")
        if self.multiple is not None and self.multiple < 1:
            raise ValueError(f"multiple must be at least 1, got {self.multiple}")
        resolved = self.language or detect_language(self.raw_word)
        object.__setattr__(self, "resolved_language", resolved)

    @property
    def word(self) -> str:
        """Trimmed NFC form of the raw word."""
        return unicodedata.normalize("NFC", self.raw_word.strip())

    @property
    def multi_match(self) -> bool:
        return self.multiple is not None

    def to_dict(self) -> dict:
        return {
            "raw_word": self.raw_word,
            "language": self.resolved_language.value,
            "exact_match": self.exact_match,
            "suggest": self.suggest,
            "multiple": self.multiple,
            "lemmatize": self.lemmatize,
        }
