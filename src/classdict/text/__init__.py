"""Text normalization for Latin and Greek headwords."""

from classdict.text.diacritics import (
    Language,
    LanguageProfile,
    RelaxedPattern,
    detect_language,
    fold,
    literal,
    profile_for,
    relax,
)

__all__ = [
    "Language",
    "LanguageProfile",
    "RelaxedPattern",
    "detect_language",
    "fold",
    "literal",
    "profile_for",
    "relax",
]
