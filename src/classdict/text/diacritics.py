"""Diacritic folding and relaxed matching patterns for Latin and Greek.

Provides:
- fold: canonical lookup key (NFC, lower-cased, diacritics folded to base letters)
- relax: position-preserving regex that accepts any diacritic variant of a vowel
- detect_language: Greek if any codepoint falls in a Greek block, else Latin

The fold tables are static data. Characters outside a table pass through
unchanged (after case folding), so folding never fails.
"""

from __future__ import annotations

import re
import unicodedata
from dataclasses import dataclass
from enum import Enum


class Language(Enum):
    """Corpus language."""

    LATIN = "latin"
    GREEK = "greek"


# Base letter -> diacritic variants (lower case only; input is lower-cased first)
LATIN_VARIANTS: dict[str, str] = {
    "a": "āăä",
    "e": "ēĕë",
    "i": "īĭï",
    "o": "ōŏö",
    "u": "ūŭü",
    "y": "ȳÿ",
}

# Breathing, accent, iota subscript and length marks. The oxia forms
# (U+1F71 etc.) are listed even though NFC maps them to the tonos forms.
GREEK_VARIANTS: dict[str, str] = {
    "α": "άὰᾶἀἁἄἅἂἃἆἇᾳᾴᾲᾷᾀᾁᾄᾅᾂᾃᾆᾇᾰᾱά",
    "ε": "έὲἐἑἔἕἒἓέ",
    "η": "ήὴῆἠἡἤἥἢἣἦἧῃῄῂῇᾐᾑᾔᾕᾒᾓᾖᾗή",
    "ι": "ίὶῖἰἱἴἵἲἳἶἷϊΐῒῗῐῑίΐ",
    "ο": "όὸὀὁὄὅὂὃό",
    "υ": "ύὺῦὐὑὔὕὒὓὖὗϋΰῢῧῠῡύΰ",
    "ω": "ώὼῶὠὡὤὥὢὣὦὧῳῴῲῷᾠᾡᾤᾥᾢᾣᾦᾧώ",
    "ρ": "ῥῤ",
}

# Folded only, never expanded by relax()
GREEK_EXTRA_FOLDS: dict[str, str] = {"ς": "σ"}

# Characters a headword line may be built from (regex class bodies)
LATIN_ALPHABET = "a-zA-ZāēīōūȳăĕĭŏŭÿÄËÏÖÜŸäëïöü"
GREEK_ALPHABET = "\u0370-\u03ff\u1f00-\u1fff"

# Optional markers that may precede a stem in a headword line
LATIN_LEADING_MARKS = "ăāĕēĭīŏōŭū"
GREEK_LEADING_MARKS = "*"


def _build_fold_table(variants: dict[str, str], extra: dict[str, str] | None = None):
    mapping = {}
    for base, chars in variants.items():
        for ch in chars:
            mapping[ord(ch)] = base
    for ch, base in (extra or {}).items():
        mapping[ord(ch)] = base
    return mapping


def _build_relax_classes(variants: dict[str, str]) -> dict[str, str]:
    classes = {}
    for base, chars in variants.items():
        members = [base, base.upper()]
        for ch in chars:
            members.append(ch)
            upper = ch.upper()
            # Some subscript forms upper-case to two characters; skip those
            if len(upper) == 1:
                members.append(upper)
        seen = dict.fromkeys(members)
        classes[base] = "[" + "".join(seen) + "]"
    return classes


_FOLD_TABLES = {
    Language.LATIN: _build_fold_table(LATIN_VARIANTS),
    Language.GREEK: _build_fold_table(GREEK_VARIANTS, GREEK_EXTRA_FOLDS),
}

_RELAX_CLASSES = {
    Language.LATIN: _build_relax_classes(LATIN_VARIANTS),
    Language.GREEK: _build_relax_classes(GREEK_VARIANTS),
}


@dataclass(frozen=True)
class LanguageProfile:
    """Static per-language lexical data used by matchers."""

    language: Language
    alphabet: str
    leading_marks: str

    @property
    def leading_class(self) -> str:
        """Regex fragment for an optional leading marker."""
        return "[" + re.escape(self.leading_marks) + "]?"


PROFILES = {
    Language.LATIN: LanguageProfile(Language.LATIN, LATIN_ALPHABET, LATIN_LEADING_MARKS),
    Language.GREEK: LanguageProfile(Language.GREEK, GREEK_ALPHABET, GREEK_LEADING_MARKS),
}


def profile_for(language: Language) -> LanguageProfile:
    """Get the static lexical profile for a language."""
    return PROFILES[language]


def detect_language(word: str) -> Language:
    """Detect language from the script of a word.

    Any codepoint in the Greek and Coptic block or the Greek Extended
    block makes the word Greek; everything else is treated as Latin.

    Args:
        word: Raw query word

    Returns:
        Language.GREEK or Language.LATIN
    """
    for ch in word:
        cp = ord(ch)
        if 0x0370 <= cp <= 0x03FF or 0x1F00 <= cp <= 0x1FFF:
            return Language.GREEK
    return Language.LATIN


def fold(word: str, language: Language) -> str:
    """Fold a word to its normalized lookup key.

    Normalizes to NFC first so composed and decomposed input fold alike,
    then lower-cases and maps every diacritic variant to its base letter.

    Args:
        word: Text with or without diacriticals
        language: Which fold table to apply

    Returns:
        Normalized key (never used for display)
    """
    nfc = unicodedata.normalize("NFC", word)
    return nfc.lower().translate(_FOLD_TABLES[language])


def _fold_char(ch: str, language: Language) -> str:
    lower = ch.lower()
    if len(lower) != 1:
        return ch
    return lower.translate(_FOLD_TABLES[language])


@dataclass(frozen=True)
class RelaxedPattern:
    """Character-class pattern built from a raw query word.

    Each input character occupies exactly one slot: either a regex-escaped
    literal or one bracketed class, so positional matching against raw
    entry text stays valid.
    """

    source: str
    pattern: str
    language: Language

    def compile(self, flags: int = 0) -> re.Pattern:
        return re.compile(self.pattern, flags)

    def fullmatch(self, text: str) -> bool:
        """True if the whole of text matches the pattern."""
        return self.compile().fullmatch(unicodedata.normalize("NFC", text)) is not None

    def __str__(self) -> str:
        return self.pattern


def relax(word: str, language: Language) -> RelaxedPattern:
    """Build a relaxed matching pattern for a raw word.

    Vowels (and Greek rho), with or without marks, expand to a class of the
    base letter plus all its variants; other characters pass through as
    escaped literals.

    Args:
        word: Raw query word
        language: Language whose variant table to use

    Returns:
        RelaxedPattern
    """
    classes = _RELAX_CLASSES[language]
    slots = []
    for ch in unicodedata.normalize("NFC", word):
        base = _fold_char(ch, language)
        if base in classes:
            slots.append(classes[base])
        else:
            slots.append(re.escape(ch))
    return RelaxedPattern(source=word, pattern="".join(slots), language=language)


def literal(word: str, language: Language) -> RelaxedPattern:
    """Pattern matching the NFC form of word exactly."""
    nfc = unicodedata.normalize("NFC", word)
    return RelaxedPattern(source=word, pattern=re.escape(nfc), language=language)
