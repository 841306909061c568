"""Entry boundary detection for flat-text dictionaries.

A flat corpus carries no structural entry markers, so the end of an entry
is found heuristically: the next line that looks like a headword line
closes it. A headword line starts (after optional indentation) with a run
of letters followed by ``,``, ``.`` or ``(``, and the token before that
punctuation is short and contains no space.

Known imprecision: a citation inside an entry body that happens to fit
the headword shape truncates the entry early, and a real headword longer
than the length threshold lets the entry bleed into the next one. The
thresholds are tuned against Lewis & Short and LSJ and are configurable.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from classdict.store.base import LineRange
from classdict.text.diacritics import Language, profile_for

DEFAULT_MAX_HEADWORD_LENGTH = {
    Language.LATIN: 15,
    Language.GREEK: 20,
}

_TERMINATOR = re.compile(r"\s*[,.(].*$")


def headword_of(line: str) -> str:
    """Extract the headword token from a headword line.

    Everything from the first ``,``, ``.`` or ``(`` on is dropped and the
    remainder trimmed. A line without such punctuation yields its trimmed
    text.
    """
    return _TERMINATOR.sub("", line).strip()


@dataclass(frozen=True)
class BoundaryRules:
    """Thresholds that decide whether a line opens a new entry."""

    language: Language
    max_headword_length: int
    allow_spaces: bool = False

    @classmethod
    def for_language(
        cls, language: Language, max_headword_length: int | None = None
    ) -> "BoundaryRules":
        if max_headword_length is None:
            max_headword_length = DEFAULT_MAX_HEADWORD_LENGTH[language]
        return cls(language=language, max_headword_length=max_headword_length)


class EntryBoundaryDetector:
    """Finds where a flat-text entry ends.

    Usage:
        detector = EntryBoundaryDetector(BoundaryRules.for_language(Language.LATIN))
        span = detector.extract(lines, start)
        text = "\\n".join(lines[span.start:span.end])
    """

    def __init__(self, rules: BoundaryRules):
        self.rules = rules
        profile = profile_for(rules.language)
        alpha = profile.alphabet
        lead = profile.leading_class
        self._shape = re.compile(rf"^\s*{lead}[{alpha}][{alpha}\-]*\s*[,.(]")

    def is_headword_line(self, line: str) -> bool:
        """True if line looks like the first line of an entry."""
        if not self._shape.match(line):
            return False

        word = headword_of(line)
        if not self.rules.allow_spaces and " " in word:
            return False
        return len(word) <= self.rules.max_headword_length

    def entry_end(self, lines: Sequence[str], start: int) -> int:
        """Index of the first line after the entry starting at start.

        The start line itself is never tested, so an entry always has at
        least one line.
        """
        for index in range(start + 1, len(lines)):
            if self.is_headword_line(lines[index]):
                return index
        return len(lines)

    def extract(self, lines: Sequence[str], start: int) -> LineRange:
        """Line range [start, next headword line) of an entry."""
        if not 0 <= start < len(lines):
            raise IndexError(f"Start line {start} outside corpus of {len(lines)} lines")
        return LineRange(start=start, end=self.entry_end(lines, start))
