"""Flat ordered-text dictionary backend.

The corpus is a plain text file (e.g. Lewis & Short) read once into memory
and scanned line by line. Each lookup is a single sequential pass that
stops as soon as ``limit`` headword lines have matched; entry text is then
bounded with the EntryBoundaryDetector.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from pathlib import Path
from typing import Iterator

from classdict.store.base import (
    CorpusUnavailableError,
    Entry,
    LineRange,
    MatchMode,
    Probe,
)
from classdict.store.boundary import BoundaryRules, EntryBoundaryDetector, headword_of
from classdict.text.diacritics import Language, fold, profile_for

logger = logging.getLogger(__name__)


def compile_probe(probe: Probe) -> re.Pattern:
    """Compile a probe into a line-anchored regex for raw text.

    Args:
        probe: Lookup request

    Returns:
        Compiled pattern to be applied with ``match`` to each line
    """
    profile = profile_for(probe.language)
    alpha = profile.alphabet
    pat = probe.pattern.pattern
    lead = profile.leading_class if probe.leading else ""
    tail = rf"\s*[{re.escape(probe.terminators)}]" if probe.terminators else ""

    if probe.mode is MatchMode.EXACT:
        regex = rf"^\s*{lead}(?:{pat}){tail}"
    elif probe.mode is MatchMode.PREFIX:
        regex = rf"^\s*{lead}(?:{pat})[{alpha}]*{tail}"
    elif probe.mode is MatchMode.SUBSTRING:
        # Compound headwords: anything but a hyphen around the word
        regex = rf"^\s*[^-]*(?:{pat})[^-]*{tail}"
    else:
        # Any headword-shaped line whose text mentions the word
        regex = rf"^\s*[{alpha}]*\s*[,.(].*(?:{pat})"

    flags = re.IGNORECASE if probe.ignore_case else 0
    return re.compile(regex, flags)


class FlatTextStore:
    """Entry store over an unstructured line-oriented corpus.

    Usage:
        store = FlatTextStore(Path("lewis-short.txt"), Language.LATIN)
        entries = store.lookup(probe, limit=1)
    """

    def __init__(
        self,
        path: Path | str,
        language: Language,
        rules: BoundaryRules | None = None,
        encoding: str = "utf-8",
    ):
        self.path = Path(path)
        self.encoding = encoding
        self._language = language
        self.detector = EntryBoundaryDetector(rules or BoundaryRules.for_language(language))
        self._lines: list[str] | None = None

    @property
    def language(self) -> Language:
        return self._language

    @property
    def location(self) -> str:
        return str(self.path)

    @property
    def supports_multiple(self) -> bool:
        return False

    def load(self) -> list[str]:
        """Read the corpus on first use and keep it for the process lifetime.

        Raises:
            CorpusUnavailableError: If the file is missing or unreadable
        """
        if self._lines is not None:
            return self._lines

        try:
            text = self.path.read_text(encoding=self.encoding)
        except FileNotFoundError:
            raise CorpusUnavailableError("Dictionary file not found", [self.path])
        except (OSError, UnicodeDecodeError) as e:
            raise CorpusUnavailableError(f"Cannot read dictionary file: {e}", [self.path])

        self._lines = [unicodedata.normalize("NFC", line) for line in text.splitlines()]
        logger.debug(f"Loaded {len(self._lines)} lines from {self.path}")
        return self._lines

    def lookup(self, probe: Probe, limit: int) -> list[Entry]:
        """Scan for headword lines matching probe.

        Args:
            probe: Lookup request (its pattern is used, not its key)
            limit: Maximum entries; the scan stops once reached

        Returns:
            Entries in corpus order
        """
        if limit <= 0:
            return []

        lines = self.load()
        regex = compile_probe(probe)

        entries = []
        for index, line in enumerate(lines):
            if regex.match(line):
                entries.append(self.entry_at(index))
                if len(entries) >= limit:
                    break
        return entries

    def entry_at(self, index: int) -> Entry:
        """Build the entry whose headword line is at index."""
        lines = self.load()
        span = self.detector.extract(lines, index)
        headword = headword_of(lines[index])
        return Entry(
            headword=headword,
            normalized_headword=fold(headword, self._language),
            definition="\n".join(lines[span.start : span.end]),
            language=self._language,
            source_location=span,
            source=str(self.path),
        )

    def context(self, index: int, radius: int) -> tuple[LineRange, list[str]]:
        """Lines within radius of index, clipped to the corpus."""
        lines = self.load()
        start = max(0, index - radius)
        end = min(len(lines), index + radius + 1)
        return LineRange(start, end), lines[start:end]

    def iter_entries(self) -> Iterator[Entry]:
        """Yield every entry in corpus order.

        Lines before the first detected headword line are skipped.
        """
        lines = self.load()
        index = 0
        while index < len(lines) and not self.detector.is_headword_line(lines[index]):
            index += 1

        while index < len(lines):
            entry = self.entry_at(index)
            yield entry
            index = entry.source_location.end

    def close(self) -> None:
        self._lines = None
