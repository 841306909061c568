"""Entry store contract shared by the flat-text and indexed backends.

Provides:
- MatchMode / Probe: what a lookup asks for
- Entry and its source locations
- EntryStore: protocol both backends implement
- union_lookup: tiered lookup with de-duplication and a result cap
- CorpusUnavailableError: the only error a lookup raises
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Protocol, Sequence, Union

from classdict.text.diacritics import Language, RelaxedPattern


class CorpusUnavailableError(Exception):
    """Raised when the backing file or database cannot be opened or read."""

    def __init__(self, message: str, locations: Sequence[Path | str] = ()):
        self.locations = [str(loc) for loc in locations]
        full_message = message
        if self.locations:
            full_message = f"{message} (tried: {', '.join(self.locations)})"
        super().__init__(full_message)


class MatchMode(Enum):
    """How a probe is compared against headwords."""

    EXACT = "exact"
    PREFIX = "prefix"
    SUBSTRING = "substring"
    FULL_TEXT = "full_text"  # anywhere in the entry text


@dataclass(frozen=True)
class Probe:
    """A single store lookup request.

    Flat backends scan raw text with ``pattern``; indexed backends compare
    ``key`` against the normalized headword column (or the display column
    when ``literal`` is set).

    ``bounded`` keeps a match inside one headword token: a substring may
    not cross a hyphen and a prefix may only be followed by letters. Flat
    scans always apply these limits; indexed lookups only when asked.
    """

    key: str
    pattern: RelaxedPattern
    mode: MatchMode
    literal: bool = False
    leading: bool = False
    bounded: bool = False
    terminators: str = ",.("
    ignore_case: bool = False

    @property
    def language(self) -> Language:
        return self.pattern.language


@dataclass(frozen=True)
class LineRange:
    """Half-open range of 0-based line indexes in a flat corpus."""

    start: int
    end: int

    def __str__(self) -> str:
        return f"lines {self.start + 1}-{self.end}"


@dataclass(frozen=True)
class RowLocation:
    """Row identifier in an indexed corpus."""

    row_id: int

    def __str__(self) -> str:
        return f"row {self.row_id}"


SourceLocation = Union[LineRange, RowLocation]


@dataclass(frozen=True)
class Entry:
    """A dictionary entry as loaded from a store. Never mutated."""

    headword: str
    normalized_headword: str
    definition: str
    language: Language
    source_location: SourceLocation
    source: str = ""

    @property
    def identity(self) -> tuple[str, SourceLocation]:
        """Key used to de-duplicate entries across lookup tiers."""
        return (self.source, self.source_location)

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        return {
            "headword": self.headword,
            "normalized_headword": self.normalized_headword,
            "definition": self.definition,
            "language": self.language.value,
            "source": self.source,
            "location": str(self.source_location),
        }


class EntryStore(Protocol):
    """Abstract interface for entry lookup.

    Implementations return at most ``limit`` entries per call and raise
    CorpusUnavailableError when their backing data cannot be read.
    Absence of a match is an empty list, never an error.
    """

    @property
    def language(self) -> Language:
        """Language of the corpus."""
        ...

    @property
    def location(self) -> str:
        """Human-readable location of the backing data."""
        ...

    @property
    def supports_multiple(self) -> bool:
        """True if one lookup can yield several distinct entries."""
        ...

    def lookup(self, probe: Probe, limit: int) -> list[Entry]:
        """Return up to limit entries matching probe."""
        ...

    def close(self) -> None:
        ...


def union_lookup(
    store: EntryStore, probes: Sequence[Probe], limit: int
) -> list[tuple[int, Entry]]:
    """Run probes in order and union their results.

    Tier order is preserved (earlier probes first), duplicates are dropped
    by entry identity, and the result is capped at limit.

    Args:
        store: Store to query
        probes: Probes in tier order
        limit: Maximum number of entries to return

    Returns:
        List of (tier index, entry) pairs
    """
    results: list[tuple[int, Entry]] = []
    seen = set()

    for tier, probe in enumerate(probes):
        remaining = limit - len(results)
        if remaining <= 0:
            break
        # Ask for extra rows so duplicates from earlier tiers don't starve the cap
        for entry in store.lookup(probe, remaining + len(seen)):
            if entry.identity in seen:
                continue
            seen.add(entry.identity)
            results.append((tier, entry))
            if len(results) >= limit:
                break

    return results
