"""Plain-text rendering of resolution results for the terminal or a pager."""

from __future__ import annotations

from dataclasses import dataclass

from classdict.engine.cascade import Candidate, ResolutionResult, ResolutionStatus
from classdict.store.base import LineRange, MatchMode
from classdict.store.flat import FlatTextStore

RULE = "-" * 61


@dataclass(frozen=True)
class RenderedEntry:
    """Display form of a candidate's entry."""

    headword: str
    definition: str
    source_description: str


def render_candidate(candidate: Candidate) -> RenderedEntry:
    entry = candidate.entry
    return RenderedEntry(
        headword=entry.headword,
        definition=entry.definition,
        source_description=f"{entry.source} ({entry.source_location})",
    )


def render_header(word: str, dictionary_name: str) -> str:
    return f"Searching for '{word}' in {dictionary_name}...\n{RULE}"


def render_not_found(result: ResolutionResult) -> str:
    """Message for a query with no entry, plus any suggestions."""
    word = result.query.word
    lines = [
        f"No entry found for '{word}'.",
        "Try checking the spelling or searching for a different form of the word.",
    ]

    if result.is_suggestion:
        lines.append("")
        if result.suggestion_mode is MatchMode.FULL_TEXT:
            lines.append("Or perhaps one of these entries contains your word:")
        else:
            lines.append("Possible related entries:")
        for candidate in result.candidates:
            # First line of the entry is its headword line
            lines.append(candidate.entry.definition.splitlines()[0])

    return "\n".join(lines)


def render_entry(candidate: Candidate) -> str:
    rendered = render_candidate(candidate)
    return f"{rendered.definition}\n{RULE}\nEntry found in: {rendered.source_description}"


def render_context(store: FlatTextStore, candidate: Candidate, radius: int) -> str:
    """A window of raw lines around the matched headword line."""
    location = candidate.entry.source_location
    if not isinstance(location, LineRange):
        raise ValueError("Context windows need a flat-text entry")

    span, lines = store.context(location.start, radius)
    parts = [
        f"Showing {radius} lines of context around match:",
        RULE,
        *lines,
        RULE,
        "Note: This is showing only a context window, not necessarily the complete entry.",
        f"Entry found in: {store.location} ({span})",
    ]
    return "\n".join(parts)


def render_result(
    result: ResolutionResult,
    dictionary_name: str,
    store: FlatTextStore | None = None,
    context: int = 0,
) -> str:
    """Full text output for a resolved (single) result.

    Args:
        result: Resolution outcome; only its first candidate is shown
        dictionary_name: Name for the header line
        store: Flat store, needed for context windows
        context: Lines of context to show instead of the bounded entry

    Returns:
        Text ready for a pager
    """
    parts = [render_header(result.query.word, dictionary_name)]

    if result.lemma and result.lemma != result.query.word:
        if result.search_word == result.lemma:
            parts.append(f"Using lemma '{result.lemma}' for '{result.query.word}'.")
        else:
            parts.append(f"Lemma '{result.lemma}' not found; searched '{result.query.word}'.")

    if result.status is not ResolutionStatus.FOUND or result.is_suggestion:
        parts.append(render_not_found(result))
        return "\n".join(parts) + "\n"

    candidate = result.candidates[0]
    if context > 0 and store is not None:
        parts.append(render_context(store, candidate, context))
    else:
        parts.append(render_entry(candidate))
    return "\n".join(parts) + "\n"
