"""Headword resolution cascade.

Tries progressively looser matching stages against an entry store and
stops at the first stage that yields anything:

    ExactHeadword < DiacriticRelaxed < MorphologicalConvention
        < CompoundTolerant < StemTruncated < Substring

Multi-match mode (indexed stores only) instead unions the literal,
normalized, prefix and substring tiers up to the requested cap.
Absence of a match is a normal NOT_FOUND result; only an unreadable
corpus produces an ERROR result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, IntEnum

from classdict.db.connection import unicode_lower
from classdict.engine.query import Query
from classdict.lemmatize.morpheus import Lemmatizer, LemmatizerError
from classdict.store.base import (
    CorpusUnavailableError,
    Entry,
    EntryStore,
    MatchMode,
    Probe,
    union_lookup,
)
from classdict.text.diacritics import Language, fold, literal, relax

logger = logging.getLogger(__name__)

DEFAULT_SUGGESTION_LIMIT = 5


class MatchStage(IntEnum):
    """Matching strategies in priority order (lower wins)."""

    EXACT_HEADWORD = 1
    DIACRITIC_RELAXED = 2
    MORPHOLOGICAL_CONVENTION = 3
    COMPOUND_TOLERANT = 4
    STEM_TRUNCATED = 5
    SUBSTRING = 6

    @property
    def label(self) -> str:
        return self.name.lower().replace("_", "-")


@dataclass(frozen=True)
class Candidate:
    """An entry plus the stage that produced it."""

    entry: Entry
    stage: MatchStage

    def to_dict(self) -> dict:
        return {"stage": self.stage.label, **self.entry.to_dict()}


class ResolutionStatus(Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass
class ResolutionResult:
    """Outcome of resolving one query."""

    status: ResolutionStatus
    query: Query
    search_word: str
    candidates: list[Candidate] = field(default_factory=list)
    lemma: str | None = None
    suggestion_mode: MatchMode | None = None
    error_kind: str | None = None
    error_message: str = ""
    error_locations: list[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.status is ResolutionStatus.FOUND

    @property
    def stage(self) -> MatchStage | None:
        """Stage of the best candidate."""
        if not self.candidates:
            return None
        return min(c.stage for c in self.candidates)

    @property
    def is_suggestion(self) -> bool:
        """True if the only matches are best-effort substring suggestions."""
        return self.found and self.suggestion_mode is not None

    def to_dict(self) -> dict:
        """Serialize for JSON output."""
        result = {
            "status": self.status.value,
            "query": self.query.to_dict(),
            "search_word": self.search_word,
            "lemma": self.lemma,
            "stage": self.stage.label if self.stage else None,
            "candidates": [c.to_dict() for c in self.candidates],
        }
        if self.suggestion_mode:
            result["suggestion_mode"] = self.suggestion_mode.value
        if self.status is ResolutionStatus.ERROR:
            result["error"] = {
                "kind": self.error_kind,
                "message": self.error_message,
                "locations": self.error_locations,
            }
        return result


class ResolutionCascade:
    """Resolves query words to dictionary entries.

    Usage:
        cascade = ResolutionCascade(FlatTextStore(path, Language.LATIN))
        result = cascade.resolve(Query("amo"))
        if result.found:
            entry = result.candidates[0].entry
    """

    def __init__(
        self,
        store: EntryStore,
        lemmatizer: Lemmatizer | None = None,
        suggestion_limit: int = DEFAULT_SUGGESTION_LIMIT,
    ):
        self.store = store
        self.lemmatizer = lemmatizer
        self.suggestion_limit = suggestion_limit

    def resolve(self, query: Query) -> ResolutionResult:
        """Resolve a query against the store.

        Args:
            query: Lookup request

        Returns:
            ResolutionResult with FOUND, NOT_FOUND or ERROR status
        """
        language = query.resolved_language
        original = query.word
        search_word = original
        lemma = None

        if query.lemmatize:
            lemma = self._lemmatize(original, language)
            if lemma:
                search_word = lemma

        try:
            candidates = self._run(search_word, language, query)

            if not candidates and search_word != original:
                logger.debug(f"Lemma '{search_word}' not found, retrying with '{original}'")
                search_word = original
                candidates = self._run(search_word, language, query)

            suggestion_mode = None
            if not candidates and query.suggest:
                candidates, suggestion_mode = self._suggest(search_word, language)
        except CorpusUnavailableError as e:
            logger.error(f"Corpus unavailable: {e}")
            return ResolutionResult(
                status=ResolutionStatus.ERROR,
                query=query,
                search_word=search_word,
                lemma=lemma,
                error_kind="corpus_unavailable",
                error_message=str(e),
                error_locations=e.locations,
            )

        if not candidates:
            return ResolutionResult(
                status=ResolutionStatus.NOT_FOUND,
                query=query,
                search_word=search_word,
                lemma=lemma,
            )

        return ResolutionResult(
            status=ResolutionStatus.FOUND,
            query=query,
            search_word=search_word,
            candidates=candidates,
            lemma=lemma,
            suggestion_mode=suggestion_mode,
        )

    def suggest(self, word: str, language: Language) -> list[Candidate]:
        """Best-effort related entries for a word that did not resolve.

        Headwords containing the word come first; only if there are none
        is the full entry text searched.
        """
        candidates, _ = self._suggest(word, language)
        return candidates

    def stages(
        self, word: str, language: Language, exact_match: bool = False
    ) -> list[tuple[MatchStage, list[Probe]]]:
        """Build the single-match stages applicable to a word, in order.

        Within a stage the probes are tried in order as well.
        """
        lit = literal(word, language)
        rel = relax(word, language)
        key = fold(word, language)

        stages = [
            (
                MatchStage.EXACT_HEADWORD,
                [Probe(unicode_lower(word), lit, MatchMode.EXACT, literal=True)],
            ),
            (MatchStage.DIACRITIC_RELAXED, [Probe(key, rel, MatchMode.EXACT)]),
        ]
        if exact_match:
            return stages

        # Principal-parts headwords ("ămo, āvi, ātum") or Greek asterisk markers
        stages.append(
            (
                MatchStage.MORPHOLOGICAL_CONVENTION,
                [
                    Probe(key, lit, MatchMode.EXACT, leading=True, terminators=","),
                    Probe(key, rel, MatchMode.EXACT, leading=True, terminators=","),
                ],
            )
        )

        if len(word) > 2:
            stem = word[:-1]
            stages.append(
                (MatchStage.COMPOUND_TOLERANT, [Probe(key, rel, MatchMode.SUBSTRING, bounded=True)])
            )
            stages.append(
                (
                    MatchStage.STEM_TRUNCATED,
                    [
                        Probe(
                            fold(stem, language),
                            relax(stem, language),
                            MatchMode.PREFIX,
                            bounded=True,
                        )
                    ],
                )
            )

        return stages

    def tiers(
        self, word: str, language: Language, exact_match: bool = False
    ) -> list[tuple[MatchStage, Probe]]:
        """Multi-match tiers: literal, normalized, prefix, substring."""
        rel = relax(word, language)
        key = fold(word, language)

        tiers = [
            (
                MatchStage.EXACT_HEADWORD,
                Probe(unicode_lower(word), literal(word, language), MatchMode.EXACT, literal=True),
            ),
            (MatchStage.DIACRITIC_RELAXED, Probe(key, rel, MatchMode.EXACT)),
        ]
        if not exact_match:
            tiers.append((MatchStage.STEM_TRUNCATED, Probe(key, rel, MatchMode.PREFIX)))
            tiers.append((MatchStage.SUBSTRING, Probe(key, rel, MatchMode.SUBSTRING)))
        return tiers

    def _run(self, word: str, language: Language, query: Query) -> list[Candidate]:
        if query.multi_match:
            if self.store.supports_multiple:
                return self._resolve_multiple(word, language, query.exact_match, query.multiple)
            logger.warning(
                f"Multiple results need an indexed dictionary; "
                f"{self.store.location} returns one entry per lookup"
            )
        return self._resolve_single(word, language, query.exact_match)

    def _resolve_single(
        self, word: str, language: Language, exact_match: bool
    ) -> list[Candidate]:
        for stage, probes in self.stages(word, language, exact_match):
            for probe in probes:
                entries = self.store.lookup(probe, 1)
                if entries:
                    logger.debug(f"'{word}' matched at stage {stage.label}: {entries[0].headword}")
                    return [Candidate(entry, stage) for entry in entries]
            logger.debug(f"'{word}' not matched at stage {stage.label}")
        return []

    def _resolve_multiple(
        self, word: str, language: Language, exact_match: bool, limit: int
    ) -> list[Candidate]:
        tiers = self.tiers(word, language, exact_match)
        found = union_lookup(self.store, [probe for _, probe in tiers], limit)
        logger.debug(f"'{word}' matched {len(found)} entries (cap {limit})")
        return [Candidate(entry, tiers[tier][0]) for tier, entry in found]

    def _suggest(
        self, word: str, language: Language
    ) -> tuple[list[Candidate], MatchMode | None]:
        rel = relax(word, language)
        key = fold(word, language)

        headword_probes = [
            Probe(key, rel, MatchMode.PREFIX, terminators="", ignore_case=True),
            Probe(key, rel, MatchMode.SUBSTRING, ignore_case=True),
        ]
        found = union_lookup(self.store, headword_probes, self.suggestion_limit)
        mode = MatchMode.SUBSTRING

        if not found:
            text_probe = Probe(key, rel, MatchMode.FULL_TEXT, ignore_case=True)
            found = union_lookup(self.store, [text_probe], self.suggestion_limit)
            mode = MatchMode.FULL_TEXT

        if not found:
            return [], None

        logger.debug(f"{len(found)} suggestions for '{word}' ({mode.value})")
        return [Candidate(entry, MatchStage.SUBSTRING) for _, entry in found], mode

    def _lemmatize(self, word: str, language: Language) -> str | None:
        if self.lemmatizer is None:
            logger.warning("Lemmatization requested but no lemmatizer is configured")
            return None

        try:
            lemma = self.lemmatizer.lemmatize(word, language)
        except LemmatizerError as e:
            logger.warning(f"Lemmatizer failed on '{word}': {e}")
            return None

        lemma = lemma.strip() if lemma else ""
        if not lemma:
            logger.warning(f"Lemmatizer returned nothing for '{word}'; searching as typed")
            return None
        return lemma
