"""Tests for the flat-text entry store."""

import unicodedata

import pytest

from classdict.store.base import CorpusUnavailableError, LineRange, MatchMode, Probe
from classdict.store.flat import FlatTextStore, compile_probe
from classdict.text.diacritics import Language, fold, literal, relax


def _probe(word, mode=MatchMode.EXACT, language=Language.LATIN, **kwargs):
    return Probe(fold(word, language), relax(word, language), mode, **kwargs)


class TestCompileProbe:
    """Tests for probe-to-regex compilation."""

    def test_exact_needs_terminator(self):
        regex = compile_probe(_probe("amo"))
        assert regex.match("amo, amare")
        assert regex.match("  amo (rare)")
        assert not regex.match("amor, oris")

    def test_prefix(self):
        regex = compile_probe(_probe("amo", MatchMode.PREFIX))
        assert regex.match("amor, oris")
        assert regex.match("amo, amare")
        assert not regex.match("clamo, to cry out")

    def test_substring_stops_at_hyphen(self):
        regex = compile_probe(_probe("utor", MatchMode.SUBSTRING))
        assert regex.match("abutor, usus")
        assert not regex.match("ab-utor, usus")

    def test_leading_marker(self):
        regex = compile_probe(_probe("do", leading=True, terminators=","))
        assert regex.match("ēdo, ēdidi")
        assert regex.match("do, dedi")
        assert not regex.match("edo, edidi")

    def test_no_terminators(self):
        regex = compile_probe(_probe("am", MatchMode.PREFIX, terminators=""))
        assert regex.match("amicus")

    def test_ignore_case(self):
        regex = compile_probe(_probe("roma", ignore_case=True))
        assert regex.match("Roma, ae, f.")
        assert not compile_probe(_probe("roma")).match("Roma, ae, f.")

    def test_full_text(self):
        regex = compile_probe(_probe("liquor", MatchMode.FULL_TEXT))
        assert regex.match("zythum, i, n., a kind of malt liquor")
        assert not regex.match("   a liquor mentioned in a body line")


class TestFlatTextStore:
    """Tests for scanning lookups."""

    def test_exact_lookup(self, latin_store):
        entries = latin_store.lookup(_probe("amo"), 1)
        assert len(entries) == 1
        entry = entries[0]
        assert entry.headword == "amo"
        assert entry.normalized_headword == "amo"
        assert entry.source_location == LineRange(6, 9)
        assert entry.definition.startswith("amo, amare")
        assert entry.definition.endswith("the strongest word for love")
        assert entry.language is Language.LATIN

    def test_literal_probe(self, latin_store):
        probe = Probe("amo", literal("amo", Language.LATIN), MatchMode.EXACT, literal=True)
        assert latin_store.lookup(probe, 1)[0].headword == "amo"

    def test_relaxed_lookup_keeps_display_headword(self, latin_store):
        entries = latin_store.lookup(_probe("abacus"), 1)
        assert entries[0].headword == "ăbăcus"
        assert entries[0].normalized_headword == "abacus"

    def test_limit(self, latin_store):
        probe = _probe("am", MatchMode.PREFIX)
        assert len(latin_store.lookup(probe, 1)) == 1
        entries = latin_store.lookup(probe, 10)
        assert [e.headword for e in entries] == ["amo", "amor", "āmīcus"]
        assert latin_store.lookup(probe, 0) == []

    def test_no_match_is_empty(self, latin_store):
        assert latin_store.lookup(_probe("xyzzy"), 1) == []

    def test_missing_file(self, tmp_path):
        store = FlatTextStore(tmp_path / "missing.txt", Language.LATIN)
        with pytest.raises(CorpusUnavailableError) as exc_info:
            store.lookup(_probe("amo"), 1)
        assert exc_info.value.locations == [str(tmp_path / "missing.txt")]
        assert "missing.txt" in str(exc_info.value)

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "utf16.txt"
        path.write_bytes("amō, to love\n".encode("utf-16"))
        store = FlatTextStore(path, Language.LATIN)
        with pytest.raises(CorpusUnavailableError):
            store.load()

    def test_decomposed_corpus_normalized(self, tmp_path):
        """Lines are NFC-normalized on load, so NFD corpora still match."""
        path = tmp_path / "nfd.txt"
        path.write_text(unicodedata.normalize("NFD", "ēdo, ēdidi\n"), encoding="utf-8")
        store = FlatTextStore(path, Language.LATIN)
        probe = Probe("ēdo", literal("ēdo", Language.LATIN), MatchMode.EXACT, literal=True)
        assert store.lookup(probe, 1)[0].headword == "ēdo"

    def test_greek_lookup(self, greek_store):
        entries = greek_store.lookup(_probe("αγαπη", language=Language.GREEK), 1)
        assert entries[0].headword == "ἀγάπη"
        assert entries[0].source_location == LineRange(0, 2)

    def test_store_properties(self, latin_store, latin_path):
        assert latin_store.language is Language.LATIN
        assert latin_store.location == str(latin_path)
        assert latin_store.supports_multiple is False


class TestContextAndIteration:
    """Tests for context windows and entry iteration."""

    def test_context_window(self, latin_store):
        span, lines = latin_store.context(6, 1)
        assert span == LineRange(5, 8)
        assert lines[1].startswith("amo,")

    def test_context_clipped(self, latin_store):
        span, lines = latin_store.context(0, 3)
        assert span.start == 0
        assert len(lines) == 4

    def test_iter_entries_skips_front_matter(self, latin_store):
        headwords = [e.headword for e in latin_store.iter_entries()]
        assert headwords == [
            "ăbăcus",
            "ab-utor",
            "amo",
            "amor",
            "āmīcus",
            "ēdo",
            "inamabilis",
            "zythum",
        ]

    def test_entries_are_contiguous(self, latin_store):
        entries = list(latin_store.iter_entries())
        for before, after in zip(entries, entries[1:]):
            assert before.source_location.end == after.source_location.start

    def test_close_reloads(self, latin_store):
        latin_store.load()
        latin_store.close()
        assert latin_store.lookup(_probe("amo"), 1)
