"""Tests for the classdict command line."""

import json
import logging

import pytest
from click.testing import CliRunner

from classdict.__main__ import cli
from classdict.store.flat import FlatTextStore
from classdict.store.indexed import build_index
from classdict.text.diacritics import Language

from conftest import GREEK_CORPUS, LATIN_CORPUS, MULTI_CORPUS


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def multi_db(tmp_path):
    source = tmp_path / "multi.txt"
    source.write_text(MULTI_CORPUS, encoding="utf-8")
    db_path = tmp_path / "multi.db"
    build_index(FlatTextStore(source, Language.LATIN), db_path)
    return db_path


class TestLookupCommand:
    """Tests for `classdict lookup`."""

    def test_found(self, runner, data_root, latin_path):
        result = runner.invoke(cli, ["lookup", "amo", "-f", str(latin_path), "-d"])
        assert result.exit_code == 0
        assert "Searching for 'amo' in lewis-short.txt..." in result.output
        assert "amo, amare, amavi, amatum" in result.output
        assert "Entry found in:" in result.output

    def test_pager_output(self, runner, data_root, latin_path):
        """Without --direct the text goes through the pager (plain echo when not a tty)."""
        result = runner.invoke(cli, ["lookup", "amō", "-f", str(latin_path)])
        assert result.exit_code == 0
        assert "amo, amare" in result.output

    def test_not_found(self, runner, data_root, latin_path):
        result = runner.invoke(cli, ["lookup", "xyzzy", "-f", str(latin_path), "-d"])
        assert result.exit_code == 1
        assert "No entry found for 'xyzzy'." in result.output

    def test_missing_corpus(self, runner, data_root, tmp_path):
        missing = tmp_path / "missing.txt"
        result = runner.invoke(cli, ["lookup", "amo", "-f", str(missing), "-d"])
        assert result.exit_code == 2
        assert "Dictionary file not found" in result.output
        assert "Searching for" not in result.output

    def test_exact(self, runner, data_root, latin_path):
        result = runner.invoke(cli, ["lookup", "do", "-e", "-f", str(latin_path), "-d"])
        assert result.exit_code == 1

    def test_suggest(self, runner, data_root, latin_path):
        result = runner.invoke(
            cli, ["lookup", "amat", "-e", "-S", "-f", str(latin_path), "-d"]
        )
        assert result.exit_code == 1
        assert "Possible related entries:" in result.output

    def test_context(self, runner, data_root, latin_path):
        result = runner.invoke(cli, ["lookup", "amor", "-c", "1", "-f", str(latin_path), "-d"])
        assert result.exit_code == 0
        assert "Showing 1 lines of context around match:" in result.output

    def test_json(self, runner, data_root, latin_path):
        result = runner.invoke(cli, ["lookup", "amō", "-f", str(latin_path), "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["status"] == "found"
        assert data["stage"] == "diacritic-relaxed"
        assert data["candidates"][0]["headword"] == "amo"

    def test_json_error(self, runner, data_root, tmp_path):
        missing = tmp_path / "missing.txt"
        result = runner.invoke(cli, ["lookup", "amo", "-f", str(missing), "--json"])
        assert result.exit_code == 2
        data = json.loads(result.output)
        assert data["status"] == "error"
        assert data["error"]["kind"] == "corpus_unavailable"
        assert data["error"]["locations"] == [str(missing)]

    def test_empty_word(self, runner, data_root, latin_path):
        result = runner.invoke(cli, ["lookup", " ", "-f", str(latin_path)])
        assert result.exit_code == 2
        assert "must not be empty" in result.output

    def test_greek_auto_detected(self, runner, data_root):
        (data_root / "lsj.txt").write_text(GREEK_CORPUS, encoding="utf-8")
        result = runner.invoke(cli, ["lookup", "αγαπη", "-d"])
        assert result.exit_code == 0
        assert "Liddell-Scott-Jones" in result.output
        assert "ἀγάπη, ἡ, love" in result.output

    def test_catalog_dictionary(self, runner, data_root):
        (data_root / "lewis-short.txt").write_text(LATIN_CORPUS, encoding="utf-8")
        result = runner.invoke(cli, ["lookup", "zythus", "-d"])
        assert result.exit_code == 0
        assert "Lewis & Short Latin Dictionary" in result.output

    def test_catalog_prefers_index(self, runner, data_root):
        source = data_root / "lewis-short.txt"
        source.write_text(LATIN_CORPUS, encoding="utf-8")
        build_index(FlatTextStore(source, Language.LATIN), data_root / "lewis-short.db")
        source.unlink()

        result = runner.invoke(cli, ["lookup", "amo", "-d"])
        assert result.exit_code == 0
        assert "row " in result.output

    def test_bad_config(self, runner, data_root, tmp_path, latin_path):
        missing = tmp_path / "missing.yaml"
        result = runner.invoke(
            cli, ["--config", str(missing), "lookup", "amo", "-f", str(latin_path)]
        )
        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestMultipleResults:
    """Tests for multi-match lookups and interactive selection."""

    def test_select(self, runner, data_root, multi_db):
        result = runner.invoke(
            cli, ["lookup", "amo", "--db", str(multi_db), "-m", "3", "-d"], input="2\n"
        )
        assert result.exit_code == 0
        assert "3 entries match" in result.output
        assert "ămo, variant spelling" in result.output

    def test_cancel(self, runner, data_root, multi_db):
        result = runner.invoke(
            cli, ["lookup", "amo", "--db", str(multi_db), "-m", "3", "-d"], input="q\n"
        )
        assert result.exit_code == 0
        assert "Selection cancelled." in result.output
        assert "Entry found in:" not in result.output

    def test_invalid_selection(self, runner, data_root, multi_db):
        result = runner.invoke(
            cli, ["lookup", "amo", "--db", str(multi_db), "-m", "3", "-d"], input="9\n"
        )
        assert result.exit_code == 0
        assert "showing entry 1" in result.output
        assert "amo, to love" in result.output

    def test_capped_by_settings(self, runner, data_root, multi_db, caplog):
        (data_root / "config.yaml").write_text("max_results: 2\n")
        with caplog.at_level(logging.WARNING):
            result = runner.invoke(
                cli, ["lookup", "amo", "--db", str(multi_db), "-m", "5", "--json"]
            )
        assert "capped at max_results=2" in caplog.text
        data = json.loads(result.output)
        assert len(data["candidates"]) == 2

    def test_flat_store_single_result(self, runner, data_root, latin_path):
        result = runner.invoke(
            cli, ["lookup", "amo", "-f", str(latin_path), "-m", "3", "--json"]
        )
        assert result.exit_code == 0
        assert len(json.loads(result.output)["candidates"]) == 1


class TestIndexCommand:
    """Tests for `classdict index`."""

    def test_build_and_query(self, runner, data_root, latin_path, tmp_path):
        db_path = tmp_path / "out.db"
        result = runner.invoke(cli, ["index", "-f", str(latin_path), "-o", str(db_path)])
        assert result.exit_code == 0
        assert "Indexed 8 entries" in result.output
        assert db_path.exists()

        result = runner.invoke(cli, ["lookup", "amicus", "--db", str(db_path), "-d"])
        assert result.exit_code == 0
        assert "āmīcus, a, um" in result.output

    def test_catalog_dictionary(self, runner, data_root):
        (data_root / "lsj.txt").write_text(GREEK_CORPUS, encoding="utf-8")
        result = runner.invoke(cli, ["index", "-D", "lsj"])
        assert result.exit_code == 0
        assert (data_root / "lsj.db").exists()

    def test_missing_source(self, runner, data_root, tmp_path):
        result = runner.invoke(
            cli, ["index", "-f", str(tmp_path / "missing.txt"), "-o", str(tmp_path / "x.db")]
        )
        assert result.exit_code == 2

    def test_unknown_dictionary(self, runner, data_root):
        result = runner.invoke(cli, ["index", "-D", "nope"])
        assert result.exit_code == 2
        assert "Unknown dictionary" in result.output

    def test_file_needs_output(self, runner, data_root, latin_path):
        result = runner.invoke(cli, ["index", "-f", str(latin_path)])
        assert result.exit_code == 2
        assert "--output" in result.output


class TestDictionariesCommand:
    """Tests for `classdict dictionaries`."""

    def test_lists_catalog(self, runner, data_root):
        (data_root / "lsj.txt").write_text(GREEK_CORPUS, encoding="utf-8")
        result = runner.invoke(cli, ["dictionaries"])
        assert result.exit_code == 0
        assert "lsj" in result.output
        assert "missing" in result.output
        assert "Data root:" in result.output
