"""Shared fixtures: small flat-text corpora and an index built from them."""

import pytest

from classdict.store.flat import FlatTextStore
from classdict.store.indexed import IndexedStore, build_index
from classdict.text.diacritics import Language

# Line indexes (0-based) are relied on by the tests:
#  2 ăbăcus   5 ab-utor   6 amo   9 amor   11 āmīcus
# 12 ēdo     13 inamabilis   14 zythum
LATIN_CORPUS = """\
LEWIS AND SHORT: A LATIN DICTIONARY
Preface text that is not an entry at all
ăbăcus, i, m., a square board or table:
   a sideboard for displaying vessels
   of gold and silver
ab-utor, usus, 3, v. dep., to use up, consume
amo, amare, amavi, amatum, 1, v. a., to love
   with acc. of person or thing
   the strongest word for love
amor, oris, m., love, affection
   as a personified deity
āmīcus, a, um, adj., friendly
ēdo, ēdidi, ēditum, 3, v. a., to give out
inamabilis, e, adj., unlovely, hateful
zythum, i, n., a kind of malt liquor
"""

GREEK_CORPUS = """\
ἀγάπη, ἡ, love, affection
   esp. brotherly love, charity
ἀγαπάω, to treat with affection
λόγος, ὁ, the word by which the inward thought is expressed
*Ἀθῆναι, αἱ, Athens
ῥήτωρ, ορος, ὁ, public speaker
"""

# Six entries that all share the stem "amo" in some tier
MULTI_CORPUS = """\
amo, to love
ămo, variant spelling
amor, love
amoenus, a, um, pleasant
clamo, to cry out
inclamo, to call upon
"""


@pytest.fixture
def latin_path(tmp_path):
    path = tmp_path / "lewis-short.txt"
    path.write_text(LATIN_CORPUS, encoding="utf-8")
    return path


@pytest.fixture
def greek_path(tmp_path):
    path = tmp_path / "lsj.txt"
    path.write_text(GREEK_CORPUS, encoding="utf-8")
    return path


@pytest.fixture
def latin_store(latin_path):
    store = FlatTextStore(latin_path, Language.LATIN)
    yield store
    store.close()


@pytest.fixture
def greek_store(greek_path):
    store = FlatTextStore(greek_path, Language.GREEK)
    yield store
    store.close()


@pytest.fixture
def latin_index(tmp_path, latin_path):
    db_path = tmp_path / "lewis-short.db"
    build_index(FlatTextStore(latin_path, Language.LATIN), db_path)
    store = IndexedStore(db_path)
    yield store
    store.close()


@pytest.fixture
def greek_index(tmp_path, greek_path):
    db_path = tmp_path / "lsj.db"
    build_index(FlatTextStore(greek_path, Language.GREEK), db_path)
    store = IndexedStore(db_path)
    yield store
    store.close()


@pytest.fixture
def multi_index(tmp_path):
    source = tmp_path / "multi.txt"
    source.write_text(MULTI_CORPUS, encoding="utf-8")
    db_path = tmp_path / "multi.db"
    build_index(FlatTextStore(source, Language.LATIN), db_path)
    store = IndexedStore(db_path)
    yield store
    store.close()


@pytest.fixture
def data_root(tmp_path, monkeypatch):
    """Isolated data root with no config file."""
    root = tmp_path / "data"
    root.mkdir()
    monkeypatch.setenv("CLASSDICT_DATA_ROOT", str(root))
    monkeypatch.delenv("CLASSDICT_CONFIG", raising=False)
    monkeypatch.delenv("CLASSDICT_CATALOG_PATH", raising=False)
    return root
