"""Indexed (SQLite) dictionary backend.

Entries are pre-extracted from a flat corpus into an ``entries`` table with
display and normalized headword columns, so entry boundaries are exact
stored data and lookups are single indexed queries.

Usage:
    count = build_index(FlatTextStore(path, Language.LATIN), db_path)

    store = IndexedStore(db_path)
    entries = store.lookup(probe, limit=5)
"""

from __future__ import annotations

import logging
import re
import sqlite3
from datetime import datetime, timezone
from pathlib import Path

from classdict.db.connection import get_connection, init_db
from classdict.store.base import (
    CorpusUnavailableError,
    Entry,
    MatchMode,
    Probe,
    RowLocation,
)
from classdict.store.flat import FlatTextStore
from classdict.text.diacritics import Language, fold, profile_for

logger = logging.getLogger(__name__)


def _escape_like(text: str) -> str:
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _fold_sql(text: str | None, language: str) -> str | None:
    if text is None:
        return None
    return fold(text, Language(language))


def _regexp_sql(pattern: str, text: str | None) -> bool:
    # Backs the REGEXP operator, which SQLite calls as regexp(pattern, text)
    return text is not None and re.search(pattern, text) is not None


class IndexedStore:
    """Entry store over a pre-built SQLite index.

    The connection is opened read-only on first use; a missing or
    malformed database raises CorpusUnavailableError.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self._conn: sqlite3.Connection | None = None
        self._info: dict[str, str] = {}

    @property
    def language(self) -> Language | None:
        """Corpus language recorded at build time (None if mixed/unknown)."""
        value = self._info.get("language")
        return Language(value) if value else None

    @property
    def location(self) -> str:
        return str(self.db_path)

    @property
    def supports_multiple(self) -> bool:
        return True

    def connect(self) -> sqlite3.Connection:
        """Open the index if not already open.

        Raises:
            CorpusUnavailableError: If the database is missing or unreadable
        """
        if self._conn is not None:
            return self._conn

        if not self.db_path.exists():
            raise CorpusUnavailableError("Dictionary index not found", [self.db_path])

        try:
            conn = get_connection(self.db_path, read_only=True)
            conn.create_function("fold_key", 2, _fold_sql, deterministic=True)
            conn.create_function("regexp", 2, _regexp_sql, deterministic=True)
            conn.execute("SELECT id FROM entries LIMIT 1").fetchall()
            rows = conn.execute("SELECT key, value FROM corpus_info").fetchall()
        except sqlite3.Error as e:
            raise CorpusUnavailableError(
                f"Cannot read dictionary index: {e}", [self.db_path]
            )

        self._info = {row["key"]: row["value"] for row in rows}
        self._conn = conn
        logger.debug(f"Opened index {self.db_path} ({self._info.get('entry_count', '?')} entries)")
        return conn

    def info(self) -> dict[str, str]:
        """Build provenance recorded in corpus_info."""
        self.connect()
        return dict(self._info)

    def _condition(self, probe: Probe) -> tuple[str, list]:
        if probe.mode is MatchMode.FULL_TEXT:
            return (
                "fold_key(definition, language) LIKE ? ESCAPE '\\'",
                [f"%{_escape_like(probe.key)}%"],
            )

        if probe.literal:
            return "unicode_lower(headword) = ?", [probe.key]

        profile = profile_for(probe.language)

        if probe.mode is MatchMode.EXACT:
            if not probe.leading:
                return "normalized_headword = ?", [probe.key]
            # The marker is checked on the display column; folding would erase it
            marks = list(profile.leading_marks)
            placeholders = ", ".join("?" for _ in marks)
            clause = (
                "(normalized_headword = ? OR "
                f"(substr(headword, 1, 1) IN ({placeholders}) "
                "AND substr(normalized_headword, 2) = ?))"
            )
            return clause, [probe.key, *marks, probe.key]

        if probe.mode is MatchMode.PREFIX:
            clause = "normalized_headword LIKE ? ESCAPE '\\'"
            params = [f"{_escape_like(probe.key)}%"]
            if probe.bounded:
                clause += " AND normalized_headword REGEXP ?"
                params.append(rf"^{re.escape(probe.key)}[{profile.alphabet}]*$")
            return f"({clause})", params

        clause = "normalized_headword LIKE ? ESCAPE '\\'"
        if probe.bounded:
            clause += " AND normalized_headword NOT LIKE '%-%'"
        return f"({clause})", [f"%{_escape_like(probe.key)}%"]

    def lookup(self, probe: Probe, limit: int) -> list[Entry]:
        """Query the index for entries matching probe.

        Args:
            probe: Lookup request (its key is used, not its pattern)
            limit: Maximum rows

        Returns:
            Entries in corpus order
        """
        if limit <= 0:
            return []

        conn = self.connect()
        condition, params = self._condition(probe)
        sql = f"""
            SELECT id, headword, normalized_headword, definition, language
            FROM entries
            WHERE {condition} AND language = ?
            ORDER BY id
            LIMIT ?
        """
        try:
            cursor = conn.execute(sql, [*params, probe.language.value, limit])
            rows = cursor.fetchall()
        except sqlite3.Error as e:
            raise CorpusUnavailableError(
                f"Cannot read dictionary index: {e}", [self.db_path]
            )

        return [
            Entry(
                headword=row["headword"],
                normalized_headword=row["normalized_headword"],
                definition=row["definition"],
                language=Language(row["language"]),
                source_location=RowLocation(row["id"]),
                source=str(self.db_path),
            )
            for row in rows
        ]

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None


def build_index(source: FlatTextStore, db_path: Path | str) -> int:
    """Build (or rebuild) an indexed dictionary from a flat corpus.

    The normalized headword column is always recomputed with fold(), never
    carried over from a previous build. The new database is written beside
    the target and moved into place when complete.

    Args:
        source: Flat corpus to split into entries
        db_path: Destination SQLite file

    Returns:
        Number of entries written

    Raises:
        CorpusUnavailableError: If the flat corpus cannot be read
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = db_path.with_name(db_path.name + ".tmp")
    if tmp_path.exists():
        tmp_path.unlink()

    language = source.language
    conn = get_connection(tmp_path)
    try:
        init_db(conn)
        count = 0
        for entry in source.iter_entries():
            conn.execute(
                """
                INSERT INTO entries
                (headword, normalized_headword, definition, language, source_line)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    entry.headword,
                    fold(entry.headword, language),
                    entry.definition,
                    language.value,
                    entry.source_location.start + 1,
                ),
            )
            count += 1

        conn.executemany(
            "INSERT OR REPLACE INTO corpus_info (key, value) VALUES (?, ?)",
            [
                ("source", str(source.path)),
                ("language", language.value),
                ("entry_count", str(count)),
                ("built_at", datetime.now(timezone.utc).isoformat()),
            ],
        )
        conn.commit()
    except Exception:
        conn.close()
        tmp_path.unlink(missing_ok=True)
        raise
    conn.close()

    tmp_path.replace(db_path)
    logger.info(f"Indexed {count} entries from {source.path} into {db_path}")
    return count
