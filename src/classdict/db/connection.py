"""SQLite connection management for indexed dictionaries."""

import sqlite3
import unicodedata
from pathlib import Path


def unicode_lower(text: str | None) -> str | None:
    """
    NFC-normalize and lower-case text.

    Registered as an SQL function because SQLite's built-in lower()
    only folds ASCII, which would miss Greek capitals.

    Args:
        text: Headword or definition text

    Returns:
        Lower-cased NFC text (None passes through)
    """
    if text is None:
        return None
    return unicodedata.normalize("NFC", text).lower()


def get_connection(db_path: Path, read_only: bool = False) -> sqlite3.Connection:
    """
    Get a SQLite connection with row factory and helper functions.

    Read-only connections are opened through a ``mode=ro`` URI so that a
    missing database file is reported instead of silently created.
    """
    if read_only:
        uri = f"{Path(db_path).resolve().as_uri()}?mode=ro"
        conn = sqlite3.connect(uri, uri=True)
    else:
        conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.create_function("unicode_lower", 1, unicode_lower, deterministic=True)
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    """Initialize database schema."""
    conn.executescript("""
        -- entries: one row per dictionary entry, bounded at build time
        CREATE TABLE IF NOT EXISTS entries (
            id INTEGER PRIMARY KEY,
            headword TEXT NOT NULL,
            normalized_headword TEXT NOT NULL,
            definition TEXT NOT NULL,
            language TEXT NOT NULL,
            source_line INTEGER
        );

        -- corpus_info: provenance of the build (source file, build time)
        CREATE TABLE IF NOT EXISTS corpus_info (
            key TEXT PRIMARY KEY,
            value TEXT NOT NULL
        );

        -- Create indexes
        CREATE INDEX IF NOT EXISTS idx_entries_normalized ON entries(normalized_headword);
    """)
    conn.commit()
