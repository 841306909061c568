"""Entry stores: flat-text and indexed dictionary backends."""

from classdict.store.base import (
    CorpusUnavailableError,
    Entry,
    EntryStore,
    LineRange,
    MatchMode,
    Probe,
    RowLocation,
    union_lookup,
)
from classdict.store.boundary import BoundaryRules, EntryBoundaryDetector
from classdict.store.flat import FlatTextStore
from classdict.store.indexed import IndexedStore, build_index

__all__ = [
    "BoundaryRules",
    "CorpusUnavailableError",
    "Entry",
    "EntryBoundaryDetector",
    "EntryStore",
    "FlatTextStore",
    "IndexedStore",
    "LineRange",
    "MatchMode",
    "Probe",
    "RowLocation",
    "build_index",
    "union_lookup",
]
