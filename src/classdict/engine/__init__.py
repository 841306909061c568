"""Resolution engine: query, cascade, disambiguation and rendering."""

from classdict.engine.cascade import (
    Candidate,
    MatchStage,
    ResolutionCascade,
    ResolutionResult,
    ResolutionStatus,
)
from classdict.engine.disambiguate import Disambiguator, Selection
from classdict.engine.query import Query

__all__ = [
    "Candidate",
    "Disambiguator",
    "MatchStage",
    "Query",
    "ResolutionCascade",
    "ResolutionResult",
    "ResolutionStatus",
    "Selection",
]
