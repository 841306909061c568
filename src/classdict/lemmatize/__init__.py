"""Lemmatization adapter for inflected query words."""

from classdict.lemmatize.morpheus import (
    OUTPUT_CONTRACT,
    Lemmatizer,
    LemmatizerError,
    MorpheusLemmatizer,
    parse_cruncher_output,
)

__all__ = [
    "OUTPUT_CONTRACT",
    "Lemmatizer",
    "LemmatizerError",
    "MorpheusLemmatizer",
    "parse_cruncher_output",
]
