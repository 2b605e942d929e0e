"""
Occurrence table ingestion and cleaning.
"""

from .ingestion import (
    DEFAULT_TAXON_COL,
    DEFAULT_LOCALITY_COL,
    OccurrenceRecord,
    load_occurrences,
    clean_occurrences,
    ingest_occurrences,
    iter_records,
    has_ambiguous_locality
)

__all__ = [
    "DEFAULT_TAXON_COL",
    "DEFAULT_LOCALITY_COL",
    "OccurrenceRecord",
    "load_occurrences",
    "clean_occurrences",
    "ingest_occurrences",
    "iter_records",
    "has_ambiguous_locality",
]
