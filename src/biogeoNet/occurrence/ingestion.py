"""
Occurrence table ingestion and cleaning for the biogeoNet library.

This module reads a flat table of occurrence records (one taxon found at one
locality or geological formation per row) and reduces it to the cleaned,
de-duplicated record set that network construction expects.

Cleaning policy
---------------
1. Names are cast to text and stripped of surrounding whitespace.
2. Rows with a missing or empty locality are dropped.
3. Rows whose locality contains any ASCII punctuation character are dropped.
   Punctuation in a locality label ("Morrison?", "Hell Creek/Lance") marks an
   unresolved or ambiguous assignment, and such rows are excluded rather than
   guessed at.
4. Rows with a missing or empty taxon are dropped.
5. Localities are normalized to title case.
6. Exact (taxon, locality) duplicates are removed. Presence is boolean: a pair
   recorded many times still yields a single edge.
"""

import string
from pathlib import Path
from typing import Any, Iterator, List, Mapping, NamedTuple, Optional, Sequence, Union
from urllib.parse import urlparse

import polars as pl

from biogeoNet.common.exceptions import IngestionError, ValidationError
from biogeoNet.common.validators import TAXON, LOCALITY, validate_occurrence_dataframe
from biogeoNet.common.logging_config import get_logger, log_function_entry, LoggingTimer

logger = get_logger(__name__)

# Column names used by Paleobiology Database occurrence downloads
DEFAULT_TAXON_COL = "accepted_name"
DEFAULT_LOCALITY_COL = "formation"

# POSIX [[:punct:]], the same ASCII set as string.punctuation
PUNCTUATION_PATTERN = r"[[:punct:]]"
_PUNCTUATION = frozenset(string.punctuation)

OccurrenceSource = Union[str, Path, pl.DataFrame, Sequence[Any]]


class OccurrenceRecord(NamedTuple):
    """A cleaned (taxon, locality) occurrence."""

    taxon: str
    locality: str


def has_ambiguous_locality(name: Optional[str]) -> bool:
    """
    Return True if a locality label would be excluded as ambiguous.

    Missing and empty labels count as ambiguous, as does any label containing
    an ASCII punctuation character.

    Examples
    --------
    >>> has_ambiguous_locality("Morrison")
    False
    >>> has_ambiguous_locality("Morrison?")
    True
    """
    if name is None:
        return True
    name = str(name).strip()
    return name == "" or any(ch in _PUNCTUATION for ch in name)


def load_occurrences(
    source: OccurrenceSource,
    taxon_col: str = DEFAULT_TAXON_COL,
    locality_col: str = DEFAULT_LOCALITY_COL,
    separator: Optional[str] = None
) -> pl.DataFrame:
    """
    Read a raw occurrence table.

    Parameters
    ----------
    source : str, Path, pl.DataFrame or sequence of records
        Local file path, ``http(s)://`` URL, an in-memory DataFrame, or a
        sequence of raw records (mappings, or ``(taxon, locality)`` pairs).
        Files ending in ``.parquet`` are read as Parquet; ``.tsv`` and
        ``.txt`` are tab separated; anything else is read as CSV.
    taxon_col : str, default "accepted_name"
        Column holding the taxon name
    locality_col : str, default "formation"
        Column holding the locality or formation name
    separator : str, optional
        Field separator overriding the extension-based default

    Returns
    -------
    pl.DataFrame
        The raw table; additional columns are kept but ignored downstream.
        Pair records are returned with columns named taxon_col/locality_col.

    Raises
    ------
    IngestionError
        If the source cannot be reached or parsed, is not tabular, or lacks
        the taxon or locality column

    Examples
    --------
    >>> raw = load_occurrences([("Allosaurus", "Morrison")], "taxon", "locality")
    >>> raw.columns
    ['taxon', 'locality']
    """
    log_function_entry("load_occurrences", source=type(source).__name__,
                       taxon_col=taxon_col, locality_col=locality_col)

    if isinstance(source, pl.DataFrame):
        df = source
    elif isinstance(source, (str, Path)):
        df = _read_table(source, separator)
    elif isinstance(source, (list, tuple)):
        df = _records_to_frame(source, taxon_col, locality_col)
    else:
        raise IngestionError(
            f"Unsupported occurrence source type: {type(source).__name__}",
            source=type(source).__name__,
            format_type="table"
        )

    try:
        validate_occurrence_dataframe(df, taxon_col, locality_col)
    except ValidationError as e:
        raise IngestionError(
            f"Occurrence table is malformed: {e.message}",
            source=str(source) if isinstance(source, (str, Path)) else type(source).__name__,
            cause=e
        )

    logger.info("Loaded %d raw occurrence rows", len(df))
    return df


def _read_table(source: Union[str, Path], separator: Optional[str]) -> pl.DataFrame:
    """
    Read a CSV/TSV/Parquet table from a local path or URL.

    All columns are read as text so names such as "1" or "NA" survive intact.
    """
    location = str(source)
    is_url = urlparse(location).scheme in ("http", "https")

    if not is_url and not Path(location).exists():
        raise IngestionError(
            f"Occurrence table not found: {location}",
            source=location
        )

    suffix = Path(urlparse(location).path if is_url else location).suffix.lower()

    try:
        if suffix == ".parquet":
            logger.debug("Reading Parquet occurrence table: %s", location)
            df = pl.read_parquet(location)
        else:
            sep = separator or ("\t" if suffix in (".tsv", ".txt") else ",")
            logger.debug("Reading delimited occurrence table: %s (separator=%r)", location, sep)
            df = pl.read_csv(location, separator=sep, infer_schema_length=0)
    except Exception as e:
        raise IngestionError(
            f"Failed to read occurrence table: {e}",
            source=location,
            format_type="Parquet" if suffix == ".parquet" else "CSV",
            cause=e
        )

    if df.width == 0:
        raise IngestionError(
            "Occurrence table has no columns",
            source=location
        )

    return df


def _records_to_frame(
    records: Sequence[Any],
    taxon_col: str,
    locality_col: str
) -> pl.DataFrame:
    """
    Convert a sequence of raw records into a DataFrame.
    """
    if len(records) == 0:
        return pl.DataFrame(schema={taxon_col: pl.Utf8, locality_col: pl.Utf8})

    if all(isinstance(record, Mapping) for record in records):
        try:
            return pl.from_dicts(list(records), infer_schema_length=None)
        except Exception as e:
            raise IngestionError(
                f"Failed to build table from record mappings: {e}",
                source="records",
                cause=e
            )

    rows: List[List[Optional[str]]] = []
    for index, record in enumerate(records):
        if not isinstance(record, (tuple, list)) or len(record) != 2:
            raise IngestionError(
                "Records must be mappings or (taxon, locality) pairs",
                source="records",
                line_number=index,
                details={"record": repr(record)[:80]}
            )
        rows.append([None if value is None else str(value) for value in record])

    return pl.DataFrame(
        rows,
        schema=[(taxon_col, pl.Utf8), (locality_col, pl.Utf8)],
        orient="row"
    )


def clean_occurrences(
    df: pl.DataFrame,
    taxon_col: str = DEFAULT_TAXON_COL,
    locality_col: str = DEFAULT_LOCALITY_COL
) -> pl.DataFrame:
    """
    Reduce a raw occurrence table to the cleaned, de-duplicated record set.

    Parameters
    ----------
    df : pl.DataFrame
        Raw occurrence table
    taxon_col : str, default "accepted_name"
        Column holding the taxon name
    locality_col : str, default "formation"
        Column holding the locality or formation name

    Returns
    -------
    pl.DataFrame
        Two columns, "taxon" and "locality", with no nulls, no empty names,
        no punctuation in localities, title-cased localities and no repeated
        pairs. Row order follows first appearance in the input.

    Raises
    ------
    ValidationError
        If the table lacks either column

    Examples
    --------
    >>> raw = pl.DataFrame({
    ...     "accepted_name": ["A", "A", "B", "C"],
    ...     "formation": ["hell creek", "Hell Creek", "Morrison?", None]
    ... })
    >>> clean_occurrences(raw).rows()
    [('A', 'Hell Creek')]
    """
    log_function_entry("clean_occurrences", rows=len(df),
                       taxon_col=taxon_col, locality_col=locality_col)
    validate_occurrence_dataframe(df, taxon_col, locality_col)

    with LoggingTimer("clean_occurrences", {"rows": len(df)}):
        frame = df.select(
            pl.col(taxon_col).cast(pl.Utf8).str.strip_chars().alias(TAXON),
            pl.col(locality_col).cast(pl.Utf8).str.strip_chars().alias(LOCALITY),
        )
        total = frame.height

        missing_locality = pl.col(LOCALITY).is_null() | (pl.col(LOCALITY) == "")
        frame, dropped_missing = _drop_where(frame, missing_locality)

        ambiguous_locality = pl.col(LOCALITY).str.contains(PUNCTUATION_PATTERN)
        frame, dropped_ambiguous = _drop_where(frame, ambiguous_locality)

        missing_taxon = pl.col(TAXON).is_null() | (pl.col(TAXON) == "")
        frame, dropped_taxon = _drop_where(frame, missing_taxon)

        frame = frame.with_columns(pl.col(LOCALITY).str.to_titlecase())

        before_dedup = frame.height
        frame = frame.unique(maintain_order=True)
        dropped_duplicates = before_dedup - frame.height

    logger.info(
        "Cleaned occurrences: %d of %d rows kept (missing locality=%d, "
        "ambiguous locality=%d, missing taxon=%d, duplicates=%d)",
        frame.height, total, dropped_missing, dropped_ambiguous,
        dropped_taxon, dropped_duplicates
    )
    return frame


def _drop_where(frame: pl.DataFrame, condition: pl.Expr):
    kept = frame.filter(~condition)
    return kept, frame.height - kept.height


def ingest_occurrences(
    source: OccurrenceSource,
    taxon_col: str = DEFAULT_TAXON_COL,
    locality_col: str = DEFAULT_LOCALITY_COL,
    separator: Optional[str] = None
) -> pl.DataFrame:
    """
    Load and clean an occurrence table in one step.

    See load_occurrences() and clean_occurrences() for parameters.

    Raises
    ------
    IngestionError
        If the source cannot be read or is malformed
    """
    raw = load_occurrences(source, taxon_col, locality_col, separator)
    return clean_occurrences(raw, taxon_col, locality_col)


def iter_records(df: pl.DataFrame) -> Iterator[OccurrenceRecord]:
    """
    Iterate a cleaned occurrence table as OccurrenceRecord tuples.
    """
    for taxon, locality in df.select(TAXON, LOCALITY).iter_rows():
        yield OccurrenceRecord(taxon, locality)
