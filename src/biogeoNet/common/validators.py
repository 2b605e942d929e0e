"""
Input validation utilities for the biogeoNet library.

These checks run before any graph is built, so structural problems in the
occurrence table surface as ValidationError with the offending column named,
instead of as obscure failures deep inside NetworkIt.
"""

from typing import Any, List, Sequence

import polars as pl

from .exceptions import ValidationError, validate_parameter

TAXON = "taxon"
LOCALITY = "locality"
PARTITIONS = [TAXON, LOCALITY]


def validate_occurrence_dataframe(
    df: Any,
    taxon_col: str = TAXON,
    locality_col: str = LOCALITY,
    allow_missing: bool = True,
    allow_duplicates: bool = True
) -> None:
    """
    Validate an occurrence table before cleaning or graph construction.

    Parameters
    ----------
    df : pl.DataFrame
        Occurrence table to validate
    taxon_col : str, default "taxon"
        Name of the taxon column
    locality_col : str, default "locality"
        Name of the locality column
    allow_missing : bool, default True
        Whether null or empty names are acceptable. Raw tables may contain
        them (cleaning drops them); cleaned tables must not.
    allow_duplicates : bool, default True
        Whether repeated (taxon, locality) pairs are acceptable

    Raises
    ------
    ValidationError
        If the table is not a DataFrame, lacks a column, has non-text name
        columns, or violates the missing/duplicate constraints

    Examples
    --------
    >>> df = pl.DataFrame({"taxon": ["A", "B"], "locality": ["X", "X"]})
    >>> validate_occurrence_dataframe(df, allow_missing=False, allow_duplicates=False)
    """
    if not isinstance(df, pl.DataFrame):
        raise ValidationError(
            f"Expected a polars DataFrame, got {type(df).__name__}",
            field="dataframe",
            expected="pl.DataFrame"
        )

    missing_cols = [col for col in (taxon_col, locality_col) if col not in df.columns]
    if missing_cols:
        raise ValidationError(
            f"Missing required columns: {missing_cols}",
            field="columns",
            details={"available_columns": df.columns, "missing": missing_cols}
        )

    for col in (taxon_col, locality_col):
        dtype = df.schema[col]
        if dtype.is_nested():
            raise ValidationError(
                f"Column must hold scalar names, got {dtype}",
                field=col,
                details={"dtype": str(dtype)}
            )

    if not allow_missing:
        for col in (taxon_col, locality_col):
            missing = df.select(
                (pl.col(col).is_null() | (pl.col(col).cast(pl.Utf8).str.strip_chars() == ""))
                .sum()
            ).item()
            if missing > 0:
                raise ValidationError(
                    f"Column contains {missing} null or empty names",
                    field=col,
                    details={"missing_count": missing, "total_rows": len(df)}
                )

    if not allow_duplicates and not df.is_empty():
        duplicate_count = int(df.select([taxon_col, locality_col]).is_duplicated().sum())
        if duplicate_count > 0:
            raise ValidationError(
                f"Found {duplicate_count} rows with repeated (taxon, locality) pairs",
                field="occurrences",
                details={"duplicate_count": duplicate_count}
            )


def validate_partition(partition: str, function_name: str) -> None:
    """
    Check that a partition label is "taxon" or "locality".

    Raises
    ------
    ConfigurationError
        If the label is anything else
    """
    validate_parameter(partition, PARTITIONS, "partition", function_name)


def other_partition(partition: str) -> str:
    """Return the opposite partition label."""
    return LOCALITY if partition == TAXON else TAXON


def validate_metric_names(
    metrics: Sequence[str],
    available: List[str],
    function_name: str
) -> None:
    """
    Check a list of metric names against the supported set.

    Raises
    ------
    ValidationError
        If metrics is empty
    ConfigurationError
        If any metric name is unsupported
    """
    if not metrics:
        raise ValidationError("At least one metric must be requested", field="metrics")
    for metric in metrics:
        validate_parameter(metric, available, "metrics", function_name)
