"""Argument and input table validation for analyses."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Optional

import pandas as pd

from ecodiff.engine.crossjoin import second
from ecodiff.engine.ranking import RANK_COLUMN, normalize_ties
from ecodiff.engine.scoring import METRIC_COLUMNS
from ecodiff.errors import ConfigError, ValidationError
from ecodiff.tasks.common import ColumnSpec

_RESERVED_COLUMNS = frozenset({RANK_COLUMN, "difference", "change", *METRIC_COLUMNS})


def _format_columns(columns: Sequence[Any]) -> str:
    return ", ".join(repr(column) for column in columns) or "<none>"


def check_columns(frame: pd.DataFrame, columns: ColumnSpec) -> None:
    """Ensure every bound column exists and no column is bound twice."""
    if not isinstance(frame, pd.DataFrame):
        raise ConfigError(
            f"Input must be a pandas DataFrame, got {type(frame).__name__}."
        )
    bound = columns.bound()
    names = list(bound.values())
    duplicated = sorted({name for name in names if names.count(name) > 1})
    if duplicated:
        raise ConfigError(
            f"Columns bound to more than one role: {_format_columns(duplicated)}."
        )
    missing = [f"{role}={name!r}" for role, name in bound.items() if name not in frame.columns]
    if missing:
        raise ConfigError(
            f"Columns not found in input: {', '.join(missing)}. "
            f"Available: {_format_columns(frame.columns)}."
        )
    reserved = sorted(
        name
        for name in names
        if name in _RESERVED_COLUMNS or second(name) in _RESERVED_COLUMNS
    )
    if reserved:
        raise ConfigError(
            f"Column names clash with output columns: {_format_columns(reserved)}; "
            "rename them before running the analysis."
        )


def _check_abundance(frame: pd.DataFrame, abundance_col: str) -> pd.Series:
    values = frame[abundance_col]
    if pd.api.types.is_bool_dtype(values) or not pd.api.types.is_numeric_dtype(values):
        raise ValidationError(
            f"Abundance column {abundance_col!r} must be numeric, got {values.dtype}."
        )
    values = values.astype(float)
    if values.isna().any():
        raise ValidationError(
            f"Abundance column {abundance_col!r} contains {int(values.isna().sum())} "
            "missing value(s)."
        )
    if values.lt(0).any():
        raise ValidationError(
            f"Abundance column {abundance_col!r} contains negative values."
        )
    return values


def _check_keys(frame: pd.DataFrame, key_cols: Sequence[str]) -> None:
    for column in key_cols:
        missing = int(frame[column].isna().sum())
        if missing:
            raise ValidationError(
                f"Column {column!r} contains {missing} missing value(s)."
            )


def _check_unique(frame: pd.DataFrame, key_cols: Sequence[str]) -> None:
    duplicated = frame.duplicated(subset=list(key_cols), keep=False)
    if duplicated.any():
        example = frame.loc[duplicated, list(key_cols)].iloc[0].to_dict()
        raise ValidationError(
            f"Found {int(duplicated.sum())} rows sharing the same "
            f"{_format_columns(key_cols)}; each species may appear once per "
            f"sample (first duplicate: {example})."
        )


def _check_reference(
    frame: pd.DataFrame, column: str, reference: Any, *, label: str
) -> None:
    values = frame[column]
    if isinstance(values.dtype, pd.CategoricalDtype):
        domain = list(values.cat.categories)
    else:
        domain = list(pd.unique(values))
    if reference not in domain:
        raise ConfigError(
            f"{label} {reference!r} is not a value of column {column!r}. "
            f"Available: {_format_columns(domain)}.",
            context={"reference": reference, "column": column},
        )


def _prepared(frame: pd.DataFrame, columns: ColumnSpec) -> pd.DataFrame:
    prepared = frame[columns.names()].copy()
    prepared[columns.abundance] = _check_abundance(prepared, columns.abundance)
    _check_keys(prepared, [name for name in columns.names() if name != columns.abundance])
    return prepared.reset_index(drop=True)


def reference_column(columns: ColumnSpec) -> Optional[str]:
    """Column a reference unit is looked up in for difference analyses."""
    return columns.treatment or columns.replicate


def check_difference_args(
    frame: pd.DataFrame,
    columns: ColumnSpec,
    *,
    pool: bool = False,
    reference: Any = None,
    ties: str = "average",
) -> pd.DataFrame:
    """Validate a difference call; return a copy holding only bound columns."""
    if columns.replicate is None:
        raise ConfigError("columns.replicate is required for difference analyses.")
    if columns.block is not None and columns.treatment is None:
        raise ConfigError(
            "A block column was given without a treatment column; "
            "set columns.treatment to compare treatments within blocks."
        )
    if pool and columns.treatment is None:
        raise ConfigError(
            "Pooling averages replicates within treatments; set columns.treatment "
            "or disable analysis.pool."
        )
    if pool and columns.block is not None:
        raise ConfigError(
            "Pooling and blocks cannot be combined; unset columns.block or "
            "disable analysis.pool."
        )
    normalize_ties(ties)
    check_columns(frame, columns)
    prepared = _prepared(frame, columns)
    sample_key = [
        name
        for name in (columns.block, columns.time, columns.treatment, columns.replicate)
        if name is not None
    ]
    _check_unique(prepared, [*sample_key, columns.species])
    if reference is not None:
        _check_reference(
            prepared,
            reference_column(columns),
            reference,
            label="Reference treatment" if columns.treatment else "Reference replicate",
        )
    return prepared


def check_change_args(
    frame: pd.DataFrame,
    columns: ColumnSpec,
    *,
    reference_time: Any = None,
) -> pd.DataFrame:
    """Validate an abundance change call; return a copy of bound columns."""
    if columns.time is None:
        raise ConfigError("columns.time is required for change analyses.")
    check_columns(frame, columns)
    prepared = _prepared(frame, columns)
    sample_key = [name for name in (columns.replicate, columns.time) if name is not None]
    _check_unique(prepared, [*sample_key, columns.species])
    if reference_time is not None:
        _check_reference(prepared, columns.time, reference_time, label="Reference time")
    return prepared


__all__ = [
    "check_change_args",
    "check_columns",
    "check_difference_args",
    "reference_column",
]
