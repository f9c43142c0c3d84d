"""Pairwise cross-join of the samples in one comparison group."""

from __future__ import annotations

from collections.abc import Hashable, Iterable, Sequence
from typing import Any, Optional

import numpy as np
import pandas as pd

from ecodiff.errors import ConfigError
from ecodiff.engine.grouping import group_keys

SECOND_SUFFIX = "2"
PAIRINGS = ("all", "consecutive")


def second(column: str) -> str:
    """Name of ``column`` on the second side of a joined pair."""
    return f"{column}{SECOND_SUFFIX}"


def _sort_units(values: Iterable[Hashable]) -> list[Hashable]:
    units = list(values)
    try:
        return sorted(units)
    except TypeError:
        # Mixed types: order by type name, then by text.
        return sorted(units, key=lambda value: (type(value).__name__, str(value)))


def canonical_order(values: pd.Series) -> dict[Hashable, int]:
    """Position of each unit in the order used to orient pairs.

    Categorical columns follow their declared categories (ordered or not);
    anything else follows the ascending order of its distinct values. The
    first member of a pair is always the unit with the smaller position.
    """
    if isinstance(values.dtype, pd.CategoricalDtype):
        categories = values.cat.categories
    else:
        categories = _sort_units(pd.unique(values.dropna()))
    return {unit: position for position, unit in enumerate(categories)}


def _positions(values: pd.Series, order: dict[Hashable, int]) -> np.ndarray:
    return np.fromiter((order[value] for value in values), dtype=int, count=len(values))


def cross_join(
    group: pd.DataFrame,
    *,
    species_col: str,
    cross_col: str,
    split_cols: Sequence[Optional[str]] = (),
    reference: Any = None,
    reference_col: Optional[str] = None,
    pairing: str = "all",
) -> pd.DataFrame:
    """Join the samples of ``group`` pairwise on species.

    Without a reference every unordered pair of distinct ``cross_col`` units is
    emitted once (``pairing="all"``), or only pairs of units adjacent in
    canonical order (``pairing="consecutive"``). With a reference, rows whose
    ``reference_col`` equals ``reference`` form the first side and all other
    rows the second side. Second-side columns get the ``2`` suffix; split
    columns appear once.
    """
    if pairing not in PAIRINGS:
        raise ConfigError(f"pairing must be one of {', '.join(PAIRINGS)}; got {pairing!r}.")
    split = group_keys(split_cols)
    right_cols = [column for column in group.columns if column not in split]
    if reference is None:
        left = group
        right = group[right_cols]
    else:
        is_reference = group[reference_col or cross_col] == reference
        left = group.loc[is_reference]
        right = group.loc[~is_reference, right_cols]
    joined = left.merge(right, on=species_col, suffixes=("", SECOND_SUFFIX))
    if reference is None:
        order = canonical_order(group[cross_col])
        first_pos = _positions(joined[cross_col], order)
        second_pos = _positions(joined[second(cross_col)], order)
        if pairing == "consecutive":
            present = sorted(set(_positions(group[cross_col], order)))
            rank_of = {position: idx for idx, position in enumerate(present)}
            step = np.fromiter(
                (rank_of[b] - rank_of[a] for a, b in zip(first_pos, second_pos)),
                dtype=int,
                count=len(first_pos),
            )
            keep = step == 1
        else:
            keep = first_pos < second_pos
        joined = joined.loc[keep]
    return joined.reset_index(drop=True)


def resolve_absent(joined: pd.DataFrame, abundance_col: str) -> pd.DataFrame:
    """Turn absent markers into zeros and drop species absent on both sides."""
    abundance_col2 = second(abundance_col)
    resolved = joined.copy()
    resolved[abundance_col] = resolved[abundance_col].fillna(0.0)
    resolved[abundance_col2] = resolved[abundance_col2].fillna(0.0)
    keep = resolved[abundance_col].ne(0) | resolved[abundance_col2].ne(0)
    return resolved.loc[keep].reset_index(drop=True)


__all__ = [
    "PAIRINGS",
    "SECOND_SUFFIX",
    "canonical_order",
    "cross_join",
    "resolve_absent",
    "second",
]
