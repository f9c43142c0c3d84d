"""Split/apply/combine over optional grouping columns."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from typing import Any, Optional

import pandas as pd


def group_keys(columns: Iterable[Optional[str]]) -> list[str]:
    """Drop unset column bindings while keeping order and uniqueness."""
    keys: list[str] = []
    for column in columns:
        if column and column not in keys:
            keys.append(column)
    return keys


def split_apply_combine(
    frame: pd.DataFrame,
    by: Iterable[Optional[str]],
    func: Callable[..., pd.DataFrame],
    *args: Any,
    **kwargs: Any,
) -> pd.DataFrame:
    """Apply ``func`` to each group of ``frame`` and stack the results.

    With no grouping columns the whole frame is a single group. Groups are
    visited in sorted key order (category order for categoricals), so the
    stacked result is deterministic. Groups producing no rows are skipped;
    if every group is empty the first (empty) result is returned so callers
    still see the output columns.
    """
    keys = group_keys(by)
    if not keys or frame.empty:
        return func(frame, *args, **kwargs)
    results: list[pd.DataFrame] = []
    empty: Optional[pd.DataFrame] = None
    grouped = frame.groupby(keys, sort=True, observed=True, dropna=False)
    for _, group in grouped:
        result = func(group, *args, **kwargs)
        if result.empty:
            if empty is None:
                empty = result
            continue
        results.append(result)
    if not results:
        return empty if empty is not None else func(frame.iloc[0:0], *args, **kwargs)
    return pd.concat(results, ignore_index=True)


__all__ = ["group_keys", "split_apply_combine"]
