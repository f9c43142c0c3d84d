"""Species abundance changes between time points."""

from __future__ import annotations

from typing import Any, Optional

import pandas as pd

from ecodiff.engine.align import fill_zeros
from ecodiff.engine.crossjoin import cross_join, resolve_absent, second
from ecodiff.engine.grouping import group_keys, split_apply_combine
from ecodiff.registry import register
from ecodiff.tasks.base import Analysis
from ecodiff.tasks.common import AnalysisSettings, ColumnSpec
from ecodiff.validators import check_change_args


def abundance_change(
    df: pd.DataFrame,
    *,
    time_col: str,
    species_col: str,
    abundance_col: str,
    replicate_col: Optional[str] = None,
    reference_time: Any = None,
) -> pd.DataFrame:
    """Change in each species' abundance between time points.

    Within each replicate (or the whole table without one) every time point
    is paired with the next one in time order, or, given ``reference_time``,
    the reference time point is paired with every other one. ``change`` is
    the abundance at ``time2`` minus the abundance at ``time``; a positive
    value means the species increased. Species absent at both time points of
    a pair are omitted.
    """
    columns = ColumnSpec(
        species=species_col,
        abundance=abundance_col,
        replicate=replicate_col,
        time=time_col,
    )
    frame = check_change_args(df, columns, reference_time=reference_time)
    split = group_keys([replicate_col])
    filled = split_apply_combine(frame, split, fill_zeros, species_col, abundance_col)
    joined = split_apply_combine(
        filled,
        split,
        cross_join,
        species_col=species_col,
        cross_col=time_col,
        split_cols=split,
        reference=reference_time,
        reference_col=time_col,
        pairing="consecutive",
    )
    output = resolve_absent(joined, abundance_col)
    output["change"] = output[second(abundance_col)] - output[abundance_col]
    order = group_keys([time_col, second(time_col), replicate_col, species_col, "change"])
    output = output.sort_values(order[:-1], kind="mergesort")
    return output[order].reset_index(drop=True)


class AbundanceChangeAnalysis(Analysis):
    name = "abundance_change"

    def run(self, frame: pd.DataFrame, settings: AnalysisSettings) -> pd.DataFrame:
        columns = settings.columns
        return abundance_change(
            frame,
            time_col=columns.time,
            species_col=columns.species,
            abundance_col=columns.abundance,
            replicate_col=columns.replicate,
            reference_time=settings.reference,
        )


register("analysis", "abundance_change", AbundanceChangeAnalysis())

__all__ = ["AbundanceChangeAnalysis", "abundance_change"]
