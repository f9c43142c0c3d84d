"""Pool replicates of a treatment into one averaged sample."""

from __future__ import annotations

from typing import Optional

import pandas as pd

from ecodiff.engine.align import fill_zeros
from ecodiff.engine.grouping import group_keys, split_apply_combine


def pool_replicates(
    frame: pd.DataFrame,
    *,
    species_col: str,
    abundance_col: str,
    replicate_col: str,
    treatment_col: str,
    time_col: Optional[str] = None,
) -> pd.DataFrame:
    """Average species abundances across the replicates of each treatment.

    Within each (time, treatment) every replicate is first zero-filled for the
    species seen in any replicate of that treatment, so a replicate missing a
    species lowers the mean instead of being ignored. The replicate column is
    dropped from the result: one row per (time, treatment, species).
    """
    split = group_keys([time_col, treatment_col])
    columns = group_keys([time_col, treatment_col, replicate_col, species_col])
    filled = split_apply_combine(
        frame[[*columns, abundance_col]],
        split,
        fill_zeros,
        species_col,
        abundance_col,
    )
    keys = group_keys([time_col, treatment_col, species_col])
    pooled = (
        filled.groupby(keys, sort=True, observed=True, dropna=False)[abundance_col]
        .mean()
        .reset_index()
    )
    return pooled[[*keys, abundance_col]]


__all__ = ["pool_replicates"]
