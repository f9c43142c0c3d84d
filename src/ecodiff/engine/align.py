"""Species alignment within a comparison group."""

from __future__ import annotations

import numpy as np
import pandas as pd

_MERGE_INDICATOR = "_ecodiff_merge"


def _sample_columns(
    frame: pd.DataFrame, species_col: str, abundance_col: str
) -> list[str]:
    return [
        column
        for column in frame.columns
        if column not in (species_col, abundance_col)
    ]


def fill_species(
    frame: pd.DataFrame,
    species_col: str,
    abundance_col: str,
    *,
    fill_value: float = np.nan,
) -> pd.DataFrame:
    """Give every sample in ``frame`` a row for every species in ``frame``.

    A sample is identified by all columns other than the species and
    abundance columns. Rows introduced for species a sample never recorded
    carry ``fill_value`` as abundance (``NaN`` marks "not observed", keeping
    it apart from an observed zero). Existing rows and their other columns
    are kept as they are; the input frame is not modified.
    """
    if frame.empty:
        return frame.copy()
    sample_cols = _sample_columns(frame, species_col, abundance_col)
    if not sample_cols:
        return frame.reset_index(drop=True)
    samples = frame[sample_cols].drop_duplicates()
    species = frame[[species_col]].drop_duplicates()
    grid = samples.merge(species, how="cross")
    filled = grid.merge(
        frame,
        on=[*sample_cols, species_col],
        how="left",
        indicator=_MERGE_INDICATOR,
    )
    introduced = filled[_MERGE_INDICATOR].eq("left_only")
    filled[abundance_col] = filled[abundance_col].astype(float)
    filled.loc[introduced, abundance_col] = fill_value
    return filled.drop(columns=_MERGE_INDICATOR)[list(frame.columns)]


def fill_zeros(
    frame: pd.DataFrame, species_col: str, abundance_col: str
) -> pd.DataFrame:
    """Same as :func:`fill_species`, recording absent species as zero."""
    return fill_species(frame, species_col, abundance_col, fill_value=0.0)


__all__ = ["fill_species", "fill_zeros"]
