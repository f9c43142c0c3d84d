"""Within-sample abundance ranks."""

from __future__ import annotations

import pandas as pd

from ecodiff.errors import ConfigError

RANK_COLUMN = "rank"
# "average" gives tied species the mean of the positions they span (the
# rank-abundance-curve convention); "min" is standard competition ranking.
TIE_METHODS = ("average", "min")
DEFAULT_TIE_METHOD = "average"


def normalize_ties(value: str) -> str:
    if value not in TIE_METHODS:
        allowed = ", ".join(TIE_METHODS)
        raise ConfigError(f"ties must be one of {allowed}; got {value!r}.")
    return value


def add_ranks(
    frame: pd.DataFrame,
    abundance_col: str,
    *,
    ties: str = DEFAULT_TIE_METHOD,
) -> pd.DataFrame:
    """Return a copy of one sample with a ``rank`` column.

    Species with a positive abundance are ranked by descending abundance.
    Species that are absent (``NaN``) or recorded at zero all share rank
    ``S + 1``, where ``S`` is the number of species present.
    """
    ties = normalize_ties(ties)
    ranked = frame.copy()
    abundance = ranked[abundance_col]
    present = abundance.gt(0)
    richness = int(present.sum())
    ranks = abundance.where(present).rank(method=ties, ascending=False)
    ranked[RANK_COLUMN] = ranks.fillna(richness + 1).astype(float)
    return ranked


__all__ = ["DEFAULT_TIE_METHOD", "RANK_COLUMN", "TIE_METHODS", "add_ranks", "normalize_ties"]
