"""Scalar difference metrics for one pair of samples."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
import logging
import math
from typing import Any, Optional

import numpy as np
import pandas as pd

from ecodiff.engine.crossjoin import second
from ecodiff.engine.ranking import RANK_COLUMN

METRIC_COLUMNS = ("richness_diff", "evenness_diff", "rank_diff", "species_diff")


def evar(values: Sequence[float] | np.ndarray) -> float:
    """Smith & Wilson's Evar over the nonzero entries of ``values``.

    ``1 - 2/pi * arctan(var(ln x))`` with the population variance. Undefined
    (``nan``) for fewer than two nonzero abundances.
    """
    x = np.asarray(values, dtype=float)
    x = x[x > 0]
    if x.size < 2:
        return math.nan
    theta = float(np.var(np.log(x)))
    return 1.0 - 2.0 / math.pi * math.atan(theta)


def species_turnover(first_present: np.ndarray, second_present: np.ndarray) -> float:
    """Replacement component of the balanced presence/absence dissimilarity.

    ``2 * min(b, c) / (a + b + c)`` where ``a`` counts shared species and
    ``b``/``c`` species found only in the first/second sample (Carvalho et
    al. 2012). This is not the Jaccard distance ``(b + c) / (a + b + c)``.
    """
    first_present = np.asarray(first_present, dtype=bool)
    second_present = np.asarray(second_present, dtype=bool)
    shared = int(np.sum(first_present & second_present))
    only_first = int(np.sum(first_present & ~second_present))
    only_second = int(np.sum(~first_present & second_present))
    total = shared + only_first + only_second
    if total == 0:
        return math.nan
    return 2.0 * min(only_first, only_second) / total


@dataclass
class MissingValueCollector:
    """Accumulates comparisons whose metrics came out undefined.

    One collector is shared by every scored pair of a call and flushed once,
    so a call emits at most one warning however many pairs are affected.
    """

    entries: list[dict[str, Any]] = field(default_factory=list)

    def record(self, metric: str, pair: Optional[Mapping[str, Any]] = None) -> None:
        entry = {"metric": metric}
        if pair:
            entry.update(pair)
        self.entries.append(entry)

    def __len__(self) -> int:
        return len(self.entries)

    def metrics(self) -> list[str]:
        return sorted({entry["metric"] for entry in self.entries})

    def flush(self, logger: logging.Logger) -> bool:
        if not self.entries:
            return False
        logger.warning(
            "%s values contain NaNs for %d comparison(s) because some samples "
            "have fewer than two species with nonzero abundance.",
            ", ".join(self.metrics()),
            len(self.entries),
        )
        logger.debug("Undefined comparisons: %s", self.entries)
        self.entries.clear()
        return True


def score_pair(
    rows: pd.DataFrame,
    abundance_col: str,
    *,
    collector: Optional[MissingValueCollector] = None,
    pair: Optional[Mapping[str, Any]] = None,
) -> dict[str, float]:
    """Reduce the joined species rows of one pair to the four metrics."""
    first = rows[abundance_col].to_numpy(dtype=float)
    second_ = rows[second(abundance_col)].to_numpy(dtype=float)
    first_present = first != 0
    second_present = second_ != 0
    union = first_present | second_present
    n_species = int(union.sum())
    if n_species == 0:
        return {metric: math.nan for metric in METRIC_COLUMNS}

    first_present = first_present[union]
    second_present = second_present[union]
    richness_diff = (int(second_present.sum()) - int(first_present.sum())) / n_species

    evenness_diff = evar(second_[union]) - evar(first[union])
    if math.isnan(evenness_diff) and collector is not None:
        collector.record("evenness_diff", pair)

    ranks = rows[RANK_COLUMN].to_numpy(dtype=float)[union]
    ranks2 = rows[second(RANK_COLUMN)].to_numpy(dtype=float)[union]
    rank_diff = float(np.mean(np.abs(ranks - ranks2))) / n_species

    return {
        "richness_diff": richness_diff,
        "evenness_diff": evenness_diff,
        "rank_diff": rank_diff,
        "species_diff": species_turnover(first_present, second_present),
    }


def score_pairs(
    joined: pd.DataFrame,
    keys: Sequence[str],
    abundance_col: str,
    *,
    collector: Optional[MissingValueCollector] = None,
) -> pd.DataFrame:
    """Score every pair in ``joined``; one output row per distinct ``keys``."""
    keys = list(keys)
    if joined.empty:
        output = joined[keys].iloc[0:0].reset_index(drop=True)
        for metric in METRIC_COLUMNS:
            output[metric] = pd.Series(dtype=float)
        return output
    heads: list[pd.DataFrame] = []
    scores: list[dict[str, float]] = []
    grouped = joined.groupby(keys, sort=True, observed=True, dropna=False)
    for _, rows in grouped:
        head = rows[keys].iloc[[0]]
        heads.append(head)
        scores.append(
            score_pair(
                rows,
                abundance_col,
                collector=collector,
                pair=head.iloc[0].to_dict(),
            )
        )
    output = pd.concat(heads, ignore_index=True)
    metrics = pd.DataFrame(scores, columns=list(METRIC_COLUMNS))
    return pd.concat([output, metrics], axis=1)


def abundance_differences(
    joined: pd.DataFrame,
    abundance_col: str,
    *,
    column: str = "difference",
) -> pd.DataFrame:
    """Per-species ``abundance2 - abundance`` for already joined pairs."""
    output = joined.copy()
    output[column] = output[second(abundance_col)] - output[abundance_col]
    return output


__all__ = [
    "METRIC_COLUMNS",
    "MissingValueCollector",
    "abundance_differences",
    "evar",
    "score_pair",
    "score_pairs",
    "species_turnover",
]
