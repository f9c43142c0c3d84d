"""Alignment, ranking, pooling, cross-join and scoring stages."""

from ecodiff.engine.align import fill_species, fill_zeros
from ecodiff.engine.crossjoin import canonical_order, cross_join, resolve_absent, second
from ecodiff.engine.grouping import split_apply_combine
from ecodiff.engine.pooling import pool_replicates
from ecodiff.engine.ranking import RANK_COLUMN, TIE_METHODS, add_ranks
from ecodiff.engine.scoring import (
    METRIC_COLUMNS,
    MissingValueCollector,
    abundance_differences,
    evar,
    score_pair,
    score_pairs,
    species_turnover,
)

__all__ = [
    "METRIC_COLUMNS",
    "MissingValueCollector",
    "RANK_COLUMN",
    "TIE_METHODS",
    "abundance_differences",
    "add_ranks",
    "canonical_order",
    "cross_join",
    "evar",
    "fill_species",
    "fill_zeros",
    "pool_replicates",
    "resolve_absent",
    "score_pair",
    "score_pairs",
    "second",
    "species_turnover",
    "split_apply_combine",
]
