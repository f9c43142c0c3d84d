"""Pairwise differences between replicates or treatments.

Three comparison shapes are supported:

* treatments within a block (``block`` and ``treatment`` columns given),
* treatments with replicates pooled into one averaged sample (``pool=True``),
* every pair of replicates (neither of the above; a ``treatment`` column, if
  given, is carried along for both sides).

Each shape runs the same stages: optional pooling, species alignment within
the comparison group, ranking within each sample, a pairwise cross-join on
species and a per-pair reduction.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging
from typing import Any, Optional

import pandas as pd

from ecodiff.engine.align import fill_species
from ecodiff.engine.crossjoin import cross_join, resolve_absent, second
from ecodiff.engine.grouping import group_keys, split_apply_combine
from ecodiff.engine.pooling import pool_replicates
from ecodiff.engine.ranking import DEFAULT_TIE_METHOD, add_ranks
from ecodiff.engine.scoring import (
    METRIC_COLUMNS,
    MissingValueCollector,
    abundance_differences,
    score_pairs,
)
from ecodiff.registry import register
from ecodiff.tasks.base import Analysis
from ecodiff.tasks.common import AnalysisSettings, ColumnSpec
from ecodiff.validators import check_difference_args, reference_column

LOGGER_NAME = "ecodiff.difference"
COMPOSITION_METRICS = ("richness_diff", "species_diff")


@dataclass(frozen=True)
class ComparisonPlan:
    """Grouping and comparison keys for one call."""

    split_cols: tuple[str, ...]
    cross_col: str
    pool: bool
    reference: Any = None
    reference_col: Optional[str] = None


def plan_comparisons(
    columns: ColumnSpec,
    *,
    pool: bool = False,
    reference: Any = None,
) -> ComparisonPlan:
    if columns.block is not None or pool:
        cross_col = columns.treatment
    else:
        cross_col = columns.replicate
    return ComparisonPlan(
        split_cols=tuple(group_keys([columns.block, columns.time])),
        cross_col=cross_col,
        pool=pool,
        reference=reference,
        reference_col=reference_column(columns) if reference is not None else None,
    )


def prepare_samples(
    frame: pd.DataFrame,
    columns: ColumnSpec,
    plan: ComparisonPlan,
    *,
    ties: Optional[str] = DEFAULT_TIE_METHOD,
) -> pd.DataFrame:
    """Pool (if planned), align species per group and rank each sample.

    ``ties=None`` skips ranking.
    """
    if plan.pool:
        frame = pool_replicates(
            frame,
            species_col=columns.species,
            abundance_col=columns.abundance,
            replicate_col=columns.replicate,
            treatment_col=columns.treatment,
            time_col=columns.time,
        )
        sample_cols = [columns.time, columns.treatment]
    else:
        sample_cols = [columns.block, columns.time, columns.treatment, columns.replicate]
    aligned = split_apply_combine(
        frame,
        plan.split_cols,
        fill_species,
        columns.species,
        columns.abundance,
    )
    if ties is None:
        return aligned
    return split_apply_combine(
        aligned,
        sample_cols,
        add_ranks,
        columns.abundance,
        ties=ties,
    )


def join_pairs(
    samples: pd.DataFrame,
    columns: ColumnSpec,
    plan: ComparisonPlan,
) -> pd.DataFrame:
    joined = split_apply_combine(
        samples,
        plan.split_cols,
        cross_join,
        species_col=columns.species,
        cross_col=plan.cross_col,
        split_cols=plan.split_cols,
        reference=plan.reference,
        reference_col=plan.reference_col,
    )
    return resolve_absent(joined, columns.abundance)


def _identity_columns(frame: pd.DataFrame, columns: ColumnSpec) -> list[str]:
    identity: list[str] = []
    for name in (columns.replicate, columns.treatment):
        if name is not None and name in frame.columns:
            identity.extend([name, second(name)])
    return identity


def pair_keys(frame: pd.DataFrame, columns: ColumnSpec, plan: ComparisonPlan) -> list[str]:
    return [*plan.split_cols, *_identity_columns(frame, columns)]


def order_columns(
    frame: pd.DataFrame,
    columns: ColumnSpec,
    tail: Sequence[str],
) -> pd.DataFrame:
    """Fixed output order: time, block, identities, then ``tail``."""
    order = group_keys(
        [columns.time, columns.block, *_identity_columns(frame, columns), *tail]
    )
    return frame[[name for name in order if name in frame.columns]].reset_index(drop=True)


def pairwise_differences(
    df: pd.DataFrame,
    columns: ColumnSpec,
    *,
    pool: bool = False,
    reference: Any = None,
    ties: str = DEFAULT_TIE_METHOD,
    collector: Optional[MissingValueCollector] = None,
) -> pd.DataFrame:
    """Score every comparison with the four rank/composition metrics.

    Rows with an undefined metric are recorded in ``collector``; reporting
    them is left to the caller.
    """
    frame = check_difference_args(df, columns, pool=pool, reference=reference, ties=ties)
    plan = plan_comparisons(columns, pool=pool, reference=reference)
    samples = prepare_samples(frame, columns, plan, ties=ties)
    joined = join_pairs(samples, columns, plan)
    scored = score_pairs(
        joined,
        pair_keys(joined, columns, plan),
        columns.abundance,
        collector=collector,
    )
    return order_columns(scored, columns, METRIC_COLUMNS)


def rac_difference(
    df: pd.DataFrame,
    *,
    species_col: str,
    abundance_col: str,
    replicate_col: str,
    time_col: Optional[str] = None,
    treatment_col: Optional[str] = None,
    block_col: Optional[str] = None,
    pool: bool = False,
    reference_treatment: Any = None,
    ties: str = DEFAULT_TIE_METHOD,
) -> pd.DataFrame:
    """Rank abundance curve differences between pairs of samples.

    Returns one row per comparison with ``richness_diff`` (difference in
    richness over the number of species in either sample), ``evenness_diff``
    (difference in Evar), ``rank_diff`` (mean absolute rank difference over
    the number of species) and ``species_diff`` (species replacement).
    Positive richness and evenness differences mean the second sample (the
    ``2``-suffixed columns) is richer or more even. A single warning is logged
    when any ``evenness_diff`` is undefined because a sample holds one
    species.
    """
    columns = ColumnSpec(
        species=species_col,
        abundance=abundance_col,
        replicate=replicate_col,
        time=time_col,
        treatment=treatment_col,
        block=block_col,
    )
    collector = MissingValueCollector()
    output = pairwise_differences(
        df,
        columns,
        pool=pool,
        reference=reference_treatment,
        ties=ties,
        collector=collector,
    )
    collector.flush(logging.getLogger(LOGGER_NAME))
    return output


def composition_difference(
    df: pd.DataFrame,
    *,
    species_col: str,
    abundance_col: str,
    replicate_col: str,
    time_col: Optional[str] = None,
    treatment_col: Optional[str] = None,
    block_col: Optional[str] = None,
    pool: bool = False,
    reference_treatment: Any = None,
) -> pd.DataFrame:
    """Richness and species replacement differences between pairs of samples."""
    columns = ColumnSpec(
        species=species_col,
        abundance=abundance_col,
        replicate=replicate_col,
        time=time_col,
        treatment=treatment_col,
        block=block_col,
    )
    output = pairwise_differences(
        df,
        columns,
        pool=pool,
        reference=reference_treatment,
    )
    return order_columns(output, columns, COMPOSITION_METRICS)


def abundance_difference(
    df: pd.DataFrame,
    *,
    species_col: str,
    abundance_col: str,
    replicate_col: str,
    time_col: Optional[str] = None,
    treatment_col: Optional[str] = None,
    block_col: Optional[str] = None,
    pool: bool = False,
    reference_treatment: Any = None,
) -> pd.DataFrame:
    """Per-species abundance differences between pairs of samples.

    ``difference`` is the abundance in the second sample minus the abundance
    in the first. Species absent from both samples of a pair are omitted.
    """
    columns = ColumnSpec(
        species=species_col,
        abundance=abundance_col,
        replicate=replicate_col,
        time=time_col,
        treatment=treatment_col,
        block=block_col,
    )
    frame = check_difference_args(df, columns, pool=pool, reference=reference_treatment)
    plan = plan_comparisons(columns, pool=pool, reference=reference_treatment)
    samples = prepare_samples(frame, columns, plan, ties=None)
    joined = abundance_differences(join_pairs(samples, columns, plan), columns.abundance)
    keys = [*pair_keys(joined, columns, plan), columns.species]
    joined = joined.sort_values(keys, kind="mergesort")
    return order_columns(joined, columns, [columns.species, "difference"])


def _keyword_columns(columns: ColumnSpec) -> dict[str, Optional[str]]:
    return {
        "species_col": columns.species,
        "abundance_col": columns.abundance,
        "replicate_col": columns.replicate,
        "time_col": columns.time,
        "treatment_col": columns.treatment,
        "block_col": columns.block,
    }


class RacDifferenceAnalysis(Analysis):
    name = "rac_difference"

    def run(self, frame: pd.DataFrame, settings: AnalysisSettings) -> pd.DataFrame:
        return rac_difference(
            frame,
            **_keyword_columns(settings.columns),
            pool=settings.pool,
            reference_treatment=settings.reference,
            ties=settings.ties,
        )


class CompositionDifferenceAnalysis(Analysis):
    name = "composition_difference"

    def run(self, frame: pd.DataFrame, settings: AnalysisSettings) -> pd.DataFrame:
        return composition_difference(
            frame,
            **_keyword_columns(settings.columns),
            pool=settings.pool,
            reference_treatment=settings.reference,
        )


class AbundanceDifferenceAnalysis(Analysis):
    name = "abundance_difference"

    def run(self, frame: pd.DataFrame, settings: AnalysisSettings) -> pd.DataFrame:
        return abundance_difference(
            frame,
            **_keyword_columns(settings.columns),
            pool=settings.pool,
            reference_treatment=settings.reference,
        )


register("analysis", "rac_difference", RacDifferenceAnalysis())
register("analysis", "composition_difference", CompositionDifferenceAnalysis())
register("analysis", "abundance_difference", AbundanceDifferenceAnalysis())

__all__ = [
    "AbundanceDifferenceAnalysis",
    "ComparisonPlan",
    "CompositionDifferenceAnalysis",
    "RacDifferenceAnalysis",
    "abundance_difference",
    "composition_difference",
    "pairwise_differences",
    "plan_comparisons",
    "prepare_samples",
    "rac_difference",
]
