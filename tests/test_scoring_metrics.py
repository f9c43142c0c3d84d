import logging
import math

import numpy as np
import pandas as pd
import pytest

from ecodiff.engine.scoring import (
    MissingValueCollector,
    evar,
    score_pair,
    species_turnover,
)


def _rows(first: list[float], second: list[float], ranks, ranks2) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "species": [f"sp{idx}" for idx in range(len(first))],
            "cover": first,
            "cover2": second,
            "rank": ranks,
            "rank2": ranks2,
        }
    )


def test_evar_matches_hand_computation() -> None:
    theta = np.var(np.log([10.0, 5.0]))
    expected = 1.0 - 2.0 / math.pi * math.atan(theta)

    assert evar([10.0, 5.0, 0.0]) == pytest.approx(expected)


def test_evar_of_perfectly_even_sample_is_one() -> None:
    assert evar([3.0, 3.0, 3.0]) == pytest.approx(1.0)


def test_evar_undefined_below_two_species() -> None:
    assert math.isnan(evar([4.0, 0.0]))
    assert math.isnan(evar([]))


def test_species_turnover_is_replacement_not_jaccard() -> None:
    first = np.array([True, True, True, False])
    second = np.array([True, False, False, True])

    # a=1, b=2, c=1 -> 2*min(2, 1)/4, whereas Jaccard would be 3/4
    assert species_turnover(first, second) == pytest.approx(0.5)


def test_species_turnover_bounds() -> None:
    same = np.array([True, True])
    assert species_turnover(same, same) == 0.0
    assert species_turnover(np.array([True, True, False, False]), np.array([False, False, True, True])) == 1.0


def test_score_pair_reference_scenario() -> None:
    rows = _rows([10.0, 5.0, 0.0], [8.0, 5.0, 2.0], [1.0, 2.0, 3.0], [1.0, 2.0, 3.0])

    scores = score_pair(rows, "cover")

    assert scores["richness_diff"] == pytest.approx(1 / 3)
    assert scores["species_diff"] == 0.0
    assert scores["rank_diff"] == 0.0
    assert scores["evenness_diff"] == pytest.approx(evar([8.0, 5.0, 2.0]) - evar([10.0, 5.0]))


def test_score_pair_rank_diff_is_mean_over_union() -> None:
    rows = _rows([4.0, 1.0, 0.0], [0.0, 3.0, 2.0], [1.0, 2.0, 3.0], [3.0, 1.0, 2.0])

    scores = score_pair(rows, "cover")

    # |1-3| + |2-1| + |3-2| = 4 over n=3, then divided by n again
    assert scores["rank_diff"] == pytest.approx(4 / 3 / 3)
    assert scores["richness_diff"] == 0.0


def test_collector_records_undefined_evenness_and_flushes_once(caplog) -> None:
    collector = MissingValueCollector()
    rows = _rows([3.0, 0.0], [1.0, 1.0], [1.0, 2.0], [1.0, 1.0])
    logger = logging.getLogger("ecodiff.test.collector")

    for _ in range(3):
        scores = score_pair(rows, "cover", collector=collector, pair={"plot": 1})
        assert math.isnan(scores["evenness_diff"])

    assert len(collector) == 3
    with caplog.at_level(logging.WARNING, logger=logger.name):
        assert collector.flush(logger) is True
        assert collector.flush(logger) is False

    warnings = [record for record in caplog.records if record.levelno == logging.WARNING]
    assert len(warnings) == 1
    assert "evenness_diff" in warnings[0].getMessage()
