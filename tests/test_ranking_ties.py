import math

import pandas as pd
import pytest

from ecodiff.engine.ranking import RANK_COLUMN, add_ranks
from ecodiff.errors import ConfigError


def _sample(values: list[float]) -> pd.DataFrame:
    return pd.DataFrame(
        {"species": [f"sp{idx}" for idx in range(len(values))], "cover": values}
    )


def test_average_ties_share_mean_position() -> None:
    ranked = add_ranks(_sample([5.0, 5.0, 2.0, 0.0]), "cover")

    assert ranked[RANK_COLUMN].tolist() == [1.5, 1.5, 3.0, 4.0]


def test_min_ties_use_competition_ranking() -> None:
    ranked = add_ranks(_sample([5.0, 5.0, 2.0, 0.0]), "cover", ties="min")

    assert ranked[RANK_COLUMN].tolist() == [1.0, 1.0, 3.0, 4.0]


def test_absent_and_zero_species_share_richness_plus_one() -> None:
    ranked = add_ranks(_sample([1.0, math.nan, 0.0, 7.0]), "cover")

    assert ranked[RANK_COLUMN].tolist() == [2.0, 3.0, 3.0, 1.0]


def test_add_ranks_keeps_input_untouched() -> None:
    sample = _sample([3.0, 1.0])

    add_ranks(sample, "cover")

    assert RANK_COLUMN not in sample.columns


def test_unknown_tie_rule_is_rejected() -> None:
    with pytest.raises(ConfigError) as exc:
        add_ranks(_sample([1.0]), "cover", ties="dense")

    assert "ties must be one of" in str(exc.value)
