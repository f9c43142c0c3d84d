import math

import pandas as pd

from ecodiff.engine.align import fill_species, fill_zeros


def _group() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "plot": [1, 1, 2],
            "treatment": ["T1", "T1", "T2"],
            "species": ["sp1", "sp2", "sp3"],
            "cover": [3.0, 0.0, 1.0],
        }
    )


def test_fill_species_gives_every_sample_every_species() -> None:
    filled = fill_species(_group(), "species", "cover")

    assert len(filled) == 6
    for _, sample in filled.groupby("plot"):
        assert sorted(sample["species"]) == ["sp1", "sp2", "sp3"]
    assert list(filled.columns) == ["plot", "treatment", "species", "cover"]


def test_fill_species_marks_absent_apart_from_observed_zero() -> None:
    filled = fill_species(_group(), "species", "cover").set_index(["plot", "species"])

    assert filled.loc[(1, "sp2"), "cover"] == 0.0
    assert math.isnan(filled.loc[(1, "sp3"), "cover"])
    assert math.isnan(filled.loc[(2, "sp1"), "cover"])
    assert filled.loc[(2, "sp1"), "treatment"] == "T2"


def test_fill_zeros_uses_zero_for_absent_species() -> None:
    filled = fill_zeros(_group(), "species", "cover").set_index(["plot", "species"])

    assert filled.loc[(1, "sp3"), "cover"] == 0.0
    assert not filled["cover"].isna().any()


def test_fill_species_does_not_modify_input() -> None:
    group = _group()
    before = group.copy()

    fill_species(group, "species", "cover")

    pd.testing.assert_frame_equal(group, before)


def test_fill_species_empty_group_is_empty() -> None:
    empty = _group().iloc[0:0]

    filled = fill_species(empty, "species", "cover")

    assert filled.empty
    assert list(filled.columns) == list(empty.columns)
