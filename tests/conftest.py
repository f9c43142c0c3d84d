from __future__ import annotations

import sys
from pathlib import Path

import pandas as pd
import pytest


def pytest_configure() -> None:
    src_root = Path(__file__).resolve().parents[1] / "src"
    src_path = str(src_root)
    if src_path not in sys.path:
        sys.path.insert(0, src_path)


def records(rows: list[tuple], columns: list[str]) -> pd.DataFrame:
    return pd.DataFrame(rows, columns=columns)


@pytest.fixture
def two_plots() -> pd.DataFrame:
    return records(
        [
            ("A", "sp1", 10.0),
            ("A", "sp2", 5.0),
            ("B", "sp1", 8.0),
            ("B", "sp2", 5.0),
            ("B", "sp3", 2.0),
        ],
        ["plot", "species", "cover"],
    )


@pytest.fixture
def blocked_plots() -> pd.DataFrame:
    rows = []
    layout = [
        (1, 1, "T1", {"sp1": 4.0, "sp2": 2.0}),
        (1, 2, "T2", {"sp1": 1.0, "sp3": 3.0}),
        (1, 3, "T3", {"sp2": 5.0, "sp3": 5.0, "sp4": 1.0}),
        (2, 4, "T1", {"sp1": 2.0, "sp2": 2.0}),
        (2, 5, "T2", {"sp2": 6.0}),
    ]
    for block, plot, treatment, species in layout:
        for name, cover in species.items():
            rows.append((block, plot, treatment, name, cover))
    return records(rows, ["block", "plot", "treatment", "species", "cover"])


@pytest.fixture
def pooled_plots() -> pd.DataFrame:
    rows = []
    layout = [
        (2001, 1, "T1", {"sp1": 10.0}),
        (2001, 2, "T1", {"sp1": 0.0, "sp2": 6.0}),
        (2001, 3, "T2", {"sp1": 3.0, "sp3": 1.0}),
        (2001, 4, "T2", {"sp3": 3.0}),
        (2002, 1, "T1", {"sp1": 8.0, "sp2": 2.0}),
        (2002, 2, "T1", {"sp2": 4.0}),
        (2002, 3, "T2", {"sp3": 2.0}),
        (2002, 4, "T2", {"sp1": 1.0, "sp3": 2.0}),
    ]
    for year, plot, treatment, species in layout:
        for name, cover in species.items():
            rows.append((year, plot, treatment, name, cover))
    return records(rows, ["year", "plot", "treatment", "species", "cover"])
