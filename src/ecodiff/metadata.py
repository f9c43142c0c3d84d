"""Metadata recorded next to analysis outputs."""

from __future__ import annotations

from pathlib import Path
import platform
import subprocess
from typing import Any

import numpy as np
import pandas as pd

from ecodiff import __version__
from ecodiff.tasks.common import ColumnSpec


def code_metadata() -> dict[str, Any]:
    payload: dict[str, Any] = {"version": __version__}
    git_dir = Path.cwd() / ".git"
    if not git_dir.exists():
        return payload
    try:
        commit = subprocess.check_output(
            ["git", "rev-parse", "HEAD"],
            stderr=subprocess.DEVNULL,
            text=True,
        ).strip()
        payload["git_commit"] = commit
    except (OSError, subprocess.SubprocessError):
        return payload
    return payload


def table_metadata(frame: pd.DataFrame, columns: ColumnSpec) -> dict[str, Any]:
    """Shape of an abundance table: bound roles and distinct values per role.

    The abundance role is summarized by its total and the number of zero
    records instead of a distinct count.
    """
    bound = columns.bound()
    distinct = {
        role: int(frame[name].nunique(dropna=False))
        for role, name in bound.items()
        if role != "abundance" and name in frame.columns
    }
    payload: dict[str, Any] = {
        "rows": len(frame),
        "columns": bound,
        "distinct": distinct,
    }
    abundance = bound["abundance"]
    if abundance in frame.columns and pd.api.types.is_numeric_dtype(frame[abundance]):
        payload["abundance_total"] = float(frame[abundance].sum())
        payload["zero_records"] = int(frame[abundance].eq(0).sum())
    return payload


def provenance_metadata() -> dict[str, Any]:
    return {
        "python": platform.python_version(),
        "pandas": pd.__version__,
        "numpy": np.__version__,
    }


__all__ = ["code_metadata", "provenance_metadata", "table_metadata"]
