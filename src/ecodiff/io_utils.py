"""Shared table and JSON I/O helpers."""

from __future__ import annotations

import json
import os
from pathlib import Path
import tempfile
from typing import Any, Optional

import pandas as pd

from ecodiff.errors import ConfigError

_DELIMITED_SUFFIXES = {".csv": ",", ".tsv": "\t", ".txt": "\t"}
_PARQUET_SUFFIXES = {".parquet", ".pq"}


def _as_path(path: str | Path) -> Path:
    return path if isinstance(path, Path) else Path(path)


def read_table(path: str | Path, *, sep: Optional[str] = None) -> pd.DataFrame:
    path = _as_path(path)
    if not path.exists():
        raise ConfigError(f"table not found: {path}")
    suffix = path.suffix.lower()
    if suffix in _PARQUET_SUFFIXES:
        try:
            return pd.read_parquet(path)
        except (ImportError, ValueError, OSError) as exc:
            raise ConfigError(
                f"Failed to read parquet table from {path}: {exc}"
            ) from exc
    if sep is None:
        sep = _DELIMITED_SUFFIXES.get(suffix)
    if sep is None:
        raise ConfigError(
            f"Cannot infer the separator for {path}; set input.sep explicitly."
        )
    try:
        return pd.read_csv(path, sep=sep)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to parse table {path}: {exc}") from exc


def write_table(frame: pd.DataFrame, path: str | Path) -> Path:
    path = _as_path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    suffix = path.suffix.lower()
    if suffix in _PARQUET_SUFFIXES:
        frame.to_parquet(path, index=False)
        return path
    sep = _DELIMITED_SUFFIXES.get(suffix)
    if sep is None:
        raise ConfigError(
            f"Unsupported output format {suffix or '<none>'!r} for {path}; "
            "use .csv, .tsv or .parquet."
        )
    frame.to_csv(path, sep=sep, index=False)
    return path


def read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def write_json_atomic(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_handle: Optional[int] = None
    tmp_path: Optional[str] = None
    try:
        tmp_handle, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        with os.fdopen(tmp_handle, "w", encoding="utf-8") as handle:
            tmp_handle = None
            json.dump(
                payload,
                handle,
                indent=2,
                sort_keys=True,
                ensure_ascii=True,
                default=str,
            )
            handle.write("\n")
        os.replace(tmp_path, path)
    finally:
        if tmp_handle is not None:
            try:
                os.close(tmp_handle)
            except OSError:
                pass
        if tmp_path is not None and os.path.exists(tmp_path):
            try:
                os.unlink(tmp_path)
            except OSError:
                pass


__all__ = [
    "read_json",
    "read_table",
    "write_json_atomic",
    "write_table",
]
