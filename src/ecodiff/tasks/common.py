"""Shared column bindings and settings for analyses."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Optional

from ecodiff.engine.ranking import DEFAULT_TIE_METHOD
from ecodiff.errors import ConfigError
from ecodiff.hydra_utils import resolve_config

_COLUMN_ROLES = ("species", "abundance", "replicate", "time", "treatment", "block")


def resolve_cfg(cfg: Any) -> dict[str, Any]:
    try:
        resolved = resolve_config(cfg)
    except (ConfigError, TypeError, ValueError):
        if isinstance(cfg, Mapping):
            return dict(cfg)
        raise
    return resolved


@dataclass(frozen=True)
class ColumnSpec:
    """Caller column names for each role; optional roles may be ``None``."""

    species: str
    abundance: str
    replicate: Optional[str] = None
    time: Optional[str] = None
    treatment: Optional[str] = None
    block: Optional[str] = None

    def bound(self) -> dict[str, str]:
        return {
            role: getattr(self, role)
            for role in _COLUMN_ROLES
            if getattr(self, role) is not None
        }

    def names(self) -> list[str]:
        return list(self.bound().values())

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "ColumnSpec":
        unknown = sorted(set(payload) - set(_COLUMN_ROLES))
        if unknown:
            raise ConfigError(f"Unknown column roles: {unknown}.")
        values: dict[str, Optional[str]] = {}
        for role in _COLUMN_ROLES:
            value = payload.get(role)
            if value is None or (isinstance(value, str) and not value.strip()):
                values[role] = None
                continue
            if not isinstance(value, str):
                raise ConfigError(f"columns.{role} must be a column name string.")
            values[role] = value.strip()
        for role in ("species", "abundance"):
            if values[role] is None:
                raise ConfigError(f"columns.{role} is required.")
        return cls(**values)


@dataclass(frozen=True)
class AnalysisSettings:
    """Everything an analysis needs besides the input table."""

    columns: ColumnSpec
    pool: bool = False
    reference: Any = None
    ties: str = DEFAULT_TIE_METHOD

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> "AnalysisSettings":
        columns_cfg = cfg.get("columns")
        if not isinstance(columns_cfg, Mapping):
            raise ConfigError("columns must be a mapping of role -> column name.")
        analysis_cfg = cfg.get("analysis") or {}
        if not isinstance(analysis_cfg, Mapping):
            raise ConfigError("analysis must be a mapping.")
        pool = analysis_cfg.get("pool", False)
        if not isinstance(pool, bool):
            raise ConfigError(f"analysis.pool must be a boolean, got {pool!r}.")
        ties = analysis_cfg.get("ties") or DEFAULT_TIE_METHOD
        return cls(
            columns=ColumnSpec.from_mapping(columns_cfg),
            pool=pool,
            reference=analysis_cfg.get("reference"),
            ties=ties,
        )


__all__ = ["AnalysisSettings", "ColumnSpec", "resolve_cfg"]
