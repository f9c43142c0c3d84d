"""Structured config schema for Hydra."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Optional

from hydra.core.config_store import ConfigStore


@dataclass
class InputConfig:
    path: str = ""
    # None lets the reader pick the separator from the file suffix.
    sep: Optional[str] = None


@dataclass
class OutputConfig:
    path: str = "differences.csv"


@dataclass
class ColumnsConfig:
    species: str = "species"
    abundance: str = "abundance"
    replicate: Optional[str] = "replicate"
    time: Optional[str] = None
    treatment: Optional[str] = None
    block: Optional[str] = None


@dataclass
class AnalysisConfig:
    name: str = "rac_difference"
    pool: bool = False
    # Treatment (or time, for abundance_change) every other unit is compared to.
    reference: Any = None
    ties: str = "average"


@dataclass
class LogConfig:
    level: str = "INFO"


@dataclass
class AppConfig:
    input: InputConfig = field(default_factory=InputConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    columns: ColumnsConfig = field(default_factory=ColumnsConfig)
    analysis: AnalysisConfig = field(default_factory=AnalysisConfig)
    log: LogConfig = field(default_factory=LogConfig)


def register_configs() -> None:
    cs = ConfigStore.instance()
    try:
        cs.store(group="schema", name="base", node=AppConfig, package="_global_")
    except Exception as exc:
        logging.getLogger(__name__).warning(
            "Hydra config store registration failed: %s", exc
        )


__all__ = [
    "AnalysisConfig",
    "AppConfig",
    "ColumnsConfig",
    "InputConfig",
    "LogConfig",
    "OutputConfig",
    "register_configs",
]
