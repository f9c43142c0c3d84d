"""Analysis resolution and execution helpers."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
import logging
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from ecodiff.errors import AnalysisError, ConfigError, EcodiffError
from ecodiff.io_utils import read_table, write_json_atomic, write_table
from ecodiff.metadata import code_metadata, provenance_metadata, table_metadata
import ecodiff.registry as registry_module
from ecodiff.registry import Registry
from ecodiff.tasks.common import AnalysisSettings, resolve_cfg

META_SUFFIX = ".meta.json"


@dataclass(frozen=True)
class AnalysisResult:
    name: str
    frame: pd.DataFrame
    output_path: Optional[Path] = None
    meta_path: Optional[Path] = None


def _load_builtin_analyses() -> None:
    # Import for side effects: register built-in analyses.
    import ecodiff.tasks.change  # noqa: F401
    import ecodiff.tasks.difference  # noqa: F401


def list_analyses(*, registry: Optional[Registry] = None) -> list[str]:
    if registry is None:
        _load_builtin_analyses()
        return registry_module.list("analysis")
    return registry.list("analysis")


def resolve_analysis(name: str, *, registry: Optional[Registry] = None) -> Any:
    if not isinstance(name, str) or not name.strip():
        raise ConfigError("analysis.name must be a non-empty string.")
    if registry is None:
        _load_builtin_analyses()
    return registry_module.resolve_analysis(name.strip(), registry=registry)


def run_analysis(
    name: str,
    frame: pd.DataFrame,
    settings: AnalysisSettings,
    *,
    registry: Optional[Registry] = None,
    logger: Optional[logging.Logger] = None,
) -> pd.DataFrame:
    run_logger = logger or logging.getLogger("ecodiff.runner")
    analysis = resolve_analysis(name, registry=registry)
    try:
        result = analysis(frame, settings)
    except EcodiffError:
        raise
    except Exception as exc:
        raise AnalysisError(
            f"Analysis {name!r} failed: {exc}",
            context={"analysis": name},
        ) from exc
    if not isinstance(result, pd.DataFrame):
        raise AnalysisError(
            f"Analysis {name!r} must return a pandas DataFrame.",
            context={"analysis": name},
        )
    run_logger.info(
        "Analysis %s produced %d row(s) from %d input row(s).",
        name,
        len(result),
        len(frame),
    )
    return result


def _extract_path(cfg: Mapping[str, Any], section: str) -> Optional[str]:
    section_cfg = cfg.get(section)
    if section_cfg is None:
        return None
    if not isinstance(section_cfg, Mapping):
        raise ConfigError(f"{section} must be a mapping if provided.")
    path = section_cfg.get("path")
    if path is None or (isinstance(path, str) and not path.strip()):
        return None
    if not isinstance(path, str):
        raise ConfigError(f"{section}.path must be a string.")
    return path


def _extract_analysis_name(cfg: Mapping[str, Any]) -> str:
    analysis_cfg = cfg.get("analysis")
    name: Any = None
    if isinstance(analysis_cfg, Mapping):
        name = analysis_cfg.get("name")
    elif isinstance(analysis_cfg, str):
        name = analysis_cfg
    if not isinstance(name, str) or not name.strip():
        raise ConfigError("analysis.name must be a non-empty string.")
    return name.strip()


def meta_path_for(output_path: Path) -> Path:
    return output_path.with_name(output_path.name + META_SUFFIX)


def run_analysis_from_config(
    cfg: Any,
    *,
    registry: Optional[Registry] = None,
    logger: Optional[logging.Logger] = None,
) -> AnalysisResult:
    """Read ``input.path``, run ``analysis.name`` and write ``output.path``.

    Next to the output table a ``<output>.meta.json`` file records the
    resolved config, the row counts and code/provenance metadata.
    """
    resolved = resolve_cfg(cfg)
    name = _extract_analysis_name(resolved)
    input_path = _extract_path(resolved, "input")
    if input_path is None:
        raise ConfigError("input.path is required to run an analysis.")
    input_cfg = resolved.get("input") or {}
    frame = read_table(Path(input_path), sep=input_cfg.get("sep"))
    settings = AnalysisSettings.from_config(resolved)
    output = run_analysis(name, frame, settings, registry=registry, logger=logger)

    output_path = _extract_path(resolved, "output")
    if output_path is None:
        return AnalysisResult(name=name, frame=output)
    written = write_table(output, Path(output_path))
    meta_path = meta_path_for(written)
    write_json_atomic(
        meta_path,
        {
            "analysis": name,
            "config": resolved,
            "rows": {"input": len(frame), "output": len(output)},
            "table": table_metadata(frame, settings.columns),
            "code": code_metadata(),
            "provenance": provenance_metadata(),
        },
    )
    return AnalysisResult(
        name=name,
        frame=output,
        output_path=written,
        meta_path=meta_path,
    )


__all__ = [
    "AnalysisResult",
    "META_SUFFIX",
    "list_analyses",
    "meta_path_for",
    "resolve_analysis",
    "run_analysis",
    "run_analysis_from_config",
]
