from pathlib import Path

import pytest

from ecodiff.errors import ConfigError
from ecodiff.hydra_utils import compose_config, format_config, resolve_config
from ecodiff.tasks.common import AnalysisSettings


def _config_dir() -> Path:
    return Path(__file__).resolve().parents[1] / "configs"


def test_hydra_compose_defaults() -> None:
    cfg = compose_config(config_path=_config_dir(), config_name="default")
    resolved = resolve_config(cfg)
    assert resolved["analysis"]["name"] == "rac_difference"
    assert resolved["analysis"]["ties"] == "average"
    assert resolved["analysis"]["pool"] is False
    assert resolved["columns"]["species"] == "species"
    assert resolved["columns"]["block"] is None
    rendered = format_config(cfg)
    assert "columns:" in rendered


def test_hydra_compose_analysis_group_and_overrides() -> None:
    cfg = compose_config(
        config_path=_config_dir(),
        config_name="default.yaml",
        overrides=["analysis=abundance_change", "columns.time=year", "analysis.reference=2001"],
    )
    resolved = resolve_config(cfg)
    assert resolved["analysis"]["name"] == "abundance_change"
    assert resolved["analysis"]["reference"] == 2001
    settings = AnalysisSettings.from_config(resolved)
    assert settings.columns.time == "year"
    assert settings.reference == 2001


def test_pool_flag_is_normalized() -> None:
    cfg = compose_config(
        config_path=_config_dir(),
        overrides=["columns.treatment=trt", "--pool"],
    )
    resolved = resolve_config(cfg)
    assert resolved["analysis"]["pool"] is True
    assert resolved["columns"]["treatment"] == "trt"


def test_missing_config_dir_is_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError) as exc:
        compose_config(config_path=tmp_path / "missing")

    assert "Config directory not found" in str(exc.value)


def test_unknown_key_is_config_error() -> None:
    with pytest.raises(ConfigError):
        compose_config(config_path=_config_dir(), overrides=["columns.colour=red"])
