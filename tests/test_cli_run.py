import json
from pathlib import Path

import pandas as pd
import pytest

from ecodiff.cli import main


def _config_dir() -> str:
    return str(Path(__file__).resolve().parents[1] / "configs")


def _write_plots(path: Path) -> Path:
    pd.DataFrame(
        {
            "plot": ["A", "A", "B", "B", "B"],
            "species": ["sp1", "sp2", "sp1", "sp2", "sp3"],
            "cover": [10.0, 5.0, 8.0, 5.0, 2.0],
        }
    ).to_csv(path, index=False)
    return path


def test_cli_run_writes_output_and_meta(tmp_path: Path, capsys) -> None:
    source = _write_plots(tmp_path / "plots.csv")
    output = tmp_path / "out" / "differences.csv"

    main(
        [
            "run",
            "--config-path",
            _config_dir(),
            f"input.path='{source}'",
            f"output.path='{output}'",
            "columns.abundance=cover",
            "columns.replicate=plot",
        ]
    )

    assert f"output={output}" in capsys.readouterr().out
    frame = pd.read_csv(output)
    assert list(frame.columns) == [
        "plot",
        "plot2",
        "richness_diff",
        "evenness_diff",
        "rank_diff",
        "species_diff",
    ]
    assert len(frame) == 1
    meta = json.loads(Path(f"{output}.meta.json").read_text(encoding="utf-8"))
    assert meta["analysis"] == "rac_difference"
    assert meta["rows"] == {"input": 5, "output": 1}
    assert meta["config"]["columns"]["replicate"] == "plot"
    assert meta["table"]["distinct"] == {"species": 3, "replicate": 2}
    assert meta["table"]["abundance_total"] == 30.0
    assert meta["table"]["zero_records"] == 0
    assert "version" in meta["code"]


def test_cli_run_abundance_difference_to_stdout(tmp_path: Path, capsys) -> None:
    source = _write_plots(tmp_path / "plots.csv")

    main(
        [
            "run",
            "--config-path",
            _config_dir(),
            "analysis=abundance_difference",
            f"input.path='{source}'",
            "output.path=''",
            "columns.abundance=cover",
            "columns.replicate=plot",
        ]
    )

    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "plot,plot2,species,difference"
    assert lines[1:] == ["A,B,sp1,-2.0", "A,B,sp2,0.0", "A,B,sp3,2.0"]


def test_cli_list_prints_analyses(capsys) -> None:
    main(["list"])
    out = capsys.readouterr().out.split()
    assert "rac_difference" in out
    assert "abundance_change" in out


def test_cli_run_error_exits_with_status_one(tmp_path: Path, capsys) -> None:
    source = _write_plots(tmp_path / "plots.csv")

    with pytest.raises(SystemExit) as exc:
        main(
            [
                "run",
                "--config-path",
                _config_dir(),
                f"input.path='{source}'",
                "output.path=''",
                "columns.abundance=cover",
                "columns.replicate=plot",
                "columns.block=plot",
            ]
        )

    assert exc.value.code == 1


def test_cli_cfg_prints_composed_config(capsys) -> None:
    main(["cfg", "--config-path", _config_dir(), "analysis=composition_difference"])
    out = capsys.readouterr().out
    assert "name: composition_difference" in out


def test_cli_run_unknown_log_level_exits_with_status_one(tmp_path: Path, caplog) -> None:
    source = _write_plots(tmp_path / "plots.csv")

    with pytest.raises(SystemExit) as exc:
        main(
            [
                "run",
                "--config-path",
                _config_dir(),
                f"input.path='{source}'",
                "output.path=''",
                "columns.abundance=cover",
                "columns.replicate=plot",
                "log.level=verbose",
            ]
        )

    assert exc.value.code == 1
    assert any("Unknown log level" in record.getMessage() for record in caplog.records)
