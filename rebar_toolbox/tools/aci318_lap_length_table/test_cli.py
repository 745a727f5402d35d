from __future__ import annotations

import json

import pytest
from loguru import logger

from rebar_toolbox.core.paths import settings_path

from .cli import build_parser, collect_inputs, main


@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("LOCALAPPDATA", str(tmp_path))
    yield tmp_path
    # configure_logging replaced the default handlers
    logger.remove()


def test_only_given_options_become_inputs() -> None:
    args = build_parser().parse_args(["--fc", "5000", "--epoxy", "--hooked-cover"])
    assert collect_inputs(args) == {"fc": 5000.0, "epoxy_coated_rebar": True, "hooked_cover_satisfied": True}


def test_command_line_wins_over_settings() -> None:
    args = build_parser().parse_args(["--fc", "5000"])
    settings = {"aci318_lap_length_table": {"fc": 3000, "roundBy": 2}, "other_tool": {"x": 1}}
    assert collect_inputs(args, settings) == {"fc": 5000.0, "roundBy": 2}


def test_malformed_settings_entry_is_ignored() -> None:
    args = build_parser().parse_args([])
    assert collect_inputs(args, {"aci318_lap_length_table": [1, 2]}) == {}


def test_prints_table(data_dir, capsys) -> None:
    assert main(["--preset", "softMetric", "--round-by", "5"]) == 0
    out = capsys.readouterr().out
    assert "No.10" in out
    assert "NP" in out


def test_uses_stored_settings(data_dir, capsys) -> None:
    settings_path().write_text(json.dumps({"aci318_lap_length_table": {"rebarList": [["X1", 0.5]]}}), encoding="utf-8")
    assert main([]) == 0
    out = capsys.readouterr().out
    assert "X1" in out
    assert "#3" not in out


def test_bad_configuration_exit_code(data_dir) -> None:
    assert main(["--fc", "-4000"]) == 2
    assert main(["--round-by", "0"]) == 2


def test_log_output_goes_to_stderr(data_dir, capsys) -> None:
    assert main(["--code-edition", "318-11"]) == 0
    captured = capsys.readouterr()
    assert "ACI 318-14 provisions are applied" in captured.err
    assert "provisions are applied" not in captured.out
    assert "#3" in captured.out

    assert main(["--fc", "-4000"]) == 2
    captured = capsys.readouterr()
    assert "Invalid configuration" in captured.err
    assert captured.out == ""


def test_save_stores_inputs_for_later_runs(data_dir, capsys) -> None:
    settings_path().write_text(json.dumps({"other_tool": {"x": 1}}), encoding="utf-8")
    assert main(["--preset", "softMetric", "--round-by", "5", "--save"]) == 0
    stored = json.loads(settings_path().read_text(encoding="utf-8"))
    assert stored["aci318_lap_length_table"] == {"preset": "softMetric", "round_by": 5.0}
    assert stored["other_tool"] == {"x": 1}

    capsys.readouterr()
    assert main([]) == 0
    assert "No.10" in capsys.readouterr().out


def test_invalid_inputs_are_not_saved(data_dir) -> None:
    assert main(["--fc", "-4000", "--save"]) == 2
    assert not settings_path().exists()


def test_export(data_dir, capsys) -> None:
    assert main(["--export"]) == 0
    out = capsys.readouterr().out
    assert "Calc package:" in out
    runs = list((data_dir / "RebarToolbox" / "aci318_lap_length_table" / "runs").iterdir())
    assert len(runs) == 1
    assert (runs[0] / "report.html").exists()
