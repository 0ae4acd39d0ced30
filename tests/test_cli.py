import json
from pathlib import Path

import pandas as pd
import yaml

from pwlcal.cli.main import main


def _battery_table(tmp_path: Path, **extra) -> Path:
    path = tmp_path / "battery.yaml"
    data = {"raw": [3300, 3750, 3800, 3880, 4100, 4200], "calibrated": [0, 10, 40, 65, 90, 100], **extra}
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, sort_keys=False)
    return path


def test_validate_pass_and_fail(tmp_path: Path, capsys):
    assert main(["validate", str(_battery_table(tmp_path))]) == 0
    assert "Validation: PASS" in capsys.readouterr().out

    bad = tmp_path / "bad.yaml"
    bad.write_text("raw: [3, 2, 1]\ncalibrated: [0, 1, 2]\n", encoding="utf-8")
    assert main(["validate", str(bad), "--json"]) == 2
    payload = json.loads(capsys.readouterr().out)
    assert payload["valid"] is False
    assert payload["issues"][0]["code"] == "unsorted_table"


def test_fit_writes_calibration_json(tmp_path: Path, capsys):
    table = _battery_table(tmp_path)
    assert main(["fit", str(table)]) == 0
    out = capsys.readouterr().out
    assert "Fitted 5 segments (extrapolate)" in out

    payload = json.loads((tmp_path / "battery.calibration.json").read_text(encoding="utf-8"))
    assert payload["limit_to_range"] is False
    assert len(payload["segments"]) == 5
    assert payload["segments"][1]["slope"] == 0.6


def test_fit_invalid_table_exits_2(tmp_path: Path, capsys):
    table = tmp_path / "dup.yaml"
    table.write_text("raw: [1, 1]\ncalibrated: [0, 1]\n", encoding="utf-8")
    assert main(["fit", str(table), "--out", str(tmp_path / "x.json")]) == 2
    assert "zero_width_segment" in capsys.readouterr().out
    assert not (tmp_path / "x.json").exists()


def test_apply_prints_clamped_values(tmp_path: Path, capsys):
    table = _battery_table(tmp_path)
    assert main(["apply", str(table), "3000", "3775", "4500", "--clamp"]) == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines == ["3000\t0", "3775\t25", "4500\t100"]


def test_apply_uses_table_settings_unless_overridden(tmp_path: Path, capsys):
    table = _battery_table(tmp_path, calibration={"limit_to_range": True})
    assert main(["apply", str(table), "4500"]) == 0
    assert capsys.readouterr().out.strip() == "4500\t100"

    assert main(["apply", str(table), "4500", "--extrapolate"]) == 0
    assert capsys.readouterr().out.strip() == "4500\t130"


def test_apply_input_file(tmp_path: Path, capsys):
    table = _battery_table(tmp_path)
    values = tmp_path / "readings.csv"
    pd.DataFrame({"mv": [3300, 3775, 4200]}).to_csv(values, index=False)
    assert main(["apply", str(table), "--input", str(values), "--column", "mv", "--clamp"]) == 0
    out = pd.read_csv(tmp_path / "readings.calibrated.csv")
    assert list(out.columns) == ["mv", "calibrated"]
    assert out["calibrated"].round(6).tolist() == [0.0, 25.0, 100.0]


def test_plot_writes_png(tmp_path: Path, capsys):
    table = _battery_table(tmp_path)
    out = tmp_path / "plots" / "battery.png"
    assert main(["plot", str(table), "--out", str(out)]) == 0
    assert out.exists()
    assert out.stat().st_size > 0


def test_no_command_prints_help(capsys):
    assert main([]) == 1
    assert "usage" in capsys.readouterr().out
