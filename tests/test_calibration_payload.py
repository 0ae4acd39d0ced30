import json
from pathlib import Path

import numpy as np

from pwlcal.calibration import (
    CalibrationSchemaError,
    Calibrator,
    build_calibration_payload,
    fit_segments,
    validate_calibration_payload,
    write_calibration,
)
from pwlcal.calibration.fit import locate_segment


def test_fit_segments_passes_through_knots():
    raw = np.array([0.0, 2.0, 5.0])
    calibrated = np.array([1.0, 5.0, 2.0])
    m, b = fit_segments(raw, calibrated)
    assert np.allclose(m, [2.0, -1.0])
    assert np.allclose(b, [1.0, 7.0])


def test_fit_segments_length_mismatch_raises():
    try:
        fit_segments(np.array([0.0, 1.0]), np.array([0.0]))
        assert False
    except ValueError as exc:
        assert "equal length" in str(exc)


def test_locate_segment_prefers_earlier_segment_at_shared_knot():
    knots = np.array([0.0, 1.0, 2.0, 3.0])
    assert locate_segment(knots, 0.0) == 0
    assert locate_segment(knots, 1.0) == 0
    assert locate_segment(knots, 1.5) == 1
    assert locate_segment(knots, 2.0) == 1
    assert locate_segment(knots, 3.0) == 2
    assert locate_segment(knots, 3.5) is None
    assert locate_segment(knots, float("nan")) is None


def test_payload_round_trip(tmp_path: Path):
    table = tmp_path / "battery.yaml"
    table.write_text("raw: [3300, 3750, 3800]\ncalibrated: [0, 10, 40]\n", encoding="utf-8")
    cal = Calibrator([3300, 3750, 3800], [0, 10, 40], limit_output_to_calibration_range=True)
    assert cal.begin()

    payload = build_calibration_payload(cal.segments, limit_to_range=True, table_path=table)
    assert payload["source"]["num_points"] == 3
    assert len(payload["source"]["table_sha256"]) == 64
    assert "numpy" in payload["versions"]

    out = write_calibration(payload, tmp_path / "out" / "battery.calibration.json")
    loaded = json.loads(out.read_text(encoding="utf-8"))
    assert validate_calibration_payload(loaded)["segments"] == payload["segments"]


def _payload(segments):
    return {
        "schema_version": 1,
        "generated_at_utc": "2026-01-01T00:00:00+00:00",
        "source": {"num_points": len(segments) + 1},
        "limit_to_range": False,
        "segments": segments,
    }


def test_schema_rejects_non_contiguous_segments():
    segments = [
        {"index": 0, "raw_lo": 0.0, "raw_hi": 1.0, "slope": 1.0, "intercept": 0.0},
        {"index": 1, "raw_lo": 1.5, "raw_hi": 2.0, "slope": 1.0, "intercept": 0.0},
    ]
    try:
        validate_calibration_payload(_payload(segments))
        assert False
    except CalibrationSchemaError as exc:
        assert "contiguous" in str(exc)


def test_schema_rejects_zero_width_and_bad_version():
    segments = [{"index": 0, "raw_lo": 1.0, "raw_hi": 1.0, "slope": 0.0, "intercept": 0.0}]
    try:
        validate_calibration_payload(_payload(segments))
        assert False
    except CalibrationSchemaError as exc:
        assert "raw_hi > raw_lo" in str(exc)

    bad = _payload([{"index": 0, "raw_lo": 0.0, "raw_hi": 1.0, "slope": 1.0, "intercept": 0.0}])
    bad["schema_version"] = 2
    try:
        validate_calibration_payload(bad)
        assert False
    except CalibrationSchemaError as exc:
        assert "schema_version" in str(exc)
