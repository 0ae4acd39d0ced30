"""Schema validator for fitted calibration payloads."""

from __future__ import annotations

import math
from typing import Any, Mapping

CALIBRATION_SCHEMA_VERSION = 1

SEGMENT_FIELDS = ("index", "raw_lo", "raw_hi", "slope", "intercept")


class CalibrationSchemaError(ValueError):
    """Raised when a calibration payload violates schema."""


def validate_calibration_payload(payload: Mapping[str, Any]) -> dict[str, Any]:
    if not isinstance(payload, Mapping):
        raise CalibrationSchemaError("Calibration payload must be a mapping")

    schema_version = _as_int(payload.get("schema_version"), "schema_version")
    if schema_version != CALIBRATION_SCHEMA_VERSION:
        raise CalibrationSchemaError(
            f"Unsupported calibration schema_version={schema_version}; "
            f"expected {CALIBRATION_SCHEMA_VERSION}"
        )

    generated_at = payload.get("generated_at_utc")
    if not isinstance(generated_at, str) or not generated_at.strip():
        raise CalibrationSchemaError("Calibration payload missing non-empty generated_at_utc")

    source = payload.get("source")
    if not isinstance(source, Mapping):
        raise CalibrationSchemaError("Calibration payload missing mapping field: source")
    num_points = _as_int(source.get("num_points"), "source.num_points")

    limit_to_range = payload.get("limit_to_range")
    if not isinstance(limit_to_range, bool):
        raise CalibrationSchemaError("limit_to_range must be a boolean")

    segments = payload.get("segments")
    if not isinstance(segments, list) or not segments:
        raise CalibrationSchemaError("segments must be a non-empty list")
    if len(segments) != num_points - 1:
        raise CalibrationSchemaError(
            f"Expected {num_points - 1} segments for {num_points} points, got {len(segments)}"
        )

    normalized = [_validate_segment(i, seg) for i, seg in enumerate(segments)]
    for left, right in zip(normalized, normalized[1:]):
        if left["raw_hi"] != right["raw_lo"]:
            raise CalibrationSchemaError(
                f"segments[{left['index']}] and segments[{right['index']}] are not contiguous"
            )

    versions = payload.get("versions", {})
    if not isinstance(versions, Mapping):
        raise CalibrationSchemaError("versions must be a mapping")

    return {
        "schema_version": schema_version,
        "generated_at_utc": generated_at,
        "source": dict(source),
        "limit_to_range": limit_to_range,
        "segments": normalized,
        "versions": dict(versions),
    }


def _validate_segment(i: int, seg: Any) -> dict[str, Any]:
    if not isinstance(seg, Mapping):
        raise CalibrationSchemaError(f"segments[{i}] must be a mapping")
    missing = [name for name in SEGMENT_FIELDS if name not in seg]
    if missing:
        raise CalibrationSchemaError(f"segments[{i}] missing fields: {', '.join(missing)}")

    index = _as_int(seg["index"], f"segments[{i}].index")
    if index != i:
        raise CalibrationSchemaError(f"segments[{i}].index must equal {i}, got {index}")
    out: dict[str, Any] = {"index": index}
    for name in SEGMENT_FIELDS[1:]:
        value = _as_float(seg[name], f"segments[{i}].{name}")
        if not math.isfinite(value):
            raise CalibrationSchemaError(f"segments[{i}].{name} must be finite")
        out[name] = value
    if not out["raw_hi"] > out["raw_lo"]:
        raise CalibrationSchemaError(f"segments[{i}] must have raw_hi > raw_lo")
    return out


def _as_float(value: Any, field: str) -> float:
    if isinstance(value, bool):
        raise CalibrationSchemaError(f"{field} must be numeric")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise CalibrationSchemaError(f"{field} must be numeric") from exc


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise CalibrationSchemaError(f"{field} must be integer")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise CalibrationSchemaError(f"{field} must be integer") from exc
