"""Segment fitting, knot lookup and calibration payload helpers."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

import numpy as np

from pwlcal.calibration.schema import (
    CALIBRATION_SCHEMA_VERSION,
    validate_calibration_payload,
)
from pwlcal.core.types import Segment
from pwlcal.core.versioning import package_versions
from pwlcal.utils.hash import file_sha256


def fit_segments(raw: np.ndarray, calibrated: np.ndarray) -> tuple[np.ndarray, np.ndarray]:
    """Fit one line through every pair of adjacent knots.

    ``raw`` must be strictly increasing and both arrays must have equal length
    of at least two; callers validate the table first.
    """
    x = np.asarray(raw, dtype=float)
    y = np.asarray(calibrated, dtype=float)
    if x.size != y.size:
        raise ValueError("raw and calibrated must have equal length")
    if x.size < 2:
        raise ValueError("fit_segments requires at least 2 points")

    # Overflow is reported by validate_coefficients, not warned about here.
    with np.errstate(over="ignore", divide="ignore", invalid="ignore"):
        slopes = np.diff(y) / np.diff(x)
        intercepts = y[:-1] - slopes * x[:-1]
    return slopes, intercepts


def locate_segment(knots: np.ndarray, value: float) -> int | None:
    """Return the first segment ``i`` with ``knots[i] <= value <= knots[i + 1]``.

    An interior knot belongs to the segment that ends there. Returns None when
    no segment contains ``value`` (out of range or NaN).
    """
    n_segments = knots.size - 1
    if n_segments < 1:
        return None
    i = int(np.searchsorted(knots, value, side="left")) - 1
    i = min(max(i, 0), n_segments - 1)
    if knots[i] <= value <= knots[i + 1]:
        return i
    return None


def locate_segments(knots: np.ndarray, values: np.ndarray) -> np.ndarray:
    """Vectorised :func:`locate_segment`, clipped to the boundary segments."""

    idx = np.searchsorted(knots, values, side="left") - 1
    return np.clip(idx, 0, knots.size - 2)


def build_segments(raw: np.ndarray, slopes: np.ndarray, intercepts: np.ndarray) -> tuple[Segment, ...]:
    return tuple(
        Segment(
            index=i,
            raw_lo=float(raw[i]),
            raw_hi=float(raw[i + 1]),
            slope=float(slopes[i]),
            intercept=float(intercepts[i]),
        )
        for i in range(slopes.size)
    )


def build_calibration_payload(
    segments: Sequence[Segment],
    limit_to_range: bool,
    table_path: str | Path | None = None,
) -> dict[str, Any]:
    source: dict[str, Any] = {"num_points": len(segments) + 1 if segments else 0}
    if table_path is not None:
        path = Path(table_path)
        source["table_path"] = str(path.resolve())
        source["table_sha256"] = file_sha256(path)
    payload = {
        "schema_version": CALIBRATION_SCHEMA_VERSION,
        "generated_at_utc": datetime.now(tz=timezone.utc).isoformat(),
        "source": source,
        "limit_to_range": bool(limit_to_range),
        "segments": [
            {
                "index": seg.index,
                "raw_lo": seg.raw_lo,
                "raw_hi": seg.raw_hi,
                "slope": seg.slope,
                "intercept": seg.intercept,
            }
            for seg in segments
        ],
        "versions": package_versions(),
    }
    return validate_calibration_payload(payload)


def write_calibration(payload: dict[str, Any], out_path: str | Path) -> Path:
    out = Path(out_path)
    out.parent.mkdir(parents=True, exist_ok=True)
    validated = validate_calibration_payload(payload)
    out.write_text(json.dumps(validated, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    return out
