"""Validation logic for calibration tables."""

from __future__ import annotations

from typing import Any, Sequence

import numpy as np

from pwlcal.core.types import ValidationIssue, ValidationReport

INSUFFICIENT_POINTS = "insufficient_points"
UNSORTED_TABLE = "unsorted_table"
ZERO_WIDTH_SEGMENT = "zero_width_segment"
LENGTH_MISMATCH = "length_mismatch"
NON_NUMERIC = "non_numeric"
NON_FINITE = "non_finite"
NON_FINITE_COEFFICIENTS = "non_finite_coefficients"

MIN_POINTS = 2


def as_numeric_array(values: Any) -> np.ndarray | None:
    """View ``values`` as a 1-D float64 array, or return None if it is not numeric.

    Integer and floating-point inputs are accepted; booleans, strings and
    object arrays are not. A float64 ndarray comes back as a view, not a copy.
    """
    try:
        arr = np.asarray(values)
    except (TypeError, ValueError):
        return None
    if arr.ndim != 1 or arr.dtype.kind not in "iuf":
        return None
    return np.asarray(arr, dtype=np.float64)


def validate_table(
    raw_values: Sequence[float] | np.ndarray,
    calibrated_values: Sequence[float] | np.ndarray,
    num_points: int | None = None,
) -> ValidationReport:
    raw = as_numeric_array(raw_values)
    calibrated = as_numeric_array(calibrated_values)

    issues: list[ValidationIssue] = []
    for name, arr in (("raw", raw), ("calibrated", calibrated)):
        if arr is None:
            issues.append(
                ValidationIssue(
                    level="error",
                    code=NON_NUMERIC,
                    message=f"{name} values must be a one-dimensional sequence of numbers",
                    context={"sequence": name},
                )
            )
    if raw is None or calibrated is None:
        return ValidationReport(valid=False, issues=issues, num_points=0)

    n = resolve_num_points(raw, num_points)
    issues.extend(_validate_lengths(raw, calibrated, num_points, n))
    if issues:
        return ValidationReport(valid=False, issues=issues, num_points=n)

    if n < MIN_POINTS:
        issues.append(
            ValidationIssue(
                level="error",
                code=INSUFFICIENT_POINTS,
                message=f"At least {MIN_POINTS} calibration points are required, got {n}",
                context={"num_points": n},
            )
        )
        return ValidationReport(valid=False, issues=issues, num_points=n)

    issues.extend(_validate_finite(raw[:n], calibrated[:n]))
    if issues:
        return ValidationReport(valid=False, issues=issues, num_points=n)

    issues.extend(_validate_order(raw[:n]))
    has_error = any(issue.level == "error" for issue in issues)
    return ValidationReport(valid=not has_error, issues=issues, num_points=n)


def validate_coefficients(slopes: np.ndarray, intercepts: np.ndarray, num_points: int) -> ValidationReport:
    """Reject fits whose slope or intercept overflowed to inf or NaN."""

    bad = np.flatnonzero(~(np.isfinite(slopes) & np.isfinite(intercepts)))
    if not bad.size:
        return ValidationReport(valid=True, issues=[], num_points=num_points)
    issue = ValidationIssue(
        level="error",
        code=NON_FINITE_COEFFICIENTS,
        message=(
            f"{bad.size} segment(s) have non-finite coefficients, starting at segment {int(bad[0])}; "
            "knot gaps are too narrow or values too large for float64"
        ),
        context={"indices": bad.tolist()},
    )
    return ValidationReport(valid=False, issues=[issue], num_points=num_points)


def resolve_num_points(raw: np.ndarray, num_points: int | None) -> int:
    if num_points is None:
        return int(raw.size)
    return max(int(num_points), 0)


def report_to_dict(report: ValidationReport) -> dict[str, Any]:
    return {
        "valid": report.valid,
        "num_points": report.num_points,
        "issues": [
            {
                "level": issue.level,
                "code": issue.code,
                "message": issue.message,
                "context": dict(issue.context),
            }
            for issue in report.issues
        ],
    }


def _validate_lengths(
    raw: np.ndarray,
    calibrated: np.ndarray,
    requested: int | None,
    n: int,
) -> list[ValidationIssue]:
    if requested is None:
        if raw.size != calibrated.size:
            return [
                ValidationIssue(
                    level="error",
                    code=LENGTH_MISMATCH,
                    message=(
                        f"raw and calibrated values must have equal length, "
                        f"got {raw.size} and {calibrated.size}"
                    ),
                    context={"raw_size": int(raw.size), "calibrated_size": int(calibrated.size)},
                )
            ]
        return []

    short = {name: int(arr.size) for name, arr in (("raw", raw), ("calibrated", calibrated)) if arr.size < n}
    if short:
        return [
            ValidationIssue(
                level="error",
                code=LENGTH_MISMATCH,
                message=f"num_points={n} exceeds the length of: {', '.join(sorted(short))}",
                context={"num_points": n, **{f"{name}_size": size for name, size in short.items()}},
            )
        ]
    return []


def _validate_finite(raw: np.ndarray, calibrated: np.ndarray) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for name, arr in (("raw", raw), ("calibrated", calibrated)):
        bad = np.flatnonzero(~np.isfinite(arr))
        if bad.size:
            issues.append(
                ValidationIssue(
                    level="error",
                    code=NON_FINITE,
                    message=f"{name} values contain {bad.size} non-finite entries",
                    context={"sequence": name, "indices": bad.tolist()},
                )
            )
    return issues


def _validate_order(raw: np.ndarray) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    gaps = np.diff(raw)

    inversions = np.flatnonzero(gaps < 0)
    if inversions.size:
        issues.append(
            ValidationIssue(
                level="error",
                code=UNSORTED_TABLE,
                message=(
                    "raw values must be sorted in non-decreasing order; "
                    f"found {inversions.size} inversion(s) starting at index {int(inversions[0])}"
                ),
                context={"indices": inversions.tolist()},
            )
        )

    # Equal neighbours would divide by zero when fitting.
    ties = np.flatnonzero(gaps == 0)
    if ties.size:
        issues.append(
            ValidationIssue(
                level="error",
                code=ZERO_WIDTH_SEGMENT,
                message=(
                    "adjacent raw values must differ; "
                    f"found {ties.size} zero-width segment(s) starting at index {int(ties[0])}"
                ),
                context={"indices": ties.tolist()},
            )
        )
    return issues
