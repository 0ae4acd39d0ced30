"""Core package types shared by validation, fitting and lookup."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Sequence

import numpy as np


@dataclass(frozen=True)
class Segment:
    """Linear model ``calibrated = slope * raw + intercept`` between two knots."""

    index: int
    raw_lo: float
    raw_hi: float
    slope: float
    intercept: float

    def evaluate(self, value: float) -> float:
        return self.slope * value + self.intercept


@dataclass(frozen=True)
class CalibrationTable:
    """Paired raw/calibrated knots loaded from a table file."""

    raw: np.ndarray
    calibrated: np.ndarray
    limit_to_range: bool = False
    source: Path | None = None


@dataclass(frozen=True)
class ValidationIssue:
    level: str
    code: str
    message: str
    context: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ValidationReport:
    valid: bool
    issues: Sequence[ValidationIssue]
    num_points: int

    @property
    def codes(self) -> list[str]:
        return [issue.code for issue in self.issues]
