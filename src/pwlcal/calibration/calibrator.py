"""Piecewise-linear calibrator over a table of raw/calibrated knots."""

from __future__ import annotations

import logging
from typing import Generic, Sequence, TypeVar

import numpy as np

from pwlcal.calibration.fit import build_segments, fit_segments, locate_segment, locate_segments
from pwlcal.calibration.validators import as_numeric_array, validate_coefficients, validate_table
from pwlcal.core.types import Segment, ValidationReport

logger = logging.getLogger(__name__)

Numeric = TypeVar("Numeric", int, float)


class Calibrator(Generic[Numeric]):
    """Map raw measurements onto calibrated values through a knot table.

    Construction only records the tables and never fails. :meth:`begin`
    validates the table and fits one line per segment; until it succeeds,
    :meth:`calibrate` returns its input unchanged.

    The tables are held by reference. A float64 ndarray is used in place, so
    mutating it after :meth:`begin` leaves the fit stale until ``begin`` is
    called again; other sequences are converted once per ``begin``.
    """

    def __init__(
        self,
        raw_values: Sequence[Numeric] | np.ndarray,
        calibrated_values: Sequence[Numeric] | np.ndarray,
        num_points: int | None = None,
        limit_output_to_calibration_range: bool = False,
    ) -> None:
        self._raw_values = raw_values
        self._calibrated_values = calibrated_values
        self._requested_points = num_points
        self._limit_output = bool(limit_output_to_calibration_range)

        self._knots: np.ndarray | None = None
        self._targets: np.ndarray | None = None
        self._m: np.ndarray | None = None
        self._b: np.ndarray | None = None
        self._report: ValidationReport | None = None

    @property
    def limit_output_to_calibration_range(self) -> bool:
        return self._limit_output

    @property
    def fitted(self) -> bool:
        return self._m is not None and self._b is not None

    @property
    def report(self) -> ValidationReport | None:
        """Validation report from the last :meth:`begin` call."""
        return self._report

    @property
    def num_points(self) -> int:
        return 0 if self._knots is None else int(self._knots.size)

    @property
    def segments(self) -> tuple[Segment, ...]:
        if not self.fitted:
            return ()
        return build_segments(self._knots, self._m, self._b)

    def begin(self) -> bool:
        """Validate the table and fit the segment coefficients.

        Returns False, leaving the calibrator unfitted, when the table has
        fewer than two points, is not sorted, has equal adjacent raw values,
        holds non-numeric or non-finite values, or yields slopes too steep
        to represent in float64. See :attr:`report`.
        """
        self.reset()
        report = validate_table(self._raw_values, self._calibrated_values, self._requested_points)
        self._report = report
        if not report.valid:
            logger.warning(
                "Calibration table rejected: %s",
                ", ".join(sorted(set(report.codes))),
            )
            return False

        n = report.num_points
        self._knots = as_numeric_array(self._raw_values)[:n]
        self._targets = as_numeric_array(self._calibrated_values)[:n]
        self._m, self._b = fit_segments(self._knots, self._targets)
        fit_report = validate_coefficients(self._m, self._b, n)
        if not fit_report.valid:
            self._report = fit_report
            self.reset()
            logger.warning("Calibration table rejected: %s", ", ".join(fit_report.codes))
            return False

        logger.debug(
            "Fitted %d segments over raw range [%g, %g]",
            self._m.size,
            self._knots[0],
            self._knots[-1],
        )
        return True

    def reset(self) -> None:
        """Release the fitted coefficients and return to the unfitted state."""
        self._m = None
        self._b = None
        self._knots = None
        self._targets = None

    def calibrate(self, value: Numeric) -> Numeric | float:
        if not self.fitted:
            return value

        knots, m, b = self._knots, self._m, self._b
        try:
            x = float(value)
        except OverflowError:
            # Integers beyond float64 are only resolvable by clamping.
            if self._limit_output:
                return float(self._targets[0] if value < 0 else self._targets[-1])
            return value

        if x < knots[0]:
            if self._limit_output:
                return float(self._targets[0])
            return float(m[0] * x + b[0])
        if x > knots[-1]:
            if self._limit_output:
                return float(self._targets[-1])
            return float(m[-1] * x + b[-1])

        i = locate_segment(knots, x)
        if i is None:
            return value
        return float(m[i] * x + b[i])

    def calibrate_many(self, values: Sequence[Numeric] | np.ndarray) -> np.ndarray:
        """Vectorised :meth:`calibrate`; always returns a new float64 array."""

        arr = np.array(values, dtype=float)
        if not self.fitted:
            return arr

        knots = self._knots
        idx = locate_segments(knots, arr)
        out = self._m[idx] * arr + self._b[idx]
        if self._limit_output:
            out = np.where(arr < knots[0], self._targets[0], out)
            out = np.where(arr > knots[-1], self._targets[-1], out)
        return out
