"""Piecewise-linear calibration: table validation, segment fitting and lookup."""

from pwlcal.calibration.calibrator import Calibrator
from pwlcal.calibration.fit import build_calibration_payload, fit_segments, write_calibration
from pwlcal.calibration.schema import CalibrationSchemaError, validate_calibration_payload
from pwlcal.calibration.validators import report_to_dict, validate_table

__all__ = [
    "Calibrator",
    "fit_segments",
    "build_calibration_payload",
    "write_calibration",
    "validate_calibration_payload",
    "CalibrationSchemaError",
    "validate_table",
    "report_to_dict",
]
