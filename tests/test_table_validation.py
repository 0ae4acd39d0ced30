import numpy as np

from pwlcal.calibration.validators import as_numeric_array, report_to_dict, validate_coefficients, validate_table


def test_valid_table_has_no_issues():
    report = validate_table([1.0, 2.0, 4.0], [10.0, 20.0, 40.0])
    assert report.valid
    assert report.num_points == 3
    assert list(report.issues) == []


def test_inversions_are_collected_in_context():
    report = validate_table([1.0, 0.5, 2.0, 1.5], [0.0, 1.0, 2.0, 3.0])
    assert not report.valid
    issue = report.issues[0]
    assert issue.code == "unsorted_table"
    assert issue.context["indices"] == [0, 2]


def test_zero_width_and_inversion_reported_together():
    report = validate_table([1.0, 1.0, 0.0], [0.0, 1.0, 2.0])
    assert not report.valid
    assert report.codes == ["unsorted_table", "zero_width_segment"]


def test_length_mismatch_without_num_points():
    report = validate_table([1.0, 2.0, 3.0], [1.0, 2.0])
    assert not report.valid
    assert report.codes == ["length_mismatch"]


def test_num_points_prefix_ignores_trailing_values():
    report = validate_table([1.0, 2.0, 0.0], [1.0, 2.0], num_points=2)
    assert report.valid
    assert report.num_points == 2


def test_negative_num_points_is_insufficient():
    report = validate_table([1.0, 2.0], [1.0, 2.0], num_points=-4)
    assert report.codes == ["insufficient_points"]
    assert report.num_points == 0


def test_non_finite_values_rejected():
    report = validate_table([1.0, np.nan, 3.0], [0.0, 1.0, np.inf])
    assert not report.valid
    assert report.codes == ["non_finite", "non_finite"]
    assert report.issues[0].context == {"sequence": "raw", "indices": [1]}
    assert report.issues[1].context == {"sequence": "calibrated", "indices": [2]}


def test_as_numeric_array_rules():
    floats = np.array([1.0, 2.0])
    assert np.shares_memory(as_numeric_array(floats), floats)
    assert as_numeric_array([1, 2, 3]).dtype == np.float64
    assert as_numeric_array(["1", "2"]) is None
    assert as_numeric_array([[1.0, 2.0]]) is None
    assert as_numeric_array(None) is None


def test_report_to_dict_serializes_issues():
    payload = report_to_dict(validate_table([2.0, 1.0], [0.0, 1.0]))
    assert payload["valid"] is False
    assert payload["num_points"] == 2
    assert payload["issues"][0]["code"] == "unsorted_table"
    assert payload["issues"][0]["level"] == "error"
    assert payload["issues"][0]["context"] == {"indices": [0]}


def test_validate_coefficients_flags_overflowed_segments():
    slopes = np.array([1.0, np.inf, 2.0])
    intercepts = np.array([0.0, np.nan, np.nan])
    report = validate_coefficients(slopes, intercepts, num_points=4)
    assert not report.valid
    assert report.codes == ["non_finite_coefficients"]
    assert report.issues[0].context == {"indices": [1, 2]}
    assert validate_coefficients(np.array([1.0]), np.array([0.0]), num_points=2).valid
