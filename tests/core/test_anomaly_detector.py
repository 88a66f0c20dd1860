# tests/core/test_anomaly_detector.py

import pytest

from core.anomaly_detector import AnomalyDetector


@pytest.mark.parametrize("threshold", [0.0, 0.5, 2.0, 10.0])
def test_constant_series_has_no_anomalies(threshold):
    """Zero spread means no z-scores are defined, whatever the threshold."""
    assert AnomalyDetector.detect_anomalies([21.5] * 12, threshold) == []


def test_empty_series_has_no_anomalies():
    assert AnomalyDetector.detect_anomalies([]) == []


def test_single_spike_is_flagged():
    """Nine samples at 10 and one at 50: mean 14, sd 12, so the spike sits at z = 3."""
    values = [10.0] * 9 + [50.0]

    assert AnomalyDetector.detect_anomalies(values) == [9]
    assert AnomalyDetector.detect_anomalies(values, 3.0) == [9]
    assert AnomalyDetector.detect_anomalies(values, 3.1) == []


def test_indices_are_in_order_for_both_tails():
    values = [0.0, 50.0, 50.0, 50.0, 50.0, 50.0, 50.0, 50.0, 50.0, 100.0]

    assert AnomalyDetector.detect_anomalies(values) == [0, 9]
