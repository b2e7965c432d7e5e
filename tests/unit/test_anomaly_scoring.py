"""
Unit tests for severity mapping and anomaly type selection.
"""

import pytest

from aac_insights.anomaly.schema import AnomalySeverity, AnomalyType
from aac_insights.anomaly.scoring import SeverityMapper, anomaly_type_for
from aac_insights.core.config import DetectorConfig


@pytest.mark.parametrize(
    "z, expected",
    [
        (0.0, None),
        (1.99, None),
        (2.0, AnomalySeverity.WARNING),
        (-2.0, AnomalySeverity.WARNING),
        (2.99, AnomalySeverity.WARNING),
        (3.0, AnomalySeverity.CRITICAL),
        (-3.0, AnomalySeverity.CRITICAL),
        (-7.5, AnomalySeverity.CRITICAL),
    ],
)
def test_severity_step_function(z, expected):
    mapper = SeverityMapper(DetectorConfig())
    assert mapper.zscore_severity(z) == expected


def test_severity_uses_configured_thresholds():
    mapper = SeverityMapper(DetectorConfig(warning_threshold=1.5, critical_threshold=2.5))
    assert mapper.zscore_severity(1.6) == AnomalySeverity.WARNING
    assert mapper.zscore_severity(2.5) == AnomalySeverity.CRITICAL


@pytest.mark.parametrize(
    "metric, z, expected",
    [
        ("total_taps", -4.0, AnomalyType.USAGE_DROP),
        ("total_taps", 4.0, AnomalyType.USAGE_SPIKE),
        ("unique_symbols", -2.5, AnomalyType.VOCABULARY_REGRESSION),
        ("unique_symbols", 2.4, AnomalyType.VOCABULARY_EXPANSION),
        ("session_count", -3.0, AnomalyType.SESSION_DROP),
        ("session_count", 3.0, AnomalyType.SESSION_SPIKE),
        ("something_else", -3.0, AnomalyType.USAGE_DROP),
        ("something_else", 3.0, AnomalyType.USAGE_SPIKE),
    ],
)
def test_anomaly_type_for(metric, z, expected):
    assert anomaly_type_for(metric, z) == expected
