"""
Unit tests for the Z-score detector.
"""

import pytest

from aac_insights.anomaly.detectors import ZScoreDetector
from aac_insights.data.schema import DayOfWeek, MetricBaseline


def _baseline(mean=100.0, std_dev=10.0, factors=None):
    return MetricBaseline(
        child_id="child-1",
        metric_name="total_taps",
        mean=mean,
        std_dev=std_dev,
        sample_days=14,
        day_of_week_factors=factors,
    )


def test_zscore_detector_computes_value():
    detector = ZScoreDetector()
    z = detector.compute(80.0, _baseline(), DayOfWeek.MON)
    assert z == pytest.approx(-2.0)


def test_zscore_detector_zero_std_is_zero():
    detector = ZScoreDetector()
    assert detector.compute(0.0, _baseline(mean=5.0, std_dev=0.0), DayOfWeek.MON) == 0.0


def test_day_factor_scales_expectation():
    detector = ZScoreDetector()
    baseline = _baseline(factors={"sun": 0.5, "mon": 1.2})

    assert detector.expected(baseline, DayOfWeek.SUN) == pytest.approx(50.0)
    assert detector.expected(baseline, DayOfWeek.MON) == pytest.approx(120.0)
    # Days without a factor keep the raw mean
    assert detector.expected(baseline, DayOfWeek.WED) == pytest.approx(100.0)


def test_day_factor_ignored_when_disabled():
    detector = ZScoreDetector(enable_day_of_week_adjustment=False)
    baseline = _baseline(factors={"sun": 0.5})

    assert detector.day_factor(baseline, DayOfWeek.SUN) is None
    assert detector.expected(baseline, DayOfWeek.SUN) == pytest.approx(100.0)


@pytest.mark.parametrize("factor", [0.0, -1.0])
def test_non_positive_factor_is_treated_as_absent(factor):
    detector = ZScoreDetector()
    baseline = _baseline(factors={"sun": factor})

    assert detector.day_factor(baseline, DayOfWeek.SUN) is None
    assert detector.expected(baseline, DayOfWeek.SUN) == pytest.approx(100.0)
