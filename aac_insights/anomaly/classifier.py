"""
Per-metric anomaly classification.

Pure function over one observed value and one baseline: no I/O, no state.
"""

from __future__ import annotations

from typing import Optional

from aac_insights.core.config import DetectorConfig, config
from aac_insights.data.schema import DayOfWeek, MetricBaseline

from .detectors import ZScoreDetector
from .schema import AnomalyContext, DetectedAnomaly
from .scoring import SeverityMapper, anomaly_type_for


def classify(
    actual: float,
    baseline: MetricBaseline,
    day_key: DayOfWeek,
    detector_config: Optional[DetectorConfig] = None,
) -> Optional[DetectedAnomaly]:
    """
    Classify one observed value against a baseline.

    Args:
        actual: observed value for the day
        baseline: the child's baseline for this metric
        day_key: day of week the value was observed on
        detector_config: thresholds; defaults to the global config

    Returns:
        DetectedAnomaly if |Z| reaches the warning threshold, else None.
        expected_value is the day-of-week adjusted expectation.
    """
    cfg = detector_config or config.anomaly.detector
    detector = ZScoreDetector(enable_day_of_week_adjustment=cfg.enable_day_of_week_adjustment)

    zscore = detector.compute(actual, baseline, day_key)
    severity = SeverityMapper(cfg).zscore_severity(zscore)
    if severity is None:
        return None

    factor = detector.day_factor(baseline, day_key)
    return DetectedAnomaly(
        type=anomaly_type_for(baseline.metric_name, zscore),
        severity=severity,
        metric_name=baseline.metric_name,
        expected_value=detector.expected(baseline, day_key),
        actual_value=float(actual),
        z_score=zscore,
        context=AnomalyContext(
            baseline_mean=baseline.mean,
            baseline_std_dev=baseline.std_dev,
            baseline_period_days=baseline.sample_days,
            day_of_week_factor=factor,
            day_of_week=DayOfWeek(day_key) if factor is not None else None,
        ),
    )
