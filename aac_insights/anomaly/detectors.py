"""
Z-score computation against a child's own baseline.

The expectation is the baseline mean, optionally scaled by the baseline's
day-of-week factor so a quiet Sunday is not compared against a school day.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from aac_insights.data.schema import DayOfWeek, MetricBaseline


@dataclass
class ZScoreDetector:
    """
    Seasonally adjusted Z-score detector.

    With zero standard deviation the Z-score is 0: without variance no
    deviation is statistically meaningful.
    """

    enable_day_of_week_adjustment: bool = True

    def day_factor(self, baseline: MetricBaseline, day_key: DayOfWeek) -> Optional[float]:
        """Return the factor to apply for day_key, or None to leave the mean as is."""
        if not self.enable_day_of_week_adjustment:
            return None
        factor = baseline.factor_for(day_key)
        # Zero or negative factors are treated as absent
        if factor is None or factor <= 0:
            return None
        return factor

    def expected(self, baseline: MetricBaseline, day_key: DayOfWeek) -> float:
        factor = self.day_factor(baseline, day_key)
        if factor is None:
            return baseline.mean
        return baseline.mean * factor

    def compute(self, observed: float, baseline: MetricBaseline, day_key: DayOfWeek) -> float:
        if baseline.std_dev == 0:
            return 0.0
        return (observed - self.expected(baseline, day_key)) / baseline.std_dev
