"""
Schema definitions for detection inputs.

Snapshots and baselines are produced upstream by the metrics aggregator and
are read-only here. Both are validated with Pydantic so a malformed row fails
loudly at the boundary instead of deep inside the classifier.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator


class DayOfWeek(str, Enum):
    """Day keys used by baseline day-of-week factors."""

    SUN = "sun"
    MON = "mon"
    TUE = "tue"
    WED = "wed"
    THU = "thu"
    FRI = "fri"
    SAT = "sat"


# date.weekday() is Monday=0
_WEEKDAY_KEYS = (
    DayOfWeek.MON,
    DayOfWeek.TUE,
    DayOfWeek.WED,
    DayOfWeek.THU,
    DayOfWeek.FRI,
    DayOfWeek.SAT,
    DayOfWeek.SUN,
)


def day_of_week_key(day: date) -> DayOfWeek:
    """Return the day key for a calendar date."""
    return _WEEKDAY_KEYS[day.weekday()]


class MetricName(str, Enum):
    """Metrics tracked by the detector, in detection order."""

    TOTAL_TAPS = "total_taps"
    UNIQUE_SYMBOLS = "unique_symbols"
    SESSION_COUNT = "session_count"


TRACKED_METRICS = (
    MetricName.TOTAL_TAPS,
    MetricName.UNIQUE_SYMBOLS,
    MetricName.SESSION_COUNT,
)


class DailyMetricSnapshot(BaseModel):
    """
    One child's usage totals for one day.

    Fields:
    - child_id: child identifier
    - date: calendar day the totals cover
    - total_taps: symbol taps across all sessions
    - unique_symbols: distinct symbols tapped
    - session_count: number of usage sessions
    """

    child_id: str
    date: date
    total_taps: int = Field(0, ge=0)
    unique_symbols: int = Field(0, ge=0)
    session_count: int = Field(0, ge=0)

    @field_validator("total_taps", "unique_symbols", "session_count", mode="before")
    @classmethod
    def _none_as_zero(cls, value):
        return 0 if value is None else value

    def value_for(self, metric: str) -> float:
        """Return the day's value for a tracked metric name."""
        name = MetricName(metric)
        if name is MetricName.TOTAL_TAPS:
            return float(self.total_taps)
        if name is MetricName.UNIQUE_SYMBOLS:
            return float(self.unique_symbols)
        return float(self.session_count)


class MetricBaseline(BaseModel):
    """
    Rolling statistics for one child and one metric.

    Fields:
    - mean: average daily value over the window
    - std_dev: standard deviation (>= 0)
    - sample_days: number of days the statistics cover
    - day_of_week_factors: optional multiplier per day key
    """

    child_id: str
    metric_name: str
    mean: float
    std_dev: float = Field(ge=0.0)
    sample_days: int = Field(ge=0)
    day_of_week_factors: Optional[Dict[DayOfWeek, float]] = None

    def factor_for(self, day_key: DayOfWeek) -> Optional[float]:
        if not self.day_of_week_factors:
            return None
        return self.day_of_week_factors.get(DayOfWeek(day_key))

    def is_sufficient(self, min_sample_days: int) -> bool:
        return self.sample_days >= min_sample_days
