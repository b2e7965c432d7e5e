"""
Schema for caregiver digest inputs.

Only factual, observable data derived from the daily snapshot and the
anomalies detected for the same day.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from aac_insights.anomaly.schema import AnomalySeverity, AnomalyType


class AnomalySummary(BaseModel):
    """
    One anomaly as the digest presents it.

    Fields:
    - type: anomaly type
    - severity: warning or critical
    - metric_name: metric that deviated
    - message: caregiver-facing sentence
    """

    type: AnomalyType
    severity: AnomalySeverity
    metric_name: str
    message: str


class MetricComparison(BaseModel):
    """
    Day-over-day change in percent, rounded to whole numbers.

    A field is None when the previous day's value was zero.
    """

    taps_percent: Optional[int] = None
    symbols_percent: Optional[int] = None
