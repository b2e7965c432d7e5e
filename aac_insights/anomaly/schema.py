"""
Schema definitions for anomaly detection.

All anomaly outputs are deterministic and explainable. Each anomaly references
its observed value, the expectation it was compared against, and the baseline
statistics behind that expectation.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from aac_insights.data.schema import DayOfWeek

RESOLUTION_MAX_LENGTH = 255


class AnomalySeverity(str, Enum):
    """Severity levels for anomalies."""

    WARNING = "warning"
    CRITICAL = "critical"


class AnomalyType(str, Enum):
    """Metric- and direction-specific anomaly labels."""

    USAGE_DROP = "usage_drop"
    USAGE_SPIKE = "usage_spike"
    VOCABULARY_REGRESSION = "vocabulary_regression"
    VOCABULARY_EXPANSION = "vocabulary_expansion"
    SESSION_DROP = "session_drop"
    SESSION_SPIKE = "session_spike"


class AnomalyState(str, Enum):
    """Lifecycle state derived from the acknowledgment and resolution fields."""

    OPEN = "open"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"


class AnomalyContext(BaseModel):
    """
    Baseline statistics the classification was made against.

    Fields:
    - baseline_mean: raw baseline mean, before any day-of-week factor
    - baseline_std_dev: baseline standard deviation
    - baseline_period_days: number of days the baseline covers
    - day_of_week_factor: factor applied to the mean, None if unadjusted
    - day_of_week: day key the factor was looked up for
    """

    baseline_mean: float
    baseline_std_dev: float
    baseline_period_days: int
    day_of_week_factor: Optional[float] = None
    day_of_week: Optional[DayOfWeek] = None


class DetectedAnomaly(BaseModel):
    """
    Classifier output for a single metric on a single day.

    z_score keeps its sign; deviation_score is its magnitude.
    """

    type: AnomalyType
    severity: AnomalySeverity
    metric_name: str
    expected_value: float
    actual_value: float
    z_score: float
    context: AnomalyContext

    @property
    def deviation_score(self) -> float:
        return abs(self.z_score)

    @property
    def is_decrease(self) -> bool:
        return self.z_score < 0


class Anomaly(BaseModel):
    """
    Persisted anomaly record.

    Fields:
    - id: unique identifier
    - child_id: child the anomaly belongs to
    - type / severity / metric_name: classification
    - expected_value / actual_value: compared values
    - deviation_score: |Z|
    - context: baseline statistics at detection time
    - detected_for_date: day of usage that was analysed
    - detected_at: when the job recorded it
    - acknowledged, acknowledged_at, acknowledged_by: acknowledgment trail
    - resolved_at, resolution: resolution trail
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    child_id: str
    type: AnomalyType
    severity: AnomalySeverity
    metric_name: str
    expected_value: float
    actual_value: float
    deviation_score: float = Field(ge=0.0)
    context: AnomalyContext
    detected_for_date: date
    detected_at: datetime
    acknowledged: bool = False
    acknowledged_at: Optional[datetime] = None
    acknowledged_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    resolution: Optional[str] = Field(None, max_length=RESOLUTION_MAX_LENGTH)

    @property
    def state(self) -> AnomalyState:
        if self.resolved_at is not None:
            return AnomalyState.RESOLVED
        if self.acknowledged:
            return AnomalyState.ACKNOWLEDGED
        return AnomalyState.OPEN


class DetectionJobResult(BaseModel):
    """
    Aggregate outcome of one detection job run.

    children_processed counts every child fetched, including failed ones.
    """

    target_date: date
    children_processed: int = Field(ge=0)
    anomalies_found: int = Field(ge=0)
    failed_children: List[str] = Field(default_factory=list)
