"""SQLAlchemy ORM models for AAC usage insights.

Tables:
- children: every child the detection job scans
- daily_metrics: one usage snapshot per child and day (written upstream)
- metric_baselines: rolling statistics per child and metric (written upstream)
- anomalies: detected deviations with their acknowledgment/resolution trail
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class ChildRecord(Base):
    """A child whose AAC usage is tracked."""

    __tablename__ = "children"

    id = Column(String(36), primary_key=True)
    name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class DailyMetricRecord(Base):
    """Daily usage totals for one child."""

    __tablename__ = "daily_metrics"

    id = Column(Integer, primary_key=True, autoincrement=True)
    child_id = Column(String(36), ForeignKey("children.id", ondelete="CASCADE"), nullable=False)
    date = Column(Date, nullable=False)
    total_taps = Column(Integer, nullable=False, default=0)
    unique_symbols = Column(Integer, nullable=False, default=0)
    session_count = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("child_id", "date", name="uq_daily_metrics_child_date"),
        Index("daily_metrics_date_idx", "date"),
    )


class MetricBaselineRecord(Base):
    """Rolling statistics for one child and metric."""

    __tablename__ = "metric_baselines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    child_id = Column(String(36), ForeignKey("children.id", ondelete="CASCADE"), nullable=False)
    metric_name = Column(String(50), nullable=False)
    mean = Column(Float, nullable=False)
    std_dev = Column(Float, nullable=False)
    sample_days = Column(Integer, nullable=False)
    day_of_week_factors = Column(JSON, nullable=True)
    computed_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        UniqueConstraint("child_id", "metric_name", name="uq_metric_baselines_child_metric"),
        Index("metric_baselines_child_idx", "child_id"),
    )


class AnomalyRecord(Base):
    """Detected anomaly. No uniqueness on (child, metric, date); see DuplicatePolicy."""

    __tablename__ = "anomalies"

    id = Column(String(36), primary_key=True)
    child_id = Column(String(36), ForeignKey("children.id", ondelete="CASCADE"), nullable=False)
    type = Column(String(50), nullable=False)
    severity = Column(String(20), nullable=False)
    metric_name = Column(String(50), nullable=False)
    expected_value = Column(Float, nullable=False)
    actual_value = Column(Float, nullable=False)
    deviation_score = Column(Float, nullable=False)
    context = Column(JSON, nullable=True)
    detected_at = Column(DateTime(timezone=True), nullable=False)
    detected_for_date = Column(Date, nullable=False)
    acknowledged = Column(Boolean, nullable=False, default=False)
    acknowledged_at = Column(DateTime(timezone=True), nullable=True)
    acknowledged_by = Column(String(255), nullable=True)
    resolved_at = Column(DateTime(timezone=True), nullable=True)
    resolution = Column(String(255), nullable=True)

    __table_args__ = (
        Index("anomalies_child_date_idx", "child_id", "detected_for_date"),
        Index("anomalies_severity_idx", "severity"),
        Index("anomalies_unacknowledged_idx", "child_id", "acknowledged"),
    )

    def __repr__(self) -> str:
        return (
            f"<AnomalyRecord(id={self.id}, child={self.child_id}, "
            f"type={self.type}, severity={self.severity})>"
        )
