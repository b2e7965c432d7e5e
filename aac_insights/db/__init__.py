"""
Database module: ORM tables, engine helpers, and SQL implementations of the
detection providers and the anomaly store.
"""

from .engine import init_db, make_engine, make_session_factory
from .models import AnomalyRecord, Base, ChildRecord, DailyMetricRecord, MetricBaselineRecord
from .repository import SqlAnomalyStore, SqlMetricsRepository

__all__ = [
    "Base",
    "ChildRecord",
    "DailyMetricRecord",
    "MetricBaselineRecord",
    "AnomalyRecord",
    "make_engine",
    "make_session_factory",
    "init_db",
    "SqlMetricsRepository",
    "SqlAnomalyStore",
]
