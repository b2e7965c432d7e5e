"""
Data module: detection inputs and the providers that serve them.

    Aggregator tables / exports
        ↓
    Providers (aac_insights/data/providers.py) → DailyMetricSnapshot, MetricBaseline
        ↓
    Ready for anomaly detection (aac_insights/anomaly)
"""

from aac_insights.data.ingestion import (
    load_baselines,
    load_metrics_provider,
    load_snapshots,
    read_records,
)
from aac_insights.data.providers import (
    BaselineProvider,
    ChildDirectory,
    InMemoryMetricsProvider,
    SnapshotProvider,
)
from aac_insights.data.schema import (
    TRACKED_METRICS,
    DailyMetricSnapshot,
    DayOfWeek,
    MetricBaseline,
    MetricName,
    day_of_week_key,
)

__all__ = [
    # Schema
    "DailyMetricSnapshot",
    "MetricBaseline",
    "MetricName",
    "DayOfWeek",
    "TRACKED_METRICS",
    "day_of_week_key",

    # Providers
    "SnapshotProvider",
    "BaselineProvider",
    "ChildDirectory",
    "InMemoryMetricsProvider",

    # Ingestion
    "read_records",
    "load_snapshots",
    "load_baselines",
    "load_metrics_provider",
]
