"""
Caregiver digest exports.
"""

from .builder import compare_metrics, digest_title, format_anomaly_message, summarize_anomalies
from .schema import AnomalySummary, MetricComparison

__all__ = [
    "format_anomaly_message",
    "summarize_anomalies",
    "digest_title",
    "compare_metrics",
    "AnomalySummary",
    "MetricComparison",
]
