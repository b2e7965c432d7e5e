"""
Anomaly module: statistical anomaly detection over daily AAC usage.

Implements the Z-score classifier, the per-child detector, the anomaly store
with its lifecycle, and the daily detection job.
"""

from .classifier import classify
from .detectors import ZScoreDetector
from .engine import AnomalyDetector
from .job import DetectionJob, default_target_date
from .lifecycle import acknowledge, resolve, state_of
from .schema import (
    Anomaly,
    AnomalyContext,
    AnomalySeverity,
    AnomalyState,
    AnomalyType,
    DetectedAnomaly,
    DetectionJobResult,
)
from .scoring import SeverityMapper, anomaly_type_for
from .store import AnomalyStore, InMemoryAnomalyStore

__all__ = [
    "classify",
    "ZScoreDetector",
    "SeverityMapper",
    "anomaly_type_for",
    "AnomalyDetector",
    "DetectionJob",
    "default_target_date",
    "AnomalyStore",
    "InMemoryAnomalyStore",
    "acknowledge",
    "resolve",
    "state_of",
    "Anomaly",
    "AnomalyContext",
    "AnomalySeverity",
    "AnomalyState",
    "AnomalyType",
    "DetectedAnomaly",
    "DetectionJobResult",
]
