"""
Anomaly detection engine.

Loads one child's daily snapshot and metric baselines, runs the classifier
over each tracked metric, and returns the anomalies found. Nothing is
persisted here; see store.py and job.py.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional

from aac_insights.core.config import DetectorConfig, config
from aac_insights.core.exceptions import AnomalyDetectionError
from aac_insights.data.providers import BaselineProvider, SnapshotProvider
from aac_insights.data.schema import TRACKED_METRICS, MetricBaseline, day_of_week_key

from .classifier import classify
from .schema import DetectedAnomaly

logger = logging.getLogger(__name__)


@dataclass
class AnomalyDetector:
    """
    Deterministic per-child anomaly detector.

    Notes:
    - No snapshot for the day is a quiet day, not a failure.
    - A child with no baselines at all is still warming up.
    - Baselines below min_sample_days are skipped metric by metric.
    - Results follow TRACKED_METRICS order.
    - Provider failures are raised as AnomalyDetectionError.
    """

    snapshots: SnapshotProvider
    baselines: BaselineProvider

    def detect(
        self,
        child_id: str,
        day: date,
        detector_config: Optional[DetectorConfig] = None,
    ) -> List[DetectedAnomaly]:
        cfg = detector_config or config.anomaly.detector
        logger.info(f"Detecting anomalies for child {child_id} on {day.isoformat()}")

        try:
            snapshot = self.snapshots.get_snapshot(child_id, day)
            baselines = self.baselines.get_baselines(child_id) if snapshot is not None else []
        except Exception as e:
            raise AnomalyDetectionError(f"Failed to load inputs for child {child_id}: {e}") from e

        if snapshot is None:
            logger.info(f"No metrics found for child {child_id} on {day.isoformat()}")
            return []

        if not baselines:
            logger.info(f"No baselines found for child {child_id} - skipping detection")
            return []

        by_metric: Dict[str, MetricBaseline] = {b.metric_name: b for b in baselines}
        day_key = day_of_week_key(day)
        found: List[DetectedAnomaly] = []

        for metric in TRACKED_METRICS:
            baseline = by_metric.get(metric.value)
            if baseline is None or not baseline.is_sufficient(cfg.min_sample_days):
                continue

            anomaly = classify(snapshot.value_for(metric.value), baseline, day_key, cfg)
            if anomaly is not None:
                found.append(anomaly)

        logger.info(f"Found {len(found)} anomalies for child {child_id} on {day.isoformat()}")
        return found
