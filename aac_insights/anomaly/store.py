"""
Anomaly persistence and lifecycle queries.

AnomalyStore is the interface the detection job writes through and the
caregiver-facing layers read from. Two implementations ship with the
package: InMemoryAnomalyStore below, and SqlAnomalyStore in
aac_insights.db.repository.

Duplicate handling on persist is a policy (see DuplicatePolicy):
- APPEND: every run adds rows, re-detections form an audit trail
- SKIP: rows already present for (child, metric, date) are not written again
- REPLACE: rows for (child, metric, date) are replaced by the new detection
"""

from __future__ import annotations

import itertools
import logging
import threading
from abc import ABC, abstractmethod
from datetime import date, datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence

from aac_insights.core.config import DuplicatePolicy, StoreConfig, config
from aac_insights.core.exceptions import AnomalyNotFoundError

from . import lifecycle
from .schema import Anomaly, DetectedAnomaly

logger = logging.getLogger(__name__)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class AnomalyStore(ABC):
    """
    Abstract anomaly store.

    Subclasses implement storage; record building, rounding and the query
    defaults live here so every backend behaves the same.
    """

    def __init__(self, store_config: Optional[StoreConfig] = None) -> None:
        self.config = store_config or config.anomaly.store

    def build_records(
        self,
        child_id: str,
        day: date,
        anomalies: Iterable[DetectedAnomaly],
        detected_at: Optional[datetime] = None,
    ) -> List[Anomaly]:
        """Turn classifier output into records with values at store precision."""
        detected_at = detected_at or datetime.now(timezone.utc)
        digits = self.config.value_precision
        return [
            Anomaly(
                child_id=child_id,
                type=a.type,
                severity=a.severity,
                metric_name=a.metric_name,
                expected_value=round(a.expected_value, digits),
                actual_value=round(a.actual_value, digits),
                deviation_score=round(a.deviation_score, digits),
                context=a.context,
                detected_for_date=day,
                detected_at=detected_at,
            )
            for a in anomalies
        ]

    def persist(self, child_id: str, day: date, anomalies: Sequence[DetectedAnomaly]) -> int:
        """
        Write one row per detected anomaly.

        Returns:
            Number of rows written (SKIP may write fewer than given)
        """
        if not anomalies:
            return 0
        records = self.build_records(child_id, day, anomalies)
        written = self._write(child_id, day, records, self.config.duplicate_policy)

        for record in written:
            logger.info(
                f"Saved {record.severity.value} {record.type.value} anomaly for child {child_id}: "
                f"expected {record.expected_value:.1f}, got {record.actual_value:g} "
                f"(|Z|={record.deviation_score:.2f})"
            )
        if len(written) != len(records):
            logger.info(
                f"Skipped {len(records) - len(written)} already stored anomalies for child "
                f"{child_id} on {day.isoformat()}"
            )
        return len(written)

    @abstractmethod
    def _write(
        self,
        child_id: str,
        day: date,
        records: List[Anomaly],
        policy: DuplicatePolicy,
    ) -> List[Anomaly]:
        """Store records under the duplicate policy and return the ones written."""
        pass

    @abstractmethod
    def get(self, anomaly_id: str) -> Anomaly:
        """Return one anomaly or raise AnomalyNotFoundError."""
        pass

    @abstractmethod
    def get_unacknowledged(self, child_id: str, limit: Optional[int] = None) -> List[Anomaly]:
        """Unacknowledged anomalies for a child, newest detected_at first."""
        pass

    @abstractmethod
    def get_recent(
        self,
        child_id: str,
        days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> List[Anomaly]:
        """Anomalies with detected_for_date >= today - days, newest first."""
        pass

    @abstractmethod
    def get_for_date(self, child_id: str, day: date) -> List[Anomaly]:
        """Anomalies detected for one child and one usage day."""
        pass

    @abstractmethod
    def acknowledge(self, anomaly_id: str, user_id: str) -> Anomaly:
        pass

    @abstractmethod
    def resolve(self, anomaly_id: str, resolution: str) -> Anomaly:
        pass

    def _limit(self, limit: Optional[int]) -> int:
        return self.config.default_unacknowledged_limit if limit is None else limit

    def _since(self, days: Optional[int], today: Optional[date]) -> date:
        days = self.config.default_recent_days if days is None else days
        return (today or utc_today()) - timedelta(days=days)


class InMemoryAnomalyStore(AnomalyStore):
    """
    Thread-safe in-memory store.

    Used by tests, offline replays, and as the reference for SQL behavior.
    """

    def __init__(self, store_config: Optional[StoreConfig] = None) -> None:
        super().__init__(store_config)
        self._lock = threading.Lock()
        self._rows: Dict[str, Anomaly] = {}
        self._seq: Dict[str, int] = {}
        self._counter = itertools.count()

    def _write(
        self,
        child_id: str,
        day: date,
        records: List[Anomaly],
        policy: DuplicatePolicy,
    ) -> List[Anomaly]:
        with self._lock:
            metrics = {r.metric_name for r in records}
            existing = [
                a
                for a in self._rows.values()
                if a.child_id == child_id and a.detected_for_date == day and a.metric_name in metrics
            ]

            if policy == DuplicatePolicy.SKIP:
                taken = {a.metric_name for a in existing}
                records = [r for r in records if r.metric_name not in taken]
            elif policy == DuplicatePolicy.REPLACE:
                for a in existing:
                    del self._rows[a.id]
                    del self._seq[a.id]

            for record in records:
                self._rows[record.id] = record
                self._seq[record.id] = next(self._counter)
            return records

    def _newest_first(self, rows: Iterable[Anomaly]) -> List[Anomaly]:
        return sorted(rows, key=lambda a: (a.detected_at, self._seq[a.id]), reverse=True)

    def get(self, anomaly_id: str) -> Anomaly:
        with self._lock:
            try:
                return self._rows[anomaly_id]
            except KeyError:
                raise AnomalyNotFoundError(anomaly_id) from None

    def get_unacknowledged(self, child_id: str, limit: Optional[int] = None) -> List[Anomaly]:
        with self._lock:
            rows = [a for a in self._rows.values() if a.child_id == child_id and not a.acknowledged]
            return self._newest_first(rows)[: self._limit(limit)]

    def get_recent(
        self,
        child_id: str,
        days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> List[Anomaly]:
        since = self._since(days, today)
        with self._lock:
            rows = [
                a
                for a in self._rows.values()
                if a.child_id == child_id and a.detected_for_date >= since
            ]
            return self._newest_first(rows)

    def get_for_date(self, child_id: str, day: date) -> List[Anomaly]:
        with self._lock:
            rows = [
                a
                for a in self._rows.values()
                if a.child_id == child_id and a.detected_for_date == day
            ]
            return sorted(rows, key=lambda a: self._seq[a.id])

    def acknowledge(self, anomaly_id: str, user_id: str) -> Anomaly:
        with self._lock:
            current = self._rows.get(anomaly_id)
            if current is None:
                raise AnomalyNotFoundError(anomaly_id)
            updated = lifecycle.acknowledge(current, user_id)
            self._rows[anomaly_id] = updated
            return updated

    def resolve(self, anomaly_id: str, resolution: str) -> Anomaly:
        with self._lock:
            current = self._rows.get(anomaly_id)
            if current is None:
                raise AnomalyNotFoundError(anomaly_id)
            updated = lifecycle.resolve(current, resolution)
            self._rows[anomaly_id] = updated
            return updated
