"""SQL-backed providers and anomaly store.

SqlMetricsRepository reads the aggregator's daily_metrics and
metric_baselines tables; SqlAnomalyStore writes and queries the anomalies
table. Each operation opens its own session, so both are safe to share
between detection worker threads.
"""

from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session, sessionmaker

from aac_insights.anomaly import lifecycle
from aac_insights.anomaly.schema import Anomaly, AnomalyContext
from aac_insights.anomaly.store import AnomalyStore
from aac_insights.core.config import DuplicatePolicy, StoreConfig
from aac_insights.core.exceptions import AnomalyNotFoundError
from aac_insights.data.providers import BaselineProvider, ChildDirectory, SnapshotProvider
from aac_insights.data.schema import DailyMetricSnapshot, MetricBaseline

from .models import AnomalyRecord, ChildRecord, DailyMetricRecord, MetricBaselineRecord


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # SQLite drops tzinfo on the way back
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SqlMetricsRepository(SnapshotProvider, BaselineProvider, ChildDirectory):
    """Detection inputs read from the aggregator tables."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def get_snapshot(self, child_id: str, day: date) -> Optional[DailyMetricSnapshot]:
        with self._session_factory() as session:
            rec = (
                session.query(DailyMetricRecord)
                .filter(DailyMetricRecord.child_id == child_id, DailyMetricRecord.date == day)
                .first()
            )
            if rec is None:
                return None
            return DailyMetricSnapshot(
                child_id=rec.child_id,
                date=rec.date,
                total_taps=rec.total_taps,
                unique_symbols=rec.unique_symbols,
                session_count=rec.session_count,
            )

    def get_baselines(self, child_id: str) -> List[MetricBaseline]:
        with self._session_factory() as session:
            rows = (
                session.query(MetricBaselineRecord)
                .filter(MetricBaselineRecord.child_id == child_id)
                .all()
            )
            return [
                MetricBaseline(
                    child_id=r.child_id,
                    metric_name=r.metric_name,
                    mean=r.mean,
                    std_dev=r.std_dev,
                    sample_days=r.sample_days,
                    day_of_week_factors=r.day_of_week_factors,
                )
                for r in rows
            ]

    def list_child_ids(self) -> List[str]:
        with self._session_factory() as session:
            rows = session.query(ChildRecord.id).order_by(ChildRecord.id).all()
            return [r.id for r in rows]

    def save_child(self, child_id: str, name: Optional[str] = None) -> None:
        """Insert a child if it does not exist yet."""
        with self._session_factory() as session, session.begin():
            if session.get(ChildRecord, child_id) is None:
                session.add(ChildRecord(id=child_id, name=name))

    def save_snapshot(self, snapshot: DailyMetricSnapshot) -> None:
        """Insert or update a snapshot. Used when importing aggregator exports."""
        self.save_child(snapshot.child_id)
        with self._session_factory() as session, session.begin():
            rec = (
                session.query(DailyMetricRecord)
                .filter(
                    DailyMetricRecord.child_id == snapshot.child_id,
                    DailyMetricRecord.date == snapshot.date,
                )
                .first()
            )
            if rec is None:
                rec = DailyMetricRecord(child_id=snapshot.child_id, date=snapshot.date)
                session.add(rec)
            rec.total_taps = snapshot.total_taps
            rec.unique_symbols = snapshot.unique_symbols
            rec.session_count = snapshot.session_count

    def save_baseline(self, baseline: MetricBaseline) -> None:
        """Insert or update a baseline. Used when importing aggregator exports."""
        self.save_child(baseline.child_id)
        factors = baseline.model_dump(mode="json")["day_of_week_factors"]
        with self._session_factory() as session, session.begin():
            rec = (
                session.query(MetricBaselineRecord)
                .filter(
                    MetricBaselineRecord.child_id == baseline.child_id,
                    MetricBaselineRecord.metric_name == baseline.metric_name,
                )
                .first()
            )
            if rec is None:
                rec = MetricBaselineRecord(
                    child_id=baseline.child_id, metric_name=baseline.metric_name
                )
                session.add(rec)
            rec.mean = baseline.mean
            rec.std_dev = baseline.std_dev
            rec.sample_days = baseline.sample_days
            rec.day_of_week_factors = factors


def _to_anomaly(rec: AnomalyRecord) -> Anomaly:
    return Anomaly(
        id=rec.id,
        child_id=rec.child_id,
        type=rec.type,
        severity=rec.severity,
        metric_name=rec.metric_name,
        expected_value=rec.expected_value,
        actual_value=rec.actual_value,
        deviation_score=rec.deviation_score,
        context=AnomalyContext.model_validate(rec.context or {}),
        detected_for_date=rec.detected_for_date,
        detected_at=_as_utc(rec.detected_at),
        acknowledged=bool(rec.acknowledged),
        acknowledged_at=_as_utc(rec.acknowledged_at),
        acknowledged_by=rec.acknowledged_by,
        resolved_at=_as_utc(rec.resolved_at),
        resolution=rec.resolution,
    )


def _to_record(anomaly: Anomaly) -> AnomalyRecord:
    return AnomalyRecord(
        id=anomaly.id,
        child_id=anomaly.child_id,
        type=anomaly.type.value,
        severity=anomaly.severity.value,
        metric_name=anomaly.metric_name,
        expected_value=anomaly.expected_value,
        actual_value=anomaly.actual_value,
        deviation_score=anomaly.deviation_score,
        context=anomaly.context.model_dump(mode="json"),
        detected_at=anomaly.detected_at,
        detected_for_date=anomaly.detected_for_date,
        acknowledged=anomaly.acknowledged,
        acknowledged_at=anomaly.acknowledged_at,
        acknowledged_by=anomaly.acknowledged_by,
        resolved_at=anomaly.resolved_at,
        resolution=anomaly.resolution,
    )


class SqlAnomalyStore(AnomalyStore):
    """Anomaly store over the anomalies table."""

    def __init__(
        self,
        session_factory: sessionmaker,
        store_config: Optional[StoreConfig] = None,
    ) -> None:
        super().__init__(store_config)
        self._session_factory = session_factory

    def _write(
        self,
        child_id: str,
        day: date,
        records: List[Anomaly],
        policy: DuplicatePolicy,
    ) -> List[Anomaly]:
        metrics = {r.metric_name for r in records}
        with self._session_factory() as session, session.begin():
            existing = (
                session.query(AnomalyRecord)
                .filter(
                    AnomalyRecord.child_id == child_id,
                    AnomalyRecord.detected_for_date == day,
                    AnomalyRecord.metric_name.in_(sorted(metrics)),
                )
                .all()
            )
            if policy == DuplicatePolicy.SKIP:
                taken = {rec.metric_name for rec in existing}
                records = [r for r in records if r.metric_name not in taken]
            elif policy == DuplicatePolicy.REPLACE:
                for rec in existing:
                    session.delete(rec)
                session.flush()

            session.add_all([_to_record(r) for r in records])
        return records

    def _load(self, session: Session, anomaly_id: str) -> AnomalyRecord:
        rec = session.get(AnomalyRecord, anomaly_id)
        if rec is None:
            raise AnomalyNotFoundError(anomaly_id)
        return rec

    def get(self, anomaly_id: str) -> Anomaly:
        with self._session_factory() as session:
            return _to_anomaly(self._load(session, anomaly_id))

    def get_unacknowledged(self, child_id: str, limit: Optional[int] = None) -> List[Anomaly]:
        with self._session_factory() as session:
            rows = (
                session.query(AnomalyRecord)
                .filter(AnomalyRecord.child_id == child_id, AnomalyRecord.acknowledged.is_(False))
                .order_by(AnomalyRecord.detected_at.desc())
                .limit(self._limit(limit))
                .all()
            )
            return [_to_anomaly(r) for r in rows]

    def get_recent(
        self,
        child_id: str,
        days: Optional[int] = None,
        today: Optional[date] = None,
    ) -> List[Anomaly]:
        since = self._since(days, today)
        with self._session_factory() as session:
            rows = (
                session.query(AnomalyRecord)
                .filter(AnomalyRecord.child_id == child_id, AnomalyRecord.detected_for_date >= since)
                .order_by(AnomalyRecord.detected_at.desc())
                .all()
            )
            return [_to_anomaly(r) for r in rows]

    def get_for_date(self, child_id: str, day: date) -> List[Anomaly]:
        with self._session_factory() as session:
            rows = (
                session.query(AnomalyRecord)
                .filter(AnomalyRecord.child_id == child_id, AnomalyRecord.detected_for_date == day)
                .order_by(AnomalyRecord.detected_at)
                .all()
            )
            return [_to_anomaly(r) for r in rows]

    def acknowledge(self, anomaly_id: str, user_id: str) -> Anomaly:
        with self._session_factory() as session, session.begin():
            rec = self._load(session, anomaly_id)
            updated = lifecycle.acknowledge(_to_anomaly(rec), user_id)
            rec.acknowledged = updated.acknowledged
            rec.acknowledged_at = updated.acknowledged_at
            rec.acknowledged_by = updated.acknowledged_by
            return updated

    def resolve(self, anomaly_id: str, resolution: str) -> Anomaly:
        with self._session_factory() as session, session.begin():
            rec = self._load(session, anomaly_id)
            updated = lifecycle.resolve(_to_anomaly(rec), resolution)
            rec.resolved_at = updated.resolved_at
            rec.resolution = updated.resolution
            return updated
