"""
Integration tests: detection job end to end over SQLite.

Covers the full path from the aggregator tables through the detector and
job into the anomalies table, then the lifecycle queries on top.
"""

from datetime import date

import pytest

from aac_insights.anomaly import AnomalyDetector, AnomalyState, AnomalyType, DetectionJob
from aac_insights.core.config import DuplicatePolicy, JobConfig, StoreConfig
from aac_insights.core.exceptions import AnomalyNotFoundError
from aac_insights.data import MetricBaseline
from aac_insights.db import AnomalyRecord, SqlAnomalyStore, SqlMetricsRepository

MONDAY = date(2026, 1, 26)
SUNDAY = date(2026, 2, 1)

pytestmark = pytest.mark.integration


@pytest.fixture
def repo(session_factory, sample_provider):
    repo = SqlMetricsRepository(session_factory)
    for child_id in sample_provider.list_child_ids():
        repo.save_snapshot(sample_provider.get_snapshot(child_id, MONDAY))
        for baseline in sample_provider.get_baselines(child_id):
            repo.save_baseline(baseline)
    return repo


def _job(repo, store):
    return DetectionJob(
        detector=AnomalyDetector(snapshots=repo, baselines=repo),
        store=store,
        children=repo,
        job_config=JobConfig(),
    )


def test_repository_round_trips_inputs(repo):
    assert repo.list_child_ids() == ["child-1", "child-2", "child-3"]
    assert repo.get_snapshot("child-1", MONDAY).total_taps == 60
    assert repo.get_snapshot("child-1", SUNDAY) is None
    assert {b.metric_name for b in repo.get_baselines("child-1")} == {
        "total_taps",
        "unique_symbols",
        "session_count",
    }
    assert repo.get_baselines("nobody") == []


def test_baseline_factors_survive_storage(repo):
    repo.save_baseline(
        MetricBaseline(
            child_id="child-1",
            metric_name="total_taps",
            mean=100,
            std_dev=10,
            sample_days=30,
            day_of_week_factors={"sun": 0.5},
        )
    )
    taps = next(b for b in repo.get_baselines("child-1") if b.metric_name == "total_taps")
    assert taps.sample_days == 30
    assert taps.day_of_week_factors == {"sun": 0.5}


def test_job_persists_anomalies(repo, session_factory, detector_config):
    store = SqlAnomalyStore(session_factory, StoreConfig())
    result = _job(repo, store).run(MONDAY, detector_config)

    assert result.children_processed == 3
    assert result.anomalies_found == 3
    assert result.failed_children == []

    child_1 = store.get_for_date("child-1", MONDAY)
    assert {a.type for a in child_1} == {AnomalyType.USAGE_DROP, AnomalyType.SESSION_DROP}
    taps = next(a for a in child_1 if a.metric_name == "total_taps")
    assert taps.expected_value == 100.0
    assert taps.actual_value == 60.0
    assert taps.deviation_score == 4.0
    assert taps.context.baseline_period_days == 14
    assert taps.detected_at.tzinfo is not None


def test_rerun_policies(repo, session_factory, detector_config):
    append = SqlAnomalyStore(session_factory, StoreConfig(duplicate_policy=DuplicatePolicy.APPEND))
    _job(repo, append).run(MONDAY, detector_config)
    _job(repo, append).run(MONDAY, detector_config)
    assert len(append.get_for_date("child-3", MONDAY)) == 2

    skip = SqlAnomalyStore(session_factory, StoreConfig(duplicate_policy=DuplicatePolicy.SKIP))
    assert _job(repo, skip).run(MONDAY, detector_config).anomalies_found == 0

    replace = SqlAnomalyStore(session_factory, StoreConfig(duplicate_policy=DuplicatePolicy.REPLACE))
    assert _job(repo, replace).run(MONDAY, detector_config).anomalies_found == 3
    assert len(replace.get_for_date("child-3", MONDAY)) == 1


def test_lifecycle_through_sql_store(repo, session_factory, detector_config):
    store = SqlAnomalyStore(session_factory)
    _job(repo, store).run(MONDAY, detector_config)

    pending = store.get_unacknowledged("child-1")
    assert len(pending) == 2

    acked = store.acknowledge(pending[0].id, "parent-1")
    assert acked.state == AnomalyState.ACKNOWLEDGED
    assert acked.resolved_at is None
    assert [a.id for a in store.get_unacknowledged("child-1")] == [pending[1].id]

    resolved = store.resolve(pending[1].id, "Child was at grandma's")
    assert resolved.state == AnomalyState.RESOLVED
    assert not resolved.acknowledged
    assert store.get(pending[1].id).resolution == "Child was at grandma's"

    # Both stay visible in the recent window
    assert len(store.get_recent("child-1", today=MONDAY)) == 2
    assert store.get_recent("child-1", days=0, today=date(2026, 1, 27)) == []

    with pytest.raises(AnomalyNotFoundError):
        store.acknowledge("missing", "parent-1")
    with pytest.raises(ValueError):
        store.resolve(pending[0].id, "x" * 256)


def test_job_survives_a_failing_child(repo, session_factory, detector_config):
    class BrokenRepo(SqlMetricsRepository):
        def get_baselines(self, child_id):
            if child_id == "child-2":
                raise RuntimeError("database went away")
            return super().get_baselines(child_id)

    broken = BrokenRepo(session_factory)
    job = DetectionJob(
        detector=AnomalyDetector(snapshots=repo, baselines=broken),
        store=SqlAnomalyStore(session_factory),
        children=repo,
        job_config=JobConfig(),
    )
    result = job.run(MONDAY, detector_config)

    assert result.children_processed == 3
    assert result.anomalies_found == 3
    assert result.failed_children == ["child-2"]


def test_acknowledged_by_accepts_external_auth_ids(repo, session_factory, detector_config):
    assert AnomalyRecord.__table__.c.acknowledged_by.type.length == 255

    store = SqlAnomalyStore(session_factory)
    _job(repo, store).run(MONDAY, detector_config)
    anomaly_id = store.get_unacknowledged("child-3")[0].id
    user_id = "auth0|oauth2|google-apps|" + "9" * 40

    store.acknowledge(anomaly_id, user_id)
    assert store.get(anomaly_id).acknowledged_by == user_id
