"""
Pytest configuration and shared fixtures.

Provides baselines, snapshots and stores for unit and integration tests.
"""

from datetime import date
from typing import List

import pytest

from aac_insights.anomaly import InMemoryAnomalyStore
from aac_insights.core.config import DetectorConfig, StoreConfig
from aac_insights.data import DailyMetricSnapshot, InMemoryMetricsProvider, MetricBaseline
from aac_insights.db import init_db, make_engine, make_session_factory

# 2026-01-26 is a Monday
MONDAY = date(2026, 1, 26)


@pytest.fixture
def detector_config() -> DetectorConfig:
    """Default thresholds, independent of any .env overrides."""
    return DetectorConfig(
        warning_threshold=2.0,
        critical_threshold=3.0,
        min_sample_days=7,
        enable_day_of_week_adjustment=True,
    )


@pytest.fixture
def store_config() -> StoreConfig:
    return StoreConfig()


@pytest.fixture
def memory_store(store_config) -> InMemoryAnomalyStore:
    return InMemoryAnomalyStore(store_config)


def make_baselines(child_id: str, sample_days: int = 14) -> List[MetricBaseline]:
    """Baselines for all three tracked metrics with no day-of-week factors."""
    return [
        MetricBaseline(child_id=child_id, metric_name="total_taps", mean=100, std_dev=10, sample_days=sample_days),
        MetricBaseline(child_id=child_id, metric_name="unique_symbols", mean=20, std_dev=5, sample_days=sample_days),
        MetricBaseline(child_id=child_id, metric_name="session_count", mean=5, std_dev=1, sample_days=sample_days),
    ]


@pytest.fixture
def baseline_factory():
    return make_baselines


@pytest.fixture
def sample_provider() -> InMemoryMetricsProvider:
    """
    Three children on MONDAY:
    - child-1: taps and sessions far below baseline (2 anomalies)
    - child-2: an ordinary day (no anomalies)
    - child-3: vocabulary well above baseline (1 anomaly)
    """
    provider = InMemoryMetricsProvider()
    days = {
        "child-1": dict(total_taps=60, unique_symbols=20, session_count=2),
        "child-2": dict(total_taps=102, unique_symbols=21, session_count=5),
        "child-3": dict(total_taps=100, unique_symbols=32, session_count=5),
    }
    for child_id, values in days.items():
        provider.add_snapshot(DailyMetricSnapshot(child_id=child_id, date=MONDAY, **values))
        for baseline in make_baselines(child_id):
            provider.add_baseline(baseline)
    return provider


@pytest.fixture
def session_factory():
    """Session factory over a fresh in-memory SQLite database."""
    engine = make_engine("sqlite://")
    init_db(engine)
    yield make_session_factory(engine)
    engine.dispose()


def pytest_configure(config):
    """
    Pytest hook for custom configuration.

    Registers custom markers used throughout tests.
    """
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running (deferred CI)"
    )
