"""
Unit tests for configuration.
"""

import logging

import pytest

from aac_insights.core.config import (
    Config,
    DetectorConfig,
    DuplicatePolicy,
    JobConfig,
    StoreConfig,
)
from aac_insights.core.exceptions import ConfigurationError
from aac_insights.core.logging_config import setup_logging


def test_detector_defaults():
    cfg = DetectorConfig()
    assert cfg.warning_threshold == 2.0
    assert cfg.critical_threshold == 3.0
    assert cfg.min_sample_days == 7
    assert cfg.enable_day_of_week_adjustment is True
    cfg.validate_thresholds()


def test_store_and_job_defaults():
    store = StoreConfig()
    assert store.duplicate_policy == DuplicatePolicy.APPEND
    assert store.value_precision == 4
    assert store.default_unacknowledged_limit == 20
    assert store.default_recent_days == 7

    job = JobConfig()
    assert job.max_workers == 1
    assert job.child_timeout_seconds is None


@pytest.mark.parametrize("warning, critical", [(3.0, 3.0), (3.5, 3.0)])
def test_inverted_thresholds_are_rejected(warning, critical):
    with pytest.raises(ConfigurationError):
        DetectorConfig(warning_threshold=warning, critical_threshold=critical).validate_thresholds()


def test_non_positive_thresholds_fail_validation():
    with pytest.raises(ValueError):
        DetectorConfig(warning_threshold=0)


def test_environment_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("AAC_LOGS_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("AAC_ANOMALY__DETECTOR__WARNING_THRESHOLD", "2.5")
    monkeypatch.setenv("AAC_ANOMALY__STORE__DUPLICATE_POLICY", "skip")
    monkeypatch.setenv("AAC_ANOMALY__JOB__MAX_WORKERS", "4")

    cfg = Config()

    assert cfg.anomaly.detector.warning_threshold == 2.5
    assert cfg.anomaly.detector.critical_threshold == 3.0
    assert cfg.anomaly.store.duplicate_policy == DuplicatePolicy.SKIP
    assert cfg.anomaly.job.max_workers == 4
    assert cfg.logs_dir.is_dir()


def test_setup_logging_is_idempotent():
    logger = setup_logging("aac_insights.test_logging", level="debug", log_to_file=False)
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1
    assert logging.getLogger("sqlalchemy.engine").level == logging.INFO

    again = setup_logging("aac_insights.test_logging", level="WARNING", log_to_file=False)
    assert again is logger
    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.WARNING
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
