"""
Core module: Configuration, logging, and exception handling.
"""

from .config import (
    AnomalyConfig,
    Config,
    DetectorConfig,
    DuplicatePolicy,
    JobConfig,
    StoreConfig,
    config,
)
from .exceptions import (
    AACInsightsError,
    AnomalyDetectionError,
    AnomalyNotFoundError,
    AnomalyStoreError,
    ConfigurationError,
    DataValidationError,
)

__all__ = [
    "Config",
    "config",
    "AnomalyConfig",
    "DetectorConfig",
    "DuplicatePolicy",
    "JobConfig",
    "StoreConfig",
    "AACInsightsError",
    "AnomalyDetectionError",
    "AnomalyNotFoundError",
    "AnomalyStoreError",
    "ConfigurationError",
    "DataValidationError",
]
