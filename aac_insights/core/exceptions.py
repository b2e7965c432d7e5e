"""
Custom exceptions for AAC usage insights.

These exceptions provide clear error semantics across the system.
Use them to distinguish between data issues, storage problems, and configuration errors.
"""


class AACInsightsError(Exception):
    """Base exception for the package."""
    pass


class AnomalyDetectionError(AACInsightsError):
    """Raised when detection for a child cannot be completed."""
    pass


class AnomalyStoreError(AACInsightsError):
    """Raised when anomalies cannot be read or written."""
    pass


class AnomalyNotFoundError(AnomalyStoreError):
    """Raised when a lifecycle mutation targets an unknown anomaly id."""

    def __init__(self, anomaly_id: str):
        super().__init__(f"Anomaly not found: {anomaly_id}")
        self.anomaly_id = anomaly_id


class DataValidationError(AACInsightsError):
    """Raised when input data fails validation or ingestion."""
    pass


class ConfigurationError(AACInsightsError):
    """Raised when configuration is invalid or missing."""
    pass
