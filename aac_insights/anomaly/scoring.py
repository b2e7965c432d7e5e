"""
Severity and type policy for anomalies.

Maps Z-scores to severity levels with configurable thresholds, and a
metric name plus direction to the caregiver-facing anomaly type.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from aac_insights.core.config import DetectorConfig
from aac_insights.data.schema import MetricName

from .schema import AnomalySeverity, AnomalyType

# (decrease, increase) per metric
_TYPES_BY_METRIC: Dict[str, Tuple[AnomalyType, AnomalyType]] = {
    MetricName.TOTAL_TAPS.value: (AnomalyType.USAGE_DROP, AnomalyType.USAGE_SPIKE),
    MetricName.UNIQUE_SYMBOLS.value: (
        AnomalyType.VOCABULARY_REGRESSION,
        AnomalyType.VOCABULARY_EXPANSION,
    ),
    MetricName.SESSION_COUNT.value: (AnomalyType.SESSION_DROP, AnomalyType.SESSION_SPIKE),
}

_DEFAULT_TYPES = (AnomalyType.USAGE_DROP, AnomalyType.USAGE_SPIKE)


@dataclass
class SeverityMapper:
    """
    Maps Z-scores to severity levels.

    Returns None below the warning threshold.
    """

    thresholds: DetectorConfig

    def zscore_severity(self, zscore: float) -> Optional[AnomalySeverity]:
        z = abs(zscore)
        if z >= self.thresholds.critical_threshold:
            return AnomalySeverity.CRITICAL
        if z >= self.thresholds.warning_threshold:
            return AnomalySeverity.WARNING
        return None


def anomaly_type_for(metric_name: str, zscore: float) -> AnomalyType:
    """
    Return the anomaly type for a metric and the sign of its Z-score.

    Negative Z is a decrease; zero or positive is an increase. Unknown
    metrics fall back to usage_drop / usage_spike.
    """
    decrease, increase = _TYPES_BY_METRIC.get(metric_name, _DEFAULT_TYPES)
    return decrease if zscore < 0 else increase

