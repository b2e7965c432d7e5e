"""
Caregiver digest building blocks.

Turns persisted anomalies into the short sentences and titles the daily
digest shows. Generating the narrative itself happens elsewhere; these
helpers are the fixed-shape part it embeds.
"""

from __future__ import annotations

import math
from typing import Iterable, List, Optional, Sequence

from aac_insights.anomaly.schema import Anomaly, AnomalySeverity, AnomalyType
from aac_insights.data.schema import DailyMetricSnapshot

from .schema import AnomalySummary, MetricComparison

CRITICAL_PREFIX = "⚠️ "
PROGRESS_RATIO = 1.2


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _plain_number(value: float) -> str:
    """Whole numbers without a decimal point, never exponent notation."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:.4f}".rstrip("0").rstrip(".")


def format_anomaly_message(anomaly: Anomaly) -> str:
    """
    Human-readable sentence for one anomaly.

    Critical anomalies get a warning sign prefix. Types without a dedicated
    sentence fall back to the type name with spaces.
    """
    prefix = CRITICAL_PREFIX if anomaly.severity == AnomalySeverity.CRITICAL else ""
    actual = _plain_number(anomaly.actual_value)
    expected = _round_half_up(anomaly.expected_value)

    if anomaly.type == AnomalyType.USAGE_DROP:
        return f"{prefix}AAC usage was lower than usual ({actual} vs expected {expected})"
    if anomaly.type == AnomalyType.VOCABULARY_REGRESSION:
        return f"{prefix}Fewer unique words used than usual ({actual} vs expected {expected})"
    if anomaly.type == AnomalyType.SESSION_DROP:
        return f"{prefix}Fewer AAC sessions than usual"
    return f"{prefix}{anomaly.type.value.replace('_', ' ')}"


def summarize_anomalies(anomalies: Iterable[Anomaly]) -> List[AnomalySummary]:
    return [
        AnomalySummary(
            type=a.type,
            severity=a.severity,
            metric_name=a.metric_name,
            message=format_anomaly_message(a),
        )
        for a in anomalies
    ]


def digest_title(
    anomalies: Sequence[AnomalySummary],
    new_symbols: Sequence[str] = (),
    today: Optional[DailyMetricSnapshot] = None,
    yesterday: Optional[DailyMetricSnapshot] = None,
) -> str:
    """
    Pick the digest title.

    Priority: critical anomalies, then new words, then a >20% jump in taps.
    """
    if any(a.severity == AnomalySeverity.CRITICAL for a in anomalies):
        return "Daily Summary - Needs Attention"
    if new_symbols:
        return "Daily Summary - New Words! 🎉"
    if today and yesterday and today.total_taps > yesterday.total_taps * PROGRESS_RATIO:
        return "Daily Summary - Great Progress!"
    return "Daily Summary"


def _percent_change(current: int, previous: int) -> Optional[int]:
    if not previous:
        return None
    return _round_half_up((current - previous) / previous * 100)


def compare_metrics(
    today: Optional[DailyMetricSnapshot],
    yesterday: Optional[DailyMetricSnapshot],
) -> Optional[MetricComparison]:
    """Day-over-day comparison, or None when either day is missing."""
    if today is None or yesterday is None:
        return None
    return MetricComparison(
        taps_percent=_percent_change(today.total_taps, yesterday.total_taps),
        symbols_percent=_percent_change(today.unique_symbols, yesterday.unique_symbols),
    )
