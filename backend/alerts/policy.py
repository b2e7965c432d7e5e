"""
Anomaly alert policy.

Maps a persisted anomaly to a push payload and decides, against the
recipient's preferences, whether it goes out now. Every anomaly the detector
persists is alert-worthy; quiet hours hold back warnings but never
critical alerts.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, List, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from aac_insights.anomaly.schema import Anomaly, AnomalySeverity
from backend.digest import format_anomaly_message

from .config import NotificationPreferences
from .schema import AlertPayload, DeliveryDecision, NotificationPriority, NotificationType

logger = logging.getLogger(__name__)


def build_anomaly_alert(
    anomaly: Anomaly,
    child_name: str,
    message: Optional[str] = None,
) -> AlertPayload:
    """
    Build the push payload for one anomaly.

    Args:
        anomaly: persisted anomaly
        child_name: name shown in the title
        message: body text; defaults to the digest sentence for the anomaly
    """
    body = message or format_anomaly_message(anomaly)
    common = {
        "body": body,
        "child_id": anomaly.child_id,
        "anomaly_id": anomaly.id,
        "data": {"anomaly_id": anomaly.id, "metric_name": anomaly.metric_name},
    }
    if anomaly.severity == AnomalySeverity.CRITICAL:
        return AlertPayload(
            type=NotificationType.ANOMALY_CRITICAL,
            priority=NotificationPriority.CRITICAL,
            title=f"⚠️ {child_name}: Needs Attention",
            sound="alert",
            **common,
        )
    return AlertPayload(
        type=NotificationType.ANOMALY_WARNING,
        priority=NotificationPriority.HIGH,
        title=f"{child_name}: Something to Watch",
        **common,
    )


def build_alerts(anomalies: Iterable[Anomaly], child_name: str) -> List[AlertPayload]:
    return [build_anomaly_alert(a, child_name) for a in anomalies]


def is_quiet_hours(prefs: NotificationPreferences, now: Optional[datetime] = None) -> bool:
    """
    True if now falls inside the recipient's quiet hours.

    An unknown timezone is logged and treated as not quiet.
    """
    quiet = prefs.quiet_hours
    if not quiet.enabled:
        return False

    try:
        tz = ZoneInfo(quiet.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Failed to resolve timezone {quiet.timezone!r}; ignoring quiet hours")
        return False

    local = (now or datetime.now(timezone.utc)).astimezone(tz)
    current = local.hour * 60 + local.minute
    start, end = quiet.start_minutes(), quiet.end_minutes()

    if start > end:
        return current >= start or current < end
    return start <= current < end


def should_deliver(
    alert: AlertPayload,
    prefs: NotificationPreferences,
    now: Optional[datetime] = None,
) -> DeliveryDecision:
    """Apply the recipient's preferences to one alert."""
    if not prefs.enabled:
        return DeliveryDecision(deliver=False, reason="Notifications disabled")
    if prefs.types.get(alert.type.value) is False:
        return DeliveryDecision(deliver=False, reason=f"{alert.type.value} notifications disabled")
    if alert.priority != NotificationPriority.CRITICAL and is_quiet_hours(prefs, now):
        return DeliveryDecision(deliver=False, reason="Quiet hours active")
    return DeliveryDecision(deliver=True)
