"""
Anomaly alert policy exports.
"""

from .config import NotificationPreferences, QuietHours
from .policy import build_alerts, build_anomaly_alert, is_quiet_hours, should_deliver
from .schema import AlertPayload, DeliveryDecision, NotificationPriority, NotificationType

__all__ = [
    "build_anomaly_alert",
    "build_alerts",
    "is_quiet_hours",
    "should_deliver",
    "NotificationPreferences",
    "QuietHours",
    "AlertPayload",
    "DeliveryDecision",
    "NotificationPriority",
    "NotificationType",
]
