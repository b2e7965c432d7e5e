"""
Schema for anomaly alerts handed to the notification service.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field


class NotificationType(str, Enum):
    ANOMALY_WARNING = "anomaly_warning"
    ANOMALY_CRITICAL = "anomaly_critical"


class NotificationPriority(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"


class AlertPayload(BaseModel):
    """
    Push payload for one anomaly.

    Fields:
    - type / priority: routing for the delivery service
    - title / body: text shown to the caregiver
    - sound: platform sound name
    - child_id / anomaly_id: references for deep links
    - data: extra key/values forwarded untouched
    """

    type: NotificationType
    priority: NotificationPriority
    title: str
    body: str
    sound: str = "default"
    child_id: Optional[str] = None
    anomaly_id: Optional[str] = None
    data: Dict[str, str] = Field(default_factory=dict)


class DeliveryDecision(BaseModel):
    """Whether an alert should be delivered now, and why not if held back."""

    deliver: bool
    reason: Optional[str] = None
