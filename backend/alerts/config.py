"""
Caregiver notification preferences for anomaly alerts.

Preferences are per user; the defaults match what a new caregiver account
starts with.
"""

from __future__ import annotations

import re
from typing import Dict

from pydantic import BaseModel, Field, field_validator

_HHMM = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)$")


class QuietHours(BaseModel):
    """
    Daily window during which non-critical alerts are held back.

    Notes:
    - start/end: "HH:MM" local times; start > end wraps past midnight.
    - timezone: IANA name the window is evaluated in.
    """

    enabled: bool = True
    start: str = "22:00"
    end: str = "07:00"
    timezone: str = "UTC"

    @field_validator("start", "end")
    @classmethod
    def _check_hhmm(cls, value: str) -> str:
        if not _HHMM.match(value):
            raise ValueError(f"Expected HH:MM, got {value!r}")
        return value

    def start_minutes(self) -> int:
        return _to_minutes(self.start)

    def end_minutes(self) -> int:
        return _to_minutes(self.end)


def _to_minutes(value: str) -> int:
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


class NotificationPreferences(BaseModel):
    """
    Per-user alert preferences.

    Notes:
    - enabled: master switch.
    - types: per notification type switch; a missing type is enabled.
    - quiet_hours: window in which only critical alerts go out.
    """

    enabled: bool = True
    types: Dict[str, bool] = Field(
        default_factory=lambda: {
            "anomaly_warning": True,
            "anomaly_critical": True,
        }
    )
    quiet_hours: QuietHours = Field(default_factory=QuietHours)
