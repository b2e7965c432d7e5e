"""
Anomaly lifecycle transitions.

Acknowledgment and resolution are two independent trails on the record:

    OPEN ──acknowledge──▶ ACKNOWLEDGED
      │                        │
      └──────resolve──────▶ RESOLVED ◀──resolve──┘

Both transitions are reachable from OPEN. RESOLVED is terminal: there is no
reopen. Transitions return an updated copy and never mutate their input.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from .schema import RESOLUTION_MAX_LENGTH, Anomaly, AnomalyState


def _now() -> datetime:
    return datetime.now(timezone.utc)


def state_of(anomaly: Anomaly) -> AnomalyState:
    """Resolution wins over acknowledgment."""
    return anomaly.state


def acknowledge(anomaly: Anomaly, user_id: str, at: Optional[datetime] = None) -> Anomaly:
    """
    Record an acknowledgment.

    Idempotent: an already acknowledged anomaly is returned unchanged, so
    the first acknowledgment's time and user are kept. Acknowledging a
    resolved anomaly records the acknowledgment; the state stays RESOLVED.
    """
    if anomaly.acknowledged:
        return anomaly
    return anomaly.model_copy(
        update={
            "acknowledged": True,
            "acknowledged_at": at or _now(),
            "acknowledged_by": user_id,
        }
    )


def resolve(anomaly: Anomaly, resolution: str, at: Optional[datetime] = None) -> Anomaly:
    """
    Record a resolution. Does not require a prior acknowledgment.

    A resolved anomaly is returned unchanged.

    Raises:
        ValueError: If the resolution text exceeds RESOLUTION_MAX_LENGTH
    """
    if len(resolution) > RESOLUTION_MAX_LENGTH:
        raise ValueError(f"Resolution must be at most {RESOLUTION_MAX_LENGTH} characters")
    if anomaly.resolved_at is not None:
        return anomaly
    return anomaly.model_copy(
        update={
            "resolved_at": at or _now(),
            "resolution": resolution,
        }
    )
