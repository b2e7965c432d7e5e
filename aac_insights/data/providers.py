"""
Read-side interfaces for detection inputs.

The detector and the job only depend on these abstract providers, so the
same engine runs against the SQL tables, an aggregator export loaded from
disk, or plain objects in tests.

Design:
- Missing data is returned as None / empty list, never raised
- Providers are read-only; nothing here mutates inputs
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from .schema import DailyMetricSnapshot, MetricBaseline


class SnapshotProvider(ABC):
    """Source of DailyMetricSnapshot rows."""

    @abstractmethod
    def get_snapshot(self, child_id: str, day: date) -> Optional[DailyMetricSnapshot]:
        """Return the snapshot for (child_id, day), or None if the day has no row."""
        pass


class BaselineProvider(ABC):
    """Source of MetricBaseline rows."""

    @abstractmethod
    def get_baselines(self, child_id: str) -> List[MetricBaseline]:
        """Return every baseline stored for the child (possibly empty)."""
        pass


class ChildDirectory(ABC):
    """Source of the child ids the detection job scans."""

    @abstractmethod
    def list_child_ids(self) -> List[str]:
        pass


class InMemoryMetricsProvider(SnapshotProvider, BaselineProvider, ChildDirectory):
    """
    Dict-backed provider for all three inputs.

    Children are known either explicitly (add_child) or implicitly through
    any snapshot or baseline added for them. Insertion order is kept.
    """

    def __init__(
        self,
        snapshots: Optional[Iterable[DailyMetricSnapshot]] = None,
        baselines: Optional[Iterable[MetricBaseline]] = None,
        child_ids: Optional[Iterable[str]] = None,
    ) -> None:
        self._children: Dict[str, None] = {}
        self._snapshots: Dict[Tuple[str, date], DailyMetricSnapshot] = {}
        self._baselines: Dict[str, Dict[str, MetricBaseline]] = {}

        for child_id in child_ids or []:
            self.add_child(child_id)
        for snapshot in snapshots or []:
            self.add_snapshot(snapshot)
        for baseline in baselines or []:
            self.add_baseline(baseline)

    def add_child(self, child_id: str) -> None:
        self._children.setdefault(child_id, None)

    def add_snapshot(self, snapshot: DailyMetricSnapshot) -> None:
        self.add_child(snapshot.child_id)
        self._snapshots[(snapshot.child_id, snapshot.date)] = snapshot

    def add_baseline(self, baseline: MetricBaseline) -> None:
        # One baseline per (child, metric): a later row replaces an earlier one
        self.add_child(baseline.child_id)
        self._baselines.setdefault(baseline.child_id, {})[baseline.metric_name] = baseline

    def get_snapshot(self, child_id: str, day: date) -> Optional[DailyMetricSnapshot]:
        return self._snapshots.get((child_id, day))

    def get_baselines(self, child_id: str) -> List[MetricBaseline]:
        return list(self._baselines.get(child_id, {}).values())

    def list_child_ids(self) -> List[str]:
        return list(self._children)
