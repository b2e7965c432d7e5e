"""
Daily anomaly detection job.

Scans every known child for one usage day, persists what the detector
finds, and reports aggregate counts. A failure for one child is logged and
counted, it never aborts the batch.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from aac_insights.core.config import DetectorConfig, JobConfig, config
from aac_insights.data.providers import ChildDirectory

from .engine import AnomalyDetector
from .schema import DetectionJobResult
from .store import AnomalyStore

logger = logging.getLogger(__name__)


def default_target_date() -> date:
    """Yesterday in UTC, so the whole day has been aggregated."""
    return (datetime.now(timezone.utc) - timedelta(days=1)).date()


@dataclass
class DetectionJob:
    """
    Batch runner over all children.

    Children are independent, so with job_config.max_workers > 1 they are
    fanned out over a bounded thread pool. Only the aggregate counts are
    guaranteed; no ordering between children is.

    With job_config.child_timeout_seconds set, a child still running at the
    deadline is reported in failed_children but is not interrupted: it may
    still persist its anomalies after the result is returned.
    """

    detector: AnomalyDetector
    store: AnomalyStore
    children: ChildDirectory
    job_config: JobConfig = field(default_factory=lambda: config.anomaly.job)

    def run(
        self,
        target_date: Optional[date] = None,
        detector_config: Optional[DetectorConfig] = None,
    ) -> DetectionJobResult:
        """
        Run detection for every child.

        Args:
            target_date: usage day to analyse (default: yesterday, UTC)
            detector_config: thresholds (default: global config)

        Returns:
            DetectionJobResult with children_processed, anomalies_found and
            the ids of children that failed

        Raises:
            ConfigurationError: If the thresholds are inconsistent. Raised
                before any child is processed.
        """
        day = target_date or default_target_date()
        cfg = detector_config or config.anomaly.detector
        cfg.validate_thresholds()

        logger.info(f"Starting anomaly detection job for {day.isoformat()}")
        child_ids = self.children.list_child_ids()

        if self.job_config.max_workers == 1 and self.job_config.child_timeout_seconds is None:
            outcomes = [self._safe_process(child_id, day, cfg) for child_id in child_ids]
        else:
            outcomes = self._run_pooled(child_ids, day, cfg)

        total = sum(count for _, count in outcomes if count is not None)
        failed = [child_id for child_id, count in outcomes if count is None]

        logger.info(
            f"Anomaly detection complete: {len(child_ids)} children, "
            f"{total} anomalies found, {len(failed)} failed"
        )
        return DetectionJobResult(
            target_date=day,
            children_processed=len(child_ids),
            anomalies_found=total,
            failed_children=failed,
        )

    def process_child(self, child_id: str, day: date, detector_config: DetectorConfig) -> int:
        """Detect and persist for one child; returns the number of rows written."""
        detected = self.detector.detect(child_id, day, detector_config)
        return self.store.persist(child_id, day, detected)

    def _safe_process(
        self, child_id: str, day: date, detector_config: DetectorConfig
    ) -> Tuple[str, Optional[int]]:
        try:
            return child_id, self.process_child(child_id, day, detector_config)
        except Exception:
            logger.exception(f"Failed to detect anomalies for child {child_id}")
            return child_id, None

    def _run_pooled(
        self, child_ids: List[str], day: date, detector_config: DetectorConfig
    ) -> List[Tuple[str, Optional[int]]]:
        """
        Run children with at most max_workers in flight.

        A child is submitted only when a thread is free for it, so its timeout
        counts from the moment its work starts. A timed-out child keeps its
        thread; the children after it get a fresh executor instead of queueing
        behind it.
        """
        timeout = self.job_config.child_timeout_seconds
        pending = deque(child_ids)
        running: Dict[Future, Tuple[str, float]] = {}
        outcomes: List[Tuple[str, Optional[int]]] = []
        executors = [self._new_executor()]
        try:
            while pending or running:
                while pending and len(running) < self.job_config.max_workers:
                    child_id = pending.popleft()
                    future = executors[-1].submit(self._safe_process, child_id, day, detector_config)
                    running[future] = (child_id, time.monotonic())

                wait_for = None
                if timeout is not None:
                    oldest = min(started for _, started in running.values())
                    wait_for = max(0.0, oldest + timeout - time.monotonic())

                done, _ = wait(list(running), timeout=wait_for, return_when=FIRST_COMPLETED)
                for future in done:
                    del running[future]
                    outcomes.append(future.result())

                if timeout is None:
                    continue
                now = time.monotonic()
                expired = [
                    future
                    for future, (_, started) in running.items()
                    if not future.done() and now - started >= timeout
                ]
                for future in expired:
                    child_id, _ = running.pop(future)
                    logger.error(
                        f"Timed out after {timeout}s detecting anomalies for child {child_id}"
                    )
                    outcomes.append((child_id, None))
                if expired:
                    executors.append(self._new_executor())
        finally:
            # Never wait on a stuck child; nothing is queued, so nothing is cancelled
            for executor in executors:
                executor.shutdown(wait=False)
        return outcomes

    def _new_executor(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(
            max_workers=self.job_config.max_workers,
            thread_name_prefix="anomaly-detection",
        )
