"""
Command line entry point for AAC usage anomaly detection.

Runs the daily detection job on demand and exposes the anomaly lifecycle
operations for operators:

    python -m backend.main detect --date 2026-01-26
    python -m backend.main detect --snapshots daily.csv --baselines baselines.csv
    python -m backend.main unacknowledged CHILD_ID
    python -m backend.main recent CHILD_ID --days 14
    python -m backend.main acknowledge ANOMALY_ID USER_ID
    python -m backend.main resolve ANOMALY_ID "Child was unwell"

Results are printed as JSON.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import date
from typing import Any, List, Optional

from dotenv import load_dotenv

from aac_insights.anomaly import AnomalyDetector, DetectionJob
from aac_insights.core.config import DetectorConfig, DuplicatePolicy, JobConfig, config
from aac_insights.core.exceptions import AACInsightsError
from aac_insights.core.logging_config import setup_logging
from aac_insights.data import load_metrics_provider
from aac_insights.db import SqlAnomalyStore, SqlMetricsRepository, init_db, make_engine, make_session_factory

load_dotenv()

logger = logging.getLogger("backend")


def _parse_date(value: str) -> date:
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"Expected YYYY-MM-DD, got {value!r}") from e


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="AAC usage anomaly detection")
    parser.add_argument("--database-url", default=None, help="Overrides AAC_DATABASE_URL")
    parser.add_argument("--log-level", default=None, help="Overrides AAC_LOG_LEVEL")
    sub = parser.add_subparsers(dest="command", required=True)

    detect = sub.add_parser("detect", help="Run the detection job for one day")
    defaults = config.anomaly.detector
    detect.add_argument("--date", type=_parse_date, default=None, help="Usage day (default: yesterday UTC)")
    detect.add_argument("--warning-threshold", type=float, default=defaults.warning_threshold)
    detect.add_argument("--critical-threshold", type=float, default=defaults.critical_threshold)
    detect.add_argument("--min-sample-days", type=int, default=defaults.min_sample_days)
    detect.add_argument(
        "--no-day-of-week",
        action="store_true",
        help="Compare against the raw baseline mean",
    )
    detect.add_argument("--workers", type=int, default=config.anomaly.job.max_workers)
    detect.add_argument("--timeout", type=float, default=config.anomaly.job.child_timeout_seconds)
    detect.add_argument(
        "--duplicate-policy",
        choices=[p.value for p in DuplicatePolicy],
        default=config.anomaly.store.duplicate_policy.value,
    )
    detect.add_argument("--snapshots", default=None, help="Snapshot export (CSV/JSON) instead of the database")
    detect.add_argument("--baselines", default=None, help="Baseline export (CSV/JSON) instead of the database")

    unack = sub.add_parser("unacknowledged", help="List unacknowledged anomalies for a child")
    unack.add_argument("child_id")
    unack.add_argument("--limit", type=int, default=None)

    recent = sub.add_parser("recent", help="List recent anomalies for a child")
    recent.add_argument("child_id")
    recent.add_argument("--days", type=int, default=None)

    ack = sub.add_parser("acknowledge", help="Acknowledge an anomaly")
    ack.add_argument("anomaly_id")
    ack.add_argument("user_id")

    res = sub.add_parser("resolve", help="Resolve an anomaly")
    res.add_argument("anomaly_id")
    res.add_argument("resolution")

    return parser


def _print_json(payload: Any) -> None:
    print(json.dumps(payload, indent=2, default=str))


def _run_detect(args: argparse.Namespace, session_factory) -> Any:
    if bool(args.snapshots) != bool(args.baselines):
        raise AACInsightsError("--snapshots and --baselines must be given together")

    detector_config = DetectorConfig(
        warning_threshold=args.warning_threshold,
        critical_threshold=args.critical_threshold,
        min_sample_days=args.min_sample_days,
        enable_day_of_week_adjustment=not args.no_day_of_week,
    )
    store_config = config.anomaly.store.model_copy(
        update={"duplicate_policy": DuplicatePolicy(args.duplicate_policy)}
    )
    job_config = JobConfig(max_workers=args.workers, child_timeout_seconds=args.timeout)

    if args.snapshots:
        metrics = load_metrics_provider(args.snapshots, args.baselines)
        # anomalies reference children by foreign key
        repo = SqlMetricsRepository(session_factory)
        for child_id in metrics.list_child_ids():
            repo.save_child(child_id)
    else:
        metrics = SqlMetricsRepository(session_factory)

    job = DetectionJob(
        detector=AnomalyDetector(snapshots=metrics, baselines=metrics),
        store=SqlAnomalyStore(session_factory, store_config),
        children=metrics,
        job_config=job_config,
    )
    return job.run(args.date, detector_config).model_dump(mode="json")


def main(argv: Optional[List[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    setup_logging(level=args.log_level)
    setup_logging("backend", level=args.log_level)

    engine = make_engine(args.database_url)
    init_db(engine)
    session_factory = make_session_factory(engine)
    store = SqlAnomalyStore(session_factory)

    try:
        if args.command == "detect":
            _print_json(_run_detect(args, session_factory))
        elif args.command == "unacknowledged":
            rows = store.get_unacknowledged(args.child_id, args.limit)
            _print_json([a.model_dump(mode="json") for a in rows])
        elif args.command == "recent":
            rows = store.get_recent(args.child_id, args.days)
            _print_json([a.model_dump(mode="json") for a in rows])
        elif args.command == "acknowledge":
            _print_json(store.acknowledge(args.anomaly_id, args.user_id).model_dump(mode="json"))
        elif args.command == "resolve":
            _print_json(store.resolve(args.anomaly_id, args.resolution).model_dump(mode="json"))
    except (AACInsightsError, ValueError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1
    finally:
        engine.dispose()

    return 0


if __name__ == "__main__":
    sys.exit(main())
