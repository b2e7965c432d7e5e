"""
Loading of aggregator exports for offline replay.

The upstream aggregator can export its daily snapshot and baseline tables as
CSV or JSON. Loading those files into an InMemoryMetricsProvider lets the
detection job be replayed without a database.

Design:
- Format detection from the file extension, or explicit format
- CSV goes through pandas; JSON accepts an array or NDJSON
- Bad rows are logged and skipped, they don't crash the load
- A missing or unreadable file raises DataValidationError
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Union

import pandas as pd
from pydantic import ValidationError

from aac_insights.core.exceptions import DataValidationError

from .providers import InMemoryMetricsProvider
from .schema import DailyMetricSnapshot, MetricBaseline

logger = logging.getLogger(__name__)


def _detect_format(filepath: Path, format: str) -> str:
    if format != "auto":
        return format
    suffix = filepath.suffix.lower()
    if suffix in (".json", ".ndjson", ".jsonl"):
        return "json"
    if suffix == ".csv":
        return "csv"
    raise DataValidationError(f"Cannot detect format of {filepath}; pass format explicitly")


def _read_csv(filepath: Path) -> Iterator[Dict[str, Any]]:
    try:
        df = pd.read_csv(filepath, dtype={"child_id": str})
    except pd.errors.EmptyDataError as e:
        raise DataValidationError(f"CSV file is empty: {filepath}") from e
    except Exception as e:
        logger.error(f"Error reading CSV file {filepath}: {e}")
        raise DataValidationError(f"Failed to read CSV: {e}") from e

    # NaN cells become None so Pydantic defaults apply
    df = df.astype(object).where(pd.notna(df), None)
    yield from df.to_dict(orient="records")


def _with_text_child_id(row: Dict[str, Any]) -> Dict[str, Any]:
    # Same as the CSV path, which reads child_id as text
    if row.get("child_id") is not None:
        row["child_id"] = str(row["child_id"])
    return row


def _read_json(filepath: Path) -> Iterator[Dict[str, Any]]:
    try:
        content = filepath.read_text(encoding="utf-8").lstrip("\ufeff").strip()
    except Exception as e:
        logger.error(f"Error reading JSON file {filepath}: {e}")
        raise DataValidationError(f"Failed to read JSON: {e}") from e

    if content.startswith("["):
        try:
            rows = json.loads(content)
        except json.JSONDecodeError as e:
            raise DataValidationError(f"Invalid JSON array: {e}") from e
        for idx, row in enumerate(rows):
            if isinstance(row, dict):
                yield _with_text_child_id(row)
            else:
                logger.warning(f"Non-dict entry at index {idx}: {type(row)}")
        return

    for line_num, line in enumerate(content.split("\n"), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            row = json.loads(line)
        except json.JSONDecodeError:
            logger.warning(f"Malformed JSON at line {line_num}: {line[:100]}")
            continue
        if isinstance(row, dict):
            yield _with_text_child_id(row)
        else:
            logger.warning(f"NDJSON line {line_num} not a dict: {type(row)}")


def read_records(filepath: Union[str, Path], format: str = "auto") -> Iterator[Dict[str, Any]]:
    """
    Yield raw row dicts from a CSV or JSON export.

    Args:
        filepath: Path to the export
        format: "csv", "json", or "auto" for detection by extension

    Raises:
        DataValidationError: If the file is missing, unreadable, or the format is unknown
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise DataValidationError(f"Input file not found: {filepath}")

    format = _detect_format(filepath, format)
    if format == "csv":
        yield from _read_csv(filepath)
    elif format == "json":
        yield from _read_json(filepath)
    else:
        raise DataValidationError(f"Unknown format: {format}")


def load_snapshots(filepath: Union[str, Path], format: str = "auto") -> List[DailyMetricSnapshot]:
    """Load DailyMetricSnapshot rows, skipping rows that fail validation."""
    snapshots: List[DailyMetricSnapshot] = []
    for idx, row in enumerate(read_records(filepath, format)):
        try:
            snapshots.append(DailyMetricSnapshot.model_validate(row))
        except ValidationError as e:
            logger.warning(f"Skipping invalid snapshot row {idx} in {filepath}: {e.errors()}")
    return snapshots


def _parse_factors(raw: Any) -> Optional[Dict[str, float]]:
    if raw is None or raw == "":
        return None
    if isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        # CSV exports carry the factor map as an embedded JSON object
        return json.loads(raw)
    raise ValueError(f"Unsupported day_of_week_factors value: {raw!r}")


def load_baselines(filepath: Union[str, Path], format: str = "auto") -> List[MetricBaseline]:
    """Load MetricBaseline rows, skipping rows that fail validation."""
    baselines: List[MetricBaseline] = []
    for idx, row in enumerate(read_records(filepath, format)):
        try:
            row = dict(row)
            row["day_of_week_factors"] = _parse_factors(row.get("day_of_week_factors"))
            baselines.append(MetricBaseline.model_validate(row))
        except (ValidationError, ValueError) as e:
            logger.warning(f"Skipping invalid baseline row {idx} in {filepath}: {e}")
    return baselines


def load_metrics_provider(
    snapshots_path: Union[str, Path],
    baselines_path: Union[str, Path],
    child_ids: Optional[List[str]] = None,
) -> InMemoryMetricsProvider:
    """
    Build an in-memory provider from a pair of aggregator exports.

    Every child that appears in either file is scanned by the job, plus any
    extra ids passed in child_ids.
    """
    snapshots = load_snapshots(snapshots_path)
    baselines = load_baselines(baselines_path)
    logger.info(
        f"Loaded {len(snapshots)} snapshots from {snapshots_path} "
        f"and {len(baselines)} baselines from {baselines_path}"
    )
    return InMemoryMetricsProvider(snapshots=snapshots, baselines=baselines, child_ids=child_ids)
