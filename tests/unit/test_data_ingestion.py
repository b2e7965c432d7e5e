"""
Unit tests for loading aggregator exports.
"""

import json
from datetime import date

import pytest

from aac_insights.core.exceptions import DataValidationError
from aac_insights.data import (
    DayOfWeek,
    load_baselines,
    load_metrics_provider,
    load_snapshots,
    read_records,
)

SNAPSHOT_CSV = """child_id,date,total_taps,unique_symbols,session_count
child-1,2026-01-26,60,20,2
child-2,2026-01-26,102,,5
child-3,not-a-date,1,1,1
"""

BASELINE_CSV = """child_id,metric_name,mean,std_dev,sample_days,day_of_week_factors
child-1,total_taps,100,10,30,"{""sun"": 0.5, ""mon"": 1.1}"
child-1,unique_symbols,20,5,30,
child-2,total_taps,100,-1,30,
"""


def test_load_snapshots_from_csv(tmp_path):
    path = tmp_path / "daily.csv"
    path.write_text(SNAPSHOT_CSV)

    snapshots = load_snapshots(path)

    # The row with a bad date is skipped
    assert [s.child_id for s in snapshots] == ["child-1", "child-2"]
    assert snapshots[0].date == date(2026, 1, 26)
    assert snapshots[0].total_taps == 60
    # Empty cells default to zero
    assert snapshots[1].unique_symbols == 0


def test_load_baselines_from_csv_parses_factor_map(tmp_path):
    path = tmp_path / "baselines.csv"
    path.write_text(BASELINE_CSV)

    baselines = load_baselines(path)

    # Negative std_dev is rejected
    assert [(b.child_id, b.metric_name) for b in baselines] == [
        ("child-1", "total_taps"),
        ("child-1", "unique_symbols"),
    ]
    assert baselines[0].day_of_week_factors == {DayOfWeek.SUN: 0.5, DayOfWeek.MON: 1.1}
    assert baselines[1].day_of_week_factors is None


def test_load_snapshots_from_json_array(tmp_path):
    path = tmp_path / "daily.json"
    path.write_text(json.dumps([
        {"child_id": "a", "date": "2026-01-26", "total_taps": 5},
        "not a row",
        {"child_id": "b", "date": "2026-01-26", "session_count": 2},
    ]))

    snapshots = load_snapshots(path)
    assert [s.child_id for s in snapshots] == ["a", "b"]
    assert snapshots[1].session_count == 2


def test_load_baselines_from_ndjson(tmp_path):
    path = tmp_path / "baselines.ndjson"
    path.write_text(
        '{"child_id": "a", "metric_name": "total_taps", "mean": 10, "std_dev": 2, "sample_days": 9, '
        '"day_of_week_factors": {"sat": 0.8}}\n'
        "{broken\n"
        "\n"
        '{"child_id": "a", "metric_name": "session_count", "mean": 3, "std_dev": 1, "sample_days": 9}\n'
    )

    baselines = load_baselines(path)
    assert [b.metric_name for b in baselines] == ["total_taps", "session_count"]
    assert baselines[0].factor_for(DayOfWeek.SAT) == 0.8


def test_read_records_missing_file(tmp_path):
    with pytest.raises(DataValidationError):
        list(read_records(tmp_path / "missing.csv"))


def test_read_records_unknown_extension(tmp_path):
    path = tmp_path / "daily.parquet"
    path.write_text("")
    with pytest.raises(DataValidationError):
        list(read_records(path))


def test_read_records_explicit_format(tmp_path):
    path = tmp_path / "daily.txt"
    path.write_text('[{"child_id": "a"}]')
    assert list(read_records(path, format="json")) == [{"child_id": "a"}]


def test_load_metrics_provider_collects_children(tmp_path):
    snapshots = tmp_path / "daily.csv"
    baselines = tmp_path / "baselines.csv"
    snapshots.write_text(SNAPSHOT_CSV)
    baselines.write_text(BASELINE_CSV)

    provider = load_metrics_provider(snapshots, baselines, child_ids=["child-9"])

    assert provider.list_child_ids() == ["child-9", "child-1", "child-2"]
    assert provider.get_snapshot("child-1", date(2026, 1, 26)).total_taps == 60
    assert len(provider.get_baselines("child-1")) == 2
    assert provider.get_baselines("child-2") == []


def test_json_numeric_child_ids_load_as_text(tmp_path):
    snapshots = tmp_path / "daily.json"
    baselines = tmp_path / "baselines.ndjson"
    snapshots.write_text(json.dumps([{"child_id": 42, "date": "2026-01-26", "total_taps": 5}]))
    baselines.write_text('{"child_id": 42, "metric_name": "total_taps", "mean": 10, "std_dev": 2, "sample_days": 9}\n')

    provider = load_metrics_provider(snapshots, baselines)

    assert provider.list_child_ids() == ["42"]
    assert provider.get_snapshot("42", date(2026, 1, 26)).total_taps == 5
    assert provider.get_baselines("42")[0].child_id == "42"
