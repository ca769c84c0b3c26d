from types import SimpleNamespace

import pytest

from tintix.services.time_performance_service import efficiency_band, summarize_time_performance


def _entry(installer_id, minutes, windows, job_id=1):
    return SimpleNamespace(installer_id=installer_id, time_minutes=minutes, windows_completed=windows, job_entry_id=job_id)


def test_ranked_ascending_by_average_time_per_window():
    rows = summarize_time_performance(
        [
            _entry("slow", 210, 7),
            _entry("fast", 105, 7),
            _entry("mid", 140, 7),
        ]
    )
    assert [r.total_minutes for r in rows] == [105, 140, 210]
    assert [r.avg_time_per_window for r in rows] == [15.0, 20.0, 30.0]


def test_ties_keep_first_seen_order():
    rows = summarize_time_performance(
        [
            _entry("b", 70, 7),
            _entry("a", 70, 7),
            _entry("c", 10, 1),
        ]
    )

    assert [r.avg_time_per_window for r in rows] == [10.0, 10.0, 10.0]
    assert [r.total_minutes for r in rows] == [70, 70, 10]


def test_minutes_windows_and_jobs_accumulate_per_installer():
    alice = SimpleNamespace(id="alice", first_name="Alice")
    rows = summarize_time_performance(
        [
            _entry("alice", 60, 3, job_id=1),
            _entry("alice", 40, 2, job_id=2),
            _entry("alice", 20, 0, job_id=2),
        ],
        {"alice": alice},
    )
    assert len(rows) == 1
    row = rows[0]
    assert row.installer is alice
    assert row.total_minutes == 120
    assert row.total_windows == 5
    assert row.avg_time_per_window == 24.0
    assert row.job_count == 2
    assert row.efficiency == "medium"


def test_zero_windows_average_is_zero():
    rows = summarize_time_performance([_entry("x", 45, 0)])
    assert rows[0].avg_time_per_window == 0
    assert rows[0].efficiency == "high"


def test_no_entries_gives_empty_list():
    assert summarize_time_performance([]) == []


@pytest.mark.parametrize(
    "avg, band",
    [(0, "high"), (20, "high"), (20.01, "medium"), (30, "medium"), (30.5, "low")],
)
def test_efficiency_bands(avg, band):
    assert efficiency_band(avg) == band
