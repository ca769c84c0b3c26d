from datetime import datetime
from types import SimpleNamespace

from tintix.database import SessionLocal
from tintix.services import metrics_service
from tintix.services.date_range import DateRange


def _job(job_id):
    return SimpleNamespace(id=job_id)


def _redo(job_id, installer_id="a@example.com", part="windshield"):
    return SimpleNamespace(job_entry_id=job_id, installer_id=installer_id, part=part)


def _assignment(job_id, installer_id, variance):
    return SimpleNamespace(job_entry_id=job_id, installer_id=installer_id, time_variance=variance)


def test_empty_set_has_neutral_defaults():
    m = metrics_service.summarize_performance([])
    assert m.total_vehicles == 0
    assert m.total_windows == 0
    assert m.total_redos == 0
    assert m.success_rate == 100
    assert m.avg_time_variance == 0
    assert m.active_installers == 0
    assert m.has_data is False


def test_ten_jobs_three_redos():
    jobs = [_job(i) for i in range(1, 11)]
    redos = [_redo(1), _redo(2), _redo(2, part="quarter")]
    m = metrics_service.summarize_performance(jobs, redos)
    assert m.total_vehicles == 10
    assert m.total_windows == 70
    assert m.total_redos == 3
    # 67 / 70 = 95.71...
    assert m.success_rate == 96
    assert m.has_data is True


def test_total_windows_is_seven_per_vehicle():
    for n in (1, 3, 12):
        m = metrics_service.summarize_performance([_job(i) for i in range(n)])
        assert m.total_windows == n * metrics_service.WINDOWS_PER_VEHICLE


def test_success_rate_rounds_half_up():
    # 1 / 8 = 12.5
    assert metrics_service.success_rate(8, 7) == 13
    assert metrics_service.success_rate(7, 0) == 100
    assert metrics_service.success_rate(0, 4) == 100
    assert metrics_service.success_rate(14, 1) == 93


def test_child_rows_outside_job_set_are_ignored():
    jobs = [_job(1), _job(2)]
    redos = [_redo(1), _redo(99)]
    assignments = [
        _assignment(1, "a@example.com", 10),
        _assignment(2, "b@example.com", -5),
        _assignment(99, "c@example.com", 1000),
    ]
    m = metrics_service.summarize_performance(jobs, redos, assignments)
    assert m.total_redos == 1
    assert m.active_installers == 2
    assert m.avg_time_variance == 2.5


def test_avg_time_variance_rounds_to_two_places():
    jobs = [_job(1)]
    assignments = [_assignment(1, "a", 1), _assignment(1, "b", 1), _assignment(1, "c", 2)]
    m = metrics_service.summarize_performance(jobs, [], assignments)
    assert m.avg_time_variance == 1.33


def test_redo_breakdown_orders_by_count():
    redos = [_redo(1, part="quarter"), _redo(1, part="windshield"), _redo(2, part="quarter"), _redo(3, part="rollups")]
    rows = metrics_service.summarize_redo_breakdown(redos)
    assert rows[0] == {"part": "quarter", "count": 2}
    assert [r["part"] for r in rows[1:]] == ["rollups", "windshield"]


def test_window_performance_per_installer():
    alice = SimpleNamespace(id="alice")
    bob = SimpleNamespace(id="bob")
    idle = SimpleNamespace(id="idle")
    time_entries = [
        SimpleNamespace(installer_id="alice", windows_completed=7),
        SimpleNamespace(installer_id="alice", windows_completed=7),
        SimpleNamespace(installer_id="bob", windows_completed=10),
    ]
    redos = [_redo(1, installer_id="bob"), _redo(2, installer_id="bob")]

    perf = metrics_service.summarize_window_performance([alice, bob, idle], time_entries, redos)

    assert perf.windows_completed == 24
    assert perf.redo_count == 2
    assert perf.success_rate == 92
    by_id = {r.installer.id: r for r in perf.installers}
    assert by_id["alice"].success_rate == 100
    assert by_id["bob"].success_rate == 80
    assert by_id["idle"].windows_completed == 0
    assert by_id["idle"].success_rate == 100
    assert perf.installers[0].installer.id == "alice"


def test_top_performers_rank_by_vehicles_less_redos():
    alice = SimpleNamespace(id="alice")
    bob = SimpleNamespace(id="bob")
    carol = SimpleNamespace(id="carol")
    idle = SimpleNamespace(id="idle")
    assignments = (
        [_assignment(i, "alice", 0) for i in range(1, 7)]
        + [_assignment(i, "bob", 0) for i in range(7, 10)]
        + [_assignment(i, "carol", 0) for i in range(10, 13)]
    )
    redos = [_redo(1, "alice"), _redo(2, "alice"), _redo(7, "bob")]

    rows = metrics_service.summarize_top_performers([idle, bob, carol, alice], assignments, redos)

    assert [r.installer.id for r in rows] == ["alice", "carol", "bob", "idle"]
    by_id = {r.installer.id: r for r in rows}
    assert by_id["alice"].vehicle_count == 6
    assert by_id["alice"].redo_count == 2
    # 4 / 6 = 66.66...
    assert by_id["alice"].success_rate == 66.7
    assert by_id["carol"].success_rate == 100.0
    assert by_id["bob"].success_rate == 66.7
    assert by_id["idle"].vehicle_count == 0
    assert by_id["idle"].success_rate == 100.0


def test_top_performers_tie_breaks_on_success_rate_and_limits():
    steady = SimpleNamespace(id="steady")
    busy = SimpleNamespace(id="busy")
    assignments = [_assignment(1, "steady", 0), _assignment(2, "steady", 0)] + [
        _assignment(i, "busy", 0) for i in range(3, 6)
    ]
    redos = [_redo(3, "busy")]

    rows = metrics_service.summarize_top_performers([busy, steady], assignments, redos)
    # both score 2; steady is at 100.0 against 66.7
    assert [r.installer.id for r in rows] == ["steady", "busy"]

    assert len(metrics_service.summarize_top_performers([busy, steady], assignments, redos, limit=1)) == 1


def test_vehicle_success_rate_rounds_to_one_decimal():
    assert metrics_service.vehicle_success_rate(0, 0) == 100.0
    assert metrics_service.vehicle_success_rate(8, 1) == 87.5
    assert metrics_service.vehicle_success_rate(3, 1) == 66.7
    assert metrics_service.vehicle_success_rate(2, 3) == -50.0


def test_film_consumption_groups_by_film():
    dims = [
        SimpleNamespace(job_entry_id=1, film_id=1, sqft=10, film_cost=20),
        SimpleNamespace(job_entry_id=2, film_id=1, sqft=5, film_cost=10),
        SimpleNamespace(job_entry_id=2, film_id=2, sqft=30, film_cost=15),
        SimpleNamespace(job_entry_id=3, film_id=None, sqft=8, film_cost=None),
    ]
    films = {1: SimpleNamespace(name="Ceramic", type="ceramic"), 2: SimpleNamespace(name="Dyed", type="dyed")}
    rows = metrics_service.summarize_film_consumption(dims, films)
    assert [r["film_id"] for r in rows] == [2, 1]
    assert rows[1]["total_sqft"] == 15.0
    assert rows[1]["total_cost"] == 30.0
    assert rows[1]["job_count"] == 2
    assert rows[0]["film_name"] == "Dyed"


def test_get_performance_metrics_filters_by_job_date(make_user, make_job):
    make_user("inst@example.com", role="installer")
    make_job("inst@example.com", job_number="J-1", date=datetime(2026, 3, 1, 9, 0))
    make_job(
        "inst@example.com",
        job_number="J-2",
        date=datetime(2026, 3, 10, 23, 59),
        redo_entries=[{"part": "windshield"}],
    )
    make_job("inst@example.com", job_number="J-3", date=datetime(2026, 3, 11, 0, 0))

    db = SessionLocal()
    try:
        m = metrics_service.get_performance_metrics(
            db, DateRange(datetime(2026, 3, 10).date(), datetime(2026, 3, 10).date())
        )
        everything = metrics_service.get_performance_metrics(db)
    finally:
        db.close()

    assert m.total_vehicles == 1
    assert m.total_redos == 1
    assert m.success_rate == 86
    assert everything.total_vehicles == 3
    assert everything.active_installers == 1
