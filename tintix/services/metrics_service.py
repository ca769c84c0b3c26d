from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from tintix.models.film import Film
from tintix.models.installer_time_entry import InstallerTimeEntry
from tintix.models.job_dimension import JobDimension
from tintix.models.job_entry import JobEntry
from tintix.models.job_installer import JobInstaller
from tintix.models.redo_entry import RedoEntry
from tintix.models.user import User
from tintix.services.date_range import UNBOUNDED, DateRange, apply_date_range
from tintix.services.measurements import money, round_half_up, to_decimal

logger = logging.getLogger(__name__)

# windshield, back windshield, 4 rollups, quarter
WINDOWS_PER_VEHICLE = 7


def success_rate(total_windows: int, total_redos: int) -> int:
    """Whole-percent share of windows not redone; 100 when nothing was installed."""
    if total_windows <= 0:
        return 100
    return int(round_half_up(Decimal(total_windows - total_redos) / Decimal(total_windows) * 100))


# ---------- Dashboard metrics ----------


@dataclass(frozen=True)
class PerformanceMetrics:
    total_vehicles: int
    total_redos: int
    total_windows: int
    success_rate: int
    avg_time_variance: float
    active_installers: int

    @property
    def has_data(self) -> bool:
        return self.total_vehicles > 0


def summarize_performance(
    job_entries: Iterable[Any],
    redo_entries: Iterable[Any] = (),
    job_installers: Iterable[Any] = (),
) -> PerformanceMetrics:
    """
    Reduce an already date-filtered job set to dashboard metrics.

    Redo and installer rows are only counted when their parent job is in
    job_entries, so callers may pass wider child sets.
    """
    job_ids = {j.id for j in job_entries}

    total_vehicles = len(job_ids)
    total_redos = sum(1 for r in redo_entries if r.job_entry_id in job_ids)
    total_windows = total_vehicles * WINDOWS_PER_VEHICLE

    variances: List[int] = []
    installer_ids = set()
    for row in job_installers:
        if row.job_entry_id not in job_ids:
            continue
        variances.append(int(row.time_variance or 0))
        installer_ids.add(row.installer_id)

    avg_time_variance = 0.0
    if variances:
        avg_time_variance = float(round_half_up(Decimal(sum(variances)) / Decimal(len(variances)), 2))

    return PerformanceMetrics(
        total_vehicles=total_vehicles,
        total_redos=total_redos,
        total_windows=total_windows,
        success_rate=success_rate(total_windows, total_redos),
        avg_time_variance=avg_time_variance,
        active_installers=len(installer_ids),
    )


def get_performance_metrics(db: Session, date_range: DateRange = UNBOUNDED) -> PerformanceMetrics:
    jobs = apply_date_range(db.query(JobEntry), JobEntry.date, date_range).all()

    redos = apply_date_range(
        db.query(RedoEntry).join(JobEntry, RedoEntry.job_entry_id == JobEntry.id),
        JobEntry.date,
        date_range,
    ).all()

    assignments = apply_date_range(
        db.query(JobInstaller).join(JobEntry, JobInstaller.job_entry_id == JobEntry.id),
        JobEntry.date,
        date_range,
    ).all()

    metrics = summarize_performance(jobs, redos, assignments)
    logger.debug(
        "Computed performance metrics",
        extra={
            "date_from": date_range.date_from,
            "date_to": date_range.date_to,
            "total_vehicles": metrics.total_vehicles,
            "total_redos": metrics.total_redos,
        },
    )
    return metrics


# ---------- Redo breakdown ----------


def summarize_redo_breakdown(redo_entries: Iterable[Any]) -> List[Dict[str, Any]]:
    counts = Counter(r.part for r in redo_entries)
    ordered = sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
    return [{"part": part, "count": count} for part, count in ordered]


def get_redo_breakdown(db: Session, date_range: DateRange = UNBOUNDED) -> List[Dict[str, Any]]:
    redos = apply_date_range(
        db.query(RedoEntry).join(JobEntry, RedoEntry.job_entry_id == JobEntry.id),
        JobEntry.date,
        date_range,
    ).all()
    return summarize_redo_breakdown(redos)


# ---------- Window performance ----------


@dataclass(frozen=True)
class InstallerWindowPerformance:
    installer: Any
    windows_completed: int
    redo_count: int
    success_rate: int


@dataclass(frozen=True)
class WindowPerformance:
    windows_completed: int
    redo_count: int
    success_rate: int
    installers: List[InstallerWindowPerformance] = field(default_factory=list)


def summarize_window_performance(
    installers: Sequence[Any],
    time_entries: Iterable[Any],
    redo_entries: Iterable[Any],
) -> WindowPerformance:
    """
    Per-installer success rate over windows actually completed (from time
    entries) rather than the fixed seven-per-vehicle denominator.
    """
    windows: Dict[str, int] = {}
    for row in time_entries:
        windows[row.installer_id] = windows.get(row.installer_id, 0) + int(row.windows_completed or 0)

    redos: Dict[str, int] = {}
    for row in redo_entries:
        redos[row.installer_id] = redos.get(row.installer_id, 0) + 1

    rows = [
        InstallerWindowPerformance(
            installer=installer,
            windows_completed=windows.get(installer.id, 0),
            redo_count=redos.get(installer.id, 0),
            success_rate=success_rate(windows.get(installer.id, 0), redos.get(installer.id, 0)),
        )
        for installer in installers
    ]
    rows.sort(key=lambda r: (-r.success_rate, -r.windows_completed))

    team_windows = sum(windows.values())
    team_redos = sum(redos.values())
    return WindowPerformance(
        windows_completed=team_windows,
        redo_count=team_redos,
        success_rate=success_rate(team_windows, team_redos),
        installers=rows,
    )


def get_window_performance(db: Session, date_range: DateRange = UNBOUNDED) -> WindowPerformance:
    time_entries = apply_date_range(
        db.query(InstallerTimeEntry).join(JobEntry, InstallerTimeEntry.job_entry_id == JobEntry.id),
        JobEntry.date,
        date_range,
    ).all()
    redos = apply_date_range(
        db.query(RedoEntry).join(JobEntry, RedoEntry.job_entry_id == JobEntry.id),
        JobEntry.date,
        date_range,
    ).all()

    seen_ids = {r.installer_id for r in time_entries} | {r.installer_id for r in redos}
    installers = (
        db.query(User)
        .filter(or_(and_(User.role == "installer", User.is_active.is_(True)), User.id.in_(seen_ids)))
        .order_by(User.first_name.asc(), User.last_name.asc(), User.id.asc())
        .all()
    )
    return summarize_window_performance(installers, time_entries, redos)


# ---------- Top performers ----------


@dataclass(frozen=True)
class TopPerformer:
    installer: Any
    vehicle_count: int
    redo_count: int
    success_rate: float


def vehicle_success_rate(vehicle_count: int, redo_count: int) -> float:
    """Share of vehicles not redone, to one decimal; 100 when no vehicles were done."""
    if vehicle_count <= 0:
        return 100.0
    rate = Decimal(vehicle_count - redo_count) / Decimal(vehicle_count) * 100
    return float(round_half_up(rate, 1))


def summarize_top_performers(
    installers: Sequence[Any],
    assignments: Iterable[Any],
    redo_entries: Iterable[Any],
    limit: int = 10,
) -> List[TopPerformer]:
    """
    Rank installers by vehicles worked minus redos charged to them, then by
    success rate. Every installer in `installers` is ranked, including those
    with no work in the range.
    """
    vehicles: Counter = Counter(row.installer_id for row in assignments)
    redos: Counter = Counter(row.installer_id for row in redo_entries)

    rows = [
        TopPerformer(
            installer=installer,
            vehicle_count=vehicles[installer.id],
            redo_count=redos[installer.id],
            success_rate=vehicle_success_rate(vehicles[installer.id], redos[installer.id]),
        )
        for installer in installers
    ]
    # sort is stable, so ties keep the caller's installer order
    rows.sort(key=lambda r: (-(r.vehicle_count - r.redo_count), -r.success_rate))
    return rows[: max(limit, 0)]


def get_top_performers(db: Session, date_range: DateRange = UNBOUNDED, limit: int = 10) -> List[TopPerformer]:
    assignments = apply_date_range(
        db.query(JobInstaller).join(JobEntry, JobInstaller.job_entry_id == JobEntry.id),
        JobEntry.date,
        date_range,
    ).all()
    redos = apply_date_range(
        db.query(RedoEntry).join(JobEntry, RedoEntry.job_entry_id == JobEntry.id),
        JobEntry.date,
        date_range,
    ).all()

    installers = (
        db.query(User)
        .filter(User.role == "installer")
        .order_by(User.first_name.asc(), User.last_name.asc(), User.id.asc())
        .all()
    )
    return summarize_top_performers(installers, assignments, redos, limit=limit)


# ---------- Film consumption ----------


def summarize_film_consumption(
    dimensions: Iterable[Any],
    films: Optional[Dict[int, Any]] = None,
) -> List[Dict[str, Any]]:
    """Square footage and snapshot cost per film; dimensions without a film are skipped."""
    films = films or {}
    by_film: Dict[int, Dict[str, Any]] = {}

    for dim in dimensions:
        if dim.film_id is None:
            continue
        bucket = by_film.setdefault(
            dim.film_id,
            {"sqft": Decimal(0), "cost": Decimal(0), "jobs": set()},
        )
        bucket["sqft"] += to_decimal(dim.sqft)
        bucket["cost"] += to_decimal(dim.film_cost)
        bucket["jobs"].add(dim.job_entry_id)

    out = []
    for film_id, bucket in by_film.items():
        film = films.get(film_id)
        out.append(
            {
                "film_id": film_id,
                "film_name": None if film is None else film.name,
                "film_type": None if film is None else film.type,
                "total_sqft": float(round_half_up(bucket["sqft"], 2)),
                "total_cost": float(money(bucket["cost"])),
                "job_count": len(bucket["jobs"]),
            }
        )
    out.sort(key=lambda r: (-r["total_sqft"], r["film_id"]))
    return out


def get_film_consumption(db: Session, date_range: DateRange = UNBOUNDED) -> List[Dict[str, Any]]:
    dimensions = apply_date_range(
        db.query(JobDimension).join(JobEntry, JobDimension.job_entry_id == JobEntry.id),
        JobEntry.date,
        date_range,
    ).all()
    film_ids = {d.film_id for d in dimensions if d.film_id is not None}
    films = {}
    if film_ids:
        films = {f.id: f for f in db.query(Film).filter(Film.id.in_(film_ids)).all()}
    return summarize_film_consumption(dimensions, films)
