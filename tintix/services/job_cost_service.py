from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from tintix.models.installer_time_entry import InstallerTimeEntry
from tintix.models.job_entry import JobEntry
from tintix.models.user import User
from tintix.services.measurements import money, to_decimal

MINUTES_PER_HOUR = Decimal(60)


@dataclass(frozen=True)
class LaborCost:
    installer: Any
    time_minutes: int
    hourly_rate: Decimal
    labor_cost: Decimal


@dataclass(frozen=True)
class JobCostSummary:
    job_entry_id: int
    labor_costs: List[LaborCost] = field(default_factory=list)
    total_labor_cost: Decimal = Decimal("0.00")
    film_cost: Decimal = Decimal("0.00")
    redo_material_cost: Decimal = Decimal("0.00")
    total_material_cost: Decimal = Decimal("0.00")
    total_cost: Decimal = Decimal("0.00")


def labor_cost(time_minutes: int, hourly_rate: Any) -> Decimal:
    return money(Decimal(int(time_minutes or 0)) / MINUTES_PER_HOUR * to_decimal(hourly_rate))


def compute_labor_costs(
    time_entries: Iterable[Any],
    installers: Optional[Dict[str, Any]] = None,
) -> List[LaborCost]:
    """One row per installer; several time rows for the same installer are summed first."""
    installers = installers or {}
    minutes: Dict[str, int] = {}
    for row in time_entries:
        minutes[row.installer_id] = minutes.get(row.installer_id, 0) + int(row.time_minutes or 0)

    out = []
    for installer_id, total_minutes in minutes.items():
        installer = installers.get(installer_id)
        rate = to_decimal(None if installer is None else installer.hourly_rate)
        out.append(
            LaborCost(
                installer=installer,
                time_minutes=total_minutes,
                hourly_rate=money(rate),
                labor_cost=labor_cost(total_minutes, rate),
            )
        )
    return out


def effective_cost_per_sqft(job_entry: Any) -> Decimal:
    """Job's own spend per square foot; 0 when the job has no recorded area."""
    total_sqft = to_decimal(job_entry.total_sqft)
    if total_sqft <= 0:
        return Decimal(0)
    return to_decimal(job_entry.film_cost) / total_sqft


def redo_material_cost(job_entry: Any, redo_entries: Iterable[Any]) -> Decimal:
    # Redos are costed at what this job actually paid per sqft, not the film's list price.
    rate = effective_cost_per_sqft(job_entry)
    if rate == 0:
        return Decimal("0.00")
    redo_sqft = sum((to_decimal(r.sqft) for r in redo_entries), Decimal(0))
    return money(redo_sqft * rate)


def summarize_job_cost(
    job_entry: Any,
    time_entries: Iterable[Any],
    redo_entries: Iterable[Any],
    installers: Optional[Dict[str, Any]] = None,
) -> JobCostSummary:
    labor = compute_labor_costs(time_entries, installers)
    total_labor = money(sum((row.labor_cost for row in labor), Decimal(0)))

    film_cost = money(to_decimal(job_entry.film_cost))
    redo_cost = redo_material_cost(job_entry, redo_entries)
    total_material = money(film_cost + redo_cost)

    return JobCostSummary(
        job_entry_id=job_entry.id,
        labor_costs=labor,
        total_labor_cost=total_labor,
        film_cost=film_cost,
        redo_material_cost=redo_cost,
        total_material_cost=total_material,
        total_cost=money(total_labor + total_material),
    )


def _get_job_entry(db: Session, job_entry_id: int) -> JobEntry:
    job = db.query(JobEntry).filter(JobEntry.id == int(job_entry_id)).first()
    if job is None:
        raise LookupError("Job entry not found")
    return job


def _installers_for(db: Session, time_entries: List[InstallerTimeEntry]) -> Dict[str, User]:
    ids = {r.installer_id for r in time_entries}
    if not ids:
        return {}
    return {u.id: u for u in db.query(User).filter(User.id.in_(ids)).all()}


def get_job_labor_costs(db: Session, job_entry_id: int) -> List[LaborCost]:
    job = _get_job_entry(db, job_entry_id)
    entries = list(job.time_entries)
    return compute_labor_costs(entries, _installers_for(db, entries))


def get_job_cost_summary(db: Session, job_entry_id: int) -> JobCostSummary:
    job = _get_job_entry(db, job_entry_id)
    entries = list(job.time_entries)
    return summarize_job_cost(job, entries, list(job.redo_entries), _installers_for(db, entries))
