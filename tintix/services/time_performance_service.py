from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from tintix.models.installer_time_entry import InstallerTimeEntry
from tintix.models.job_entry import JobEntry
from tintix.models.user import User
from tintix.services.date_range import UNBOUNDED, DateRange, apply_date_range
from tintix.services.measurements import round_half_up

HIGH_EFFICIENCY_MAX_MINUTES = 20
MEDIUM_EFFICIENCY_MAX_MINUTES = 30


def efficiency_band(avg_time_per_window: float) -> str:
    """Display label only; never feeds back into the numbers."""
    if avg_time_per_window <= HIGH_EFFICIENCY_MAX_MINUTES:
        return "high"
    if avg_time_per_window <= MEDIUM_EFFICIENCY_MAX_MINUTES:
        return "medium"
    return "low"


@dataclass(frozen=True)
class InstallerTimePerformance:
    installer: Any
    total_minutes: int
    total_windows: int
    avg_time_per_window: float
    job_count: int

    @property
    def efficiency(self) -> str:
        return efficiency_band(self.avg_time_per_window)


def summarize_time_performance(
    time_entries: Iterable[Any],
    installers: Optional[Dict[str, Any]] = None,
) -> List[InstallerTimePerformance]:
    """
    Minutes per window for each installer with at least one time entry.

    Ranked ascending by avg_time_per_window (lower is more efficient). The
    sort is stable, so ties keep the order installers first appear in.
    """
    installers = installers or {}
    totals: Dict[str, Dict[str, Any]] = {}

    for row in time_entries:
        bucket = totals.setdefault(row.installer_id, {"minutes": 0, "windows": 0, "jobs": set()})
        bucket["minutes"] += int(row.time_minutes or 0)
        bucket["windows"] += int(row.windows_completed or 0)
        bucket["jobs"].add(row.job_entry_id)

    results = []
    for installer_id, bucket in totals.items():
        avg = 0.0
        if bucket["windows"] > 0:
            avg = float(round_half_up(Decimal(bucket["minutes"]) / Decimal(bucket["windows"]), 2))
        results.append(
            InstallerTimePerformance(
                installer=installers.get(installer_id),
                total_minutes=bucket["minutes"],
                total_windows=bucket["windows"],
                avg_time_per_window=avg,
                job_count=len(bucket["jobs"]),
            )
        )

    return sorted(results, key=lambda r: r.avg_time_per_window)


def get_time_performance(db: Session, date_range: DateRange = UNBOUNDED) -> List[InstallerTimePerformance]:
    rows = apply_date_range(
        db.query(InstallerTimeEntry).join(JobEntry, InstallerTimeEntry.job_entry_id == JobEntry.id),
        JobEntry.date,
        date_range,
    ).order_by(InstallerTimeEntry.id.asc()).all()

    installer_ids = {r.installer_id for r in rows}
    installers = {}
    if installer_ids:
        installers = {u.id: u for u in db.query(User).filter(User.id.in_(installer_ids)).all()}

    return summarize_time_performance(rows, installers)
