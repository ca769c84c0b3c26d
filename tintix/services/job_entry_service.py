from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from tintix.database import SessionLocal
from tintix.models.film import Film
from tintix.models.installer_time_entry import InstallerTimeEntry
from tintix.models.job_dimension import JobDimension
from tintix.models.job_entry import JobEntry
from tintix.models.job_installer import JobInstaller
from tintix.models.redo_entry import RedoEntry
from tintix.models.user import User
from tintix.services import inventory_service
from tintix.services.date_range import UNBOUNDED, DateRange, apply_date_range
from tintix.services.measurements import money, square_feet, to_decimal

logger = logging.getLogger(__name__)

_SCALAR_FIELDS = (
    "job_number",
    "date",
    "vehicle_year",
    "vehicle_make",
    "vehicle_model",
    "total_sqft",
    "film_cost",
    "start_time",
    "end_time",
    "duration_minutes",
    "notes",
)


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    # Columns are timezone-naive UTC.
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _duration_minutes(start: Optional[datetime], end: Optional[datetime]) -> Optional[int]:
    if start is None or end is None:
        return None
    if end < start:
        raise ValueError("end_time must not be before start_time")
    return int((end - start).total_seconds() // 60)


def _load_film(db: Session, film_id: int, cache: Dict[int, Film]) -> Film:
    if film_id not in cache:
        film = db.query(Film).filter(Film.id == int(film_id)).first()
        if film is None:
            raise ValueError(f"Unknown film_id={film_id}")
        if not film.is_active:
            raise ValueError(f"Film {film.name!r} is inactive")
        cache[film_id] = film
    return cache[film_id]


def _require_users(db: Session, user_ids: Iterable[str]) -> None:
    wanted = {str(u) for u in user_ids}
    if not wanted:
        return
    found = {row.id for row in db.query(User.id).filter(User.id.in_(wanted)).all()}
    missing = sorted(wanted - found)
    if missing:
        raise ValueError(f"Unknown installer id(s): {', '.join(missing)}")


def _build_dimensions(db: Session, dimensions: Iterable[Any], films: Dict[int, Film]) -> List[JobDimension]:
    rows = []
    for dim in dimensions:
        sqft = square_feet(dim.length_inches, dim.width_inches)
        film_cost = None
        if dim.film_id is not None:
            film = _load_film(db, dim.film_id, films)
            # price snapshot at write time
            film_cost = money(sqft * to_decimal(film.cost_per_sqft))
        rows.append(
            JobDimension(
                film_id=dim.film_id,
                length_inches=to_decimal(dim.length_inches),
                width_inches=to_decimal(dim.width_inches),
                sqft=sqft.quantize(Decimal("0.0001")),
                film_cost=film_cost,
                description=dim.description,
            )
        )
    return rows


def _build_redos(
    db: Session,
    redos: Iterable[Any],
    default_installer_id: str,
    films: Dict[int, Film],
) -> List[RedoEntry]:
    rows = []
    for redo in redos:
        if not (redo.installer_id or default_installer_id):
            raise ValueError("Redo entry needs an installer")
        sqft = square_feet(redo.length_inches, redo.width_inches)

        material_cost = None
        if redo.material_cost is not None:
            material_cost = money(to_decimal(redo.material_cost))
        elif redo.film_id is not None and sqft is not None:
            film = _load_film(db, redo.film_id, films)
            material_cost = money(sqft * to_decimal(film.cost_per_sqft))

        rows.append(
            RedoEntry(
                installer_id=redo.installer_id or default_installer_id,
                part=getattr(redo.part, "value", redo.part),
                length_inches=redo.length_inches,
                width_inches=redo.width_inches,
                sqft=None if sqft is None else float(sqft),
                film_id=redo.film_id,
                material_cost=material_cost,
                time_minutes=int(redo.time_minutes or 0),
                timestamp=_naive_utc(redo.timestamp) or datetime.utcnow(),
            )
        )
    return rows


def _film_usage(dimensions: Iterable[JobDimension]) -> Dict[int, Decimal]:
    usage: Dict[int, Decimal] = {}
    for dim in dimensions:
        if dim.film_id is None:
            continue
        usage[dim.film_id] = usage.get(dim.film_id, Decimal(0)) + to_decimal(dim.sqft)
    return usage


def _deduct_film_usage(db: Session, job: JobEntry, dimensions: Iterable[JobDimension], user_id: str) -> None:
    for film_id, sqft in sorted(_film_usage(dimensions).items()):
        if money(sqft) <= 0:
            continue
        inventory_service.deduct_stock(
            film_id,
            money(sqft),
            created_by=user_id,
            job_entry_id=job.id,
            notes=f"Used on job {job.job_number}",
            db=db,
        )


def _restock_film_usage(db: Session, job: JobEntry, dimensions: Iterable[JobDimension], user_id: str) -> None:
    for film_id, sqft in sorted(_film_usage(dimensions).items()):
        if money(sqft) <= 0:
            continue
        inventory_service.add_stock(
            film_id,
            money(sqft),
            created_by=user_id,
            notes=f"Returned from job {job.job_number} correction",
            db=db,
        )


def _apply_derived_totals(
    job: JobEntry,
    explicit_total_sqft: bool,
    explicit_film_cost: bool,
    replaced: bool = False,
) -> None:
    """Recompute job totals from its dimensions unless the caller set them explicitly.

    On update (replaced=True) an empty dimension list clears the derived totals,
    since the film they described has already gone back into stock.
    """
    dims = list(job.dimensions)
    if not dims:
        if not replaced:
            return
        if not explicit_total_sqft:
            job.total_sqft = None
        if not explicit_film_cost:
            job.film_cost = None
        return
    if not explicit_total_sqft:
        job.total_sqft = float(sum((to_decimal(d.sqft) for d in dims), Decimal(0)))
    if not explicit_film_cost:
        costs = [to_decimal(d.film_cost) for d in dims if d.film_cost is not None]
        job.film_cost = money(sum(costs, Decimal(0))) if costs else None


def _replace_children(
    db: Session,
    job: JobEntry,
    payload: Any,
    user_id: str,
    films: Dict[int, Film],
) -> None:
    if payload.installers is not None:
        if not payload.installers:
            raise ValueError("At least one installer must be selected")
        _require_users(db, [a.installer_id for a in payload.installers])
        job.installers = [
            JobInstaller(installer_id=a.installer_id, time_variance=int(a.time_variance or 0))
            for a in payload.installers
        ]

    default_installer_id = job.installers[0].installer_id if job.installers else None

    if payload.dimensions is not None:
        old = list(job.dimensions)
        if job.id is not None and old:
            _restock_film_usage(db, job, old, user_id)
        job.dimensions = _build_dimensions(db, payload.dimensions, films)

    if payload.redo_entries is not None:
        _require_users(db, [r.installer_id for r in payload.redo_entries if r.installer_id])
        job.redo_entries = _build_redos(db, payload.redo_entries, default_installer_id, films)

    if payload.time_entries is not None:
        _require_users(db, [t.installer_id for t in payload.time_entries])
        job.time_entries = [
            InstallerTimeEntry(
                installer_id=t.installer_id,
                windows_completed=int(t.windows_completed or 0),
                time_minutes=int(t.time_minutes),
            )
            for t in payload.time_entries
        ]


def create_job_entry(payload: Any, user_id: str, *, db: Optional[Session] = None) -> JobEntry:
    """
    Insert a job with all of its children and deduct used film from stock.

    If db is provided, this function will NOT commit/close. Caller owns the transaction.
    If db is None, this function manages its own session + commit.
    """
    owns_db = db is None
    if owns_db:
        db = SessionLocal()

    try:
        if not payload.installers:
            raise ValueError("At least one installer must be selected")

        start_time = _naive_utc(payload.start_time)
        end_time = _naive_utc(payload.end_time)
        duration = payload.duration_minutes
        if duration is None:
            duration = _duration_minutes(start_time, end_time)

        job = JobEntry(
            job_number=payload.job_number.strip(),
            date=_naive_utc(payload.date),
            vehicle_year=payload.vehicle_year,
            vehicle_make=payload.vehicle_make,
            vehicle_model=payload.vehicle_model,
            total_sqft=payload.total_sqft,
            film_cost=None if payload.film_cost is None else money(to_decimal(payload.film_cost)),
            start_time=start_time,
            end_time=end_time,
            duration_minutes=duration,
            notes=payload.notes,
        )

        films: Dict[int, Film] = {}
        _replace_children(db, job, payload, user_id, films)
        _apply_derived_totals(
            job,
            explicit_total_sqft=payload.total_sqft is not None,
            explicit_film_cost=payload.film_cost is not None,
        )

        db.add(job)
        db.flush()

        _deduct_film_usage(db, job, job.dimensions, user_id)

        if owns_db:
            db.commit()
            db.refresh(job)

        logger.info(
            "Job entry created",
            extra={
                "job_entry_id": job.id,
                "job_number": job.job_number,
                "installers": len(job.installers),
                "redos": len(job.redo_entries),
            },
        )
        return job
    except Exception:
        if owns_db:
            db.rollback()
        raise
    finally:
        if owns_db:
            db.close()


def update_job_entry(job_entry_id: int, payload: Any, user_id: str, *, db: Optional[Session] = None) -> JobEntry:
    """Scalar fields are patched; child collections are replaced only when supplied."""
    owns_db = db is None
    if owns_db:
        db = SessionLocal()

    try:
        job = get_job_entry(db, job_entry_id)

        changes = payload.model_dump(exclude_unset=True, include=set(_SCALAR_FIELDS))
        for name, value in changes.items():
            if name in ("date", "start_time", "end_time"):
                value = _naive_utc(value)
            if name == "film_cost" and value is not None:
                value = money(to_decimal(value))
            if name == "job_number" and value is not None:
                value = value.strip()
            if name in ("job_number", "date", "vehicle_year", "vehicle_make", "vehicle_model") and value is None:
                raise ValueError(f"{name} cannot be null")
            setattr(job, name, value)

        if "duration_minutes" not in changes and ("start_time" in changes or "end_time" in changes):
            job.duration_minutes = _duration_minutes(job.start_time, job.end_time)

        films: Dict[int, Film] = {}
        _replace_children(db, job, payload, user_id, films)

        if payload.dimensions is not None:
            _apply_derived_totals(
                job,
                explicit_total_sqft="total_sqft" in changes,
                explicit_film_cost="film_cost" in changes,
                replaced=True,
            )

        db.flush()

        if payload.dimensions is not None:
            _deduct_film_usage(db, job, job.dimensions, user_id)

        if owns_db:
            db.commit()
            db.refresh(job)

        logger.info("Job entry updated", extra={"job_entry_id": job.id, "fields": sorted(changes)})
        return job
    except Exception:
        if owns_db:
            db.rollback()
        raise
    finally:
        if owns_db:
            db.close()


def delete_job_entry(job_entry_id: int, user_id: str, *, db: Optional[Session] = None) -> None:
    """Children go with the job; film recorded on its dimensions is returned to stock."""
    owns_db = db is None
    if owns_db:
        db = SessionLocal()

    try:
        job = get_job_entry(db, job_entry_id)
        _restock_film_usage(db, job, list(job.dimensions), user_id)
        db.delete(job)
        db.flush()

        if owns_db:
            db.commit()

        logger.info("Job entry deleted", extra={"job_entry_id": int(job_entry_id)})
    except Exception:
        if owns_db:
            db.rollback()
        raise
    finally:
        if owns_db:
            db.close()


def get_job_entry(db: Session, job_entry_id: int) -> JobEntry:
    job = db.query(JobEntry).filter(JobEntry.id == int(job_entry_id)).first()
    if job is None:
        raise LookupError("Job entry not found")
    return job


def list_job_entries(
    db: Session,
    *,
    date_range: DateRange = UNBOUNDED,
    installer_id: Optional[str] = None,
    limit: Optional[int] = None,
    offset: int = 0,
) -> List[JobEntry]:
    q = apply_date_range(db.query(JobEntry), JobEntry.date, date_range)
    if installer_id is not None:
        q = q.filter(JobEntry.installers.any(JobInstaller.installer_id == str(installer_id)))

    q = q.order_by(JobEntry.date.desc(), JobEntry.id.desc())
    if offset:
        q = q.offset(int(offset))
    if limit is not None:
        q = q.limit(int(limit))
    return q.all()


def is_assigned(job: JobEntry, installer_id: str) -> bool:
    return any(a.installer_id == installer_id for a in job.installers)
