from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.exc import IntegrityError

from tintix.core.authorization import Capability, allowed_operations, require_capability
from tintix.database import SessionLocal
from tintix.deps.auth import CurrentUser
from tintix.deps.filters import date_range_filter
from tintix.models.job_entry import JobEntry
from tintix.schemas.analytics import JobCostResponse, LaborCostRow
from tintix.schemas.job_entry import JobEntryCreate, JobEntryResponse, JobEntryUpdate
from tintix.schemas.user import UserResponse
from tintix.services import job_cost_service, job_entry_service
from tintix.services.date_range import DateRange

router = APIRouter(prefix="/job-entries", tags=["Job Entries"])


def _sees_all_jobs(user: CurrentUser) -> bool:
    return Capability.VIEW_ALL_JOB_ENTRIES in allowed_operations(user.role)


def _ensure_visible(job: JobEntry, user: CurrentUser) -> None:
    if not _sees_all_jobs(user) and not job_entry_service.is_assigned(job, user.user_id):
        raise HTTPException(status_code=403, detail="Not assigned to this job entry")


def _labor_row(row: job_cost_service.LaborCost) -> LaborCostRow:
    return LaborCostRow(
        installer=None if row.installer is None else UserResponse.model_validate(row.installer),
        time_minutes=row.time_minutes,
        hourly_rate=float(row.hourly_rate),
        labor_cost=float(row.labor_cost),
    )


@router.get("", response_model=List[JobEntryResponse])
def list_job_entries(
    installer_id: Optional[str] = Query(default=None, alias="installerId"),
    limit: int = Query(default=100, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    date_range: DateRange = Depends(date_range_filter),
    user: CurrentUser = Depends(require_capability(Capability.VIEW_JOB_ENTRIES)),
):
    if not _sees_all_jobs(user):
        if installer_id is not None and installer_id != user.user_id:
            raise HTTPException(status_code=403, detail="Cannot list another installer's job entries")
        installer_id = user.user_id

    db = SessionLocal()
    try:
        rows = job_entry_service.list_job_entries(
            db,
            date_range=date_range,
            installer_id=installer_id,
            limit=limit,
            offset=offset,
        )
        return [JobEntryResponse.model_validate(r) for r in rows]
    finally:
        db.close()


@router.post("", response_model=JobEntryResponse, status_code=201)
def create_job_entry(
    payload: JobEntryCreate,
    user: CurrentUser = Depends(require_capability(Capability.CREATE_JOB_ENTRIES)),
):
    db = SessionLocal()
    try:
        job = job_entry_service.create_job_entry(payload, user.user_id, db=db)
        db.commit()
        db.refresh(job)
        return JobEntryResponse.model_validate(job)
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail="Job number already exists") from exc
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@router.get("/{job_entry_id}", response_model=JobEntryResponse)
def get_job_entry(
    job_entry_id: int,
    user: CurrentUser = Depends(require_capability(Capability.VIEW_JOB_ENTRIES)),
):
    db = SessionLocal()
    try:
        job = job_entry_service.get_job_entry(db, job_entry_id)
        _ensure_visible(job, user)
        return JobEntryResponse.model_validate(job)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    finally:
        db.close()


@router.put("/{job_entry_id}", response_model=JobEntryResponse)
def update_job_entry(
    job_entry_id: int,
    payload: JobEntryUpdate,
    user: CurrentUser = Depends(require_capability(Capability.EDIT_JOB_ENTRIES)),
):
    db = SessionLocal()
    try:
        job = job_entry_service.update_job_entry(job_entry_id, payload, user.user_id, db=db)
        db.commit()
        db.refresh(job)
        return JobEntryResponse.model_validate(job)
    except LookupError as exc:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=409, detail="Job number already exists") from exc
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@router.delete("/{job_entry_id}", status_code=204)
def delete_job_entry(
    job_entry_id: int,
    user: CurrentUser = Depends(require_capability(Capability.DELETE_JOB_ENTRIES)),
):
    db = SessionLocal()
    try:
        job_entry_service.delete_job_entry(job_entry_id, user.user_id, db=db)
        db.commit()
        return Response(status_code=204)
    except LookupError as exc:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@router.get("/{job_entry_id}/labor-costs", response_model=List[LaborCostRow])
def get_labor_costs(
    job_entry_id: int,
    user: CurrentUser = Depends(require_capability(Capability.VIEW_JOB_COSTS)),
):
    db = SessionLocal()
    try:
        _ensure_visible(job_entry_service.get_job_entry(db, job_entry_id), user)
        rows = job_cost_service.get_job_labor_costs(db, job_entry_id)
        return [_labor_row(r) for r in rows]
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    finally:
        db.close()


@router.get("/{job_entry_id}/cost-summary", response_model=JobCostResponse)
def get_cost_summary(
    job_entry_id: int,
    user: CurrentUser = Depends(require_capability(Capability.VIEW_JOB_COSTS)),
):
    db = SessionLocal()
    try:
        _ensure_visible(job_entry_service.get_job_entry(db, job_entry_id), user)
        summary = job_cost_service.get_job_cost_summary(db, job_entry_id)
        return JobCostResponse(
            job_entry_id=summary.job_entry_id,
            labor_costs=[_labor_row(r) for r in summary.labor_costs],
            total_labor_cost=float(summary.total_labor_cost),
            film_cost=float(summary.film_cost),
            redo_material_cost=float(summary.redo_material_cost),
            total_material_cost=float(summary.total_material_cost),
            total_cost=float(summary.total_cost),
        )
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    finally:
        db.close()
