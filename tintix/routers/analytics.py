from typing import List

from fastapi import APIRouter, Depends, Query

from tintix.core.authorization import Capability, require_capability
from tintix.database import SessionLocal
from tintix.deps.auth import CurrentUser
from tintix.deps.filters import date_range_filter
from tintix.schemas.analytics import (
    FilmConsumptionRow,
    InstallerWindowRow,
    MetricsResponse,
    RedoBreakdownRow,
    TimePerformanceRow,
    TopPerformerRow,
    WindowPerformanceResponse,
)
from tintix.schemas.user import InstallerRef
from tintix.services import metrics_service, time_performance_service
from tintix.services.date_range import DateRange

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/metrics", response_model=MetricsResponse)
def get_metrics(
    date_range: DateRange = Depends(date_range_filter),
    _user: CurrentUser = Depends(require_capability(Capability.VIEW_DASHBOARD)),
):
    db = SessionLocal()
    try:
        metrics = metrics_service.get_performance_metrics(db, date_range)
    finally:
        db.close()

    return MetricsResponse(
        date_from=date_range.date_from,
        date_to=date_range.date_to,
        filter_applied=date_range.applied,
        total_vehicles=metrics.total_vehicles,
        total_redos=metrics.total_redos,
        total_windows=metrics.total_windows,
        success_rate=metrics.success_rate,
        avg_time_variance=metrics.avg_time_variance,
        active_installers=metrics.active_installers,
        has_data=metrics.has_data,
    )


@router.get("/time-performance", response_model=List[TimePerformanceRow])
def get_time_performance(
    date_range: DateRange = Depends(date_range_filter),
    _user: CurrentUser = Depends(require_capability(Capability.VIEW_TIME_REPORTS)),
):
    db = SessionLocal()
    try:
        rows = time_performance_service.get_time_performance(db, date_range)
        return [
            TimePerformanceRow(
                installer=None if r.installer is None else InstallerRef.model_validate(r.installer),
                total_minutes=r.total_minutes,
                total_windows=r.total_windows,
                avg_time_per_window=r.avg_time_per_window,
                job_count=r.job_count,
                efficiency=r.efficiency,
            )
            for r in rows
        ]
    finally:
        db.close()


@router.get("/redo-breakdown", response_model=List[RedoBreakdownRow])
def get_redo_breakdown(
    date_range: DateRange = Depends(date_range_filter),
    _user: CurrentUser = Depends(require_capability(Capability.VIEW_REPORTS)),
):
    db = SessionLocal()
    try:
        return [RedoBreakdownRow(**row) for row in metrics_service.get_redo_breakdown(db, date_range)]
    finally:
        db.close()


@router.get("/window-performance", response_model=WindowPerformanceResponse)
def get_window_performance(
    date_range: DateRange = Depends(date_range_filter),
    _user: CurrentUser = Depends(require_capability(Capability.VIEW_REPORTS)),
):
    db = SessionLocal()
    try:
        perf = metrics_service.get_window_performance(db, date_range)
        return WindowPerformanceResponse(
            windows_completed=perf.windows_completed,
            redo_count=perf.redo_count,
            success_rate=perf.success_rate,
            installer_performance=[
                InstallerWindowRow(
                    installer=InstallerRef.model_validate(r.installer),
                    windows_completed=r.windows_completed,
                    redo_count=r.redo_count,
                    success_rate=r.success_rate,
                )
                for r in perf.installers
            ],
        )
    finally:
        db.close()


@router.get("/top-performers", response_model=List[TopPerformerRow])
def get_top_performers(
    limit: int = Query(default=10, ge=1, le=100),
    date_range: DateRange = Depends(date_range_filter),
    _user: CurrentUser = Depends(require_capability(Capability.VIEW_REPORTS)),
):
    db = SessionLocal()
    try:
        return [
            TopPerformerRow(
                installer=InstallerRef.model_validate(r.installer),
                vehicle_count=r.vehicle_count,
                redo_count=r.redo_count,
                success_rate=r.success_rate,
            )
            for r in metrics_service.get_top_performers(db, date_range, limit=limit)
        ]
    finally:
        db.close()


@router.get("/film-consumption", response_model=List[FilmConsumptionRow])
def get_film_consumption(
    date_range: DateRange = Depends(date_range_filter),
    _user: CurrentUser = Depends(require_capability(Capability.VIEW_REPORTS)),
):
    db = SessionLocal()
    try:
        return [FilmConsumptionRow(**row) for row in metrics_service.get_film_consumption(db, date_range)]
    finally:
        db.close()
