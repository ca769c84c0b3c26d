from datetime import date
from typing import List, Optional

from tintix.schemas.base import CamelModel
from tintix.schemas.user import InstallerRef, UserResponse


class AppliedFilter(CamelModel):
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    filter_applied: bool = False


class MetricsResponse(AppliedFilter):
    total_vehicles: int
    total_redos: int
    total_windows: int
    success_rate: int
    avg_time_variance: float
    active_installers: int
    has_data: bool


class TimePerformanceRow(CamelModel):
    installer: Optional[InstallerRef] = None
    total_minutes: int
    total_windows: int
    avg_time_per_window: float
    job_count: int
    efficiency: str


class RedoBreakdownRow(CamelModel):
    part: str
    count: int


class InstallerWindowRow(CamelModel):
    installer: InstallerRef
    windows_completed: int
    redo_count: int
    success_rate: int


class WindowPerformanceResponse(CamelModel):
    windows_completed: int
    redo_count: int
    success_rate: int
    installer_performance: List[InstallerWindowRow]


class TopPerformerRow(CamelModel):
    installer: InstallerRef
    vehicle_count: int
    redo_count: int
    success_rate: float


class FilmConsumptionRow(CamelModel):
    film_id: int
    film_name: Optional[str] = None
    film_type: Optional[str] = None
    total_sqft: float
    total_cost: float
    job_count: int


class LaborCostRow(CamelModel):
    installer: Optional[UserResponse] = None
    time_minutes: int
    hourly_rate: float
    labor_cost: float


class JobCostResponse(CamelModel):
    job_entry_id: int
    labor_costs: List[LaborCostRow]
    total_labor_cost: float
    film_cost: float
    redo_material_cost: float
    total_material_cost: float
    total_cost: float
