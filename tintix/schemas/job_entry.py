from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, model_validator

from tintix.models.redo_entry import RedoPart
from tintix.schemas.base import CamelModel
from tintix.schemas.user import InstallerRef


class DimensionIn(CamelModel):
    length_inches: float = Field(gt=0)
    width_inches: float = Field(gt=0)
    film_id: Optional[int] = None
    description: Optional[str] = Field(default=None, max_length=255)


class InstallerAssignmentIn(CamelModel):
    installer_id: str
    time_variance: int = 0


class RedoEntryIn(CamelModel):
    installer_id: Optional[str] = None
    part: RedoPart
    length_inches: Optional[float] = Field(default=None, gt=0)
    width_inches: Optional[float] = Field(default=None, gt=0)
    film_id: Optional[int] = None
    material_cost: Optional[Decimal] = Field(default=None, ge=0)
    time_minutes: int = Field(default=0, ge=0)
    timestamp: Optional[datetime] = None

    @model_validator(mode="after")
    def _both_dimensions_or_neither(self):
        if (self.length_inches is None) != (self.width_inches is None):
            raise ValueError("Redo measurements need both length and width")
        return self


class TimeEntryIn(CamelModel):
    installer_id: str
    windows_completed: int = Field(default=0, ge=0)
    time_minutes: int = Field(ge=0)


class JobEntryCreate(CamelModel):
    job_number: str = Field(min_length=1)
    date: datetime
    vehicle_year: str
    vehicle_make: str
    vehicle_model: str
    total_sqft: Optional[float] = Field(default=None, ge=0)
    film_cost: Optional[Decimal] = Field(default=None, ge=0)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None

    installers: List[InstallerAssignmentIn] = Field(min_length=1)
    dimensions: List[DimensionIn] = Field(default_factory=list)
    redo_entries: List[RedoEntryIn] = Field(default_factory=list)
    time_entries: List[TimeEntryIn] = Field(default_factory=list)


class JobEntryUpdate(CamelModel):
    job_number: Optional[str] = Field(default=None, min_length=1)
    date: Optional[datetime] = None
    vehicle_year: Optional[str] = None
    vehicle_make: Optional[str] = None
    vehicle_model: Optional[str] = None
    total_sqft: Optional[float] = Field(default=None, ge=0)
    film_cost: Optional[Decimal] = Field(default=None, ge=0)
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    notes: Optional[str] = None

    # None keeps the existing rows; a list (even empty) replaces them.
    installers: Optional[List[InstallerAssignmentIn]] = None
    dimensions: Optional[List[DimensionIn]] = None
    redo_entries: Optional[List[RedoEntryIn]] = None
    time_entries: Optional[List[TimeEntryIn]] = None


class DimensionResponse(CamelModel):
    id: int
    film_id: Optional[int] = None
    length_inches: float
    width_inches: float
    sqft: float
    film_cost: Optional[float] = None
    description: Optional[str] = None


class JobInstallerResponse(CamelModel):
    installer_id: str
    time_variance: int
    installer: Optional[InstallerRef] = None


class RedoEntryResponse(CamelModel):
    id: int
    installer_id: str
    part: str
    length_inches: Optional[float] = None
    width_inches: Optional[float] = None
    sqft: Optional[float] = None
    film_id: Optional[int] = None
    material_cost: Optional[float] = None
    time_minutes: Optional[int] = 0
    timestamp: datetime


class TimeEntryResponse(CamelModel):
    id: int
    installer_id: str
    windows_completed: int
    time_minutes: int


class JobEntryResponse(CamelModel):
    id: int
    job_number: str
    date: datetime
    vehicle_year: str
    vehicle_make: str
    vehicle_model: str
    total_sqft: Optional[float] = None
    film_cost: Optional[float] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    installers: List[JobInstallerResponse] = Field(default_factory=list)
    dimensions: List[DimensionResponse] = Field(default_factory=list)
    redo_entries: List[RedoEntryResponse] = Field(default_factory=list)
    time_entries: List[TimeEntryResponse] = Field(default_factory=list)
