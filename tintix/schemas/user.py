from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from tintix.core.authorization import Role
from tintix.schemas.base import CamelModel


class InstallerRef(CamelModel):
    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class UserResponse(CamelModel):
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    hourly_rate: float = 0.0
    is_active: bool
    created_at: datetime
    updated_at: datetime


class InstallerCreate(CamelModel):
    email: str = Field(min_length=3)
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    hourly_rate: Optional[Decimal] = Field(default=None, ge=0)


class InstallerUpdate(CamelModel):
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class RoleUpdate(CamelModel):
    role: Role


class HourlyRateUpdate(CamelModel):
    hourly_rate: Decimal = Field(ge=0)
