from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from tintix.schemas.base import CamelModel


class FilmCreate(CamelModel):
    name: str = Field(min_length=1)
    type: str = Field(min_length=1)
    cost_per_sqft: Decimal = Field(ge=0)
    minimum_stock: Decimal = Field(default=Decimal("0"), ge=0)


class FilmUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[str] = Field(default=None, min_length=1)
    cost_per_sqft: Optional[Decimal] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class FilmResponse(CamelModel):
    id: int
    name: str
    type: str
    cost_per_sqft: float
    is_active: bool
    created_at: datetime
    updated_at: datetime
