from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from tintix.schemas.base import CamelModel
from tintix.schemas.film import FilmResponse


class StockAddRequest(CamelModel):
    quantity: Decimal = Field(gt=0)
    notes: Optional[str] = None


class StockAdjustRequest(CamelModel):
    new_stock: Decimal = Field(ge=0)
    notes: Optional[str] = None


class MinimumStockRequest(CamelModel):
    minimum_stock: Decimal = Field(ge=0)


class InventoryLevel(CamelModel):
    current_stock: float
    minimum_stock: float
    is_low: bool


class FilmWithInventory(FilmResponse):
    inventory: Optional[InventoryLevel] = None


class InventoryTransactionResponse(CamelModel):
    id: int
    film_id: int
    type: str
    quantity: float
    previous_stock: float
    new_stock: float
    job_entry_id: Optional[int] = None
    notes: Optional[str] = None
    created_by: str
    created_at: datetime
