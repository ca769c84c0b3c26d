from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from tintix.core.authorization import Capability, require_capability
from tintix.database import SessionLocal
from tintix.deps.auth import CurrentUser
from tintix.models.film import Film
from tintix.schemas.film import FilmResponse
from tintix.schemas.inventory import (
    FilmWithInventory,
    InventoryLevel,
    InventoryTransactionResponse,
    MinimumStockRequest,
    StockAddRequest,
    StockAdjustRequest,
)
from tintix.services import inventory_service

router = APIRouter(prefix="/inventory", tags=["Inventory"])


def _to_response(film: Film) -> FilmWithInventory:
    level = None
    inv = film.inventory
    if inv is not None:
        level = InventoryLevel(
            current_stock=float(inv.current_stock),
            minimum_stock=float(inv.minimum_stock),
            is_low=inv.current_stock <= inv.minimum_stock,
        )
    return FilmWithInventory(**FilmResponse.model_validate(film).model_dump(), inventory=level)


@router.get("", response_model=List[FilmWithInventory])
def list_inventory(_user: CurrentUser = Depends(require_capability(Capability.VIEW_INVENTORY))):
    db = SessionLocal()
    try:
        return [_to_response(f) for f in inventory_service.films_with_inventory(db)]
    finally:
        db.close()


@router.get("/low-stock", response_model=List[FilmWithInventory])
def list_low_stock(_user: CurrentUser = Depends(require_capability(Capability.VIEW_INVENTORY))):
    db = SessionLocal()
    try:
        return [_to_response(f) for f in inventory_service.low_stock_films(db)]
    finally:
        db.close()


@router.get("/transactions", response_model=List[InventoryTransactionResponse])
def list_transactions(
    film_id: Optional[int] = Query(default=None, alias="filmId"),
    limit: int = Query(default=100, ge=1, le=500),
    _user: CurrentUser = Depends(require_capability(Capability.VIEW_INVENTORY)),
):
    db = SessionLocal()
    try:
        rows = inventory_service.list_transactions(db, film_id=film_id, limit=limit)
        return [InventoryTransactionResponse.model_validate(r) for r in rows]
    finally:
        db.close()


def _run(operation, **kwargs) -> InventoryTransactionResponse:
    db = SessionLocal()
    try:
        row = operation(db=db, **kwargs)
        db.commit()
        db.refresh(row)
        return InventoryTransactionResponse.model_validate(row)
    except LookupError as exc:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@router.post("/{film_id}/add", response_model=InventoryTransactionResponse)
def add_stock(
    film_id: int,
    payload: StockAddRequest,
    user: CurrentUser = Depends(require_capability(Capability.MANAGE_INVENTORY)),
):
    return _run(
        inventory_service.add_stock,
        film_id=film_id,
        quantity=payload.quantity,
        created_by=user.user_id,
        notes=payload.notes,
    )


@router.post("/{film_id}/adjust", response_model=InventoryTransactionResponse)
def adjust_stock(
    film_id: int,
    payload: StockAdjustRequest,
    user: CurrentUser = Depends(require_capability(Capability.MANAGE_INVENTORY)),
):
    return _run(
        inventory_service.adjust_stock,
        film_id=film_id,
        new_stock=payload.new_stock,
        created_by=user.user_id,
        notes=payload.notes,
    )


@router.post("/{film_id}/minimum", response_model=FilmWithInventory)
def set_minimum_stock(
    film_id: int,
    payload: MinimumStockRequest,
    _user: CurrentUser = Depends(require_capability(Capability.MANAGE_INVENTORY)),
):
    db = SessionLocal()
    try:
        inventory_service.set_minimum_stock(film_id, payload.minimum_stock, db=db)
        db.commit()
        film = db.query(Film).filter(Film.id == int(film_id)).first()
        return _to_response(film)
    except LookupError as exc:
        db.rollback()
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except ValueError as exc:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    finally:
        db.close()
