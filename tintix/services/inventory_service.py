import logging
from decimal import Decimal
from typing import Any, List, Optional

from sqlalchemy.orm import Session

from tintix.database import SessionLocal
from tintix.models.film import Film, FilmInventory
from tintix.models.inventory_transaction import InventoryTransaction
from tintix.services.measurements import money, to_decimal

logger = logging.getLogger(__name__)


def _lock_inventory(db: Session, film_id: int) -> FilmInventory:
    """
    Row-lock the film's stock for the rest of the transaction so two
    concurrent changes cannot both read the same previous_stock.
    """
    film = db.query(Film).filter(Film.id == int(film_id)).first()
    if film is None:
        raise LookupError("Film not found")

    inventory = (
        db.query(FilmInventory)
        .filter(FilmInventory.film_id == int(film_id))
        .with_for_update()
        .first()
    )
    if inventory is None:
        inventory = FilmInventory(film_id=film.id, current_stock=Decimal("0.00"), minimum_stock=Decimal("0.00"))
        db.add(inventory)
        db.flush()
    return inventory


def _apply(
    db: Optional[Session],
    *,
    film_id: int,
    kind: str,
    compute_new_stock,
    created_by: str,
    job_entry_id: Optional[int] = None,
    notes: Optional[str] = None,
) -> InventoryTransaction:
    """
    If db is provided, this function will NOT commit/close. Caller owns the transaction.
    If db is None, this function manages its own session + commit.
    """
    owns_db = db is None
    if owns_db:
        db = SessionLocal()

    try:
        inventory = _lock_inventory(db, film_id)
        previous = money(to_decimal(inventory.current_stock))
        new_stock = money(compute_new_stock(previous))

        row = InventoryTransaction(
            film_id=int(film_id),
            type=kind,
            quantity=money(new_stock - previous) if kind == "adjustment" else money(abs(new_stock - previous)),
            previous_stock=previous,
            new_stock=new_stock,
            job_entry_id=job_entry_id,
            notes=notes,
            created_by=str(created_by),
        )
        inventory.current_stock = new_stock
        db.add(row)
        db.flush()

        if new_stock < 0:
            logger.warning(
                "Film stock went negative",
                extra={"film_id": int(film_id), "new_stock": new_stock, "job_entry_id": job_entry_id},
            )

        if owns_db:
            db.commit()
            db.refresh(row)

        return row
    except Exception:
        if owns_db:
            db.rollback()
        raise
    finally:
        if owns_db:
            db.close()


def add_stock(
    film_id: int,
    quantity: Any,
    created_by: str,
    notes: Optional[str] = None,
    *,
    db: Optional[Session] = None,
) -> InventoryTransaction:
    qty = to_decimal(quantity)
    if qty <= 0:
        raise ValueError("Quantity must be greater than 0")
    return _apply(
        db,
        film_id=film_id,
        kind="addition",
        compute_new_stock=lambda prev: prev + qty,
        created_by=created_by,
        notes=notes,
    )


def deduct_stock(
    film_id: int,
    quantity: Any,
    created_by: str,
    job_entry_id: Optional[int] = None,
    notes: Optional[str] = None,
    *,
    db: Optional[Session] = None,
) -> InventoryTransaction:
    """Record film consumed; stock is allowed to go negative (logged) since the film was already used."""
    qty = to_decimal(quantity)
    if qty <= 0:
        raise ValueError("Quantity must be greater than 0")
    return _apply(
        db,
        film_id=film_id,
        kind="deduction",
        compute_new_stock=lambda prev: prev - qty,
        created_by=created_by,
        job_entry_id=job_entry_id,
        notes=notes,
    )


def adjust_stock(
    film_id: int,
    new_stock: Any,
    created_by: str,
    notes: Optional[str] = None,
    *,
    db: Optional[Session] = None,
) -> InventoryTransaction:
    target = to_decimal(new_stock)
    if target < 0:
        raise ValueError("Stock cannot be negative")
    return _apply(
        db,
        film_id=film_id,
        kind="adjustment",
        compute_new_stock=lambda _prev: target,
        created_by=created_by,
        notes=notes,
    )


def set_minimum_stock(film_id: int, minimum_stock: Any, *, db: Optional[Session] = None) -> FilmInventory:
    minimum = to_decimal(minimum_stock)
    if minimum < 0:
        raise ValueError("Minimum stock cannot be negative")

    owns_db = db is None
    if owns_db:
        db = SessionLocal()

    try:
        inventory = _lock_inventory(db, film_id)
        inventory.minimum_stock = money(minimum)
        db.flush()

        if owns_db:
            db.commit()
            db.refresh(inventory)

        return inventory
    except Exception:
        if owns_db:
            db.rollback()
        raise
    finally:
        if owns_db:
            db.close()


def films_with_inventory(db: Session, *, active_only: bool = True) -> List[Film]:
    q = db.query(Film)
    if active_only:
        q = q.filter(Film.is_active.is_(True))
    return q.order_by(Film.name.asc()).all()


def low_stock_films(db: Session) -> List[Film]:
    return (
        db.query(Film)
        .join(FilmInventory, FilmInventory.film_id == Film.id)
        .filter(Film.is_active.is_(True))
        .filter(FilmInventory.current_stock <= FilmInventory.minimum_stock)
        .order_by(Film.name.asc())
        .all()
    )


def list_transactions(db: Session, film_id: Optional[int] = None, limit: int = 100) -> List[InventoryTransaction]:
    q = db.query(InventoryTransaction)
    if film_id is not None:
        q = q.filter(InventoryTransaction.film_id == int(film_id))
    return (
        q.order_by(InventoryTransaction.created_at.desc(), InventoryTransaction.id.desc())
        .limit(int(limit))
        .all()
    )
