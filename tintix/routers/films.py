import logging
from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError

from tintix.core.authorization import Capability, require_capability
from tintix.database import SessionLocal
from tintix.deps.auth import CurrentUser, require_auth
from tintix.models.film import Film, FilmInventory
from tintix.schemas.film import FilmCreate, FilmResponse, FilmUpdate
from tintix.services.measurements import money

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/films", tags=["Films"])


def _get_film(db, film_id: int) -> Film:
    row = db.query(Film).filter(Film.id == int(film_id)).first()
    if row is None:
        raise HTTPException(status_code=404, detail="Film not found")
    return row


@router.get("", response_model=List[FilmResponse])
def list_active_films(_user: CurrentUser = Depends(require_auth)):
    db = SessionLocal()
    try:
        rows = db.query(Film).filter(Film.is_active.is_(True)).order_by(Film.name.asc()).all()
        return [FilmResponse.model_validate(r) for r in rows]
    finally:
        db.close()


@router.get("/all", response_model=List[FilmResponse])
def list_all_films(_user: CurrentUser = Depends(require_capability(Capability.MANAGE_FILMS))):
    db = SessionLocal()
    try:
        rows = db.query(Film).order_by(Film.name.asc()).all()
        return [FilmResponse.model_validate(r) for r in rows]
    finally:
        db.close()


@router.post("", response_model=FilmResponse, status_code=201)
def create_film(
    payload: FilmCreate,
    _user: CurrentUser = Depends(require_capability(Capability.MANAGE_FILMS)),
):
    db = SessionLocal()
    try:
        row = Film(
            name=payload.name.strip(),
            type=payload.type.strip(),
            cost_per_sqft=money(payload.cost_per_sqft),
            is_active=True,
        )
        row.inventory = FilmInventory(current_stock=Decimal("0.00"), minimum_stock=money(payload.minimum_stock))
        db.add(row)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise HTTPException(status_code=409, detail="Film name already exists") from exc
        db.refresh(row)
        return FilmResponse.model_validate(row)
    finally:
        db.close()


@router.put("/{film_id}", response_model=FilmResponse)
def update_film(
    film_id: int,
    payload: FilmUpdate,
    _user: CurrentUser = Depends(require_capability(Capability.MANAGE_FILMS)),
):
    db = SessionLocal()
    try:
        row = _get_film(db, film_id)
        changes = payload.model_dump(exclude_unset=True, exclude_none=True)

        if "cost_per_sqft" in changes:
            # Only future writes pick this up; stored job and redo costs keep their snapshot.
            changes["cost_per_sqft"] = money(changes["cost_per_sqft"])
            logger.info(
                "Film price changed",
                extra={"film_id": row.id, "from": row.cost_per_sqft, "to": changes["cost_per_sqft"]},
            )

        for name, value in changes.items():
            setattr(row, name, value)

        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise HTTPException(status_code=409, detail="Film name already exists") from exc
        db.refresh(row)
        return FilmResponse.model_validate(row)
    finally:
        db.close()


@router.delete("/{film_id}", response_model=FilmResponse)
def deactivate_film(
    film_id: int,
    _user: CurrentUser = Depends(require_capability(Capability.MANAGE_FILMS)),
):
    # Historical dimensions reference films, so they are only deactivated.
    db = SessionLocal()
    try:
        row = _get_film(db, film_id)
        row.is_active = False
        db.commit()
        db.refresh(row)
        return FilmResponse.model_validate(row)
    finally:
        db.close()
