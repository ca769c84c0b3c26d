from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.exc import IntegrityError

from tintix.core.authorization import Capability, Role, require_capability
from tintix.database import SessionLocal
from tintix.deps.auth import CurrentUser, require_auth
from tintix.models.user import User
from tintix.schemas.user import InstallerCreate, InstallerUpdate, UserResponse
from tintix.services.measurements import money

router = APIRouter(prefix="/installers", tags=["Installers"])


@router.get("", response_model=List[UserResponse])
def list_installers(
    include_inactive: bool = False,
    _user: CurrentUser = Depends(require_auth),
):
    db = SessionLocal()
    try:
        q = db.query(User).filter(User.role == Role.INSTALLER.value)
        if not include_inactive:
            q = q.filter(User.is_active.is_(True))
        rows = q.order_by(User.first_name.asc(), User.last_name.asc()).all()
        return [UserResponse.model_validate(r) for r in rows]
    finally:
        db.close()


@router.post("", response_model=UserResponse, status_code=201)
def create_installer(
    payload: InstallerCreate,
    _user: CurrentUser = Depends(require_capability(Capability.MANAGE_INSTALLERS)),
):
    db = SessionLocal()
    try:
        email = payload.email.strip().lower()
        row = User(
            id=email,
            email=email,
            first_name=payload.first_name,
            last_name=payload.last_name,
            role=Role.INSTALLER.value,
            hourly_rate=money(payload.hourly_rate) if payload.hourly_rate is not None else 0,
            is_active=True,
        )
        db.add(row)
        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise HTTPException(status_code=409, detail="A user with this email already exists") from exc
        db.refresh(row)
        return UserResponse.model_validate(row)
    finally:
        db.close()


@router.patch("/{installer_id}", response_model=UserResponse)
def update_installer(
    installer_id: str,
    payload: InstallerUpdate,
    _user: CurrentUser = Depends(require_capability(Capability.MANAGE_INSTALLERS)),
):
    db = SessionLocal()
    try:
        row = db.query(User).filter(User.id == str(installer_id)).first()
        if row is None:
            raise HTTPException(status_code=404, detail="Installer not found")

        for name, value in payload.model_dump(exclude_unset=True).items():
            if value:
                setattr(row, name, value)

        try:
            db.commit()
        except IntegrityError as exc:
            db.rollback()
            raise HTTPException(status_code=409, detail="A user with this email already exists") from exc
        db.refresh(row)
        return UserResponse.model_validate(row)
    finally:
        db.close()


@router.delete("/{installer_id}", status_code=204)
def deactivate_installer(
    installer_id: str,
    _user: CurrentUser = Depends(require_capability(Capability.MANAGE_INSTALLERS)),
):
    # Installers stay referenced by historical jobs, so removal only deactivates.
    db = SessionLocal()
    try:
        row = db.query(User).filter(User.id == str(installer_id)).first()
        if row is None:
            raise HTTPException(status_code=404, detail="Installer not found")
        row.is_active = False
        db.commit()
        return Response(status_code=204)
    finally:
        db.close()
