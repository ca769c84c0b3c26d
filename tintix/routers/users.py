import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from tintix.core.authorization import Capability, require_capability
from tintix.database import SessionLocal
from tintix.deps.auth import CurrentUser
from tintix.models.user import User
from tintix.schemas.user import HourlyRateUpdate, RoleUpdate, UserResponse
from tintix.services.measurements import money

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


def _get_user(db, user_id: str) -> User:
    row = db.query(User).filter(User.id == str(user_id)).first()
    if row is None:
        raise HTTPException(status_code=404, detail="User not found")
    return row


@router.get("", response_model=List[UserResponse])
def list_users(_user: CurrentUser = Depends(require_capability(Capability.MANAGE_USERS))):
    db = SessionLocal()
    try:
        rows = db.query(User).order_by(User.first_name.asc(), User.last_name.asc(), User.id.asc()).all()
        return [UserResponse.model_validate(r) for r in rows]
    finally:
        db.close()


@router.patch("/{user_id}/role", response_model=UserResponse)
def update_role(
    user_id: str,
    payload: RoleUpdate,
    user: CurrentUser = Depends(require_capability(Capability.MANAGE_USERS)),
):
    if str(user_id) == user.user_id:
        raise HTTPException(status_code=400, detail="Cannot change your own role")

    db = SessionLocal()
    try:
        row = _get_user(db, user_id)
        previous = row.role
        row.role = payload.role.value
        db.commit()
        db.refresh(row)
        logger.info(
            "User role changed",
            extra={"user_id": row.id, "from_role": previous, "to_role": row.role, "changed_by": user.user_id},
        )
        return UserResponse.model_validate(row)
    finally:
        db.close()


@router.patch("/{user_id}/hourly-rate", response_model=UserResponse)
def update_hourly_rate(
    user_id: str,
    payload: HourlyRateUpdate,
    _user: CurrentUser = Depends(require_capability(Capability.MANAGE_USERS)),
):
    db = SessionLocal()
    try:
        row = _get_user(db, user_id)
        row.hourly_rate = money(payload.hourly_rate)
        db.commit()
        db.refresh(row)
        return UserResponse.model_validate(row)
    finally:
        db.close()
