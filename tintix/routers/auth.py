import os

from fastapi import APIRouter, Depends, HTTPException

from tintix.database import SessionLocal
from tintix.deps.auth import CurrentUser, require_auth
from tintix.models.user import User
from tintix.schemas.base import CamelModel
from tintix.schemas.user import UserResponse
from tintix.services.auth_service import create_access_token

router = APIRouter(prefix="/auth", tags=["auth"])


class TokenRequest(CamelModel):
    user_id: str


@router.post("/token")
def issue_token(payload: TokenRequest):
    env = os.getenv("ENV", "dev").lower()
    if env not in {"dev", "local", "test"}:
        raise HTTPException(status_code=404, detail="Not Found")

    db = SessionLocal()
    try:
        user = db.query(User).filter(User.id == str(payload.user_id)).first()
        if user is None or not user.is_active:
            raise HTTPException(status_code=401, detail="Unknown or inactive user")
        role = user.role
    finally:
        db.close()

    try:
        token = create_access_token(user_id=str(payload.user_id), role=role)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {
        "access_token": token,
        "token_type": "bearer",
    }


@router.get("/user", response_model=UserResponse)
def current_user(user: CurrentUser = Depends(require_auth)):
    db = SessionLocal()
    try:
        row = db.query(User).filter(User.id == user.user_id).first()
        if row is None:
            raise HTTPException(status_code=401, detail="User not found")
        return UserResponse.model_validate(row)
    finally:
        db.close()
