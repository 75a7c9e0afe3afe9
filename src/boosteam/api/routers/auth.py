from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from boosteam.api.dependencies.auth import (
    get_current_user,
    raise_http,
    require_owner_or_role,
    require_permission,
)
from boosteam.config import Settings, get_settings
from boosteam.database import get_db
from boosteam.exceptions.handlers import BoosteamException
from boosteam.security.auth.jwt import build_access_token_payload, encode_hs256
from boosteam.security.auth.models import User
from boosteam.security.auth.service import AuthService
from boosteam.security.rbac.catalog import ADMIN_ROLE

router = APIRouter(prefix="/auth", tags=["Auth"])


def _service(db: Session, settings: Settings) -> AuthService:
    return AuthService(
        db,
        password_min_length=settings.PASSWORD_MIN_LENGTH,
        password_iterations=settings.PASSWORD_HASH_ITERATIONS,
    )


class RegisterRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=200)


class MessageResponse(BaseModel):
    message: str


@router.post("/register", response_model=MessageResponse, status_code=201)
def register(
    req: RegisterRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    try:
        _service(db, settings).register_user(
            username=req.username, password=req.password, email=req.email
        )
        db.commit()
    except BoosteamException as exc:
        db.rollback()
        raise_http(exc)
    return MessageResponse(message="User registered successfully")


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, max_length=200, description="Username or email")
    password: str = Field(..., min_length=1, max_length=200)


class LoginResponse(BaseModel):
    message: str = "Logged in successfully"
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    user_id: int
    username: str


@router.post("/login", response_model=LoginResponse)
def login(
    req: LoginRequest,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> LoginResponse:
    try:
        user = _service(db, settings).authenticate(login=req.username, password=req.password)
    except ValueError as e:
        raise HTTPException(status_code=401, detail=str(e)) from e
    db.commit()

    payload = build_access_token_payload(
        user_id=user.id, ttl_seconds=settings.JWT_ACCESS_TOKEN_TTL_SECONDS
    )
    token = encode_hs256(payload, secret=settings.JWT_SECRET_KEY)
    return LoginResponse(
        access_token=token,
        expires_in=settings.JWT_ACCESS_TOKEN_TTL_SECONDS,
        user_id=user.id,
        username=user.username,
    )


class RoleSummary(BaseModel):
    id: int
    name: str
    description: str = ""


class ProfileResponse(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    roles: List[RoleSummary] = Field(default_factory=list)
    created_at: datetime
    last_login: Optional[datetime] = None


def profile_of(user: User) -> ProfileResponse:
    return ProfileResponse(
        id=user.id,
        username=user.username,
        email=user.email,
        roles=[
            RoleSummary(id=r.id, name=r.name, description=r.description or "")
            for r in (user.roles or [])
        ],
        created_at=user.created_at,
        last_login=user.last_login,
    )


@router.get("/profile", response_model=ProfileResponse)
def profile(user: User = Depends(get_current_user)) -> ProfileResponse:
    return profile_of(user)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=200)
    new_password: str = Field(..., min_length=1, max_length=200)


@router.put("/change-password", response_model=MessageResponse)
def change_password(
    req: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    try:
        _service(db, settings).change_password(
            user, current_password=req.current_password, new_password=req.new_password
        )
    except ValueError as e:
        db.rollback()
        raise HTTPException(status_code=401, detail=str(e)) from e
    except BoosteamException as exc:
        db.rollback()
        raise_http(exc)
    db.commit()
    return MessageResponse(message="Password changed successfully")


@router.delete(
    "/users/{user_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_permission("delete", "user"))],
)
def delete_user(
    user_id: int,
    _: User = Depends(require_owner_or_role("user_id", ADMIN_ROLE)),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> MessageResponse:
    try:
        _service(db, settings).delete_user(user_id)
    except BoosteamException as exc:
        db.rollback()
        raise_http(exc)
    db.commit()
    return MessageResponse(message="User deleted successfully")
