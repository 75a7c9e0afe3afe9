from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session, selectinload

from boosteam.api.dependencies.auth import raise_http, require_permission, require_role
from boosteam.api.routers.auth import ProfileResponse, profile_of
from boosteam.config import Settings, get_settings
from boosteam.database import get_db
from boosteam.exceptions.handlers import BoosteamException, NotFoundError
from boosteam.models.roster import Player, Roster
from boosteam.security.auth.models import User
from boosteam.security.rbac.bootstrap import reset_roles_and_permissions
from boosteam.security.rbac.catalog import ADMIN_ROLE
from boosteam.security.rbac.models import Permission, Role
from boosteam.security.rbac.service import RoleService

# Every admin route needs the named admin role on top of its permission.
router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(require_role(ADMIN_ROLE))],
)


class PermissionResponse(BaseModel):
    id: int
    action: str
    resource: str
    description: str = ""


class PermissionCreateRequest(BaseModel):
    action: str = Field(..., min_length=1, max_length=20)
    resource: str = Field(..., min_length=1, max_length=50)
    description: str = Field(..., min_length=1, max_length=500)


class RoleResponse(BaseModel):
    id: int
    name: str
    description: str = ""
    permissions: List[PermissionResponse] = Field(default_factory=list)


class RoleCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=500)
    permissions: List[int] = Field(default_factory=list, description="Permission ids")


class RoleUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    permissions: Optional[List[int]] = None


class AssignRolesRequest(BaseModel):
    role_ids: List[int]


class UserSummary(BaseModel):
    id: int
    username: str
    email: Optional[str] = None
    roles: List[str] = Field(default_factory=list)
    created_at: datetime
    last_login: Optional[datetime] = None


class UserDetailResponse(ProfileResponse):
    players: List[Dict[str, Any]] = Field(default_factory=list)
    teams: Dict[str, Any] = Field(default_factory=dict)
    settings: Optional[Dict[str, int]] = None


def _permission_response(p: Permission) -> PermissionResponse:
    return PermissionResponse(
        id=p.id, action=p.action, resource=p.resource, description=p.description or ""
    )


def _role_response(role: Role) -> RoleResponse:
    return RoleResponse(
        id=role.id,
        name=role.name,
        description=role.description or "",
        permissions=[_permission_response(p) for p in role.permissions],
    )


@router.get(
    "/roles",
    response_model=Dict[str, Any],
    dependencies=[Depends(require_permission("read", "user"))],
)
def list_roles(db: Session = Depends(get_db)) -> Dict[str, Any]:
    roles = RoleService(db).list_roles()
    return {
        "message": "Roles retrieved successfully",
        "roles": [_role_response(r).model_dump() for r in roles],
    }


@router.post(
    "/roles",
    response_model=RoleResponse,
    status_code=201,
    dependencies=[Depends(require_permission("create", "user"))],
)
def create_role(req: RoleCreateRequest, db: Session = Depends(get_db)) -> RoleResponse:
    try:
        role = RoleService(db).create_role(
            name=req.name, description=req.description, permission_ids=req.permissions
        )
    except BoosteamException as exc:
        db.rollback()
        raise_http(exc)
    db.commit()
    return _role_response(role)


@router.put(
    "/roles/{role_id}",
    response_model=RoleResponse,
    dependencies=[Depends(require_permission("update", "user"))],
)
def update_role(
    role_id: int, req: RoleUpdateRequest, db: Session = Depends(get_db)
) -> RoleResponse:
    try:
        role = RoleService(db).update_role(
            role_id,
            name=req.name,
            description=req.description,
            permission_ids=req.permissions,
        )
    except BoosteamException as exc:
        db.rollback()
        raise_http(exc)
    db.commit()
    return _role_response(role)


@router.delete(
    "/roles/{role_id}",
    response_model=Dict[str, Any],
    dependencies=[Depends(require_permission("delete", "user"))],
)
def delete_role(role_id: int, db: Session = Depends(get_db)) -> Dict[str, Any]:
    try:
        RoleService(db).delete_role(role_id)
    except BoosteamException as exc:
        db.rollback()
        raise_http(exc)
    db.commit()
    return {"message": "Role deleted successfully"}


@router.post(
    "/users/{user_id}/roles",
    response_model=Dict[str, Any],
    dependencies=[Depends(require_permission("update", "user"))],
)
def assign_roles(
    user_id: int, req: AssignRolesRequest, db: Session = Depends(get_db)
) -> Dict[str, Any]:
    try:
        user = RoleService(db).assign_roles(user_id, req.role_ids)
    except BoosteamException as exc:
        db.rollback()
        raise_http(exc)
    db.commit()
    return {
        "message": "Roles assigned successfully",
        "user": profile_of(user).model_dump(mode="json"),
    }


@router.get(
    "/users",
    response_model=Dict[str, Any],
    dependencies=[Depends(require_permission("read", "user"))],
)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    total = db.query(User).count()
    users = (
        db.query(User)
        .options(selectinload(User.roles))
        .order_by(User.id.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "message": "Users retrieved successfully",
        "users": [
            UserSummary(
                id=u.id,
                username=u.username,
                email=u.email,
                roles=[r.name for r in u.roles],
                created_at=u.created_at,
                last_login=u.last_login,
            ).model_dump(mode="json")
            for u in users
        ],
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": math.ceil(total / limit),
        },
    }


@router.get(
    "/users/{user_id}",
    response_model=UserDetailResponse,
    dependencies=[Depends(require_permission("read", "user"))],
)
def get_user(user_id: int, db: Session = Depends(get_db)) -> UserDetailResponse:
    user = db.get(User, user_id)
    if not user:
        raise_http(NotFoundError("user", user_id))
    players = (
        db.query(Player).filter(Player.user_id == user.id).order_by(Player.created_at.asc()).all()
    )
    roster = db.get(Roster, user.id)
    return UserDetailResponse(
        **profile_of(user).model_dump(),
        players=[p.to_dict() for p in players],
        teams=dict(roster.teams or {}) if roster else {},
        settings=roster.settings_dict() if roster else None,
    )


@router.get(
    "/permissions",
    response_model=Dict[str, Any],
    dependencies=[Depends(require_permission("read", "user"))],
)
def list_permissions(db: Session = Depends(get_db)) -> Dict[str, Any]:
    permissions = RoleService(db).list_permissions()
    return {
        "message": "Permissions retrieved successfully",
        "permissions": [_permission_response(p).model_dump() for p in permissions],
    }


@router.post(
    "/permissions",
    response_model=PermissionResponse,
    status_code=201,
    dependencies=[Depends(require_permission("create", "user"))],
)
def create_permission(
    req: PermissionCreateRequest, db: Session = Depends(get_db)
) -> PermissionResponse:
    try:
        permission = RoleService(db).create_permission(
            action=req.action, resource=req.resource, description=req.description
        )
    except BoosteamException as exc:
        db.rollback()
        raise_http(exc)
    db.commit()
    return _permission_response(permission)


@router.post(
    "/rbac/reset",
    response_model=Dict[str, Any],
    dependencies=[Depends(require_permission("delete", "user"))],
)
def reset_rbac(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Dict[str, Any]:
    if settings.ENVIRONMENT == "production":
        raise HTTPException(status_code=403, detail="Reset is disabled in production")
    result = reset_roles_and_permissions(db, mode=settings.BOOTSTRAP_MODE)
    db.commit()
    return {
        "message": "Roles and permissions reset",
        "permissions_created": result.permissions_created,
        "roles_created": result.roles_created,
    }
