from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from boosteam.exceptions.handlers import (
    DuplicatePermissionError,
    DuplicateRoleError,
    NotFoundError,
    RoleInUseError,
    ValidationError,
)
from boosteam.security.auth.models import User
from boosteam.security.rbac.models import (
    Permission,
    PermissionAction,
    PermissionResource,
    Role,
    user_roles,
)

logger = logging.getLogger(__name__)

_ACTIONS = {a.value for a in PermissionAction}
_RESOURCES = {r.value for r in PermissionResource}


class RoleService:
    def __init__(self, session: Session):
        self.session = session

    # Permissions

    def list_permissions(self) -> List[Permission]:
        return self.session.query(Permission).order_by(Permission.id.asc()).all()

    def create_permission(self, *, action: str, resource: str, description: str) -> Permission:
        if action not in _ACTIONS:
            raise ValidationError(f"Unknown action: {action}", field="action")
        if resource not in _RESOURCES:
            raise ValidationError(f"Unknown resource: {resource}", field="resource")

        existing = (
            self.session.query(Permission)
            .filter(Permission.action == action, Permission.resource == resource)
            .first()
        )
        if existing:
            raise DuplicatePermissionError(action, resource)

        permission = Permission(action=action, resource=resource, description=description)
        self.session.add(permission)
        try:
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicatePermissionError(action, resource) from e
        return permission

    def _resolve_permissions(self, permission_ids: Iterable[int]) -> List[Permission]:
        wanted = list(dict.fromkeys(int(pid) for pid in permission_ids))
        if not wanted:
            return []
        found = self.session.query(Permission).filter(Permission.id.in_(wanted)).all()
        if len(found) != len(wanted):
            missing = sorted(set(wanted) - {p.id for p in found})
            raise ValidationError(
                "One or more permissions not found",
                field="permissions",
                status_code=400,
                missing=missing,
            )
        return found

    # Roles

    def list_roles(self) -> List[Role]:
        return (
            self.session.query(Role)
            .options(selectinload(Role.permissions))
            .order_by(Role.id.asc())
            .all()
        )

    def get_role(self, role_id: int) -> Role:
        role = self.session.get(Role, role_id)
        if not role:
            raise NotFoundError("role", role_id)
        return role

    def get_role_by_name(self, name: str) -> Optional[Role]:
        return self.session.query(Role).filter(Role.name == name).first()

    def create_role(
        self, *, name: str, description: str, permission_ids: Iterable[int] = ()
    ) -> Role:
        if self.get_role_by_name(name):
            raise DuplicateRoleError(name)

        role = Role(
            name=name,
            description=description,
            permissions=self._resolve_permissions(permission_ids),
        )
        self.session.add(role)
        try:
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateRoleError(name) from e
        logger.info("Created role %s with %d permissions", name, len(role.permissions))
        return role

    def update_role(
        self,
        role_id: int,
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        permission_ids: Optional[Iterable[int]] = None,
    ) -> Role:
        role = self.get_role(role_id)
        if name is not None and name != role.name:
            if self.get_role_by_name(name):
                raise DuplicateRoleError(name)
            role.name = name
        if description is not None:
            role.description = description
        if permission_ids is not None:
            role.permissions = self._resolve_permissions(permission_ids)
        try:
            self.session.flush()
        except IntegrityError as e:
            self.session.rollback()
            raise DuplicateRoleError(name or role.name) from e
        return role

    def count_users_with_role(self, role_id: int) -> int:
        return (
            self.session.query(func.count())
            .select_from(user_roles)
            .filter(user_roles.c.role_id == role_id)
            .scalar()
            or 0
        )

    def delete_role(self, role_id: int) -> None:
        role = self.get_role(role_id)
        in_use = self.count_users_with_role(role.id)
        if in_use > 0:
            raise RoleInUseError(role.id, in_use)
        self.session.delete(role)
        self.session.flush()
        logger.info("Deleted role %s", role.name)

    # Assignments

    def assign_roles(self, user_id: int, role_ids: Iterable[int]) -> User:
        wanted = list(dict.fromkeys(int(rid) for rid in role_ids))
        roles = self.session.query(Role).filter(Role.id.in_(wanted)).all() if wanted else []
        if len(roles) != len(wanted):
            raise ValidationError("One or more roles not found", field="role_ids", status_code=400)

        user = self.session.get(User, user_id)
        if not user:
            raise NotFoundError("user", user_id)

        by_id = {r.id: r for r in roles}
        user.roles = [by_id[rid] for rid in wanted]
        self.session.flush()
        return user
