"""
Authorization decisions over an already-loaded principal.

Three predicates are composed by the API layer:
- PermissionChecker: exact (action, resource) membership in the union of the
  principal's role permissions. No wildcards, no hierarchy, no implication.
- RoleRequirement: the principal holds a role with a given name.
- check_ownership: the principal is the owner of the target resource.

All of them are pure: they read ``user.roles`` and ``role.permissions`` and
never touch the session.
"""

from __future__ import annotations

import logging
from typing import Any, FrozenSet, Optional, Tuple

from boosteam.exceptions.handlers import PermissionError, UnauthenticatedError

logger = logging.getLogger(__name__)

PermissionKey = Tuple[str, str]


def _value(raw: Any) -> str:
    return str(getattr(raw, "value", raw))


def effective_permissions(user: Any) -> FrozenSet[PermissionKey]:
    keys = set()
    for role in getattr(user, "roles", None) or []:
        for permission in getattr(role, "permissions", None) or []:
            keys.add((_value(permission.action), _value(permission.resource)))
    return frozenset(keys)


def role_names(user: Any) -> FrozenSet[str]:
    return frozenset(str(r.name) for r in (getattr(user, "roles", None) or []))


def has_permission(user: Any, action: Any, resource: Any) -> bool:
    if user is None:
        return False
    return (_value(action), _value(resource)) in effective_permissions(user)


def has_role(user: Any, role_name: str) -> bool:
    if user is None:
        return False
    return role_name in role_names(user)


def _require_user(user: Any) -> Any:
    if user is None:
        raise UnauthenticatedError()
    return user


class PermissionChecker:
    def __init__(self, action: Any, resource: Any) -> None:
        self.action = _value(action)
        self.resource = _value(resource)

    def allows(self, user: Any) -> bool:
        return has_permission(user, self.action, self.resource)

    def check(self, user: Any) -> Any:
        _require_user(user)
        if not self.allows(user):
            logger.warning(
                "Permission denied user_id=%s action=%s resource=%s",
                getattr(user, "id", None),
                self.action,
                self.resource,
            )
            raise PermissionError(action=self.action, resource=self.resource)
        return user

    def __repr__(self) -> str:
        return f"PermissionChecker({self.action!r}, {self.resource!r})"


class RoleRequirement:
    def __init__(self, role_name: str, *, message: Optional[str] = None) -> None:
        self.role_name = role_name
        self.message = message or f"{role_name.capitalize()} access required"

    def allows(self, user: Any) -> bool:
        return has_role(user, self.role_name)

    def check(self, user: Any) -> Any:
        _require_user(user)
        if not self.allows(user):
            logger.warning(
                "Role %s required, denied user_id=%s", self.role_name, getattr(user, "id", None)
            )
            raise PermissionError(self.message, role=self.role_name)
        return user

    def __repr__(self) -> str:
        return f"RoleRequirement({self.role_name!r})"


def check_ownership(user: Any, owner_id: Any) -> Any:
    _require_user(user)
    if str(getattr(user, "id", None)) != str(owner_id):
        raise PermissionError("You don't have permission to access this resource")
    return user
