"""
Reference permission catalog and the default role derivation rules.

The rules are applied once, when roles are seeded; later edits to roles or
permissions never re-run them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Tuple

from boosteam.security.rbac.models import PermissionAction as A
from boosteam.security.rbac.models import PermissionResource as R


@dataclass(frozen=True)
class PermissionSpec:
    action: str
    resource: str
    description: str

    @property
    def key(self) -> Tuple[str, str]:
        return (self.action, self.resource)


PERMISSION_CATALOG: Tuple[PermissionSpec, ...] = (
    PermissionSpec(A.CREATE.value, R.USER.value, "Create users"),
    PermissionSpec(A.READ.value, R.USER.value, "View user information"),
    PermissionSpec(A.UPDATE.value, R.USER.value, "Update user information"),
    PermissionSpec(A.DELETE.value, R.USER.value, "Delete users"),
    PermissionSpec(A.CREATE.value, R.PLAYER.value, "Create players"),
    PermissionSpec(A.READ.value, R.PLAYER.value, "View players"),
    PermissionSpec(A.UPDATE.value, R.PLAYER.value, "Update players"),
    PermissionSpec(A.DELETE.value, R.PLAYER.value, "Delete players"),
    PermissionSpec(A.CREATE.value, R.TEAM.value, "Create teams"),
    PermissionSpec(A.READ.value, R.TEAM.value, "View teams"),
    PermissionSpec(A.UPDATE.value, R.TEAM.value, "Update teams"),
    PermissionSpec(A.DELETE.value, R.TEAM.value, "Delete teams"),
    PermissionSpec(A.CREATE.value, R.RAID.value, "Create raids"),
    PermissionSpec(A.READ.value, R.RAID.value, "View raids"),
    PermissionSpec(A.UPDATE.value, R.RAID.value, "Update raids"),
    PermissionSpec(A.DELETE.value, R.RAID.value, "Delete raids"),
    PermissionSpec(A.READ.value, R.SETTINGS.value, "View settings"),
    PermissionSpec(A.UPDATE.value, R.SETTINGS.value, "Update settings"),
)

ADMIN_ROLE = "admin"
USER_ROLE = "user"
VIEWER_ROLE = "viewer"

_USER_RESOURCES = {R.PLAYER.value, R.TEAM.value, R.SETTINGS.value}


@dataclass(frozen=True)
class RoleSpec:
    name: str
    description: str
    grants: Callable[[str, str], bool]


DEFAULT_ROLES: Tuple[RoleSpec, ...] = (
    RoleSpec(
        ADMIN_ROLE,
        "Administrator with full access",
        lambda action, resource: True,
    ),
    RoleSpec(
        USER_ROLE,
        "Regular user with team management access",
        lambda action, resource: resource in _USER_RESOURCES and action != A.DELETE.value,
    ),
    RoleSpec(
        VIEWER_ROLE,
        "Read-only access to all resources",
        lambda action, resource: action == A.READ.value,
    ),
)


def derive_role_permissions(spec: RoleSpec, permissions: List) -> List:
    """Select the permissions a default role receives at seed time."""
    return [p for p in permissions if spec.grants(p.action, p.resource)]
