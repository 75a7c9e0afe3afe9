from boosteam.security.rbac.permissions import (
    PermissionChecker,
    RoleRequirement,
    check_ownership,
    effective_permissions,
    has_permission,
    has_role,
)

__all__ = [
    "PermissionChecker",
    "RoleRequirement",
    "check_ownership",
    "effective_permissions",
    "has_permission",
    "has_role",
]
