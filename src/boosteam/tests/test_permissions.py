from __future__ import annotations

from types import SimpleNamespace

import pytest

from boosteam.exceptions.handlers import PermissionError, UnauthenticatedError
from boosteam.security.rbac.permissions import (
    PermissionChecker,
    RoleRequirement,
    check_ownership,
    effective_permissions,
    has_permission,
    has_role,
)


def _perm(action, resource):
    return SimpleNamespace(action=action, resource=resource)


def _role(name, *perms):
    return SimpleNamespace(name=name, permissions=[_perm(a, r) for a, r in perms])


def _user(*roles, user_id=1):
    return SimpleNamespace(id=user_id, roles=list(roles))


def test_effective_permissions_is_union_of_roles():
    user = _user(
        _role("a", ("read", "team"), ("update", "team")),
        _role("b", ("read", "team"), ("read", "player")),
    )
    assert effective_permissions(user) == frozenset(
        {("read", "team"), ("update", "team"), ("read", "player")}
    )


def test_duplicate_grants_are_idempotent():
    once = _user(_role("a", ("read", "team")))
    twice = _user(_role("a", ("read", "team")), _role("b", ("read", "team")))
    assert has_permission(once, "read", "team") == has_permission(twice, "read", "team")
    assert effective_permissions(once) == effective_permissions(twice)


def test_same_role_listed_twice_changes_nothing():
    viewer = _role("viewer", ("read", "team"), ("read", "player"))
    once = _user(viewer)
    twice = _user(viewer, viewer)
    assert effective_permissions(twice) == effective_permissions(once)
    assert PermissionChecker("read", "team").allows(twice)
    assert not PermissionChecker("update", "team").allows(twice)


def test_viewer_can_read_but_not_update():
    viewer = _user(_role("viewer", ("read", "team"), ("read", "player")))
    assert PermissionChecker("read", "team").check(viewer) is viewer

    with pytest.raises(PermissionError) as excinfo:
        PermissionChecker("update", "team").check(viewer)
    assert excinfo.value.status_code == 403
    assert excinfo.value.details == {"action": "update", "resource": "team"}


def test_update_does_not_imply_read():
    user = _user(_role("editor", ("update", "team")))
    assert not PermissionChecker("read", "team").allows(user)


def test_user_without_roles_is_denied_everything():
    user = _user()
    for action in ("create", "read", "update", "delete"):
        with pytest.raises(PermissionError):
            PermissionChecker(action, "player").check(user)


def test_role_without_permissions_grants_nothing():
    user = _user(_role("empty"))
    assert effective_permissions(user) == frozenset()
    assert has_role(user, "empty")


def test_missing_principal_is_unauthenticated():
    with pytest.raises(UnauthenticatedError):
        PermissionChecker("read", "team").check(None)
    with pytest.raises(UnauthenticatedError):
        RoleRequirement("admin").check(None)
    assert not has_permission(None, "read", "team")


def test_role_requirement_uses_role_name():
    admin = _user(_role("admin"))
    user = _user(_role("user", ("read", "user")))

    assert RoleRequirement("admin").check(admin) is admin
    with pytest.raises(PermissionError) as excinfo:
        RoleRequirement("admin").check(user)
    assert excinfo.value.message == "Admin access required"


def test_check_ownership_compares_ids_as_strings():
    user = _user(user_id=7)
    assert check_ownership(user, "7") is user
    assert check_ownership(user, 7) is user

    with pytest.raises(PermissionError) as excinfo:
        check_ownership(user, 8)
    assert excinfo.value.message == "You don't have permission to access this resource"

