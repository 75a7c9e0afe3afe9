from __future__ import annotations

import pytest

from boosteam.exceptions.handlers import (
    DuplicatePermissionError,
    DuplicateRoleError,
    NotFoundError,
    RoleInUseError,
    ValidationError,
)
from boosteam.security.rbac.models import Permission
from boosteam.security.rbac.service import RoleService
from boosteam.tests.conftest import make_user


def _permission_id(session, action, resource):
    return (
        session.query(Permission)
        .filter(Permission.action == action, Permission.resource == resource)
        .one()
        .id
    )


def test_create_role_with_permissions(seeded_db):
    svc = RoleService(seeded_db)
    pid = _permission_id(seeded_db, "read", "raid")

    role = svc.create_role(name="raider", description="Raid lead", permission_ids=[pid, pid])
    seeded_db.commit()

    assert [(p.action, p.resource) for p in role.permissions] == [("read", "raid")]


def test_create_role_rejects_duplicate_name(seeded_db):
    with pytest.raises(DuplicateRoleError) as excinfo:
        RoleService(seeded_db).create_role(name="viewer", description="again")
    assert excinfo.value.status_code == 409


def test_create_role_rejects_unknown_permission(seeded_db):
    with pytest.raises(ValidationError) as excinfo:
        RoleService(seeded_db).create_role(name="x", description="x", permission_ids=[9999])
    assert excinfo.value.status_code == 400
    assert excinfo.value.details["missing"] == [9999]


def test_update_role_rename_collision(seeded_db):
    svc = RoleService(seeded_db)
    viewer = svc.get_role_by_name("viewer")
    with pytest.raises(DuplicateRoleError):
        svc.update_role(viewer.id, name="user")


def test_update_role_replaces_permission_set(seeded_db):
    svc = RoleService(seeded_db)
    viewer = svc.get_role_by_name("viewer")
    pid = _permission_id(seeded_db, "update", "team")

    role = svc.update_role(viewer.id, permission_ids=[pid])
    seeded_db.commit()

    assert [(p.action, p.resource) for p in role.permissions] == [("update", "team")]


def test_create_permission_duplicate(seeded_db):
    with pytest.raises(DuplicatePermissionError) as excinfo:
        RoleService(seeded_db).create_permission(
            action="read", resource="team", description="again"
        )
    assert excinfo.value.status_code == 409


def test_create_permission_unknown_action(seeded_db):
    with pytest.raises(ValidationError):
        RoleService(seeded_db).create_permission(
            action="archive", resource="team", description="nope"
        )


def test_delete_role_in_use_is_refused(seeded_db):
    make_user(seeded_db, "alice", roles=["viewer"])
    svc = RoleService(seeded_db)
    viewer = svc.get_role_by_name("viewer")

    with pytest.raises(RoleInUseError) as excinfo:
        svc.delete_role(viewer.id)
    assert excinfo.value.status_code == 400
    assert excinfo.value.details["user_count"] == 1
    assert svc.get_role_by_name("viewer") is not None


def test_delete_unused_role(seeded_db):
    svc = RoleService(seeded_db)
    role = svc.create_role(name="temp", description="Temporary")
    seeded_db.commit()

    svc.delete_role(role.id)
    seeded_db.commit()
    assert svc.get_role_by_name("temp") is None


def test_delete_missing_role(seeded_db):
    with pytest.raises(NotFoundError):
        RoleService(seeded_db).delete_role(424242)


def test_assign_roles_replaces_set(seeded_db):
    user = make_user(seeded_db, "bob", roles=["user"])
    svc = RoleService(seeded_db)
    viewer = svc.get_role_by_name("viewer")

    svc.assign_roles(user.id, [viewer.id])
    seeded_db.commit()
    assert [r.name for r in user.roles] == ["viewer"]


def test_assign_roles_unknown_role_leaves_assignment(seeded_db):
    user = make_user(seeded_db, "carol", roles=["user"])
    with pytest.raises(ValidationError):
        RoleService(seeded_db).assign_roles(user.id, [9999])
    assert [r.name for r in user.roles] == ["user"]


def test_assign_roles_unknown_user(seeded_db):
    viewer = RoleService(seeded_db).get_role_by_name("viewer")
    with pytest.raises(NotFoundError):
        RoleService(seeded_db).assign_roles(9999, [viewer.id])
