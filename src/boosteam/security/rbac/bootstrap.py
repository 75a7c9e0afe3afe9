"""
Seed and reset the permission registry and the default roles.

Two idempotence policies are supported:

``first-run``
    Seed only an empty registry. When any permission exists nothing is
    created; roles are only seeded in the run that created the permissions
    and only when no role exists. A store left with permissions but no roles
    stays that way; this is logged, not repaired.

``upsert``
    Ensure every catalog permission by (action, resource) and every default
    role by name. Existing roles keep their current permission sets.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from sqlalchemy.orm import Session

from boosteam.exceptions.handlers import ConfigurationError
from boosteam.security.rbac.catalog import (
    DEFAULT_ROLES,
    PERMISSION_CATALOG,
    derive_role_permissions,
)
from boosteam.security.rbac.models import Permission, Role, user_roles

logger = logging.getLogger(__name__)

BOOTSTRAP_MODES = ("first-run", "upsert")


@dataclass
class BootstrapResult:
    permissions_created: int = 0
    roles_created: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.permissions_created or self.roles_created)


def _create_roles(session: Session, permissions: List[Permission], result: BootstrapResult) -> None:
    for spec in DEFAULT_ROLES:
        session.add(
            Role(
                name=spec.name,
                description=spec.description,
                permissions=derive_role_permissions(spec, permissions),
            )
        )
        result.roles_created += 1


def _seed_first_run(session: Session) -> BootstrapResult:
    result = BootstrapResult()

    if session.query(Permission).first() is not None:
        if session.query(Role).first() is None:
            logger.warning(
                "Permissions exist but no roles were found; first-run bootstrap "
                "will not seed roles (set BOOTSTRAP_MODE=upsert to repair)"
            )
        return result

    logger.info("Creating default permissions...")
    permissions = [
        Permission(action=p.action, resource=p.resource, description=p.description)
        for p in PERMISSION_CATALOG
    ]
    session.add_all(permissions)
    session.flush()
    result.permissions_created = len(permissions)
    logger.info("Created %d permissions", result.permissions_created)

    if session.query(Role).first() is None:
        logger.info("Creating default roles...")
        _create_roles(session, permissions, result)
        session.flush()
        logger.info("Created %d roles", result.roles_created)
    return result


def _seed_upsert(session: Session) -> BootstrapResult:
    result = BootstrapResult()

    existing = {p.key: p for p in session.query(Permission).all()}
    for spec in PERMISSION_CATALOG:
        if spec.key in existing:
            continue
        permission = Permission(
            action=spec.action, resource=spec.resource, description=spec.description
        )
        session.add(permission)
        existing[spec.key] = permission
        result.permissions_created += 1
    session.flush()

    catalog_permissions = [existing[spec.key] for spec in PERMISSION_CATALOG]
    role_names = {name for (name,) in session.query(Role.name).all()}
    for spec in DEFAULT_ROLES:
        if spec.name in role_names:
            continue
        session.add(
            Role(
                name=spec.name,
                description=spec.description,
                permissions=derive_role_permissions(spec, catalog_permissions),
            )
        )
        result.roles_created += 1
    session.flush()

    if result.changed:
        logger.info(
            "Bootstrap upsert created %d permissions and %d roles",
            result.permissions_created,
            result.roles_created,
        )
    return result


def seed_default_roles_and_permissions(session: Session, *, mode: str = "first-run") -> BootstrapResult:
    mode = (mode or "first-run").strip().lower()
    if mode not in BOOTSTRAP_MODES:
        raise ConfigurationError(f"Unknown bootstrap mode: {mode}", config_key="BOOTSTRAP_MODE")
    if mode == "upsert":
        return _seed_upsert(session)
    return _seed_first_run(session)


def reset_roles_and_permissions(session: Session, *, mode: str = "first-run") -> BootstrapResult:
    """
    Delete every role, permission and role assignment, then seed again.

    Destructive and unconditional; users keep their accounts but lose all roles.
    """
    session.execute(user_roles.delete())
    session.expire_all()
    for role in session.query(Role).all():
        session.delete(role)
    session.flush()
    session.query(Permission).delete(synchronize_session=False)
    session.flush()
    logger.warning("Deleted all roles and permissions")
    return seed_default_roles_and_permissions(session, mode=mode)
