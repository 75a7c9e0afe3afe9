"""
RBAC models: the permission registry, roles and the user/role association.

Permissions and roles are shared rows. Users reference roles and roles
reference permissions through association tables, never by embedding.
"""

from __future__ import annotations

import enum
from datetime import datetime
from typing import Tuple

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from boosteam.models.base import Base


class PermissionAction(str, enum.Enum):
    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"


class PermissionResource(str, enum.Enum):
    USER = "user"
    PLAYER = "player"
    TEAM = "team"
    RAID = "raid"
    SETTINGS = "settings"


role_permissions = Table(
    "rbac_role_permissions",
    Base.metadata,
    Column(
        "role_id", Integer, ForeignKey("rbac_roles.id", ondelete="CASCADE"), primary_key=True
    ),
    Column(
        "permission_id",
        Integer,
        ForeignKey("rbac_permissions.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("granted_at", DateTime, default=datetime.utcnow),
)

user_roles = Table(
    "rbac_user_roles",
    Base.metadata,
    Column("user_id", Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("role_id", Integer, ForeignKey("rbac_roles.id"), primary_key=True),
    Column("assigned_at", DateTime, default=datetime.utcnow),
)


class Permission(Base):
    __tablename__ = "rbac_permissions"
    __table_args__ = (
        UniqueConstraint("action", "resource", name="uq_rbac_permission_action_resource"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    action = Column(String(20), nullable=False)
    resource = Column(String(50), nullable=False)
    description = Column(Text, nullable=False, default="")

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.action, self.resource)

    def __repr__(self) -> str:
        return f"<Permission {self.action}:{self.resource}>"


class Role(Base):
    __tablename__ = "rbac_roles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    description = Column(Text, nullable=False, default="")

    permissions = relationship("Permission", secondary=role_permissions, backref="roles")

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self) -> str:
        return f"<Role {self.name}>"
