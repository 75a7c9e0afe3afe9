"""
Roster data owned by a single user: players, team assignments and the
team-building settings.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict

from sqlalchemy import JSON, Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import backref, relationship

from boosteam.models.base import Base

PLAYER_ROLES = ("support", "dps", "alt")
PLAYER_TIERS = ("S", "A", "B", "C", "D", "1", "2", "3", "4", "5")

DEFAULT_MAX_PLAYERS = 10
DEFAULT_MIN_DPS_PLAYERS = 2
DEFAULT_MIN_SUPPORT_PLAYERS = 2


class Player(Base):
    __tablename__ = "roster_players"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String(100), nullable=False)
    role = Column(String(20), nullable=False)
    tier = Column(String(2), nullable=False)
    assigned_team_id = Column(Integer, nullable=True)
    checked = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship(
        "User",
        backref=backref(
            "players",
            cascade="all, delete-orphan",
            passive_deletes=True,
            order_by="Player.created_at",
        ),
    )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "role": self.role,
            "tier": self.tier,
            "assigned_team_id": self.assigned_team_id,
            "checked": bool(self.checked),
        }


class Roster(Base):
    """Per-user team layout and settings; one row per user."""

    __tablename__ = "roster_settings"

    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    teams = Column(JSON, nullable=False, default=dict)

    max_players = Column(Integer, default=DEFAULT_MAX_PLAYERS, nullable=False)
    min_dps_players = Column(Integer, default=DEFAULT_MIN_DPS_PLAYERS, nullable=False)
    min_support_players = Column(Integer, default=DEFAULT_MIN_SUPPORT_PLAYERS, nullable=False)

    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship(
        "User",
        backref=backref("roster", uselist=False, cascade="all, delete-orphan", passive_deletes=True),
    )

    def settings_dict(self) -> Dict[str, int]:
        return {
            "max_players": self.max_players,
            "min_dps_players": self.min_dps_players,
            "min_support_players": self.min_support_players,
        }
