from __future__ import annotations

import logging
import uuid
from typing import Any, Dict, Iterable, List, Optional, Set

from sqlalchemy.orm import Session

from boosteam.exceptions.handlers import NotFoundError, ValidationError
from boosteam.models.roster import PLAYER_ROLES, PLAYER_TIERS, Player, Roster
from boosteam.security.auth.models import User

logger = logging.getLogger(__name__)


def normalize_tier(tier: Any) -> str:
    value = str(tier)
    if value not in PLAYER_TIERS:
        raise ValidationError(f"Invalid tier: {tier}", field="tier", status_code=400)
    return value


def normalize_role(role: Any) -> str:
    value = str(role)
    if value not in PLAYER_ROLES:
        raise ValidationError(f"Invalid role: {role}", field="role", status_code=400)
    return value


def _normalize_teams(teams: Dict[Any, Iterable[Dict[str, Any]]]) -> Dict[str, List[Dict[str, Any]]]:
    normalized: Dict[str, List[Dict[str, Any]]] = {}
    for team_id, members in teams.items():
        try:
            key = str(int(team_id))
        except (TypeError, ValueError) as e:
            raise ValidationError("Invalid teams data", field="teams", status_code=400) from e
        normalized[key] = [dict(m) for m in (members or [])]
    return normalized


class RosterService:
    """Players, teams and settings of a single user."""

    def __init__(self, session: Session, user: User):
        self.session = session
        self.user = user

    def get_roster(self) -> Roster:
        roster = self.session.get(Roster, self.user.id)
        if roster is None:
            roster = Roster(user_id=self.user.id, teams={})
            self.session.add(roster)
            self.session.flush()
        return roster

    def list_players(self) -> List[Player]:
        return (
            self.session.query(Player)
            .filter(Player.user_id == self.user.id)
            .order_by(Player.created_at.asc(), Player.id.asc())
            .all()
        )

    def get_player(self, player_id: str) -> Player:
        player = (
            self.session.query(Player)
            .filter(Player.id == player_id, Player.user_id == self.user.id)
            .first()
        )
        if player is None:
            raise NotFoundError("player", player_id)
        return player

    def snapshot(self) -> Dict[str, Any]:
        roster = self.get_roster()
        return {
            "players": [p.to_dict() for p in self.list_players()],
            "teams": dict(roster.teams or {}),
            "settings": roster.settings_dict(),
        }

    def add_player(self, *, name: str, role: Any, tier: Any) -> Player:
        if not name:
            raise ValidationError("Name, role, and tier are required", field="name", status_code=400)
        player = Player(
            user_id=self.user.id,
            name=name,
            role=normalize_role(role),
            tier=normalize_tier(tier),
            assigned_team_id=None,
        )
        self.session.add(player)
        self.session.flush()
        return player

    def update_player(self, player_id: str, changes: Dict[str, Any]) -> Player:
        """Apply only the submitted fields; an explicit null assigned_team_id unassigns."""
        player = self.get_player(player_id)
        if changes.get("name") is not None:
            player.name = changes["name"]
        if changes.get("role") is not None:
            player.role = normalize_role(changes["role"])
        if changes.get("tier") is not None:
            player.tier = normalize_tier(changes["tier"])
        if changes.get("checked") is not None:
            player.checked = bool(changes["checked"])
        if "assigned_team_id" in changes:
            player.assigned_team_id = changes["assigned_team_id"]
        self.session.flush()
        return player

    def delete_player(self, player_id: str) -> None:
        player = self.get_player(player_id)
        self.session.delete(player)
        self.session.flush()

    def update_settings(
        self, *, max_players: int, min_dps_players: int, min_support_players: int
    ) -> Roster:
        if max_players < 1 or min_dps_players < 0 or min_support_players < 0:
            raise ValidationError("Invalid settings values", field="settings", status_code=400)
        roster = self.get_roster()
        roster.max_players = max_players
        roster.min_dps_players = min_dps_players
        roster.min_support_players = min_support_players
        self.session.flush()
        return roster

    def save(
        self,
        *,
        players: List[Dict[str, Any]],
        teams: Dict[Any, Iterable[Dict[str, Any]]],
        settings: Optional[Dict[str, int]] = None,
    ) -> Dict[str, Any]:
        """Replace the whole roster with the submitted players, teams and settings."""
        normalized_teams = _normalize_teams(teams)

        submitted = [str(p["id"]) for p in players if p.get("id")]
        taken: Set[str] = set()
        if submitted:
            rows = (
                self.session.query(Player.id)
                .filter(Player.id.in_(submitted), Player.user_id != self.user.id)
                .all()
            )
            taken = {pid for (pid,) in rows}

        for existing in self.list_players():
            self.session.delete(existing)
        self.session.flush()

        used: Set[str] = set()
        for data in players:
            player = Player(
                user_id=self.user.id,
                name=data["name"],
                role=normalize_role(data["role"]),
                tier=normalize_tier(data["tier"]),
                assigned_team_id=data.get("assigned_team_id"),
                checked=bool(data.get("checked", False)),
            )
            # Ids owned by another user or repeated in the payload get a fresh one.
            pid = str(data["id"]) if data.get("id") else None
            if pid and pid not in taken and pid not in used:
                player.id = pid
            else:
                player.id = str(uuid.uuid4())
            used.add(player.id)
            self.session.add(player)

        roster = self.get_roster()
        roster.teams = normalized_teams
        if settings is not None:
            self.update_settings(**settings)
        self.session.flush()
        logger.info(
            "Saved roster user_id=%s players=%d teams=%d",
            self.user.id,
            len(players),
            len(normalized_teams),
        )
        return self.snapshot()
