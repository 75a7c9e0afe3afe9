from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from boosteam.api.dependencies.auth import raise_http, require_permission
from boosteam.database import get_db
from boosteam.exceptions.handlers import BoosteamException
from boosteam.models.roster import (
    DEFAULT_MAX_PLAYERS,
    DEFAULT_MIN_DPS_PLAYERS,
    DEFAULT_MIN_SUPPORT_PLAYERS,
)
from boosteam.security.auth.models import User
from boosteam.services.roster_service import RosterService

router = APIRouter(tags=["Roster"])

PlayerRole = Literal["support", "dps", "alt"]
# Numeric tiers are accepted as ints or digit strings; they are returned as strings.
PlayerTier = Union[
    Literal["S", "A", "B", "C", "D", "1", "2", "3", "4", "5"], Literal[1, 2, 3, 4, 5]
]


class PlayerResponse(BaseModel):
    id: str
    name: str
    role: str
    tier: str
    assigned_team_id: Optional[int] = None
    checked: bool = False


class TeamPlayer(BaseModel):
    id: Optional[str] = None
    name: str = Field(..., min_length=1, max_length=100)
    role: PlayerRole
    tier: PlayerTier
    checked: bool = False
    assigned_team_id: Optional[int] = None


class RosterSettings(BaseModel):
    max_players: int = DEFAULT_MAX_PLAYERS
    min_dps_players: int = DEFAULT_MIN_DPS_PLAYERS
    min_support_players: int = DEFAULT_MIN_SUPPORT_PLAYERS


class TeamsResponse(BaseModel):
    message: str = "Successfully retrieved teams data"
    players: List[PlayerResponse] = Field(default_factory=list)
    teams: Dict[str, List[Dict[str, Any]]] = Field(default_factory=dict)
    settings: RosterSettings


class SaveTeamsRequest(BaseModel):
    players: List[TeamPlayer]
    teams: Dict[int, List[TeamPlayer]]
    settings: Optional[RosterSettings] = None


class MessageResponse(BaseModel):
    message: str


@router.get("/teams", response_model=TeamsResponse)
def get_teams(
    user: User = Depends(require_permission("read", "team")),
    db: Session = Depends(get_db),
) -> TeamsResponse:
    snapshot = RosterService(db, user).snapshot()
    db.commit()
    return TeamsResponse(**snapshot)


@router.post("/teams", response_model=MessageResponse)
def save_teams(
    req: SaveTeamsRequest,
    user: User = Depends(require_permission("update", "team")),
    db: Session = Depends(get_db),
) -> MessageResponse:
    try:
        RosterService(db, user).save(
            players=[p.model_dump() for p in req.players],
            teams={
                team_id: [m.model_dump(mode="json") for m in members]
                for team_id, members in req.teams.items()
            },
            settings=req.settings.model_dump() if req.settings else None,
        )
    except BoosteamException as exc:
        db.rollback()
        raise_http(exc)
    db.commit()
    return MessageResponse(message="Teams data saved successfully")


class PlayerCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    role: PlayerRole
    tier: PlayerTier


class PlayerCreateResponse(BaseModel):
    message: str = "Player added successfully"
    player: PlayerResponse


@router.post("/players", response_model=PlayerCreateResponse, status_code=201)
def add_player(
    req: PlayerCreateRequest,
    user: User = Depends(require_permission("create", "player")),
    db: Session = Depends(get_db),
) -> PlayerCreateResponse:
    try:
        player = RosterService(db, user).add_player(name=req.name, role=req.role, tier=req.tier)
    except BoosteamException as exc:
        db.rollback()
        raise_http(exc)
    db.commit()
    return PlayerCreateResponse(player=PlayerResponse(**player.to_dict()))


class PlayerUpdateRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    role: Optional[PlayerRole] = None
    tier: Optional[PlayerTier] = None
    assigned_team_id: Optional[int] = None
    checked: Optional[bool] = None


@router.put("/players/{player_id}", response_model=PlayerCreateResponse)
def update_player(
    player_id: str,
    req: PlayerUpdateRequest,
    user: User = Depends(require_permission("update", "player")),
    db: Session = Depends(get_db),
) -> PlayerCreateResponse:
    try:
        player = RosterService(db, user).update_player(
            player_id, req.model_dump(exclude_unset=True)
        )
    except BoosteamException as exc:
        db.rollback()
        raise_http(exc)
    db.commit()
    return PlayerCreateResponse(
        message="Player updated successfully", player=PlayerResponse(**player.to_dict())
    )


@router.delete("/players/{player_id}", response_model=MessageResponse)
def delete_player(
    player_id: str,
    user: User = Depends(require_permission("delete", "player")),
    db: Session = Depends(get_db),
) -> MessageResponse:
    try:
        RosterService(db, user).delete_player(player_id)
    except BoosteamException as exc:
        db.rollback()
        raise_http(exc)
    db.commit()
    return MessageResponse(message="Player deleted successfully")


class SettingsResponse(BaseModel):
    message: str
    settings: RosterSettings


@router.get("/settings", response_model=SettingsResponse)
def get_roster_settings(
    user: User = Depends(require_permission("read", "settings")),
    db: Session = Depends(get_db),
) -> SettingsResponse:
    roster = RosterService(db, user).get_roster()
    db.commit()
    return SettingsResponse(
        message="Settings retrieved successfully",
        settings=RosterSettings(**roster.settings_dict()),
    )


@router.put("/settings", response_model=SettingsResponse)
def update_roster_settings(
    req: RosterSettings,
    user: User = Depends(require_permission("update", "settings")),
    db: Session = Depends(get_db),
) -> SettingsResponse:
    try:
        roster = RosterService(db, user).update_settings(**req.model_dump())
    except BoosteamException as exc:
        db.rollback()
        raise_http(exc)
    db.commit()
    return SettingsResponse(
        message="Settings updated successfully",
        settings=RosterSettings(**roster.settings_dict()),
    )
