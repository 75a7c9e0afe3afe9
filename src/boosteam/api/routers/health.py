from __future__ import annotations

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from boosteam import __version__
from boosteam.config import get_settings
from boosteam.database import get_db_session

router = APIRouter(tags=["system"])


@router.get("/health")
def health() -> dict:
    settings = get_settings()
    return {
        "ok": True,
        "status": "ok",
        "service": "boosteam-api",
        "version": __version__,
        "environment": settings.ENVIRONMENT,
    }


@router.get("/health/deps")
def health_deps() -> dict:
    try:
        with get_db_session() as db:
            db.execute(text("SELECT 1"))
        db_status = {"ok": True}
    except SQLAlchemyError as exc:
        db_status = {"ok": False, "error": str(exc)}
    return {"ok": db_status["ok"], "deps": {"db": db_status}}


@router.get("/api")
def api_root() -> dict:
    return {"message": "Boosteam API v1", "version": __version__}
