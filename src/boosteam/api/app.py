from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import InterfaceError, OperationalError
from starlette.requests import Request
from starlette.responses import JSONResponse

from boosteam import __version__
from boosteam.api.routers.admin import router as admin_router
from boosteam.api.routers.auth import router as auth_router
from boosteam.api.routers.health import router as health_router
from boosteam.api.routers.roster import router as roster_router
from boosteam.config import get_settings
from boosteam.database import get_db_session, init_db
from boosteam.exceptions.handlers import StorageUnavailableError
from boosteam.security.rbac.bootstrap import seed_default_roles_and_permissions

logger = logging.getLogger(__name__)


async def _storage_unavailable(request: Request, exc: Exception) -> JSONResponse:
    logger.error("Storage failure on %s %s: %s", request.method, request.url.path, exc)
    error = StorageUnavailableError()
    return JSONResponse({"detail": error.to_dict()}, status_code=error.status_code)


def bootstrap() -> None:
    """Create tables (dev) and seed the permission registry before serving traffic."""
    settings = get_settings()
    if settings.ENVIRONMENT in {"dev", "test"}:
        init_db(create_tables=True)
    if settings.SEED_ON_STARTUP:
        with get_db_session() as session:
            seed_default_roles_and_permissions(session, mode=settings.BOOTSTRAP_MODE)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Boosteam API", version=__version__)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        allow_credentials=True,
    )
    app.add_exception_handler(OperationalError, _storage_unavailable)
    app.add_exception_handler(InterfaceError, _storage_unavailable)

    app.include_router(health_router)
    app.include_router(auth_router, prefix="/api")
    app.include_router(roster_router, prefix="/api")
    app.include_router(admin_router, prefix="/api")

    @app.on_event("startup")
    def _startup() -> None:  # pragma: no cover
        bootstrap()

    return app


app = create_app()
