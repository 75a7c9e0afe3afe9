from __future__ import annotations

from typing import Any, Callable, Optional

from fastapi import Depends, HTTPException
from sqlalchemy.orm import Session
from starlette.requests import Request

from boosteam.config import Settings, get_settings
from boosteam.database import get_db
from boosteam.exceptions.handlers import (
    AuthenticationError,
    BoosteamException,
    UnauthenticatedError,
)
from boosteam.security.auth.authenticator import Authenticator, parse_bearer
from boosteam.security.auth.models import User
from boosteam.security.rbac.permissions import (
    PermissionChecker,
    RoleRequirement,
    check_ownership,
)


def raise_http(exc: BoosteamException) -> None:
    raise HTTPException(status_code=exc.status_code, detail=exc.to_dict()) from exc


def _auth_failure(exc: AuthenticationError, settings: Settings) -> HTTPException:
    mode = (settings.AUTH_ERROR_DETAIL or "detailed").strip().lower()
    if mode == "uniform":
        exc = UnauthenticatedError("Unauthorized")
    return HTTPException(
        status_code=exc.status_code,
        detail=exc.to_dict(),
        headers={"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None,
    )


def get_authorization_header(request: Request) -> Optional[str]:
    return request.headers.get("authorization")


def get_authenticator(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Authenticator:
    return Authenticator(
        db, secret=settings.JWT_SECRET_KEY, leeway_seconds=settings.AUTH_LEEWAY_SECONDS
    )


def get_current_user(
    authorization: Optional[str] = Depends(get_authorization_header),
    authenticator: Authenticator = Depends(get_authenticator),
    settings: Settings = Depends(get_settings),
) -> User:
    try:
        return authenticator.authenticate(parse_bearer(authorization))
    except AuthenticationError as e:
        raise _auth_failure(e, settings) from e


def _enforce(requirement: Any, user: Optional[User]) -> User:
    try:
        return requirement.check(user)
    except BoosteamException as e:
        raise_http(e)


def require_permission(action: Any, resource: Any) -> Callable[..., User]:
    """Dependency: authenticated user holding the (action, resource) permission."""
    checker = PermissionChecker(action, resource)

    def dependency(user: User = Depends(get_current_user)) -> User:
        return _enforce(checker, user)

    dependency.__name__ = f"require_{checker.action}_{checker.resource}"
    return dependency


def require_role(role_name: str) -> Callable[..., User]:
    """Dependency: authenticated user holding a role named ``role_name``."""
    requirement = RoleRequirement(role_name)

    def dependency(user: User = Depends(get_current_user)) -> User:
        return _enforce(requirement, user)

    dependency.__name__ = f"require_role_{role_name}"
    return dependency


def require_owner_or_role(param: str, role_name: str) -> Callable[..., User]:
    """Dependency: the user owns the path parameter ``param`` or holds ``role_name``."""
    requirement = RoleRequirement(role_name)

    def dependency(request: Request, user: User = Depends(get_current_user)) -> User:
        if requirement.allows(user):
            return user
        try:
            return check_ownership(user, request.path_params.get(param))
        except BoosteamException as e:
            raise_http(e)

    dependency.__name__ = f"require_owner_{param}"
    return dependency
