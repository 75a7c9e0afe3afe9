"""
Resolve a bearer credential into a principal.

The signing secret is handed to the Authenticator by its caller, so tests can
construct one with any key without touching process-wide settings.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from boosteam.exceptions.handlers import (
    InvalidCredentialError,
    MissingCredentialError,
    PrincipalNotFoundError,
)
from boosteam.security.auth.jwt import JWTError, TokenExpiredError, decode_hs256
from boosteam.security.auth.models import User
from boosteam.security.rbac.models import Role

logger = logging.getLogger(__name__)


def parse_bearer(header_value: Optional[str]) -> Optional[str]:
    """
    Extract the token from an ``Authorization`` header.

    An absent or blank header yields None; any other value that is not
    ``Bearer <token>`` is an invalid credential.
    """
    if not header_value or not header_value.strip():
        return None
    parts = header_value.strip().split(" ", 1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise InvalidCredentialError()
    return parts[1].strip()


class Authenticator:
    def __init__(self, session: Session, *, secret: str, leeway_seconds: int = 0):
        self.session = session
        self.secret = secret
        self.leeway_seconds = leeway_seconds

    def verify(self, token: Optional[str]) -> int:
        """Check signature and expiry; return the principal id."""
        if not token:
            raise MissingCredentialError()
        try:
            payload = decode_hs256(token, secret=self.secret, leeway_seconds=self.leeway_seconds)
        except TokenExpiredError as e:
            raise InvalidCredentialError("Token expired") from e
        except JWTError as e:
            raise InvalidCredentialError() from e

        try:
            return int(payload.get("sub"))
        except (TypeError, ValueError) as e:
            raise InvalidCredentialError("Invalid sub claim") from e

    def load_principal(self, user_id: int) -> User:
        user = (
            self.session.query(User)
            .options(selectinload(User.roles).selectinload(Role.permissions))
            .filter(User.id == user_id)
            .first()
        )
        if user is None:
            raise PrincipalNotFoundError()
        return user

    def touch_last_login(self, user: User) -> None:
        try:
            user.last_login = datetime.utcnow()
            self.session.commit()
        except SQLAlchemyError:
            self.session.rollback()
            logger.warning("Could not record last login for user_id=%s", user.id, exc_info=True)

    def authenticate(self, token: Optional[str]) -> User:
        user = self.load_principal(self.verify(token))
        self.touch_last_login(user)
        return user
