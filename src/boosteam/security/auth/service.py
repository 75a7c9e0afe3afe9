from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from boosteam.exceptions.handlers import (
    ConfigurationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from boosteam.security.auth.models import Credential, User
from boosteam.security.auth.passwords import (
    DEFAULT_ITERATIONS,
    check_password_policy,
    hash_password,
    verify_password,
)
from boosteam.security.rbac.catalog import USER_ROLE
from boosteam.security.rbac.models import Role


class AuthService:
    def __init__(
        self,
        session: Session,
        *,
        password_min_length: int = 8,
        password_iterations: int = DEFAULT_ITERATIONS,
    ):
        self.session = session
        self.password_min_length = password_min_length
        self.password_iterations = password_iterations

    def _check_policy(self, password: str, field: str = "password") -> None:
        if not check_password_policy(password, min_length=self.password_min_length):
            raise ValidationError(
                f"Password must be at least {self.password_min_length} characters long",
                field=field,
                status_code=400,
            )

    def _hash(self, password: str) -> str:
        return hash_password(password, iterations=self.password_iterations)

    def find_by_login(self, login: str) -> Optional[User]:
        return (
            self.session.query(User)
            .filter(or_(User.username == login, User.email == login))
            .first()
        )

    def register_user(
        self,
        *,
        username: str,
        password: str,
        email: Optional[str] = None,
        default_role: Optional[str] = USER_ROLE,
    ) -> User:
        if not username or not password:
            raise ValidationError("Username and password are required", status_code=400)
        self._check_policy(password)

        clauses = [User.username == username]
        if email:
            clauses.append(User.email == email)
        if self.session.query(User).filter(or_(*clauses)).first():
            raise ConflictError("Username or email already exists", username=username)

        roles = []
        if default_role:
            role = self.session.query(Role).filter(Role.name == default_role).first()
            if not role:
                raise ConfigurationError(
                    "Error setting up user role", config_key="BOOTSTRAP_MODE", role=default_role
                )
            roles.append(role)

        user = User(username=username, email=email, roles=roles)
        user.credential = Credential(password_hash=self._hash(password))
        self.session.add(user)
        self.session.flush()
        return user

    def authenticate(self, *, login: str, password: str) -> User:
        user = self.find_by_login(login) if login else None
        if not user:
            raise ValueError("Invalid username or password")

        cred = self.session.get(Credential, user.id)
        if not cred or not verify_password(password, cred.password_hash):
            raise ValueError("Invalid username or password")

        user.last_login = datetime.utcnow()
        self.session.flush()
        return user

    def change_password(self, user: User, *, current_password: str, new_password: str) -> None:
        cred = self.session.get(Credential, user.id)
        if not cred or not verify_password(current_password, cred.password_hash):
            raise ValueError("Current password is incorrect")
        self._check_policy(new_password, field="new_password")
        cred.password_hash = self._hash(new_password)
        self.session.flush()

    def delete_user(self, user_id: int) -> None:
        user = self.session.get(User, user_id)
        if not user:
            raise NotFoundError("user", user_id)
        self.session.delete(user)
        self.session.flush()
