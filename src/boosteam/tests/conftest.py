from __future__ import annotations

from typing import Dict, Iterable, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from boosteam.api.app import create_app
from boosteam.config import Settings, get_settings
from boosteam.database import get_db
from boosteam.models import import_all_models
from boosteam.models.base import Base
from boosteam.security.auth.jwt import build_access_token_payload, encode_hs256
from boosteam.security.auth.models import User
from boosteam.security.auth.service import AuthService
from boosteam.security.rbac.bootstrap import seed_default_roles_and_permissions
from boosteam.security.rbac.models import Role

TEST_SECRET = "test-secret"
TEST_ITERATIONS = 1000


def make_settings(**overrides) -> Settings:
    values = {
        "ENVIRONMENT": "test",
        "JWT_SECRET_KEY": TEST_SECRET,
        "PASSWORD_HASH_ITERATIONS": TEST_ITERATIONS,
        "SEED_ON_STARTUP": False,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def db():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    import_all_models()
    Base.metadata.create_all(bind=engine)
    SessionLocal = sessionmaker(bind=engine, expire_on_commit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def seeded_db(db):
    seed_default_roles_and_permissions(db)
    db.commit()
    return db


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def client(seeded_db, settings):
    def override_get_db():
        try:
            yield seeded_db
        finally:
            pass

    app = create_app()
    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    return TestClient(app)


def make_user(
    session,
    username: str,
    *,
    roles: Optional[Iterable[str]] = None,
    password: str = "password123",
    email: Optional[str] = None,
) -> User:
    user = AuthService(session, password_iterations=TEST_ITERATIONS).register_user(
        username=username,
        password=password,
        email=email or f"{username}@example.com",
        default_role=None,
    )
    if roles:
        user.roles = session.query(Role).filter(Role.name.in_(list(roles))).all()
    session.commit()
    return user


def token_for(user_id: int, *, ttl_seconds: int = 3600, secret: str = TEST_SECRET) -> str:
    payload = build_access_token_payload(user_id=user_id, ttl_seconds=ttl_seconds)
    return encode_hs256(payload, secret=secret)


def auth_header(user_id: int, **kwargs) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token_for(user_id, **kwargs)}"}
