from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from boosteam.exceptions.handlers import (
    InvalidCredentialError,
    MissingCredentialError,
    PrincipalNotFoundError,
)
from boosteam.security.auth.authenticator import Authenticator, parse_bearer
from boosteam.security.auth.jwt import (
    JWTError,
    TokenExpiredError,
    decode_hs256,
    encode_hs256,
    now_ts,
)
from boosteam.security.auth.passwords import hash_password, verify_password
from boosteam.tests.conftest import TEST_SECRET, make_user, token_for


def test_jwt_roundtrip_and_expiry():
    token = encode_hs256({"sub": "1", "exp": 1000}, secret="k")
    assert decode_hs256(token, secret="k", now=999)["sub"] == "1"

    with pytest.raises(TokenExpiredError):
        decode_hs256(token, secret="k", now=1000)
    assert decode_hs256(token, secret="k", now=1004, leeway_seconds=5)["sub"] == "1"


def test_jwt_rejects_bad_signature_and_missing_exp():
    token = encode_hs256({"sub": "1", "exp": now_ts() + 60}, secret="k")
    with pytest.raises(JWTError):
        decode_hs256(token, secret="other")

    no_exp = encode_hs256({"sub": "1"}, secret="k")
    with pytest.raises(JWTError):
        decode_hs256(no_exp, secret="k")

    with pytest.raises(JWTError):
        decode_hs256("not-a-token", secret="k")


def test_jwt_refuses_empty_secret():
    with pytest.raises(JWTError):
        encode_hs256({"sub": "1", "exp": 1}, secret="")


def test_password_hash_roundtrip():
    stored = hash_password("correct horse", iterations=1000)
    assert verify_password("correct horse", stored)
    assert not verify_password("wrong horse", stored)
    assert not verify_password("correct horse", "garbage")


def test_parse_bearer():
    assert parse_bearer("Bearer abc") == "abc"
    assert parse_bearer("bearer abc") == "abc"
    assert parse_bearer(None) is None
    assert parse_bearer("") is None
    assert parse_bearer("   ") is None


def test_parse_bearer_rejects_malformed_header():
    for header in ("Basic abc", "garbage", "Token", "Bearer ", "Bearer"):
        with pytest.raises(InvalidCredentialError):
            parse_bearer(header)


def test_missing_token(db):
    with pytest.raises(MissingCredentialError) as excinfo:
        Authenticator(db, secret=TEST_SECRET).authenticate(None)
    assert excinfo.value.status_code == 401
    assert excinfo.value.message == "No token provided"


def test_expired_token_is_invalid(db):
    user = make_user(db, "alice")
    token = encode_hs256({"sub": str(user.id), "exp": now_ts() - 10}, secret=TEST_SECRET)

    with pytest.raises(InvalidCredentialError) as excinfo:
        Authenticator(db, secret=TEST_SECRET).authenticate(token)
    assert excinfo.value.message == "Token expired"
    assert user.last_login is None


def test_token_signed_with_other_key(db):
    user = make_user(db, "alice")
    with pytest.raises(InvalidCredentialError):
        Authenticator(db, secret=TEST_SECRET).authenticate(
            token_for(user.id, secret="someone-else")
        )


def test_non_numeric_subject(db):
    token = encode_hs256({"sub": "abc", "exp": now_ts() + 60}, secret=TEST_SECRET)
    with pytest.raises(InvalidCredentialError) as excinfo:
        Authenticator(db, secret=TEST_SECRET).authenticate(token)
    assert excinfo.value.message == "Invalid sub claim"


def test_unknown_principal(db):
    with pytest.raises(PrincipalNotFoundError) as excinfo:
        Authenticator(db, secret=TEST_SECRET).authenticate(token_for(4242))
    assert excinfo.value.status_code == 404


def test_successful_authentication_loads_roles_and_touches_last_login(seeded_db):
    user = make_user(seeded_db, "alice", roles=["viewer"])
    assert user.last_login is None

    principal = Authenticator(seeded_db, secret=TEST_SECRET).authenticate(token_for(user.id))

    assert principal.id == user.id
    assert [r.name for r in principal.roles] == ["viewer"]
    assert len(principal.roles[0].permissions) == 5
    assert principal.last_login is not None


def test_last_login_failure_does_not_block_authentication(seeded_db, monkeypatch, caplog):
    user = make_user(seeded_db, "alice", roles=["user"])

    def failing_commit():
        raise OperationalError("UPDATE users", {}, Exception("database is locked"))

    monkeypatch.setattr(seeded_db, "commit", failing_commit)
    with caplog.at_level("WARNING"):
        principal = Authenticator(seeded_db, secret=TEST_SECRET).authenticate(token_for(user.id))

    assert principal.id == user.id
    assert [r.name for r in principal.roles] == ["user"]
    assert "Could not record last login" in caplog.text
