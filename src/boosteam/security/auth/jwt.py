from __future__ import annotations

import base64
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Optional


class JWTError(ValueError):
    pass


class TokenExpiredError(JWTError):
    pass


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(raw: str) -> bytes:
    pad = "=" * (-len(raw) % 4)
    return base64.urlsafe_b64decode(raw + pad)


def _sign(signing_input: bytes, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), signing_input, hashlib.sha256).digest()


def encode_hs256(payload: Dict[str, Any], *, secret: str) -> str:
    if not secret:
        raise JWTError("Signing secret must not be empty")
    header = {"alg": "HS256", "typ": "JWT"}
    header_b64 = _b64url_encode(json.dumps(header, separators=(",", ":"), sort_keys=True).encode("utf-8"))
    payload_b64 = _b64url_encode(json.dumps(payload, separators=(",", ":"), sort_keys=True).encode("utf-8"))
    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    return f"{header_b64}.{payload_b64}.{_b64url_encode(_sign(signing_input, secret))}"


def decode_hs256(
    token: str,
    *,
    secret: str,
    leeway_seconds: int = 0,
    now: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Verify an HS256 token and return its claims.

    The ``exp`` claim is mandatory; a token without an expiry is rejected.
    """
    try:
        header_b64, payload_b64, sig_b64 = token.split(".")
    except ValueError as e:
        raise JWTError("Invalid token format") from e

    try:
        header = json.loads(_b64url_decode(header_b64))
        payload = json.loads(_b64url_decode(payload_b64))
    except (ValueError, TypeError) as e:
        raise JWTError("Invalid token encoding") from e

    if not isinstance(header, dict) or header.get("alg") != "HS256":
        raise JWTError("Unsupported alg")
    if not isinstance(payload, dict):
        raise JWTError("Invalid token payload")

    expected = _sign(f"{header_b64}.{payload_b64}".encode("ascii"), secret)
    try:
        got = _b64url_decode(sig_b64)
    except ValueError as e:
        raise JWTError("Invalid signature encoding") from e
    if not hmac.compare_digest(expected, got):
        raise JWTError("Invalid signature")

    exp = payload.get("exp")
    if exp is None:
        raise JWTError("Missing exp claim")
    try:
        exp_int = int(exp)
    except (TypeError, ValueError) as e:
        raise JWTError("Invalid exp claim") from e

    current = now_ts() if now is None else int(now)
    if current >= exp_int + int(leeway_seconds):
        raise TokenExpiredError("Token expired")

    return payload


def now_ts() -> int:
    return int(time.time())


def build_access_token_payload(
    *,
    user_id: int,
    ttl_seconds: int = 86400,
    extra: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    issued_at = now_ts()
    payload: Dict[str, Any] = {
        "sub": str(user_id),
        "iat": issued_at,
        "exp": issued_at + int(ttl_seconds),
    }
    if extra:
        payload.update(extra)
    return payload
