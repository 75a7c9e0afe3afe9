from __future__ import annotations

import base64
import hashlib
import hmac
import os
from dataclasses import dataclass

_ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 260_000


@dataclass(frozen=True)
class PasswordHash:
    algorithm: str
    iterations: int
    salt_b64: str
    digest_b64: str

    def to_string(self) -> str:
        return f"{self.algorithm}${self.iterations}${self.salt_b64}${self.digest_b64}"

    @classmethod
    def parse(cls, stored_hash: str) -> "PasswordHash":
        algorithm, iterations_str, salt_b64, digest_b64 = stored_hash.split("$", 3)
        return cls(
            algorithm=algorithm,
            iterations=int(iterations_str),
            salt_b64=salt_b64,
            digest_b64=digest_b64,
        )


def _b64e(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64d(raw_b64: str) -> bytes:
    pad = "=" * (-len(raw_b64) % 4)
    return base64.urlsafe_b64decode(raw_b64 + pad)


def _derive(password: str, salt: bytes, iterations: int) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def check_password_policy(password: str, *, min_length: int) -> bool:
    return bool(password) and len(password) >= min_length


def hash_password(password: str, *, iterations: int = DEFAULT_ITERATIONS) -> str:
    if not password:
        raise ValueError("Password must not be empty")

    salt = os.urandom(16)
    return PasswordHash(
        algorithm=_ALGORITHM,
        iterations=iterations,
        salt_b64=_b64e(salt),
        digest_b64=_b64e(_derive(password, salt, iterations)),
    ).to_string()


def verify_password(password: str, stored_hash: str) -> bool:
    if not password or not stored_hash:
        return False
    try:
        parsed = PasswordHash.parse(stored_hash)
        if parsed.algorithm != _ALGORITHM:
            return False
        salt = _b64d(parsed.salt_b64)
        expected = _b64d(parsed.digest_b64)
    except ValueError:
        return False

    return hmac.compare_digest(_derive(password, salt, parsed.iterations), expected)
