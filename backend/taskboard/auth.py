from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
from dataclasses import dataclass
from typing import Any

import jwt

from .config import TOKEN_TTL_SECONDS
from .errors import TokenExpired, TokenInvalidSignature, TokenMalformed

JWT_ALG = "HS256"
DEFAULT_PBKDF2_ITERS = 200_000


def _b64(b: bytes) -> str:
    return base64.urlsafe_b64encode(b).decode("utf-8").rstrip("=")


def _b64d(s: str) -> bytes:
    pad = "=" * (-len(s) % 4)
    return base64.urlsafe_b64decode((s + pad).encode("utf-8"))


def hash_password(pw: str, iters: int = DEFAULT_PBKDF2_ITERS) -> str:
    # Format: pbkdf2_sha256$iters$salt$hash
    salt = secrets.token_bytes(16)
    dk = hashlib.pbkdf2_hmac("sha256", pw.encode("utf-8", "surrogatepass"), salt, iters, dklen=32)
    return f"pbkdf2_sha256${iters}${_b64(salt)}${_b64(dk)}"


def verify_password(pw: str, pw_hash: str | None) -> bool:
    if not pw_hash:
        return False
    try:
        algo, iters_s, salt_s, hash_s = pw_hash.split("$", 3)
        if algo != "pbkdf2_sha256":
            return False
        iters = int(iters_s)
        salt = _b64d(salt_s)
        expected = _b64d(hash_s)
        dk = hashlib.pbkdf2_hmac("sha256", pw.encode("utf-8", "surrogatepass"), salt, iters, dklen=len(expected))
        return hmac.compare_digest(dk, expected)
    except (ValueError, TypeError):
        # malformed stored hash counts as a mismatch
        return False


@dataclass(frozen=True)
class Identity:
    id: int
    email: str


class TokenIssuer:
    """Signs and verifies the 8h bearer token carrying ``{id, email}``."""

    def __init__(self, secret: str, ttl_seconds: int = TOKEN_TTL_SECONDS):
        self._secret = secret
        self._ttl = ttl_seconds

    def issue(self, user_id: int, email: str, now: int | None = None) -> str:
        now = int(time.time()) if now is None else now
        payload: dict[str, Any] = {
            "id": int(user_id),
            "email": email,
            "iat": now,
            "exp": now + self._ttl,
        }
        return jwt.encode(payload, self._secret, algorithm=JWT_ALG)

    def verify(self, token: str) -> Identity:
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[JWT_ALG],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenExpired() from exc
        except jwt.InvalidSignatureError as exc:
            raise TokenInvalidSignature() from exc
        except jwt.InvalidTokenError as exc:
            raise TokenMalformed() from exc

        user_id = claims.get("id")
        email = claims.get("email")
        if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(email, str):
            raise TokenMalformed()
        return Identity(id=user_id, email=email)
