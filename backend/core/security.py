# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Central security module.  All cryptographic primitives live here.  No other
module should touch raw crypto directly.

Responsibilities
----------------
1. Password / security-answer hashing       (passlib pbkdf2_sha256)
2. Session token issuing / decoding         (PyJWT / HS256)
3. Request helpers                          (bearer scheme, client IP)

Both helpers are built once at process start from ``settings`` and handed to
the auth service by the FastAPI dependencies in auth/dependencies.py.
"""

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt as _jwt        # PyJWT
from passlib.exc import PasswordSizeError
from passlib.hash import pbkdf2_sha256 as _pbkdf2  # pure Python, no binary deps
from passlib.utils import MAX_PASSWORD_SIZE
from fastapi import Request
from fastapi.security import OAuth2PasswordBearer

from core.config import settings
from core.logger import logger

# ---------------------------------------------------------------------------
# 1.  pbkdf2_sha256 – password and security-answer hashing
# ---------------------------------------------------------------------------
# passlib embeds a fresh random salt and the round count inside every hash
# string, so hashes produced with an older cost keep verifying after
# PASSWORD_HASH_ROUNDS is raised.
# ---------------------------------------------------------------------------


def normalize_answer(answer: str) -> str:
    """Security answers compare case- and surrounding-whitespace-insensitively."""
    return answer.strip().lower()


class PasswordHasher:
    """Randomized one-way hashing with a fixed adaptive cost."""

    # passlib refuses longer secrets (UTF-8 bytes)
    max_secret_bytes = MAX_PASSWORD_SIZE

    def __init__(self, rounds: int):
        self._scheme = _pbkdf2.using(rounds=rounds)

    def hash(self, plain: str) -> str:
        return self._scheme.hash(plain)

    def verify(self, plain: str, stored_hash: str) -> bool:
        """
        Constant-time comparison against a hash produced by :meth:`hash`.
        A stored value that is not a pbkdf2_sha256 hash counts as a mismatch.
        """
        try:
            return self._scheme.verify(plain, stored_hash)
        except PasswordSizeError:
            # nothing that long was ever hashed, so it cannot match
            return False
        except (ValueError, TypeError):
            logger.warning("Stored hash is malformed – treating as mismatch")
            return False

    def hash_answer(self, answer: str) -> str:
        return self.hash(normalize_answer(answer))

    def verify_answer(self, answer: str, stored_hash: str) -> bool:
        return self.verify(normalize_answer(answer), stored_hash)


# ---------------------------------------------------------------------------
# 2.  JWT – session tokens
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IssuedToken:
    token: str
    issued_at: datetime
    expires_at: datetime


class TokenIssuer:
    """
    Sign session tokens with HS256.

    The user id is the only identity claim.  ``iat`` / ``exp`` are whole
    seconds so the returned ``expires_at`` matches the embedded expiry
    exactly, and a random ``jti`` keeps two tokens issued to the same user
    within one second distinct.
    """

    def __init__(self, secret_key: str, ttl: timedelta, algorithm: str = "HS256"):
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.ttl = ttl

    def issue(self, user_id: int, issued_at: Optional[datetime] = None) -> IssuedToken:
        issued_at = (issued_at or datetime.now(timezone.utc)).replace(microsecond=0)
        expires_at = issued_at + self.ttl
        claims = {
            "user_id": user_id,
            "iat": issued_at,
            "exp": expires_at,
            "jti": secrets.token_urlsafe(16),
        }
        token = _jwt.encode(claims, self._secret_key, algorithm=self._algorithm)
        return IssuedToken(token=token, issued_at=issued_at, expires_at=expires_at)

    def decode(self, token: str, verify_exp: bool = True) -> Optional[dict]:
        """
        Verify the signature and return the claims, or None when the token is
        malformed, tampered with or (with ``verify_exp``) expired.
        """
        try:
            return _jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": verify_exp},
            )
        except _jwt.InvalidTokenError:
            return None

    def expiry_of(self, token: str) -> Optional[datetime]:
        """Embedded expiry, for display; signature is still checked."""
        claims = self.decode(token, verify_exp=False)
        if not claims or "exp" not in claims:
            return None
        return datetime.fromtimestamp(claims["exp"], tz=timezone.utc)


# ---------------------------------------------------------------------------
# Process-wide instances
# ---------------------------------------------------------------------------
password_hasher = PasswordHasher(rounds=settings.password_hash_rounds)
token_issuer = TokenIssuer(
    secret_key=settings.secret_key,
    ttl=timedelta(hours=settings.session_ttl_hours),
    algorithm=settings.jwt_algorithm,
)

# ---------------------------------------------------------------------------
# 3.  Request helpers
# ---------------------------------------------------------------------------

# The tokenUrl here is only used by the auto-generated OpenAPI docs;
# the actual login endpoint is POST /auth/login and takes JSON.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


def get_client_ip(request: Request) -> str:
    """
    Extract the client IP address from the request.
    Checks X-Forwarded-For header first (for proxies), then falls back to client host.
    """
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        # X-Forwarded-For can contain multiple IPs, take the first (original client)
        return forwarded.split(",")[0].strip()

    if request.client:
        return request.client.host

    return "unknown"
