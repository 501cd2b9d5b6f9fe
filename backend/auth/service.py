# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Auth service – registration, login, password reset and session lifecycle.

The service is built per request from explicitly passed collaborators
(see auth/dependencies.py) and keeps no state between calls.  All
persistent state lives in the credential and session stores.

Security notes
--------------
* Login raises the *same* error whether the username doesn't exist or the
  password is wrong.  This prevents user-enumeration attacks.
* Password reset does distinguish an unknown username from a wrong answer;
  the reset screen is only reached after the user has typed their username.
* A successful reset deletes every session of the user.  Whatever the
  outcome of that delete, it is reported to the caller.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Optional

from core.errors import (
    InvalidCredentials,
    InvalidSecurityAnswer,
    InvalidSession,
    PartialRevocationError,
    StorageError,
    UserNotFound,
    UsernameTaken,
    ValidationError,
)
from core.logger import logger
from core.security import PasswordHasher, TokenIssuer
from models.user import DEFAULT_PREFERENCES, User
from stores.base import CredentialStore, DuplicateUsernameError, SessionStore, StoreError

_USERNAME_MAX_LEN = 255


@dataclass(frozen=True)
class AuthResult:
    """Successful register / login: the user plus their new session."""

    user: User
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class AuthenticatedSession:
    user: User
    token: str
    expires_at: datetime


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is stored in UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _require(**fields) -> None:
    """Reject missing or blank inputs before any store is touched."""
    for name, value in fields.items():
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"{name} is required")


def _limit_secrets(max_bytes: int, **fields) -> None:
    """Secrets the hasher would refuse are rejected as invalid input."""
    for name, value in fields.items():
        if len(value.encode("utf-8")) > max_bytes:
            raise ValidationError(f"{name} must be at most {max_bytes} bytes")


class AuthService:
    def __init__(
        self,
        credentials: CredentialStore,
        sessions: SessionStore,
        hasher: PasswordHasher,
        tokens: TokenIssuer,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._credentials = credentials
        self._sessions = sessions
        self._hasher = hasher
        self._tokens = tokens
        self._clock = clock or _utc_now

    # -- Register ------------------------------------------------------------

    def register(
        self,
        username: str,
        password: str,
        security_question: str,
        security_answer: str,
    ) -> AuthResult:
        _require(
            username=username,
            password=password,
            securityQuestion=security_question,
            securityAnswer=security_answer,
        )
        if len(username) > _USERNAME_MAX_LEN:
            raise ValidationError(
                f"username must be at most {_USERNAME_MAX_LEN} characters"
            )
        _limit_secrets(
            self._hasher.max_secret_bytes,
            password=password,
            securityAnswer=security_answer,
        )

        if self._find_user(username) is not None:
            raise UsernameTaken()

        password_hash = self._hasher.hash(password)
        answer_hash = self._hasher.hash_answer(security_answer)

        try:
            user = self._credentials.insert_user(
                username=username,
                password_hash=password_hash,
                security_question=security_question,
                security_answer_hash=answer_hash,
                preferences=DEFAULT_PREFERENCES,
            )
        except DuplicateUsernameError:
            # lost a race with a concurrent registration of the same name
            raise UsernameTaken()
        except StoreError:
            logger.exception("User creation failed")
            raise StorageError("Registration failed")

        logger.info("User registered | user_id=%s", user.id)

        # A failure here leaves a usable account without a session; the
        # client recovers by logging in.
        return self._open_session(user)

    # -- Login ---------------------------------------------------------------

    def login(self, username: str, password: str) -> AuthResult:
        _require(username=username, password=password)

        user = self._find_user(username)

        # Unified failure path – no information leaks about whether the user exists
        if user is None or not self._hasher.verify(password, user.password_hash):
            logger.warning("Failed login attempt")
            raise InvalidCredentials()

        return self._open_session(user)

    # -- Reset password ------------------------------------------------------

    def reset_password(
        self, username: str, security_answer: str, new_password: str
    ) -> None:
        _require(
            username=username,
            securityAnswer=security_answer,
            newPassword=new_password,
        )
        _limit_secrets(
            self._hasher.max_secret_bytes,
            securityAnswer=security_answer,
            newPassword=new_password,
        )

        user = self._find_user(username)
        if user is None:
            raise UserNotFound()

        if not self._hasher.verify_answer(security_answer, user.security_answer_hash):
            logger.warning("Wrong security answer | user_id=%s", user.id)
            raise InvalidSecurityAnswer()

        new_hash = self._hasher.hash(new_password)
        try:
            self._credentials.update_user_password_hash(user.id, new_hash, self._clock())
        except StoreError:
            logger.exception("Password update failed | user_id=%s", user.id)
            raise StorageError("Failed to update password")

        # The password is changed from here on; any problem below must say so.
        try:
            outcome = self._sessions.delete_sessions_for_user(user.id)
        except StoreError:
            logger.exception("Session revocation failed | user_id=%s", user.id)
            raise PartialRevocationError(deleted=0, remaining=None)

        if not outcome.complete:
            logger.error(
                "Session revocation incomplete | user_id=%s deleted=%d remaining=%d",
                user.id,
                outcome.deleted,
                outcome.remaining,
            )
            raise PartialRevocationError(
                deleted=outcome.deleted, remaining=outcome.remaining
            )

        logger.info(
            "Password reset | user_id=%s sessions_revoked=%d", user.id, outcome.deleted
        )

    # -- Session lifecycle ---------------------------------------------------

    def authenticate(self, token: str) -> AuthenticatedSession:
        """
        Resolve a bearer token to its user.  The token must carry a valid
        signature *and* still have an unexpired row in the session store.
        """
        # Expiry is decided by the session row against self._clock, not by
        # the wall-clock check inside PyJWT
        claims = self._tokens.decode(token, verify_exp=False)
        if claims is None:
            raise InvalidSession()

        try:
            session = self._sessions.find_active_session(token, self._clock())
            user = None
            if session is not None and session.user_id == claims.get("user_id"):
                user = self._credentials.find_user_by_id(session.user_id)
        except StoreError:
            logger.exception("Session lookup failed")
            raise StorageError()

        if user is None:
            raise InvalidSession()

        return AuthenticatedSession(
            user=user, token=token, expires_at=_as_utc(session.expires_at)
        )

    def logout(self, token: str) -> None:
        try:
            deleted = self._sessions.delete_session(token)
        except StoreError:
            logger.exception("Logout failed")
            raise StorageError("Failed to delete session")
        if not deleted:
            raise InvalidSession()

    def purge_expired_sessions(self) -> int:
        try:
            purged = self._sessions.delete_expired_sessions(self._clock())
        except StoreError:
            logger.exception("Expired session purge failed")
            raise StorageError()
        logger.info("Expired sessions purged | count=%d", purged)
        return purged

    # -- Helpers -------------------------------------------------------------

    def _find_user(self, username: str) -> Optional[User]:
        try:
            return self._credentials.find_user_by_username(username)
        except StoreError:
            logger.exception("User lookup failed")
            raise StorageError()

    def _open_session(self, user: User) -> AuthResult:
        issued = self._tokens.issue(user.id, issued_at=self._clock())
        try:
            self._sessions.insert_session(
                user_id=user.id,
                token=issued.token,
                created_at=issued.issued_at,
                expires_at=issued.expires_at,
            )
        except StoreError:
            logger.exception("Session creation failed | user_id=%s", user.id)
            raise StorageError("Failed to create session")
        return AuthResult(user=user, token=issued.token, expires_at=issued.expires_at)
