# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Collaborator interfaces the auth service depends on.

Each method is one logical storage operation that either succeeds or
raises :class:`StoreError`.  The service never retries them.  The
SQLAlchemy implementations live next to this module; tests substitute
in-memory versions.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from models.user import User
from models.session import UserSession


class StoreError(Exception):
    """Any failure of the persistence layer."""


class DuplicateUsernameError(StoreError):
    """Insert rejected by the username uniqueness constraint."""


@dataclass(frozen=True)
class RevocationResult:
    """Outcome of a bulk session delete for one user."""

    deleted: int
    remaining: int

    @property
    def complete(self) -> bool:
        return self.remaining == 0


class CredentialStore(ABC):
    @abstractmethod
    def find_user_by_username(self, username: str) -> Optional[User]:
        """Exact, case-sensitive lookup."""

    @abstractmethod
    def find_user_by_id(self, user_id: int) -> Optional[User]:
        ...

    @abstractmethod
    def insert_user(
        self,
        username: str,
        password_hash: str,
        security_question: str,
        security_answer_hash: str,
        preferences: dict,
    ) -> User:
        """
        Persist a new user and return it with id and timestamps populated.
        Raises DuplicateUsernameError if the username is already taken at
        write time.
        """

    @abstractmethod
    def update_user_password_hash(
        self, user_id: int, password_hash: str, updated_at: datetime
    ) -> None:
        ...


class SessionStore(ABC):
    @abstractmethod
    def insert_session(
        self, user_id: int, token: str, created_at: datetime, expires_at: datetime
    ) -> UserSession:
        ...

    @abstractmethod
    def delete_sessions_for_user(self, user_id: int) -> RevocationResult:
        """Delete every session of *user_id* and report what is left."""

    @abstractmethod
    def find_active_session(self, token: str, now: datetime) -> Optional[UserSession]:
        """The session for *token* if it exists and expires after *now*."""

    @abstractmethod
    def delete_session(self, token: str) -> int:
        """Delete the session for *token*; returns the number of rows removed."""

    @abstractmethod
    def delete_expired_sessions(self, now: datetime) -> int:
        ...
