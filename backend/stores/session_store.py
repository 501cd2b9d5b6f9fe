# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""SQLAlchemy-backed session store (the ``sessions`` table)."""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.session import UserSession
from stores.base import RevocationResult, SessionStore, StoreError


class SqlSessionStore(SessionStore):
    """Operates on the request-scoped session it is constructed with."""

    def __init__(self, db: Session):
        self._db = db

    def insert_session(
        self, user_id: int, token: str, created_at: datetime, expires_at: datetime
    ) -> UserSession:
        row = UserSession(
            user_id=user_id,
            token=token,
            created_at=created_at,
            expires_at=expires_at,
        )
        self._db.add(row)
        try:
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise StoreError("session insert failed") from exc
        return row

    def delete_sessions_for_user(self, user_id: int) -> RevocationResult:
        """
        One DELETE for all of the user's sessions.  ``remaining`` is counted
        inside the same transaction, before commit, so sessions created by
        concurrent logins after the purge are not reported as leftovers.
        """
        query = self._db.query(UserSession).filter(UserSession.user_id == user_id)
        try:
            deleted = query.delete(synchronize_session=False)
            remaining = query.count()
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise StoreError("session purge failed") from exc
        return RevocationResult(deleted=deleted, remaining=remaining)

    def find_active_session(self, token: str, now: datetime) -> Optional[UserSession]:
        try:
            return (
                self._db.query(UserSession)
                .filter(UserSession.token == token, UserSession.expires_at > now)
                .first()
            )
        except SQLAlchemyError as exc:
            raise StoreError("session lookup failed") from exc

    def delete_session(self, token: str) -> int:
        return self._delete(UserSession.token == token, "session delete failed")

    def delete_expired_sessions(self, now: datetime) -> int:
        return self._delete(UserSession.expires_at <= now, "expired session purge failed")

    def _delete(self, criterion, error: str) -> int:
        try:
            deleted = (
                self._db.query(UserSession)
                .filter(criterion)
                .delete(synchronize_session=False)
            )
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise StoreError(error) from exc
        return deleted
