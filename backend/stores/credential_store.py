# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""SQLAlchemy-backed credential store (the ``users`` table)."""

from datetime import datetime
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from models.user import User
from stores.base import CredentialStore, DuplicateUsernameError, StoreError


class SqlCredentialStore(CredentialStore):
    """Operates on the request-scoped session it is constructed with."""

    def __init__(self, db: Session):
        self._db = db

    def find_user_by_username(self, username: str) -> Optional[User]:
        try:
            return self._db.query(User).filter(User.username == username).first()
        except SQLAlchemyError as exc:
            raise StoreError("user lookup failed") from exc

    def find_user_by_id(self, user_id: int) -> Optional[User]:
        try:
            return self._db.query(User).filter(User.id == user_id).first()
        except SQLAlchemyError as exc:
            raise StoreError("user lookup failed") from exc

    def insert_user(
        self,
        username: str,
        password_hash: str,
        security_question: str,
        security_answer_hash: str,
        preferences: dict,
    ) -> User:
        user = User(
            username=username,
            password_hash=password_hash,
            security_question=security_question,
            security_answer_hash=security_answer_hash,
            preferences=dict(preferences),
        )
        self._db.add(user)
        try:
            self._db.commit()
        except IntegrityError as exc:
            # users.username is the only unique column the caller controls
            self._db.rollback()
            raise DuplicateUsernameError(username) from exc
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise StoreError("user insert failed") from exc

        # load id and the server-side timestamps
        self._db.refresh(user)
        return user

    def update_user_password_hash(
        self, user_id: int, password_hash: str, updated_at: datetime
    ) -> None:
        try:
            rows = (
                self._db.query(User)
                .filter(User.id == user_id)
                .update(
                    {User.password_hash: password_hash, User.updated_at: updated_at},
                    synchronize_session=False,
                )
            )
            self._db.commit()
        except SQLAlchemyError as exc:
            self._db.rollback()
            raise StoreError("password update failed") from exc

        if rows != 1:
            raise StoreError(f"password update matched {rows} rows")
        # later reads in this session must see the new hash
        self._db.expire_all()
