# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""User ORM model."""

from sqlalchemy import Column, Integer, String, Text, JSON, DateTime
from sqlalchemy.dialects import mysql
from sqlalchemy.sql import func

from database import Base

# Applied on registration; later edits belong to the preferences screens
DEFAULT_PREFERENCES = {"theme": "light", "moving_avg_days": 7}


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Case-sensitive and immutable once created.  The UNIQUE constraint is
    # what actually settles concurrent registrations of the same name.
    username = Column(
        String(255).with_variant(mysql.VARCHAR(255, collation="utf8mb4_bin"), "mysql"),
        unique=True,
        nullable=False,
        index=True,
    )
    # passlib embeds the salt in the hash string
    password_hash = Column(String(255), nullable=False)
    security_question = Column(Text, nullable=False)
    # Hash of the lower-cased, trimmed answer
    security_answer_hash = Column(String(255), nullable=False)
    preferences = Column(JSON, nullable=False, default=lambda: dict(DEFAULT_PREFERENCES))
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
