import os

# Settings are read at import time; these must be in place before any
# application module is imported.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "test-only-signing-secret-0123456789abcdef0123456789")
os.environ.setdefault("PASSWORD_HASH_ROUNDS", "1000")

from datetime import datetime, timedelta, timezone  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import models.session  # noqa: F401, E402
import models.user  # noqa: F401, E402
from core.security import PasswordHasher, TokenIssuer  # noqa: E402
from database import Base, get_db  # noqa: E402
from main import app  # noqa: E402


class FakeClock:
    """Callable clock the tests can move forward."""

    def __init__(self):
        self.now = datetime.now(timezone.utc).replace(microsecond=0)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def hasher():
    return PasswordHasher(rounds=1000)


@pytest.fixture()
def issuer():
    return TokenIssuer(
        secret_key="unit-test-signing-secret-0123456789abcdef",
        ttl=timedelta(hours=48),
    )


@pytest.fixture()
def engine():
    # One shared in-memory database for every connection of the test
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
