"""
Shared fixtures: a throwaway SQLite file per test, fast bcrypt, and
non-Secure cookies so the HTTP test client sends them over plain http.
"""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from tasktracker.config import Settings
from tasktracker.database import Database
from tasktracker.main import create_app
from tasktracker.stores.sessions import SessionStore
from tasktracker.stores.tasks import TaskStore
from tasktracker.stores.users import UserStore

TEST_BCRYPT_ROUNDS = 4


class FakeClock:
    """Callable clock that tests can move forward or backward."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now += delta


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        BCRYPT_ROUNDS=TEST_BCRYPT_ROUNDS,
        COOKIE_SECURE=False,
        SESSION_SWEEP_MINUTES=0,
        CORS_ORIGINS=[],
    )


@pytest_asyncio.fixture
async def database(settings):
    db = Database.from_settings(settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def users(database) -> UserStore:
    return UserStore(database, bcrypt_rounds=TEST_BCRYPT_ROUNDS)


@pytest.fixture
def sessions(database, clock) -> SessionStore:
    return SessionStore(database, ttl=timedelta(days=30), clock=clock)


@pytest.fixture
def tasks(database) -> TaskStore:
    return TaskStore(database)


@pytest.fixture
def client(settings):
    """
    Test client for the full application. Entering the context runs the
    lifespan, which builds the database handle and creates the tables.
    """
    app = create_app(settings)
    with TestClient(app) as c:
        yield c
