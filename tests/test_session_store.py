from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy.future import select

from tasktracker.models.session import UserSession
from tasktracker.utils.tokens import digest_token


@pytest_asyncio.fixture
async def user_id(users):
    return (await users.create("alice", "secret1")).id


@pytest.mark.asyncio
async def test_create_and_resolve(sessions, user_id, clock):
    issued = await sessions.create(user_id)
    assert issued.expires_at == clock() + timedelta(days=30)
    assert await sessions.resolve(issued.token) == user_id


@pytest.mark.asyncio
async def test_only_digest_is_persisted(database, sessions, user_id):
    issued = await sessions.create(user_id)
    async with database.session() as db:
        row = (await db.execute(select(UserSession))).scalars().one()
    assert row.token_digest == digest_token(issued.token)
    assert row.token_digest != issued.token


@pytest.mark.asyncio
async def test_unknown_or_missing_token(sessions, user_id):
    await sessions.create(user_id)
    assert await sessions.resolve("not-a-token") is None
    assert await sessions.resolve("") is None
    assert await sessions.resolve(None) is None


@pytest.mark.asyncio
async def test_revoke(sessions, user_id):
    first = await sessions.create(user_id)
    second = await sessions.create(user_id)

    assert await sessions.revoke(first.token) == user_id
    assert await sessions.resolve(first.token) is None
    assert await sessions.resolve(second.token) == user_id

    # Revoking again, or revoking garbage, is not an error
    assert await sessions.revoke(first.token) is None
    assert await sessions.revoke("not-a-token") is None
    assert await sessions.revoke(None) is None


@pytest.mark.asyncio
async def test_ttl_boundaries(database, sessions, user_id, clock):
    issued = await sessions.create(user_id)

    clock.advance(timedelta(days=30) - timedelta(seconds=1))
    assert await sessions.resolve(issued.token) == user_id

    clock.advance(timedelta(seconds=2))
    assert await sessions.resolve(issued.token) is None

    # The expired row was purged on lookup, so rewinding does not revive it
    async with database.session() as db:
        assert (await db.execute(select(UserSession))).scalars().all() == []
    clock.advance(timedelta(days=-1))
    assert await sessions.resolve(issued.token) is None


@pytest.mark.asyncio
async def test_purge_expired(sessions, user_id, clock):
    old = await sessions.create(user_id)
    clock.advance(timedelta(days=20))
    fresh = await sessions.create(user_id)
    clock.advance(timedelta(days=11))

    assert await sessions.purge_expired() == 1
    assert await sessions.resolve(fresh.token) == user_id
    assert await sessions.resolve(old.token) is None
