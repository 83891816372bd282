from datetime import timedelta

import pytest

from tasktracker.services.scheduler import (
    acquire_scheduler_lock,
    purge_expired_sessions,
    release_scheduler_lock,
)


@pytest.mark.asyncio
async def test_purge_expired_sessions(users, sessions, clock):
    user = await users.create("alice", "secret1")
    expired = await sessions.create(user.id)
    clock.advance(timedelta(days=31))
    live = await sessions.create(user.id)

    assert await purge_expired_sessions(sessions) == 1
    assert await purge_expired_sessions(sessions) == 0
    assert await sessions.resolve(live.token) == user.id
    assert await sessions.resolve(expired.token) is None


def test_only_one_holder_of_scheduler_lock(tmp_path):
    path = str(tmp_path / "scheduler.lock")
    first = acquire_scheduler_lock(path)
    assert first is not None
    assert acquire_scheduler_lock(path) is None

    release_scheduler_lock(first)
    second = acquire_scheduler_lock(path)
    assert second is not None
    release_scheduler_lock(second)
