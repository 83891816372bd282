from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.exc import SQLAlchemyError

from tasktracker.database import Database
from tasktracker.exceptions import DateRange, InternalError, TitleLength, TitleRequired
from tasktracker.stores.tasks import TaskStore


@pytest_asyncio.fixture
async def owners(users):
    alice = await users.create("alice", "secret1")
    bob = await users.create("bob", "secret2")
    return alice.id, bob.id


@pytest.mark.asyncio
async def test_create_and_list_most_recent_first(tasks, owners):
    alice, bob = owners
    first = await tasks.create(alice, "buy milk")
    second = await tasks.create(alice, "  walk dog  ")
    await tasks.create(bob, "bob's task")

    assert second.title == "walk dog"
    assert first.completed is False
    listed = await tasks.list_all(alice)
    assert [t.id for t in listed] == [second.id, first.id]
    assert all(t.owner_id == alice for t in listed)


@pytest.mark.asyncio
async def test_create_with_optional_fields(tasks, owners):
    alice, _ = owners
    task = await tasks.create(
        alice, "plan trip", assignee="carol",
        start_date=date(2025, 3, 1), end_date=date(2025, 3, 5),
    )
    assert task.assignee == "carol"
    assert task.start_date == date(2025, 3, 1)
    assert task.end_date == date(2025, 3, 5)
    assert task.created_at is not None


@pytest.mark.asyncio
async def test_create_validation(tasks, owners):
    alice, _ = owners
    with pytest.raises(TitleRequired):
        await tasks.create(alice, "   ")
    with pytest.raises(TitleLength):
        await tasks.create(alice, "x" * 201)
    with pytest.raises(DateRange):
        await tasks.create(alice, "backwards", start_date=date(2025, 3, 5), end_date=date(2025, 3, 1))
    assert await tasks.list_all(alice) == []


@pytest.mark.asyncio
async def test_update_title(tasks, owners):
    alice, _ = owners
    task = await tasks.create(alice, "buy milk")
    updated = await tasks.update_title(alice, task.id, "buy oat milk")
    assert updated.id == task.id
    assert updated.title == "buy oat milk"
    with pytest.raises(TitleRequired):
        await tasks.update_title(alice, task.id, "")


@pytest.mark.asyncio
async def test_toggle_completed_flips(tasks, owners):
    alice, _ = owners
    task = await tasks.create(alice, "buy milk")
    assert (await tasks.toggle_completed(alice, task.id)).completed is True
    assert (await tasks.toggle_completed(alice, task.id)).completed is False


@pytest.mark.asyncio
async def test_wrong_owner_looks_like_missing(tasks, owners):
    alice, bob = owners
    task = await tasks.create(alice, "buy milk")

    assert await tasks.remove_by_id(bob, task.id) is False
    assert await tasks.update_title(bob, task.id, "hijacked") is None
    assert await tasks.toggle_completed(bob, task.id) is None

    # Same answers as for an id nobody has
    assert await tasks.remove_by_id(bob, task.id + 1000) is False
    assert await tasks.update_title(bob, task.id + 1000, "x") is None
    assert await tasks.toggle_completed(bob, task.id + 1000) is None

    [unchanged] = await tasks.list_all(alice)
    assert unchanged.title == "buy milk"
    assert unchanged.completed is False


@pytest.mark.asyncio
async def test_remove_by_id(tasks, owners):
    alice, _ = owners
    task = await tasks.create(alice, "buy milk")
    assert await tasks.remove_by_id(alice, task.id) is True
    assert await tasks.remove_by_id(alice, task.id) is False
    assert await tasks.list_all(alice) == []


@pytest.mark.asyncio
async def test_complete_all_then_clear_completed(tasks, owners):
    alice, bob = owners
    incomplete = [await tasks.create(alice, f"todo {i}") for i in range(3)]
    for i in range(2):
        done = await tasks.create(alice, f"done {i}")
        await tasks.toggle_completed(alice, done.id)
    bobs = await tasks.create(bob, "bob's task")

    assert await tasks.complete_all(alice) == len(incomplete)
    assert all(t.completed for t in await tasks.list_all(alice))
    assert await tasks.complete_all(alice) == 0

    assert await tasks.clear_completed(alice) == 5
    assert await tasks.list_all(alice) == []

    [untouched] = await tasks.list_all(bob)
    assert untouched.id == bobs.id
    assert untouched.completed is False


@pytest.mark.asyncio
async def test_storage_failure_is_reported_as_internal_error(settings):
    # Tables were never created, so every statement fails inside SQLAlchemy
    database = Database.from_settings(settings)
    store = TaskStore(database)
    try:
        with pytest.raises(InternalError) as excinfo:
            await store.list_all(1)
        assert isinstance(excinfo.value.__cause__, SQLAlchemyError)
        assert excinfo.value.code == "internal_error"

        with pytest.raises(InternalError):
            await store.complete_all(1)
    finally:
        await database.dispose()
