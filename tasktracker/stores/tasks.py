"""
Per-user task storage.

Every statement is filtered by ``owner_id`` and every mutation is a single
conditional UPDATE/DELETE, so a task id belonging to another user behaves
exactly like an id that does not exist.
"""

from datetime import date

from sqlalchemy import delete, update
from sqlalchemy.future import select

from tasktracker.database import Database, translate_store_errors, utcnow
from tasktracker.exceptions import DateRange, TitleLength, TitleRequired
from tasktracker.models.tasks import TITLE_MAX_LENGTH, Task


def validate_title(title: str | None) -> str:
    title = (title or "").strip()
    if not title:
        raise TitleRequired()
    if len(title) > TITLE_MAX_LENGTH:
        raise TitleLength()
    return title


class TaskStore:
    def __init__(self, database: Database):
        self.database = database

    @translate_store_errors
    async def list_all(self, owner_id: int) -> list[Task]:
        async with self.database.session() as db:
            result = await db.execute(
                select(Task).filter(Task.owner_id == owner_id).order_by(Task.id.desc())
            )
            return list(result.scalars().all())

    @translate_store_errors
    async def create(
        self,
        owner_id: int,
        title: str,
        assignee: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Task:
        title = validate_title(title)
        if start_date and end_date and end_date < start_date:
            raise DateRange()

        async with self.database.session() as db:
            task = Task(
                title=title,
                completed=False,
                owner_id=owner_id,
                assignee=assignee or None,
                start_date=start_date,
                end_date=end_date,
                created_at=utcnow(),
            )
            db.add(task)
            await db.commit()
            return task

    @translate_store_errors
    async def remove_by_id(self, owner_id: int, task_id: int) -> bool:
        async with self.database.session() as db:
            result = await db.execute(
                delete(Task)
                .where(Task.id == task_id, Task.owner_id == owner_id)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
            return result.rowcount > 0

    @translate_store_errors
    async def update_title(self, owner_id: int, task_id: int, new_title: str) -> Task | None:
        new_title = validate_title(new_title)
        async with self.database.session() as db:
            result = await db.execute(
                update(Task)
                .where(Task.id == task_id, Task.owner_id == owner_id)
                .values(title=new_title)
                .returning(Task)
            )
            task = result.scalars().first()
            await db.commit()
            return task

    @translate_store_errors
    async def toggle_completed(self, owner_id: int, task_id: int) -> Task | None:
        async with self.database.session() as db:
            result = await db.execute(
                update(Task)
                .where(Task.id == task_id, Task.owner_id == owner_id)
                .values(completed=~Task.completed)
                .returning(Task)
            )
            task = result.scalars().first()
            await db.commit()
            return task

    @translate_store_errors
    async def complete_all(self, owner_id: int) -> int:
        async with self.database.session() as db:
            result = await db.execute(
                update(Task)
                .where(Task.owner_id == owner_id, Task.completed == False)
                .values(completed=True)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
            return result.rowcount

    @translate_store_errors
    async def clear_completed(self, owner_id: int) -> int:
        async with self.database.session() as db:
            result = await db.execute(
                delete(Task)
                .where(Task.owner_id == owner_id, Task.completed == True)
                .execution_options(synchronize_session=False)
            )
            await db.commit()
            return result.rowcount
