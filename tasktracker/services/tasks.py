from datetime import date

from tasktracker.exceptions import NotFoundError, UnauthorizedError
from tasktracker.models.tasks import Task
from tasktracker.stores.sessions import SessionStore
from tasktracker.stores.tasks import TaskStore


class TaskService:
    """
    Authorization wrapper around the task store.

    The owner id always comes from the caller's session token and is resolved
    before the store is touched; clients never supply it.
    """

    def __init__(self, sessions: SessionStore, tasks: TaskStore):
        self.sessions = sessions
        self.tasks = tasks

    async def _owner_id(self, token: str | None) -> int:
        user_id = await self.sessions.resolve(token)
        if user_id is None:
            raise UnauthorizedError()
        return user_id

    async def list_tasks(self, token: str | None) -> list[Task]:
        owner_id = await self._owner_id(token)
        return await self.tasks.list_all(owner_id)

    async def create_task(
        self,
        token: str | None,
        title: str,
        assignee: str | None = None,
        start_date: date | None = None,
        end_date: date | None = None,
    ) -> Task:
        owner_id = await self._owner_id(token)
        return await self.tasks.create(owner_id, title, assignee, start_date, end_date)

    async def rename_task(self, token: str | None, task_id: int, title: str) -> Task:
        owner_id = await self._owner_id(token)
        task = await self.tasks.update_title(owner_id, task_id, title)
        if task is None:
            raise NotFoundError()
        return task

    async def toggle_task(self, token: str | None, task_id: int) -> Task:
        owner_id = await self._owner_id(token)
        task = await self.tasks.toggle_completed(owner_id, task_id)
        if task is None:
            raise NotFoundError()
        return task

    async def delete_task(self, token: str | None, task_id: int) -> None:
        owner_id = await self._owner_id(token)
        if not await self.tasks.remove_by_id(owner_id, task_id):
            raise NotFoundError()

    async def complete_all(self, token: str | None) -> tuple[int, list[Task]]:
        owner_id = await self._owner_id(token)
        changed = await self.tasks.complete_all(owner_id)
        return changed, await self.tasks.list_all(owner_id)

    async def clear_completed(self, token: str | None) -> tuple[int, list[Task]]:
        owner_id = await self._owner_id(token)
        changed = await self.tasks.clear_completed(owner_id)
        return changed, await self.tasks.list_all(owner_id)
