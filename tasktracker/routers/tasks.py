from fastapi import APIRouter, Depends, status

from tasktracker.dependencies import get_session_token, get_task_service
from tasktracker.schemas.task import BulkResult, TaskCreate, TaskEnvelope, TaskList, TaskUpdate
from tasktracker.schemas.user import OkResponse
from tasktracker.services.tasks import TaskService

router = APIRouter(prefix="/api/tasks", tags=["tasks"])


@router.get("", response_model=TaskList)
async def list_tasks(
    token: str | None = Depends(get_session_token),
    service: TaskService = Depends(get_task_service),
):
    return {"tasks": await service.list_tasks(token)}


@router.post("", response_model=TaskEnvelope, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    token: str | None = Depends(get_session_token),
    service: TaskService = Depends(get_task_service),
):
    task = await service.create_task(
        token,
        task_data.title,
        assignee=task_data.assignee,
        start_date=task_data.start_date,
        end_date=task_data.end_date,
    )
    return {"task": task}


@router.post("/complete-all", response_model=BulkResult)
async def complete_all(
    token: str | None = Depends(get_session_token),
    service: TaskService = Depends(get_task_service),
):
    changed, tasks = await service.complete_all(token)
    return {"changed": changed, "tasks": tasks}


@router.post("/clear-completed", response_model=BulkResult)
async def clear_completed(
    token: str | None = Depends(get_session_token),
    service: TaskService = Depends(get_task_service),
):
    changed, tasks = await service.clear_completed(token)
    return {"changed": changed, "tasks": tasks}


@router.patch("/{task_id}", response_model=TaskEnvelope)
async def update_task(
    task_id: int,
    update_data: TaskUpdate,
    token: str | None = Depends(get_session_token),
    service: TaskService = Depends(get_task_service),
):
    return {"task": await service.rename_task(token, task_id, update_data.title)}


@router.post("/{task_id}/toggle", response_model=TaskEnvelope)
async def toggle_task(
    task_id: int,
    token: str | None = Depends(get_session_token),
    service: TaskService = Depends(get_task_service),
):
    return {"task": await service.toggle_task(token, task_id)}


@router.delete("/{task_id}", response_model=OkResponse)
async def delete_task(
    task_id: int,
    token: str | None = Depends(get_session_token),
    service: TaskService = Depends(get_task_service),
):
    await service.delete_task(token, task_id)
    return OkResponse()
