from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from tasktracker.models.tasks import ASSIGNEE_MAX_LENGTH
from tasktracker.utils.sanitization import sanitize_string


class TaskCreate(BaseModel):
    title: str = ""
    assignee: str | None = Field(None, max_length=ASSIGNEE_MAX_LENGTH)
    start_date: date | None = None
    end_date: date | None = None

    @field_validator("title", "assignee", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)

    @field_validator("assignee")
    @classmethod
    def blank_assignee_is_none(cls, v):
        return v or None


class TaskUpdate(BaseModel):
    title: str = ""

    @field_validator("title", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)


class Task(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    completed: bool
    assignee: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    created_at: datetime | None = None


class TaskEnvelope(BaseModel):
    task: Task


class TaskList(BaseModel):
    tasks: list[Task]


class BulkResult(BaseModel):
    ok: bool = True
    changed: int
    tasks: list[Task]
