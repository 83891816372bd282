from tasktracker.models.user import User
from tasktracker.models.session import UserSession
from tasktracker.models.tasks import Task

__all__ = ["User", "UserSession", "Task"]
