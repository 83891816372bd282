from datetime import timedelta

from fastapi import Depends, Request

from tasktracker.config import Settings
from tasktracker.database import Database
from tasktracker.services.auth import AuthService
from tasktracker.services.tasks import TaskService
from tasktracker.stores.sessions import SessionStore
from tasktracker.stores.tasks import TaskStore
from tasktracker.stores.users import UserStore


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_database(request: Request) -> Database:
    # Built once in the application lifespan
    return request.app.state.database


def get_session_token(request: Request, settings: Settings = Depends(get_settings)) -> str | None:
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


def get_session_store(
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
) -> SessionStore:
    return SessionStore(database, ttl=timedelta(days=settings.SESSION_TTL_DAYS))


def get_user_store(
    database: Database = Depends(get_database),
    settings: Settings = Depends(get_settings),
) -> UserStore:
    return UserStore(database, bcrypt_rounds=settings.BCRYPT_ROUNDS)


def get_auth_service(
    users: UserStore = Depends(get_user_store),
    sessions: SessionStore = Depends(get_session_store),
) -> AuthService:
    return AuthService(users, sessions)


def get_task_service(
    database: Database = Depends(get_database),
    sessions: SessionStore = Depends(get_session_store),
) -> TaskService:
    return TaskService(sessions, TaskStore(database))
