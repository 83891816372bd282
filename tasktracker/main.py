from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tasktracker.config import Settings, settings as default_settings
from tasktracker.database import Database
from tasktracker.exceptions import AppError
from tasktracker.routers.auth import router as auth_router
from tasktracker.routers.tasks import router as tasks_router
from tasktracker.services.scheduler import (
    acquire_scheduler_lock,
    release_scheduler_lock,
    setup_scheduler,
)
from tasktracker.stores.sessions import SessionStore
from tasktracker.utils.logger import setup_logger

logger = setup_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    database = Database.from_settings(settings)
    await database.create_all()
    app.state.database = database

    scheduler = None
    lock_fd = None
    if settings.SESSION_SWEEP_MINUTES > 0:
        lock_fd = acquire_scheduler_lock()
        if lock_fd is not None:
            sessions = SessionStore(database, ttl=timedelta(days=settings.SESSION_TTL_DAYS))
            scheduler = setup_scheduler(sessions, settings.SESSION_SWEEP_MINUTES)

    yield

    # Clean up
    if scheduler:
        scheduler.shutdown(wait=True)
    if lock_fd:
        release_scheduler_lock(lock_fd)
    await database.dispose()
    logger.info("Database connections closed")


async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.code})


async def request_validation_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "invalid_request"})


async def global_exception_handler(request: Request, exc: Exception):
    # Details stay in the server log; clients only see the code
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "internal_error"})


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        lifespan=lifespan,
        title="Task Tracker API",
        description="Multi-user task tracking with cookie sessions",
        version="1.0.0",
    )
    app.state.settings = settings

    if settings.CORS_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(auth_router)
    app.include_router(tasks_router)

    @app.get("/")
    def root():
        return {"message": "Task Tracker API running"}

    @app.get("/health")
    async def health(request: Request):
        if await request.app.state.database.ping():
            return {"ok": True}
        return JSONResponse(status_code=503, content={"error": "database_unavailable"})

    return app


app = create_app()
