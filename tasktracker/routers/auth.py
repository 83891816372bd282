from fastapi import APIRouter, Depends, Response, status

from tasktracker.config import Settings
from tasktracker.dependencies import get_auth_service, get_session_token, get_settings
from tasktracker.schemas.user import Credentials, OkResponse, UserEnvelope, UserResponse
from tasktracker.services.auth import AuthService
from tasktracker.stores.sessions import IssuedSession

router = APIRouter(prefix="/api/auth", tags=["auth"])


def set_session_cookie(response: Response, session: IssuedSession, settings: Settings) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=session.token,
        max_age=settings.session_ttl_seconds,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.COOKIE_SECURE,
    )


@router.post("/register", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def register(
    credentials: Credentials,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    user, session = await auth.register(credentials.username, credentials.password)
    set_session_cookie(response, session, settings)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.post("/login", response_model=UserEnvelope)
async def login(
    credentials: Credentials,
    response: Response,
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    user, session = await auth.login(credentials.username, credentials.password)
    set_session_cookie(response, session, settings)
    return UserEnvelope(user=UserResponse.model_validate(user))


@router.post("/logout", response_model=OkResponse)
async def logout(
    response: Response,
    token: str | None = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    await auth.logout(token)
    clear_session_cookie(response, settings)
    return OkResponse()


@router.get("/me", response_model=UserEnvelope)
async def whoami(
    token: str | None = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
):
    user = await auth.whoami(token)
    return UserEnvelope(user=UserResponse.model_validate(user) if user else None)


@router.delete("/me", response_model=OkResponse)
async def delete_account(
    response: Response,
    token: str | None = Depends(get_session_token),
    auth: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings),
):
    await auth.delete_account(token)
    clear_session_cookie(response, settings)
    return OkResponse()
