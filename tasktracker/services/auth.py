"""
Register / login / logout / whoami on top of the user and session stores.

A request is either anonymous or authenticated by a live session token; there
is no other state. Login failures are reported uniformly as
``invalid_credentials`` whether the username exists or not, and an unknown
username still pays for one bcrypt verification so response timing does not
reveal which case occurred.
"""

from functools import lru_cache

from fastapi.concurrency import run_in_threadpool

from tasktracker.exceptions import InvalidCredentials, UnauthorizedError, UsernameTaken
from tasktracker.stores.sessions import IssuedSession, SessionStore
from tasktracker.stores.users import UserStore, UserSummary, validate_credentials
from tasktracker.utils.security import get_password_hash, verify_password
from tasktracker.utils.logger import setup_logger

logger = setup_logger(__name__)


@lru_cache(maxsize=None)
def _dummy_hash(rounds: int | None) -> str:
    return get_password_hash("timing-equalizer", rounds)


class AuthService:
    def __init__(self, users: UserStore, sessions: SessionStore):
        self.users = users
        self.sessions = sessions

    async def register(self, username: str, password: str) -> tuple[UserSummary, IssuedSession]:
        canonical = validate_credentials(username, password)
        # Fast path only; the unique index still decides concurrent registrations
        if await self.users.find_by_username(canonical) is not None:
            raise UsernameTaken()

        user = await self.users.create(canonical, password)
        session = await self.sessions.create(user.id)
        logger.info(f"Registered user {user.id}")
        return user, session

    async def login(self, username: str, password: str) -> tuple[UserSummary, IssuedSession]:
        user = await self.users.find_by_username(username)
        if user is not None:
            stored_hash = user.password_hash
        else:
            stored_hash = await run_in_threadpool(_dummy_hash, self.users.bcrypt_rounds)

        ok = await run_in_threadpool(verify_password, password, stored_hash)
        if user is None or not ok:
            logger.info(f"Failed login for username {username.strip().lower()!r}")
            raise InvalidCredentials()

        session = await self.sessions.create(user.id)
        return UserSummary.from_model(user), session

    async def logout(self, token: str | None) -> None:
        user_id = await self.sessions.revoke(token)
        if user_id is not None:
            logger.info(f"Logged out user {user_id}")

    async def whoami(self, token: str | None) -> UserSummary | None:
        user_id = await self.sessions.resolve(token)
        if user_id is None:
            return None
        return await self.users.find_by_id(user_id)

    async def delete_account(self, token: str | None) -> None:
        user_id = await self.sessions.resolve(token)
        if user_id is None:
            raise UnauthorizedError()
        await self.users.delete(user_id)
        logger.info(f"Deleted user {user_id}")
