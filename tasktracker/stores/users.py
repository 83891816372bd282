from dataclasses import dataclass
from datetime import datetime

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.future import select

from tasktracker.database import Database, translate_store_errors, utcnow
from tasktracker.exceptions import PasswordLength, UsernameLength, UsernameRequired, UsernameTaken
from tasktracker.models.user import User
from tasktracker.utils.sanitization import normalize_username
from tasktracker.utils.security import get_password_hash

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 32
PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 100


@dataclass(frozen=True)
class UserSummary:
    """Public projection of a user; never carries the password hash."""

    id: int
    username: str
    created_at: datetime

    @classmethod
    def from_model(cls, user: User) -> "UserSummary":
        return cls(id=user.id, username=user.username, created_at=user.created_at)


def validate_credentials(username: str, password: str) -> str:
    """Check registration input and return the canonical username."""
    username = normalize_username(username)
    if not username:
        raise UsernameRequired()
    if not USERNAME_MIN_LENGTH <= len(username) <= USERNAME_MAX_LENGTH:
        raise UsernameLength()
    if not PASSWORD_MIN_LENGTH <= len(password) <= PASSWORD_MAX_LENGTH:
        raise PasswordLength()
    return username


class UserStore:
    def __init__(self, database: Database, bcrypt_rounds: int | None = None):
        self.database = database
        self.bcrypt_rounds = bcrypt_rounds

    @translate_store_errors
    async def create(self, username: str, password: str) -> UserSummary:
        username = validate_credentials(username, password)
        password_hash = await run_in_threadpool(get_password_hash, password, self.bcrypt_rounds)

        async with self.database.session() as db:
            user = User(username=username, password_hash=password_hash, created_at=utcnow())
            db.add(user)
            try:
                await db.commit()
            except IntegrityError as e:
                await db.rollback()
                # The unique index is the authority; a concurrent winner lands here
                if self.database.is_unique_violation(e):
                    raise UsernameTaken() from e
                raise
            return UserSummary.from_model(user)

    @translate_store_errors
    async def find_by_username(self, username: str) -> User | None:
        username = normalize_username(username)
        if not username:
            return None
        async with self.database.session() as db:
            result = await db.execute(select(User).filter(User.username == username))
            return result.scalars().first()

    @translate_store_errors
    async def find_by_id(self, user_id: int) -> UserSummary | None:
        async with self.database.session() as db:
            result = await db.execute(
                select(User.id, User.username, User.created_at).filter(User.id == user_id)
            )
            row = result.first()
            if row is None:
                return None
            return UserSummary(id=row.id, username=row.username, created_at=row.created_at)

    @translate_store_errors
    async def delete(self, user_id: int) -> bool:
        """Remove an account; its sessions and tasks go with it (FK cascade)."""
        async with self.database.session() as db:
            result = await db.execute(
                delete(User).where(User.id == user_id).execution_options(synchronize_session=False)
            )
            await db.commit()
            return result.rowcount > 0
