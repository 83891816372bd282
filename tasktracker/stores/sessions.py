from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy import delete
from sqlalchemy.future import select

from tasktracker.database import Database, translate_store_errors, utcnow
from tasktracker.models.session import UserSession
from tasktracker.utils.tokens import digest_token, generate_session_token
from tasktracker.utils.logger import setup_logger

logger = setup_logger(__name__)

DEFAULT_TTL = timedelta(days=30)


@dataclass(frozen=True)
class IssuedSession:
    # Handed to the client once; only its digest is stored
    token: str
    expires_at: datetime


class SessionStore:
    def __init__(
        self,
        database: Database,
        ttl: timedelta = DEFAULT_TTL,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.database = database
        self.ttl = ttl
        self.clock = clock

    @translate_store_errors
    async def create(self, user_id: int) -> IssuedSession:
        token, token_digest = generate_session_token()
        created_at = self.clock()
        expires_at = created_at + self.ttl

        async with self.database.session() as db:
            db.add(UserSession(
                user_id=user_id,
                token_digest=token_digest,
                created_at=created_at,
                expires_at=expires_at,
            ))
            await db.commit()

        return IssuedSession(token=token, expires_at=expires_at)

    @translate_store_errors
    async def resolve(self, token: str | None) -> int | None:
        """User id for a live session, else None. Expired rows are deleted on sight."""
        if not token:
            return None
        token_digest = digest_token(token)

        async with self.database.session() as db:
            result = await db.execute(
                select(UserSession.user_id, UserSession.expires_at)
                .filter(UserSession.token_digest == token_digest)
            )
            row = result.first()
            if row is None:
                return None

            if row.expires_at < self.clock():
                await db.execute(
                    delete(UserSession)
                    .where(UserSession.token_digest == token_digest)
                    .execution_options(synchronize_session=False)
                )
                await db.commit()
                logger.info(f"Expired session for user {row.user_id} removed")
                return None

            return row.user_id

    @translate_store_errors
    async def revoke(self, token: str | None) -> int | None:
        """Delete the session if present; return the user id it belonged to."""
        if not token:
            return None
        async with self.database.session() as db:
            result = await db.execute(
                delete(UserSession)
                .where(UserSession.token_digest == digest_token(token))
                .returning(UserSession.user_id)
            )
            user_id = result.scalar_one_or_none()
            await db.commit()
            return user_id

    @translate_store_errors
    async def purge_expired(self) -> int:
        async with self.database.session() as db:
            result = await db.execute(
                delete(UserSession)
                .where(UserSession.expires_at < self.clock())
                .execution_options(synchronize_session=False)
            )
            await db.commit()
            return result.rowcount
