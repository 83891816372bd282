from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Storage. The URL scheme picks the backend (sqlite / postgresql).
    DATABASE_URL: str = "sqlite+aiosqlite:///./tasks.db"
    DATABASE_SSL: bool = False
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_TIMEOUT: int = 30

    # Sessions
    SESSION_TTL_DAYS: int = Field(30, ge=1)
    SESSION_COOKIE_NAME: str = "session"
    COOKIE_SECURE: bool = True
    SESSION_SWEEP_MINUTES: int = Field(0, ge=0)

    # Security
    BCRYPT_ROUNDS: int = Field(12, ge=4, le=31)

    CORS_ORIGINS: list[str] = []

    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    @property
    def session_ttl_seconds(self) -> int:
        return self.SESSION_TTL_DAYS * 24 * 60 * 60


settings = Settings()
