from sqlalchemy import Column, Integer, String, ForeignKey
from tasktracker.database import Base, UTCDateTime


class UserSession(Base):
    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # SHA-256 hex digest of the bearer token; the raw token is never stored
    token_digest = Column(String(64), unique=True, nullable=False)
    created_at = Column(UTCDateTime, nullable=False)
    expires_at = Column(UTCDateTime, nullable=False, index=True)
