from sqlalchemy import Column, Integer, String, Date, ForeignKey, Boolean
from tasktracker.database import Base, UTCDateTime, utcnow

TITLE_MAX_LENGTH = 200
ASSIGNEE_MAX_LENGTH = 100


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(TITLE_MAX_LENGTH), nullable=False)
    completed = Column(Boolean, default=False, nullable=False)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    assignee = Column(String(ASSIGNEE_MAX_LENGTH), nullable=True)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)
