"""
Optional storage-hygiene job: deletes expired session rows.

Session validity never depends on this job; expired sessions are already
rejected (and removed) when they are next presented.
"""

import fcntl
import os

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from tasktracker.stores.sessions import SessionStore
from tasktracker.utils.logger import setup_logger

logger = setup_logger(__name__)

LOCK_FILE = "/tmp/tasktracker_scheduler.lock"


async def purge_expired_sessions(sessions: SessionStore) -> int:
    try:
        removed = await sessions.purge_expired()
    except Exception:
        logger.exception("Expired session sweep failed")
        return 0
    if removed:
        logger.info(f"Swept {removed} expired sessions")
    return removed


def acquire_scheduler_lock(path: str = LOCK_FILE):
    """
    Only the first worker to grab the lock runs the scheduler.
    Returns the open lock file, or None if another worker holds it.
    """
    lock_fd = open(path, "w")
    try:
        fcntl.flock(lock_fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except (BlockingIOError, OSError):
        lock_fd.close()
        logger.info(f"[PROCESS {os.getpid()}] Another worker is running the scheduler. Skipping.")
        return None
    logger.info(f"[PROCESS {os.getpid()}] Acquired scheduler lock.")
    return lock_fd


def release_scheduler_lock(lock_fd) -> None:
    fcntl.flock(lock_fd, fcntl.LOCK_UN)
    lock_fd.close()


def setup_scheduler(sessions: SessionStore, interval_minutes: int) -> AsyncIOScheduler:
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        purge_expired_sessions,
        trigger=IntervalTrigger(minutes=interval_minutes),
        args=[sessions],
        id="purge_expired_sessions",
        max_instances=1,
        coalesce=True,
    )
    scheduler.start()
    return scheduler
