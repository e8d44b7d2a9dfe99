"""Work that runs outside the request/response cycle.

``spawn_detached`` is for side effects that must never delay or fail a
response, such as emails. ``SessionSweeper`` owns the periodic clean-up of
expired sessions and is started and stopped by the application lifespan.
"""

import logging
from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from datetime import datetime, timezone

from apscheduler.executors.asyncio import AsyncIOExecutor
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from app.services.sessions import get_session_store

logger = logging.getLogger(__name__)

_executor: Executor = ThreadPoolExecutor(max_workers=4, thread_name_prefix="detached")


def _run_logged(label: str, func: Callable, args: tuple, kwargs: dict):
    try:
        return func(*args, **kwargs)
    except Exception:
        logger.exception("Detached task %s failed", label)
        return None


def spawn_detached(func: Callable, *args, **kwargs) -> Future:
    """Run ``func`` in the background. Failures are logged, never raised, and nobody waits on it."""
    label = getattr(func, "__qualname__", repr(func))
    return _executor.submit(_run_logged, label, func, args, kwargs)


class SessionSweeper:
    """Periodically deletes expired sessions on an APScheduler interval job.

    Expiry is always re-checked on lookup, so the sweep only bounds table
    growth. Each pass runs in a worker thread with its own database session.
    """

    JOB_ID = "session_sweep"

    def __init__(self, interval_seconds: float, session_factory: Callable[[], Session]):
        self.interval_seconds = interval_seconds
        self._session_factory = session_factory
        self._scheduler: AsyncIOScheduler | None = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None and self._scheduler.running

    def sweep_once(self) -> int:
        """Run a single sweep synchronously. Returns the number of sessions removed."""
        db = self._session_factory()
        try:
            removed = get_session_store().sweep_expired(db)
        finally:
            db.close()
        if removed:
            logger.info("Session sweep removed %d expired sessions", removed)
        return removed

    def start(self) -> None:
        """Schedule the sweep on the running event loop. The first pass runs immediately."""
        if self.running:
            return
        self._scheduler = AsyncIOScheduler(
            executors={"default": AsyncIOExecutor()},
            job_defaults={"coalesce": True, "max_instances": 1, "misfire_grace_time": 60},
            timezone="UTC",
        )
        self._scheduler.add_job(
            func=self.sweep_once,
            trigger=IntervalTrigger(seconds=self.interval_seconds),
            id=self.JOB_ID,
            name="Expired session sweep",
            next_run_time=datetime.now(timezone.utc),
            replace_existing=True,
        )
        self._scheduler.start()
        logger.info("Session sweeper started (every %ss)", self.interval_seconds)

    def stop(self) -> None:
        """Shut the scheduler down. Safe to call when it never started."""
        if self._scheduler is None:
            return
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)
        self._scheduler = None
        logger.info("Session sweeper stopped")
