"""
Job Queue - best-effort background work (interaction logs).

Callers hand a job to the dispatcher and move on: dispatch() never raises
and never waits. A bounded asyncio.Queue holds pending jobs; one worker
task, started with the application, drains it and runs the registered
handler inside its own short database session.

A full queue or a failing handler is logged and otherwise ignored. Nothing
the worker does can change a response that has already been returned.

Usage:
    from aistudio.services.job_queue import job_dispatcher

    job_dispatcher.dispatch("log-ai-interaction", {
        "tenant_id": str(tenant_id),
        "user_id": str(user_id),
        "query": message,
        "response": answer,
        "module": "crm",
    })
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from aistudio.core.config import settings
from aistudio.db.session import SessionLocal
from aistudio.models.usage import InteractionLog

logger = logging.getLogger("aistudio.services.job_queue")

LOG_AI_INTERACTION = "log-ai-interaction"
LOG_INSIGHTS_GENERATION = "log-insights-generation"

JobHandler = Callable[[Session, Dict[str, Any]], None]


@dataclass
class Job:
    name: str
    payload: Dict[str, Any]
    enqueued_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


def _uuid(value: Any) -> Optional[UUID]:
    if value is None or isinstance(value, UUID):
        return value
    return UUID(str(value))


# ---------------------------------------------------------------------------
# HANDLERS
# ---------------------------------------------------------------------------

def log_ai_interaction(db: Session, payload: Dict[str, Any]) -> None:
    db.add(InteractionLog(
        tenant_id=_uuid(payload["tenant_id"]),
        user_id=_uuid(payload.get("user_id")),
        kind=LOG_AI_INTERACTION,
        query=payload.get("query"),
        response=payload.get("response"),
        module=payload.get("module"),
    ))
    db.commit()


def log_insights_generation(db: Session, payload: Dict[str, Any]) -> None:
    db.add(InteractionLog(
        tenant_id=_uuid(payload["tenant_id"]),
        user_id=_uuid(payload.get("user_id")),
        kind=LOG_INSIGHTS_GENERATION,
        payload={"insights": payload.get("insights")},
    ))
    db.commit()


DEFAULT_HANDLERS: Dict[str, JobHandler] = {
    LOG_AI_INTERACTION: log_ai_interaction,
    LOG_INSIGHTS_GENERATION: log_insights_generation,
}


# ---------------------------------------------------------------------------
# DISPATCHER
# ---------------------------------------------------------------------------

class JobDispatcher:
    """
    One-way job sender backed by a bounded in-process queue.

    Args:
        max_size: Queue bound (JOB_QUEUE_MAX_SIZE by default)
        session_factory: Opens the session each job runs in
        handlers: Job name -> handler (DEFAULT_HANDLERS by default)
    """

    def __init__(
        self,
        max_size: Optional[int] = None,
        session_factory: Callable[[], Session] = SessionLocal,
        handlers: Optional[Dict[str, JobHandler]] = None,
    ):
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_size or settings.JOB_QUEUE_MAX_SIZE)
        self._session_factory = session_factory
        self._handlers = dict(handlers if handlers is not None else DEFAULT_HANDLERS)
        self._worker: Optional[asyncio.Task] = None

    def register(self, name: str, handler: JobHandler) -> None:
        self._handlers[name] = handler

    def dispatch(self, name: str, payload: Dict[str, Any]) -> bool:
        """
        Enqueue a job without waiting.

        Returns:
            True if the job was queued, False if it was dropped
        """
        if name not in self._handlers:
            logger.error(f"Dropping job '{name}': no handler registered")
            return False
        try:
            self._queue.put_nowait(Job(name=name, payload=payload))
        except asyncio.QueueFull:
            logger.warning(f"Job queue full ({self._queue.maxsize}), dropping '{name}'")
            return False
        return True

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def run_job(self, job: Job) -> bool:
        """Run one job in a fresh session. Returns False if it failed."""
        handler = self._handlers[job.name]
        db = self._session_factory()
        try:
            handler(db, job.payload)
            return True
        except (SQLAlchemyError, KeyError, ValueError) as e:
            db.rollback()
            logger.error(f"Job '{job.name}' failed: {e}")
            return False
        except Exception:
            # A handler bug must not end the worker loop
            db.rollback()
            logger.exception(f"Job '{job.name}' crashed")
            return False
        finally:
            db.close()

    def drain(self) -> int:
        """Run every queued job now. Returns how many succeeded."""
        done = 0
        while not self._queue.empty():
            job = self._queue.get_nowait()
            if self.run_job(job):
                done += 1
            self._queue.task_done()
        return done

    async def _run(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                await asyncio.to_thread(self.run_job, job)
            finally:
                self._queue.task_done()

    def start(self) -> None:
        """Start the worker on the running event loop."""
        if self._worker is None or self._worker.done():
            self._worker = asyncio.get_running_loop().create_task(self._run())
            logger.info("Job worker started")

    async def stop(self) -> None:
        if self._worker is None:
            return
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None
        flushed = self.drain()
        # asyncio.Queue binds to the loop that first waited on it
        self._queue = asyncio.Queue(maxsize=self._queue.maxsize)
        logger.info(f"Job worker stopped ({flushed} queued job(s) flushed)")


# ---------------------------------------------------------------------------
# SINGLETON INSTANCE
# ---------------------------------------------------------------------------
job_dispatcher = JobDispatcher()


def get_job_dispatcher() -> JobDispatcher:
    """FastAPI dependency; tests override it with a dispatcher bound to their session."""
    return job_dispatcher
