"""
Tests for the best-effort job dispatcher.
"""

import asyncio
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from aistudio.models.usage import InteractionLog
from aistudio.services.job_queue import LOG_AI_INTERACTION, JobDispatcher


def recording_dispatcher(max_size: int = 10):
    calls = []
    session = MagicMock()

    def handler(db, payload):
        if payload.get("explode"):
            raise ValueError("bad payload")
        calls.append(payload)

    dispatcher = JobDispatcher(max_size=max_size, session_factory=lambda: session, handlers={"record": handler})
    return dispatcher, calls, session


class TestDispatch:
    def test_dispatch_queues_without_running(self):
        dispatcher, calls, _ = recording_dispatcher()

        assert dispatcher.dispatch("record", {"n": 1}) is True
        assert dispatcher.pending == 1
        assert calls == []

    def test_unknown_job_is_dropped(self):
        dispatcher, _, _ = recording_dispatcher()
        assert dispatcher.dispatch("no-such-job", {}) is False
        assert dispatcher.pending == 0

    def test_full_queue_drops(self):
        dispatcher, _, _ = recording_dispatcher(max_size=2)

        assert dispatcher.dispatch("record", {"n": 1})
        assert dispatcher.dispatch("record", {"n": 2})
        assert dispatcher.dispatch("record", {"n": 3}) is False
        assert dispatcher.pending == 2

    def test_drain_runs_in_order_and_survives_failures(self):
        dispatcher, calls, session = recording_dispatcher()
        dispatcher.dispatch("record", {"n": 1})
        dispatcher.dispatch("record", {"explode": True})
        dispatcher.dispatch("record", {"n": 3})

        assert dispatcher.drain() == 2
        assert calls == [{"n": 1}, {"n": 3}]
        session.rollback.assert_called_once()
        assert session.close.call_count == 3

    def test_register_adds_handler(self):
        dispatcher, _, _ = recording_dispatcher()
        seen = []
        dispatcher.register("extra", lambda db, payload: seen.append(payload))

        dispatcher.dispatch("extra", {"ok": True})
        dispatcher.drain()

        assert seen == [{"ok": True}]


class TestInteractionLogJob:
    def test_writes_interaction_log(self, db: Session, dispatcher: JobDispatcher, test_tenant):
        dispatcher.dispatch(LOG_AI_INTERACTION, {
            "tenant_id": str(test_tenant.id),
            "user_id": None,
            "query": "What needs attention?",
            "response": "Chase INV-1001.",
            "module": "crm",
        })

        assert dispatcher.drain() == 1
        log = db.query(InteractionLog).one()
        assert log.tenant_id == test_tenant.id
        assert log.query == "What needs attention?"
        assert log.module == "crm"

    def test_bad_tenant_id_is_logged_not_raised(self, dispatcher: JobDispatcher, db: Session):
        dispatcher.dispatch(LOG_AI_INTERACTION, {"tenant_id": "not-a-uuid"})
        assert dispatcher.drain() == 0


class TestWorker:
    """The background worker started with the application."""

    @pytest.mark.asyncio
    async def test_worker_runs_jobs(self):
        dispatcher, calls, _ = recording_dispatcher()
        dispatcher.start()

        dispatcher.dispatch("record", {"n": 1})
        for _ in range(50):
            if calls:
                break
            await asyncio.sleep(0.02)

        await dispatcher.stop()
        assert calls == [{"n": 1}]

    @pytest.mark.asyncio
    async def test_worker_survives_crashing_handler(self):
        ran = []

        def crash(db, payload):
            raise RuntimeError("unexpected")

        dispatcher = JobDispatcher(
            max_size=10,
            session_factory=MagicMock,
            handlers={"boom": crash, "ok": lambda db, payload: ran.append(payload)},
        )
        dispatcher.start()

        dispatcher.dispatch("boom", {})
        dispatcher.dispatch("ok", {"n": 1})
        for _ in range(50):
            if ran:
                break
            await asyncio.sleep(0.02)

        assert ran == [{"n": 1}]
        assert not dispatcher._worker.done()
        await dispatcher.stop()

    def test_drain_survives_crashing_handler(self):
        dispatcher, calls, session = recording_dispatcher()

        def crash(db, payload):
            raise RuntimeError("unexpected")

        dispatcher.register("boom", crash)
        dispatcher.dispatch("boom", {})
        dispatcher.dispatch("record", {"n": 2})

        assert dispatcher.drain() == 1
        assert calls == [{"n": 2}]
        session.rollback.assert_called_once()

    @pytest.mark.asyncio
    async def test_stop_flushes_pending_jobs(self):
        dispatcher, calls, _ = recording_dispatcher()
        dispatcher.start()
        dispatcher.dispatch("record", {"n": 2})
        await dispatcher.stop()

        assert calls == [{"n": 2}]

    @pytest.mark.asyncio
    async def test_stop_without_start(self):
        dispatcher, _, _ = recording_dispatcher()
        await dispatcher.stop()
        assert dispatcher.pending == 0
