"""Tests for the periodic cleanup task."""
import asyncio
from datetime import datetime, timedelta

from impostor.cleanup import CleanupTask
from impostor.db_models import DBPlayer, DBRoom


def test_run_once(manager, db):
    stale = manager.create_room("Old")
    long_ago = datetime.utcnow() - timedelta(hours=3)
    db.query(DBRoom).filter(DBRoom.id == stale.room_id).update({"updated_at": long_ago})
    db.query(DBPlayer).filter(DBPlayer.room_id == stale.room_id).update({"last_seen": long_ago})
    db.commit()

    task = CleanupTask(manager, interval_seconds=60, max_idle_minutes=60, disconnect_timeout_seconds=30)
    summary = asyncio.run(task.run_once())

    assert summary["staleRooms"] == 1
    assert manager.list_rooms() == []


def test_disabled_task_does_not_start(manager):
    async def scenario():
        task = CleanupTask(manager, interval_seconds=0, max_idle_minutes=60, disconnect_timeout_seconds=30)
        task.start()
        assert task.is_running is False
        await task.stop()

    asyncio.run(scenario())


def test_start_and_stop(manager):
    async def scenario():
        task = CleanupTask(manager, interval_seconds=3600, max_idle_minutes=60, disconnect_timeout_seconds=30)
        task.start()
        assert task.is_running is True
        await task.stop()
        assert task.is_running is False

    asyncio.run(scenario())


def test_loop_survives_unexpected_errors(manager, monkeypatch):
    calls = []

    def failing_cleanup(max_idle, timeout):
        calls.append((max_idle, timeout))
        raise RuntimeError("boom")

    monkeypatch.setattr(manager, "run_cleanup", failing_cleanup)

    async def scenario():
        task = CleanupTask(manager, interval_seconds=0.01, max_idle_minutes=60, disconnect_timeout_seconds=30)
        task.start()
        for _ in range(500):
            if len(calls) >= 3:
                break
            await asyncio.sleep(0.01)
        assert task.is_running is True
        await task.stop()
        assert task.is_running is False

    asyncio.run(scenario())
    assert len(calls) >= 3
    assert calls[0] == (60, 30)


def test_stop_tolerates_a_task_that_already_failed(manager):
    async def broken():
        raise RuntimeError("boom")

    async def scenario():
        task = CleanupTask(manager, interval_seconds=3600, max_idle_minutes=60, disconnect_timeout_seconds=30)
        task._task = asyncio.create_task(broken())
        await asyncio.sleep(0)
        assert task._task.done()
        await task.stop()
        assert task.is_running is False

    asyncio.run(scenario())
