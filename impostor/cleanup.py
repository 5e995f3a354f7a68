# impostor/cleanup.py
"""Periodic sweep for abandoned rooms and silent players."""
import asyncio
import logging
from typing import Optional

from impostor.errors import GameError
from impostor.game_manager import GameManager

logger = logging.getLogger(__name__)


class CleanupTask:
    def __init__(
        self,
        manager: GameManager,
        interval_seconds: int,
        max_idle_minutes: int,
        disconnect_timeout_seconds: int,
    ):
        self.manager = manager
        self.interval_seconds = interval_seconds
        self.max_idle_minutes = max_idle_minutes
        self.disconnect_timeout_seconds = disconnect_timeout_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self):
        if self.interval_seconds <= 0:
            logger.info("Room cleanup disabled")
            return
        if self.is_running:
            logger.warning("Room cleanup already running")
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(
            "Room cleanup started: every %ss, idle timeout %s min",
            self.interval_seconds, self.max_idle_minutes,
        )

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        except Exception:
            logger.exception("Room cleanup had already died")
        self._task = None
        logger.info("Room cleanup stopped")

    async def run_once(self) -> dict:
        # The manager is blocking, keep it off the event loop
        return await asyncio.to_thread(
            self.manager.run_cleanup, self.max_idle_minutes, self.disconnect_timeout_seconds
        )

    async def _loop(self):
        while True:
            await asyncio.sleep(self.interval_seconds)
            # One failed sweep shouldn't stop the next one
            try:
                await self.run_once()
            except GameError as e:
                logger.error("Room cleanup failed: %s", e)
            except Exception:
                logger.exception("Unexpected error during room cleanup")
