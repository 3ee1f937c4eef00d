"""
Reclamation of expired pastes.

``ExpirySweeper.run_once`` is the entry point an external scheduler calls.
``SweepScheduler`` drives it on a fixed interval inside the web process,
and ``python -m shortpaste.sweeper`` runs a single pass for cron.
"""
import asyncio
import logging
import sys
from contextlib import suppress
from typing import Optional

from shortpaste.database import PasteStore

logger = logging.getLogger(__name__)


class ExpirySweeper:
    """Deletes pastes whose expiry has passed."""

    def __init__(self, store: PasteStore):
        self.store = store

    def run_once(self) -> int:
        """
        Sweep every paste expired as of now.

        Returns:
            Number of pastes actually deleted by this pass
        """
        now = self.store.clock()
        candidates = self.store.list_expired(now)
        if not candidates:
            logger.debug("No expired pastes to sweep")
            return 0

        deleted = 0
        for identifier in candidates:
            if self.store.delete_if_expired(identifier, now):
                deleted += 1

        logger.info(f"Sweep complete: {deleted} deleted, {len(candidates)} candidates")
        return deleted


class SweepScheduler:
    """
    Runs the sweeper every ``interval_seconds`` on the event loop.

    Each pass runs in a worker thread; a failed pass is logged and the
    next one still happens on schedule.
    """

    def __init__(self, sweeper: ExpirySweeper, interval_seconds: float):
        self.sweeper = sweeper
        self.interval_seconds = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        if self.running:
            logger.warning("Sweep scheduler already started")
            return
        self._task = asyncio.create_task(self._loop())
        logger.info(f"Sweeping expired pastes every {self.interval_seconds}s")

    async def stop(self) -> None:
        if self._task is None:
            return
        task, self._task = self._task, None
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        logger.info("Sweep scheduler stopped")

    async def _loop(self) -> None:
        while True:
            await asyncio.sleep(self.interval_seconds)
            try:
                await asyncio.to_thread(self.sweeper.run_once)
            except Exception as e:
                logger.error(f"Sweep pass failed: {e}", exc_info=True)


def main() -> None:
    """
    Run a single sweep pass against the configured backend.

    Exits with status 0 whatever the number of pastes deleted; backend
    errors propagate and fail the process.
    """
    from shortpaste.config import settings
    from shortpaste.database import open_client

    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    client = open_client(settings.REDIS_URL, allow_fallback=False, use_memory=settings.USE_MEMORY_STORE)
    try:
        deleted = ExpirySweeper(PasteStore(client)).run_once()
    finally:
        client.close()
    logger.info(f"Sweep run finished, {deleted} expired pastes removed")


if __name__ == "__main__":
    sys.exit(main())
