"""Periodic removal of expired progress records."""

import asyncio
import contextlib

from contest_media.commons.telemetry import get_logger
from contest_media.infrastructure.progress.base import ProgressStoreBase

logger = get_logger(__name__)


class ProgressSweeper:
    """Background task calling `purge_expired` on a fixed interval."""

    def __init__(
        self,
        stores: list[ProgressStoreBase],  # type: ignore[type-arg]
        interval_seconds: float = 5.0,
    ) -> None:
        self._stores = stores
        self._interval = interval_seconds
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def sweep_once(self) -> int:
        """Purge every store once and return the number of removed records."""
        return sum(store.purge_expired() for store in self._stores)

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            try:
                self.sweep_once()
            except Exception:
                logger.exception("Progress sweep failed")

    def start(self) -> None:
        """Start sweeping on the running event loop."""
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="progress-sweeper")
        logger.debug(
            "Progress sweeper started",
            extra={"interval_seconds": self._interval},
        )

    async def stop(self) -> None:
        """Cancel the sweeping task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
