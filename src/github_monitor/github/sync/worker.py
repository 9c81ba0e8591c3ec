"""Poll worker - periodic incremental sync of one repository."""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING

from github_monitor.logging import bind_repo

from .enums import WorkerState

if TYPE_CHECKING:
    from .results import SyncResult
    from .service import SyncService


class PollWorker:
    """Keeps one repository in sync until the shared stop event is set.

    Lifecycle: STARTING -> WAITING <-> SYNCING -> STOPPED.

    The worker first runs one full sync (skipped with initial_sync=False),
    then on every interval tick syncs from the stored watermark. The stop
    event is checked only while waiting, so a running sync always finishes.
    Sync failures are logged and never end the loop.

    Usage:
        stop = asyncio.Event()
        worker = PollWorker(service, "chromium", "chromium", interval=3600, stop_event=stop)
        task = asyncio.create_task(worker.run())
        ...
        stop.set()
        await task
    """

    def __init__(
        self,
        service: SyncService,
        owner: str,
        name: str,
        *,
        interval: float,
        stop_event: asyncio.Event,
        initial_sync: bool = True,
    ) -> None:
        """Initialize the worker.

        Args:
            service: Sync service used for every sync
            owner: Repository owner
            name: Repository name
            interval: Seconds between incremental syncs
            stop_event: Shared shutdown signal
            initial_sync: Run a full sync before the first wait
        """
        self._service = service
        self._owner = owner
        self._name = name
        self._interval = interval
        self._stop_event = stop_event
        self._initial_sync = initial_sync
        self._state = WorkerState.STARTING
        self._last_result: SyncResult | None = None
        self.syncs_completed = 0
        self.syncs_failed = 0
        self._logger = bind_repo(self.full_name, name="worker")

    @property
    def full_name(self) -> str:
        return f"{self._owner}/{self._name}"

    @property
    def state(self) -> WorkerState:
        return self._state

    @property
    def last_result(self) -> SyncResult | None:
        """Outcome of the most recent sync attempt."""
        return self._last_result

    async def run(self) -> None:
        """Run until the stop event is set."""
        self._state = WorkerState.STARTING
        self._logger.info("Worker started (interval={interval}s)", interval=self._interval)

        if self._initial_sync:
            await self._sync(since=None)

        while True:
            self._state = WorkerState.WAITING
            if await self._wait_for_tick():
                break
            self._state = WorkerState.SYNCING
            await self._tick()

        self._state = WorkerState.STOPPED
        self._logger.info("Worker stopped")

    async def _wait_for_tick(self) -> bool:
        """Wait for the interval or the stop event.

        Returns:
            True if the stop event was set
        """
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval)
        except TimeoutError:
            return False
        return True

    async def _tick(self) -> None:
        try:
            repository = await self._service.gateway.get_repository(self.full_name)
        except Exception as e:
            self.syncs_failed += 1
            self._logger.error("Failed to read watermark: {error}", error=str(e))
            return
        await self._sync(since=repository.last_commit_fetched_at)

    async def _sync(self, since: datetime | None) -> None:
        result = await self._service.sync_repository(self._owner, self._name, since)
        self._last_result = result
        if result.success:
            self.syncs_completed += 1
            self._logger.info(
                "Sync complete: {inserted} new commits",
                inserted=result.commits_inserted,
            )
        else:
            self.syncs_failed += 1
            self._logger.warning(
                "Sync failed at {stage}: {error}",
                stage=result.stage.value if result.stage else "unknown",
                error=str(result.error),
            )
