"""Monitor supervisor - owns the set of poll workers.

Handles startup (seed the default repository on an empty store, then one
worker per stored repository), registration of new repositories while
running, and shutdown through the shared stop event.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import TYPE_CHECKING

from github_monitor.config import get_settings
from github_monitor.errors import RepositoryAlreadyMonitoredError
from github_monitor.logging import get_logger
from github_monitor.schemas import parse_repo_string

from .worker import PollWorker

if TYPE_CHECKING:
    from .results import SyncResult
    from .service import SyncService

logger = get_logger(__name__)


class MonitorSupervisor:
    """Starts, tracks and stops one PollWorker per monitored repository.

    Usage:
        supervisor = MonitorSupervisor(service)
        await supervisor.bootstrap()
        await supervisor.add_repository("octocat", "hello-world")
        ...
        await supervisor.shutdown()
    """

    def __init__(
        self,
        service: SyncService,
        *,
        interval: float | None = None,
        default_repository: str | None = None,
        stop_event: asyncio.Event | None = None,
    ) -> None:
        """Initialize the supervisor.

        Args:
            service: Sync service shared by all workers
            interval: Seconds between incremental syncs (default from settings)
            default_repository: owner/name seeded when the store is empty
            stop_event: Shared shutdown signal (a new one if not provided)
        """
        settings = get_settings()
        self._service = service
        self._interval = interval or settings.sync.interval_seconds
        self._default_repository = default_repository or settings.default_repository
        self._stop_event = stop_event or asyncio.Event()
        self._workers: dict[str, PollWorker] = {}
        self._tasks: dict[str, asyncio.Task[None]] = {}

    @property
    def stop_event(self) -> asyncio.Event:
        return self._stop_event

    @property
    def workers(self) -> dict[str, PollWorker]:
        """Running workers keyed by full repository name."""
        return dict(self._workers)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    async def bootstrap(self) -> list[str]:
        """Start a worker for every stored repository.

        When the store is empty the default repository is synced first.

        Returns:
            Full names of the repositories now being monitored

        Raises:
            MonitorError: If the default repository sync fails
        """
        repositories = await self._service.gateway.list_repositories()
        seeded: str | None = None

        if not repositories:
            owner, name = parse_repo_string(self._default_repository)
            logger.info(
                "No repositories stored, syncing default {repo}",
                repo=self._default_repository,
            )
            result = await self._service.sync_repository(owner, name)
            self._raise_on_failure(result)
            seeded = result.repository.lower()
            repositories = await self._service.gateway.list_repositories()

        for repository in repositories:
            owner, name = repository.owner_and_name
            self.start_worker(owner, name, initial_sync=repository.name.lower() != seeded)

        logger.info("Monitoring {count} repositories", count=len(self._workers))
        return list(self._workers)

    def start_worker(self, owner: str, name: str, *, initial_sync: bool = True) -> PollWorker:
        """Create a worker for a repository and schedule it as a task."""
        worker = PollWorker(
            self._service,
            owner,
            name,
            interval=self._interval,
            stop_event=self._stop_event,
            initial_sync=initial_sync,
        )
        self._workers[worker.full_name] = worker
        self._tasks[worker.full_name] = asyncio.create_task(
            worker.run(), name=f"poll-worker:{worker.full_name}"
        )
        return worker

    async def shutdown(self) -> None:
        """Signal every worker to stop and wait for them to exit."""
        self._stop_event.set()
        if not self._tasks:
            return
        results = await asyncio.gather(*self._tasks.values(), return_exceptions=True)
        for full_name, outcome in zip(self._tasks, results, strict=True):
            if isinstance(outcome, BaseException):
                logger.error(
                    "Worker for {repo} exited with error: {error}",
                    repo=full_name,
                    error=str(outcome),
                )
        logger.info("All {count} workers stopped", count=len(self._tasks))

    async def run_until_stopped(self) -> None:
        """Block until the stop event is set, then shut down."""
        await self._stop_event.wait()
        await self.shutdown()

    # -------------------------------------------------------------------------
    # Repository operations
    # -------------------------------------------------------------------------
    async def add_repository(self, owner: str, name: str) -> SyncResult:
        """Register a new repository: full sync, then a worker.

        The worker skips its own initial sync since one just ran, and is
        keyed by the name GitHub reports, whatever casing the caller used.

        Raises:
            RepositoryAlreadyMonitoredError: If the repository is already stored
            MonitorError: If the sync fails (e.g. GitHubNotFoundError)
        """
        full_name = f"{owner}/{name}"
        stored = {repo.name.lower() for repo in await self._service.gateway.list_repositories()}
        stored.update(key.lower() for key in self._workers)
        if full_name.lower() in stored:
            raise RepositoryAlreadyMonitoredError(full_name)

        result = await self._service.sync_repository(owner, name)
        self._raise_on_failure(result)
        self.start_worker(*parse_repo_string(result.repository), initial_sync=False)
        return result

    async def monitor_since(
        self, owner: str, name: str, since: datetime | None
    ) -> SyncResult:
        """Run one sync from a caller-supplied watermark (None = full history).

        Raises:
            MonitorError: If the sync fails
        """
        result = await self._service.sync_repository(owner, name, since)
        self._raise_on_failure(result)
        return result

    @staticmethod
    def _raise_on_failure(result: SyncResult) -> None:
        if result.error is not None:
            raise result.error
