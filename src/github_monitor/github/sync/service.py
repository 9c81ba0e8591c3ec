"""Repository sync service - GitHub to database synchronization.

One sync runs three steps in order:

1. fetch repository metadata
2. fetch commits newer than the caller's watermark
3. persist everything in one transaction: upsert the repository, insert
   the commits (duplicates ignored) and move the watermark to now

Nothing is written unless both fetches succeed, and a failure while
persisting rolls back the whole transaction.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

from github_monitor.logging import bind_repo

from .enums import SyncStage
from .results import SyncResult

if TYPE_CHECKING:
    from github_monitor.db.gateway import PersistenceGateway
    from github_monitor.github.client import GitHubClient


class SyncService:
    """Synchronizes one repository's metadata and commits into the store.

    Safe to run concurrently for different repositories. Runs for the
    same repository must not overlap.

    Usage:
        async with GitHubClient() as client:
            service = SyncService(client, PersistenceGateway())
            result = await service.sync_repository("chromium", "chromium")
            if not result.success:
                print(result.stage, result.error)
    """

    def __init__(self, client: GitHubClient, gateway: PersistenceGateway) -> None:
        """Initialize the sync service.

        Args:
            client: GitHub API client
            gateway: Persistence gateway
        """
        self._client = client
        self._gateway = gateway

    @property
    def gateway(self) -> PersistenceGateway:
        return self._gateway

    async def sync_repository(
        self,
        owner: str,
        name: str,
        since: datetime | None = None,
    ) -> SyncResult:
        """Fetch and store a repository and its commits since a watermark.

        Args:
            owner: Repository owner
            name: Repository name
            since: Only fetch commits after this time (None = full history)

        Returns:
            SyncResult. Errors are captured in result.error, not raised.
        """
        full_name = f"{owner}/{name}"
        repo_logger = bind_repo(full_name)

        try:
            metadata = await self._client.get_repository(owner, name)
        except Exception as e:
            repo_logger.error("Failed to fetch repository metadata: {error}", error=str(e))
            return SyncResult.failed(full_name, SyncStage.METADATA_FETCH, e)

        # Stored under GitHub's casing, which may differ from the caller's
        full_name = metadata.full_name

        try:
            commits = await self._client.list_commits_since(owner, name, since)
        except Exception as e:
            repo_logger.error("Failed to fetch commits: {error}", error=str(e))
            return SyncResult.failed(full_name, SyncStage.COMMIT_FETCH, e)

        result = SyncResult(repository=full_name, commits_fetched=len(commits))
        try:
            async with self._gateway.transaction() as tx:
                repository_id, previous = await tx.upsert_repository(
                    metadata.to_repository_upsert()
                )
                for commit in commits:
                    if await tx.insert_commit(commit.to_commit_create(repository_id)):
                        result.commits_inserted += 1
                watermark = datetime.now(UTC)
                await tx.update_watermark(repository_id, watermark)
        except Exception as e:
            repo_logger.error("Failed to persist sync, rolled back: {error}", error=str(e))
            return SyncResult.failed(full_name, SyncStage.PERSISTENCE, e)

        result.repository_id = repository_id
        result.first_sync = previous is None
        result.watermark = watermark
        repo_logger.info(
            "Synced: {fetched} fetched, {inserted} new (first_sync={first_sync})",
            fetched=result.commits_fetched,
            inserted=result.commits_inserted,
            first_sync=result.first_sync,
        )
        return result
