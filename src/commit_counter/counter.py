"""Commit and project aggregation across all of a user's repositories.

``CommitCounter.get()`` always returns a ``CountResult``. API failures,
pagination limits and strategy errors are logged and degrade to partial or
zero counts; nothing is raised to the caller. Partial data is preferred over
a hard failure for a counting tool.
"""

import asyncio
from typing import Any

from commit_counter.api_client import APIClient
from commit_counter.errors import PaginationLimitError
from commit_counter.lister import RepoLister
from commit_counter.log import LoggerLike, counter_logger
from commit_counter.models import CountResult
from commit_counter.platforms import PlatformStrategy
from commit_counter.settings import Settings


class CommitCounter:
    """Count a user's commits and active projects on one platform."""

    def __init__(
        self,
        settings: Settings,
        platform: PlatformStrategy,
        client: APIClient,
        logger: LoggerLike | None = None,
    ) -> None:
        """Initialize the counter.

        Args:
            settings: Resolved counter settings
            platform: Strategy supplying the listing endpoint and per-repo counts
            client: Accessor used for listing requests
            logger: Logger for diagnostics (module logger prefixed with the
                platform name if None)
        """
        self.settings = settings
        self.platform = platform
        self.client = client
        self.logger = counter_logger(__name__, platform.name, logger)
        self.lister = RepoLister(client, max_pages=settings.max_pages, logger=self.logger)

    async def get_all_repos(self) -> list[Any]:
        """List every repo the platform shows, stopping early at ``from_date``."""
        try:
            config = self.platform.listing_config()
        except Exception as e:
            self.logger.error(f"Failed to build the repo listing: {e}")
            return []
        if not config.repos_endpoint:
            return []

        try:
            return await self.lister.get_repos(
                config.repos_endpoint,
                config.repos_params,
                self.settings.from_datetime(),
                items_per_page=config.items_per_page,
                date_field=config.repo_updated_date_field,
                request_options=config.request_options,
                items_key=config.items_key,
            )
        except PaginationLimitError as e:
            self.logger.error(f"{e}; continuing with {len(e.items)} repos")
            return e.items

    async def _count_repo(self, repo: Any) -> int:
        try:
            count = int(await self.platform.count_commits(repo))
        except Exception as e:
            self.logger.warning(f"Failed to count commits for {_repo_label(repo)}: {e}")
            return 0
        return max(count, 0)

    async def _count_all(self, repos: list[Any]) -> list[int]:
        """Count commits per repo, keeping listing order."""
        if self.settings.max_concurrency <= 1:
            return [await self._count_repo(repo) for repo in repos]

        semaphore = asyncio.Semaphore(self.settings.max_concurrency)

        async def bounded(repo: Any) -> int:
            async with semaphore:
                return await self._count_repo(repo)

        return list(await asyncio.gather(*(bounded(repo) for repo in repos)))

    async def get(self) -> CountResult:
        """Run the count.

        Returns:
            Number of projects with at least ``min_commits`` commits and the
            total number of commits across all repos
        """
        repos = await self.get_all_repos()
        self.logger.info(f"Counting commits in {len(repos)} repos")

        projects = 0
        commits = 0
        for repo, repo_commits in zip(repos, await self._count_all(repos), strict=True):
            self.logger.debug(f"{_repo_label(repo)}: {repo_commits} commits")
            if repo_commits > 0:
                if repo_commits >= self.settings.min_commits:
                    projects += 1
                commits += repo_commits

        return CountResult(projects=projects, commits=commits)


def _repo_label(repo: Any) -> str:
    if isinstance(repo, dict):
        for key in ("full_name", "path_with_namespace", "name", "id"):
            if key in repo:
                return str(repo[key])
    return repr(repo)
