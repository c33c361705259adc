"""Platform strategies: where to list repos and how to count a repo's commits."""

from typing import Any, Protocol

from commit_counter.api_client import APIClient
from commit_counter.errors import PaginationLimitError, UnknownPlatformError
from commit_counter.lister import RepoLister
from commit_counter.log import LoggerLike, counter_logger
from commit_counter.models import DEFAULT_ITEMS_PER_PAGE, ListingConfig
from commit_counter.settings import Settings, parse_date


class PlatformStrategy(Protocol):
    """What a platform must supply to the generic counter."""

    name: str

    def listing_config(self) -> ListingConfig:
        """Return the repo listing endpoint and its paging parameters.

        The endpoint must sort repos descending by the configured date field.
        """
        ...

    async def count_commits(self, repo: Any) -> int:
        """Return the user's commit count in one repo (0 or more)."""
        ...


class NullPlatform:
    """Unspecialized strategy: lists nothing and counts 0 commits."""

    name = "null"

    def listing_config(self) -> ListingConfig:
        return ListingConfig()

    async def count_commits(self, repo: Any) -> int:
        return 0


class RESTPlatform:
    """Shared setup for strategies that page through a REST API."""

    name = ""
    base_url = ""

    def __init__(
        self,
        client: APIClient,
        settings: Settings,
        base_url: str | None = None,
        logger: LoggerLike | None = None,
    ) -> None:
        """Initialize the strategy.

        Args:
            client: Accessor authenticated for the platform
            settings: Resolved counter settings
            base_url: API base URL (self-hosted installs differ)
            logger: Logger for diagnostics (module logger prefixed with the
                platform name if None)
        """
        self.client = client
        self.settings = settings
        if base_url:
            self.base_url = base_url.rstrip("/")
        self.logger = counter_logger(__name__, self.name, logger)

    def _date_params(self) -> dict[str, str]:
        params = {}
        if self.settings.from_date.strip():
            params["since"] = self.settings.from_date.strip()
        if self.settings.until_date.strip():
            params["until"] = self.settings.until_date.strip()
        return params

    async def _list_commits(
        self, endpoint: str, params: dict[str, Any], label: str, **kwargs: Any
    ) -> list[Any]:
        """List commits with a lister of its own, so concurrent repos don't share state."""
        lister = RepoLister(
            self.client, max_pages=self.settings.max_pages, logger=self.logger
        )
        try:
            return await lister.get_repos(endpoint, params, **kwargs)
        except PaginationLimitError as e:
            self.logger.warning(f"{label}: {e}")
            return e.items


class GitHubPlatform(RESTPlatform):
    """GitHub REST API strategy."""

    name = "github"
    base_url = "https://api.github.com"

    def listing_config(self) -> ListingConfig:
        return ListingConfig(
            repos_endpoint=f"{self.base_url}/user/repos",
            repos_params={
                "page": 1,
                "per_page": DEFAULT_ITEMS_PER_PAGE,
                "sort": "pushed",
                "direction": "desc",
            },
            repo_updated_date_field="pushed_at",
        )

    def _author_identities(self) -> list[str]:
        identities = [self.settings.username, *self.settings.user_email_addresses]
        return list(dict.fromkeys(i for i in identities if i))

    async def count_commits(self, repo: Any) -> int:
        """Count distinct commits authored by the user's login or e-mail addresses.

        GitHub's ``author`` filter accepts a login or an e-mail address, so
        one listing is made per identity and commits are de-duplicated by sha.
        User display names cannot be filtered on here and are not used.
        """
        full_name = repo.get("full_name")
        if not full_name:
            return 0

        endpoint = f"{self.base_url}/repos/{full_name}/commits"
        shas: set[str] = set()
        for author in self._author_identities():
            params: dict[str, Any] = {
                "page": 1,
                "per_page": DEFAULT_ITEMS_PER_PAGE,
                "author": author,
                **self._date_params(),
            }
            commits = await self._list_commits(endpoint, params, full_name)
            shas.update(commit["sha"] for commit in commits if "sha" in commit)

        return len(shas)


class GitLabPlatform(RESTPlatform):
    """GitLab REST API (v4) strategy.

    GitLab ignores basic auth, so the token is sent as a ``PRIVATE-TOKEN``
    header on every request.
    """

    name = "gitlab"
    base_url = "https://gitlab.com/api/v4"

    def _request_options(self) -> dict[str, Any]:
        return {
            "headers": {
                **self.client.headers,
                "PRIVATE-TOKEN": self.settings.access_token,
            },
            "auth": None,
        }

    def listing_config(self) -> ListingConfig:
        return ListingConfig(
            repos_endpoint=f"{self.base_url}/projects",
            repos_params={
                "page": 1,
                "per_page": DEFAULT_ITEMS_PER_PAGE,
                "membership": "true",
                "order_by": "last_activity_at",
                "sort": "desc",
            },
            repo_updated_date_field="last_activity_at",
            request_options=self._request_options(),
        )

    def _is_users_commit(self, commit: dict[str, Any]) -> bool:
        emails = {e.lower() for e in self.settings.user_email_addresses}
        names = {n.lower() for n in self.settings.user_names}
        return (commit.get("author_email") or "").lower() in emails or (
            commit.get("author_name") or ""
        ).lower() in names

    async def count_commits(self, repo: Any) -> int:
        """Count commits whose author e-mail or name belongs to the user."""
        project_id = repo.get("id")
        if project_id is None:
            return 0

        commits = await self._list_commits(
            f"{self.base_url}/projects/{project_id}/repository/commits",
            {"page": 1, "per_page": DEFAULT_ITEMS_PER_PAGE, **self._date_params()},
            f"Project {project_id}",
            request_options=self._request_options(),
        )
        return sum(1 for commit in commits if self._is_users_commit(commit))


class BitbucketPlatform(RESTPlatform):
    """Bitbucket Cloud REST API (2.0) strategy.

    Bitbucket pages are ``{"values": [...]}`` objects, and its commit listing
    has no date filter: commits come newest first, so listing stops at the
    first page that reaches past ``from_date`` and the range is applied here.
    """

    name = "bitbucket"
    base_url = "https://api.bitbucket.org/2.0"

    def listing_config(self) -> ListingConfig:
        return ListingConfig(
            repos_endpoint=f"{self.base_url}/repositories",
            repos_params={
                "page": 1,
                "pagelen": DEFAULT_ITEMS_PER_PAGE,
                "role": "member",
                "sort": "-updated_on",
            },
            repo_updated_date_field="updated_on",
            items_key="values",
        )

    def _is_users_commit(self, commit: dict[str, Any]) -> bool:
        raw = (commit.get("author") or {}).get("raw") or ""
        name, _, rest = raw.partition("<")
        name = name.strip()
        email = rest.partition(">")[0].strip()
        emails = {e.lower() for e in self.settings.user_email_addresses}
        names = {n.lower() for n in self.settings.user_names}
        return (bool(email) and email.lower() in emails) or (
            bool(name) and name.lower() in names
        )

    def _in_date_range(self, commit: dict[str, Any]) -> bool:
        from_date = self.settings.from_datetime()
        until_date = self.settings.until_datetime()
        if from_date is None and until_date is None:
            return True
        try:
            committed = parse_date(commit.get("date") or "")
        except ValueError:
            return False
        if from_date is not None and committed < from_date:
            return False
        return until_date is None or committed <= until_date

    async def count_commits(self, repo: Any) -> int:
        """Count commits in the date range whose ``author.raw`` belongs to the user."""
        full_name = repo.get("full_name")
        if not full_name:
            return 0

        commits = await self._list_commits(
            f"{self.base_url}/repositories/{full_name}/commits",
            {"page": 1, "pagelen": DEFAULT_ITEMS_PER_PAGE},
            full_name,
            from_date=self.settings.from_datetime(),
            date_field="date",
            items_key="values",
        )
        return sum(
            1
            for commit in commits
            if self._in_date_range(commit) and self._is_users_commit(commit)
        )


PLATFORMS: dict[str, type[RESTPlatform]] = {
    GitHubPlatform.name: GitHubPlatform,
    GitLabPlatform.name: GitLabPlatform,
    BitbucketPlatform.name: BitbucketPlatform,
}


def get_platform(
    name: str, client: APIClient, settings: Settings, base_url: str | None = None
) -> RESTPlatform:
    """Look up a platform strategy by name.

    Raises:
        UnknownPlatformError: If no strategy is registered under ``name``
    """
    try:
        platform_class = PLATFORMS[name.lower()]
    except KeyError as e:
        raise UnknownPlatformError(
            f"Unknown platform '{name}'. Choose from: {', '.join(sorted(PLATFORMS))}"
        ) from e
    return platform_class(client, settings, base_url=base_url)
