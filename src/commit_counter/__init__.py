"""commit-counter - count a user's commits and active projects on a code-hosting platform.

Library API:

    import asyncio

    from commit_counter import APIClient, CommitCounter, get_platform, resolve_settings

    settings = resolve_settings({"username": "octocat", "accessToken": "ghp_...", "minCommits": 2})

    async def main():
        async with APIClient(settings.username, settings.access_token) as client:
            platform = get_platform("github", client, settings)
            return await CommitCounter(settings, platform, client).get()

    result = asyncio.run(main())  # CountResult(projects=..., commits=...)
"""

__version__ = "0.1.0"

from commit_counter.api_client import APIClient
from commit_counter.config import Config
from commit_counter.counter import CommitCounter
from commit_counter.errors import (
    CommitCounterError,
    PaginationLimitError,
    UnknownPlatformError,
)
from commit_counter.lister import RepoLister
from commit_counter.models import APIResult, CountResult, Empty, ListingConfig, Ok
from commit_counter.platforms import (
    BitbucketPlatform,
    GitHubPlatform,
    GitLabPlatform,
    NullPlatform,
    PlatformStrategy,
    get_platform,
)
from commit_counter.settings import DEFAULT_OPTIONS, Settings, resolve_settings

__all__ = [
    # Core API
    "CommitCounter",
    "RepoLister",
    "APIClient",
    "Settings",
    "resolve_settings",
    "DEFAULT_OPTIONS",
    # Results
    "CountResult",
    "APIResult",
    "Ok",
    "Empty",
    # Platforms
    "PlatformStrategy",
    "ListingConfig",
    "GitHubPlatform",
    "GitLabPlatform",
    "BitbucketPlatform",
    "NullPlatform",
    "get_platform",
    # Exceptions
    "CommitCounterError",
    "PaginationLimitError",
    "UnknownPlatformError",
    # Credential storage
    "Config",
    # Metadata
    "__version__",
]
