"""Shared fixtures for commit-counter tests."""

from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from commit_counter.api_client import APIClient
from commit_counter.models import Empty, Ok


def build_repos(
    count: int, start: int = 0, pushed_at: str = "2024-06-01T12:00:00Z"
) -> list[dict[str, Any]]:
    """Build GitHub-shaped repo records with the fields the counter reads."""
    return [
        {
            "id": start + i,
            "full_name": f"testuser/repo-{start + i}",
            "pushed_at": pushed_at,
        }
        for i in range(count)
    ]


@pytest.fixture
def make_repos():
    """Factory for lists of repo records."""
    return build_repos


@pytest.fixture
def paged_client():
    """Factory for an APIClient mock that serves a fixed sequence of pages.

    Each item is a list (served as Ok) or an Empty. The page number of every
    request is recorded on ``client.requested_pages``.
    """

    def _make(pages: list[Any]) -> Mock:
        client = Mock(spec=APIClient)
        client.headers = {"Content-Type": "application/json"}
        client.requested_pages = []
        remaining = list(pages)

        async def get_from_api(endpoint, params=None, extra_options=None):
            client.requested_pages.append((params or {}).get("page"))
            page = remaining.pop(0) if remaining else Empty()
            return page if isinstance(page, Empty) else Ok(page)

        client.get_from_api = AsyncMock(side_effect=get_from_api)
        return client

    return _make
