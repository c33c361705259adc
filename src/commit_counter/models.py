"""Data structures shared by the fetch and aggregation layers."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_ITEMS_PER_PAGE = 100


@dataclass(frozen=True)
class Ok:
    """A successful API call that returned a non-empty body."""

    data: Any


@dataclass(frozen=True)
class Empty:
    """An API call that produced no usable data.

    Covers both a legitimately empty body and a failed call; ``reason``
    tells them apart in diagnostics.
    """

    reason: str = "empty response"


APIResult = Ok | Empty


@dataclass
class ListingConfig:
    """How a platform lists the repositories visible to the user.

    The endpoint must return repos sorted descending by
    ``repo_updated_date_field``. The lister relies on that ordering to stop
    early once it sees a repo older than the requested start date, and does
    not verify it.

    Attributes:
        repos_endpoint: Full URL of the listing endpoint
        repos_params: Initial query parameters, including the first ``page``
        repo_updated_date_field: Key of the ISO-8601 "last updated" value on a repo
        items_per_page: Page size the endpoint is asked for
        request_options: Extra accessor options applied to every listing call
        items_key: Key of the item list when pages are JSON objects, not lists
    """

    repos_endpoint: str = ""
    repos_params: dict[str, Any] = field(default_factory=dict)
    repo_updated_date_field: str = ""
    items_per_page: int = DEFAULT_ITEMS_PER_PAGE
    request_options: dict[str, Any] = field(default_factory=dict)
    items_key: str | None = None


class CountResult(BaseModel):
    """Aggregated counts for one run of the counter."""

    model_config = ConfigDict(frozen=True)

    projects: int = Field(default=0, ge=0)
    commits: int = Field(default=0, ge=0)

    def to_dict(self) -> dict[str, int]:
        """Convert to dictionary for serialization."""
        return self.model_dump()
