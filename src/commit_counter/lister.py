"""Paginated listing with early termination on a "last updated" date."""

from datetime import UTC, datetime
from typing import Any

from commit_counter.api_client import APIClient
from commit_counter.errors import PaginationLimitError
from commit_counter.log import LoggerLike, counter_logger
from commit_counter.models import DEFAULT_ITEMS_PER_PAGE, Empty
from commit_counter.settings import parse_date

DEFAULT_MAX_PAGES = 1000


class RepoLister:
    """Walk a page-numbered listing endpoint and collect every item."""

    def __init__(
        self,
        client: APIClient,
        max_pages: int = DEFAULT_MAX_PAGES,
        logger: LoggerLike | None = None,
    ) -> None:
        """Initialize the lister.

        Args:
            client: Accessor used for every page request
            max_pages: Number of full pages after which listing is aborted
            logger: Logger for diagnostics (module logger if None)
        """
        self.client = client
        self.max_pages = max_pages
        self.logger = counter_logger(__name__, type(self).__name__, logger)
        # Pages fetched by the most recent listing
        self.pages_fetched = 0

    def _is_older(self, item: Any, date_field: str, from_date: datetime) -> bool:
        """Check whether an item's date field is strictly before ``from_date``."""
        value = item.get(date_field) if isinstance(item, dict) else None
        if not isinstance(value, str):
            return False
        try:
            return parse_date(value) < from_date
        except ValueError:
            self.logger.debug(f"Unparseable {date_field} value: {value!r}")
            return False

    async def get_repos(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        from_date: datetime | None = None,
        *,
        items_per_page: int = DEFAULT_ITEMS_PER_PAGE,
        date_field: str = "",
        request_options: dict[str, Any] | None = None,
        items_key: str | None = None,
    ) -> list[Any]:
        """Fetch every page of an endpoint, in page order.

        When ``from_date`` is given, listing stops after the first page whose
        last item was updated before it. This assumes the endpoint returns
        items sorted descending by ``date_field``; that ordering is not
        checked here. A naive ``from_date`` is taken to be UTC.

        Up to ``max_pages`` full pages are followed by one more request, so a
        listing of exactly ``max_pages`` full pages still ends normally.

        Args:
            endpoint: The full URL of the listing endpoint
            params: Initial query parameters; ``page`` defaults to 1
            from_date: Lower date bound for early termination
            items_per_page: Page size; a shorter page is the last one
            date_field: Key of the "last updated" value on each item
            request_options: Extra accessor options for every request
            items_key: Key holding the item list when pages are JSON objects
                (e.g. "values" on Bitbucket)

        Returns:
            All items from the pages that were fetched

        Raises:
            PaginationLimitError: If more than ``max_pages`` full pages were returned
        """
        # Copy so that repeated listings start from the caller's first page
        params = dict(params or {})
        params.setdefault("page", 1)

        if from_date is not None and from_date.tzinfo is None:
            from_date = from_date.replace(tzinfo=UTC)

        items: list[Any] = []
        pages_fetched = 0

        while True:
            result = await self.client.get_from_api(endpoint, params, request_options)
            pages_fetched += 1
            self.pages_fetched = pages_fetched

            if isinstance(result, Empty):
                self.logger.debug(
                    f"No data on page {params['page']} of {endpoint} ({result.reason})"
                )
                return items

            page = result.data
            if items_key is not None and isinstance(page, dict):
                page = page.get(items_key, [])
            if not isinstance(page, list):
                self.logger.warning(
                    f"Expected a list from {endpoint}, got {type(page).__name__}"
                )
                return items

            items.extend(page)

            if page and from_date is not None and date_field:
                if self._is_older(page[-1], date_field, from_date):
                    self.logger.debug(
                        f"Stopping at page {params['page']} of {endpoint}: "
                        f"last item older than {from_date.isoformat()}"
                    )
                    return items

            if len(page) != items_per_page:
                return items

            if pages_fetched > self.max_pages:
                raise PaginationLimitError(
                    f"{endpoint} returned more than {self.max_pages} full pages, "
                    f"aborting at max_pages={self.max_pages}",
                    items=items,
                    pages=pages_fetched,
                )

            params["page"] += 1
