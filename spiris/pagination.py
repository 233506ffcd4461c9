"""Lazy pagination over page-numbered list endpoints.

A PaginationStream turns a page fetcher into one async sequence of items:

    stream = PaginationStream(fetch_customers, page_size=100)
    async for customer in stream:
        print(customer.name)

Pages are fetched one at a time, only when the consumer asks for more, each
fetch wrapped in a RetryExecutor. A definitive fetch failure is raised once
from the iteration and the stream then stays exhausted.
"""

from __future__ import annotations

from collections import deque
from typing import Generic, TypeVar

from spiris.config.constants import DEFAULT_PAGE_SIZE, MAX_CONSECUTIVE_EMPTY_PAGES
from spiris.core.errors import ConfigError
from spiris.core.types import Page, PageFetcher, StreamCursor
from spiris.observability.logger import get_logger
from spiris.resilience.retry import RetryExecutor, RetryPolicy

logger = get_logger(__name__)

T = TypeVar("T")


class PaginationStream(Generic[T]):
    """Single-use, lazy async iterator over every item of a paginated listing.

    Items are delivered in page order, then in intra-page order. No
    prefetching, no buffering beyond the current page, no deduplication.
    """

    def __init__(
        self,
        fetcher: PageFetcher[T],
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        policy: RetryPolicy | None = None,
        executor: RetryExecutor | None = None,
        max_empty_pages: int = MAX_CONSECUTIVE_EMPTY_PAGES,
        max_pages: int | None = None,
        name: str | None = None,
    ) -> None:
        """
        Args:
            fetcher: Idempotent ``async (page_index, page_size) -> Page[T]``
            page_size: Items requested per page
            policy: Retry policy for each page fetch (ignored if executor is given)
            executor: Pre-built executor, e.g. with an injected sleep
            max_empty_pages: Consecutive empty pages flagged has_next_page
                tolerated before the stream is treated as exhausted
            max_pages: Optional ceiling on the number of pages fetched
            name: Label used in log messages
        """
        if page_size <= 0:
            raise ConfigError(f"page_size must be positive, got {page_size}")
        if max_empty_pages < 0:
            raise ConfigError(f"max_empty_pages must be >= 0, got {max_empty_pages}")
        if max_pages is not None and max_pages <= 0:
            raise ConfigError(f"max_pages must be positive, got {max_pages}")

        self._fetcher = fetcher
        self._page_size = page_size
        self._executor = executor or RetryExecutor(policy or RetryPolicy())
        self._max_empty_pages = max_empty_pages
        self._max_pages = max_pages
        self._name = name or getattr(fetcher, "__name__", "stream")

        self._cursor = StreamCursor()
        self._buffer: deque[T] = deque()

    @property
    def cursor(self) -> StreamCursor:
        return self._cursor

    @property
    def page_size(self) -> int:
        return self._page_size

    def __aiter__(self) -> PaginationStream[T]:
        return self

    async def __anext__(self) -> T:
        while True:
            if self._buffer:
                return self._buffer.popleft()

            if self._cursor.exhausted:
                raise StopAsyncIteration

            await self._fetch_next_page()

    async def _fetch_next_page(self) -> None:
        cursor = self._cursor

        if self._max_pages is not None and cursor.pages_fetched >= self._max_pages:
            logger.warning(
                f"{self._name}: page ceiling of {self._max_pages} reached, stopping",
                extra={"page": cursor.next_page_index},
            )
            cursor.exhaust()
            return

        index = cursor.next_page_index
        logger.debug(f"{self._name}: fetching page {index}", extra={"page_size": self._page_size})

        try:
            page: Page[T] = await self._executor.execute(
                lambda: self._fetcher(index, self._page_size)
            )
        except Exception:
            # Terminal: the error surfaces once, the stream never resumes
            cursor.exhaust()
            raise

        cursor.pages_fetched += 1
        self._buffer.extend(page.items)

        if not page.has_next_page:
            cursor.exhaust()
            return

        if page.items:
            cursor.consecutive_empty_pages = 0
        else:
            cursor.consecutive_empty_pages += 1
            if cursor.consecutive_empty_pages > self._max_empty_pages:
                logger.warning(
                    f"{self._name}: {cursor.consecutive_empty_pages} consecutive empty pages "
                    "flagged has_next_page, treating as exhausted",
                    extra={"page": index},
                )
                cursor.exhaust()
                return

        cursor.advance()

    async def aclose(self) -> None:
        """Abandon the stream; later pulls produce nothing."""
        self._buffer.clear()
        self._cursor.exhaust()

    async def collect(self, limit: int | None = None) -> list[T]:
        """Drain the stream into a list, optionally stopping after `limit` items."""
        items: list[T] = []
        if limit is not None and limit <= 0:
            await self.aclose()
            return items
        async for item in self:
            items.append(item)
            if limit is not None and len(items) >= limit:
                await self.aclose()
                break
        return items


def paginate(fetcher: PageFetcher[T], **kwargs) -> PaginationStream[T]:
    """Create a PaginationStream; keyword arguments as for the constructor."""
    return PaginationStream(fetcher, **kwargs)
