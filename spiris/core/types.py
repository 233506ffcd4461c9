"""Shared types for paginated access.

These types are used by the pagination stream and every list endpoint.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, Protocol, TypeVar

from .errors import InvalidPageError

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)


@dataclass(frozen=True)
class Page(Generic[T]):
    """One bounded slice of a larger result set.

    `has_next_page` is the sole authority for stream continuation;
    `total_item_count` and `total_pages` are informational only.
    """

    items: Sequence[T]
    current_page_index: int
    page_size: int
    total_item_count: int = 0
    has_next_page: bool = False
    has_previous_page: bool = False
    total_pages: int | None = None

    def __post_init__(self) -> None:
        if self.current_page_index < 0:
            raise InvalidPageError(f"Negative page index: {self.current_page_index}")
        if self.page_size <= 0:
            raise InvalidPageError(f"Page size must be positive, got {self.page_size}")
        if self.total_item_count < 0:
            raise InvalidPageError(f"Negative total item count: {self.total_item_count}")
        if len(self.items) > self.page_size:
            raise InvalidPageError(
                f"Page {self.current_page_index} has {len(self.items)} items "
                f"but page size is {self.page_size}"
            )

    def __len__(self) -> int:
        return len(self.items)

    @classmethod
    def from_api(
        cls,
        payload: Mapping[str, Any],
        parse_item: Callable[[Any], T],
        *,
        page_index: int = 0,
        page_size: int | None = None,
    ) -> Page[T]:
        """Build a page from the API envelope ``{"Meta": {...}, "Data": [...]}``.

        Args:
            payload: Decoded JSON response
            parse_item: Converts one raw item (e.g. ``Model.model_validate``)
            page_index: Requested index, used when Meta omits CurrentPage
            page_size: Requested size, used when Meta omits PageSize

        Returns:
            Page with parsed items in API order
        """
        meta = payload.get("Meta") or {}
        raw_items = payload.get("Data") or []
        items = [parse_item(raw) for raw in raw_items]

        size = meta.get("PageSize") or page_size or max(len(items), 1)
        total_pages = meta.get("TotalNumberOfPages", meta.get("TotalPages"))

        return cls(
            items=items,
            current_page_index=int(meta.get("CurrentPage", page_index)),
            page_size=int(size),
            total_item_count=int(meta.get("TotalNumberOfResults", meta.get("TotalCount", len(items)))),
            has_next_page=bool(meta.get("HasNextPage", False)),
            has_previous_page=bool(meta.get("HasPreviousPage", False)),
            total_pages=int(total_pages) if total_pages is not None else None,
        )


@dataclass
class StreamCursor:
    """Cursor state for a single pagination stream.

    Created at index 0; exhausted permanently once a page reports no next
    page, a fetch fails definitively, or the consumer abandons the stream.
    """

    next_page_index: int = 0
    exhausted: bool = False
    pages_fetched: int = 0
    consecutive_empty_pages: int = 0

    def advance(self) -> None:
        self.next_page_index += 1

    def exhaust(self) -> None:
        self.exhausted = True


class PageFetcher(Protocol[T_co]):
    """Fetch page N of size S.

    Must be idempotent: the retry executor may call it repeatedly with the
    same arguments.
    """

    async def __call__(self, page_index: int, page_size: int) -> Page[T_co]: ...


@dataclass
class PageRequest:
    """Query parameters for one page request (``page`` / ``pagesize``)."""

    page: int = 0
    page_size: int = 50
    extra: dict[str, Any] = field(default_factory=dict)

    def to_params(self) -> dict[str, Any]:
        params = {"page": self.page, "pagesize": self.page_size}
        params.update(self.extra)
        return params
