"""Generic resource endpoints.

Every Spiris resource is the same shape: a collection path, an entity
model, and a subset of list/get/create/update/delete/search/stream.
One ResourceEndpoint covers them all; a `Resource` descriptor on the client
binds path, model and capabilities once:

    class SpirisClient:
        customers = Resource("customers", Customer, CRUD_SEARCH)

    page = await client.customers.list(page=0, page_size=100)
    await client.vat_codes.create(...)  # UnsupportedOperationError
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar
from urllib.parse import quote

from pydantic import BaseModel

from spiris.config.constants import DEFAULT_PAGE_SIZE
from spiris.core.errors import UnsupportedOperationError
from spiris.core.types import Page
from spiris.models import AccountBalance, ConvertDraftOptions, InvoicePayment
from spiris.observability.logger import get_logger, log_context
from spiris.pagination import PaginationStream

if TYPE_CHECKING:
    from spiris.client import SpirisClient
    from spiris.resilience import RetryPolicy

logger = get_logger(__name__)

T = TypeVar("T", bound=BaseModel)


class Capability(str, Enum):
    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    SEARCH = "search"
    STREAM = "stream"


READ_ONLY = frozenset({Capability.LIST, Capability.GET, Capability.STREAM})
CRUD = READ_ONLY | {Capability.CREATE, Capability.UPDATE, Capability.DELETE}
CRUD_SEARCH = CRUD | {Capability.SEARCH}


class ResourceEndpoint(Generic[T]):
    """Operations on one API collection, e.g. ``/customers``."""

    def __init__(
        self,
        client: SpirisClient,
        path: str,
        model: type[T],
        capabilities: frozenset[Capability],
        name: str | None = None,
    ):
        self.client = client
        self.path = path.strip("/")
        self.model = model
        self.capabilities = frozenset(capabilities)
        self.name = name or self.path

    def __repr__(self) -> str:
        caps = ",".join(sorted(c.value for c in self.capabilities))
        return f"{type(self).__name__}({self.path!r}, {self.model.__name__}, [{caps}])"

    def supports(self, capability: Capability) -> bool:
        return capability in self.capabilities

    def _require(self, capability: Capability) -> None:
        if capability not in self.capabilities:
            raise UnsupportedOperationError(f"{self.name} does not support {capability.value}")

    def _item_path(self, item_id: str) -> str:
        return f"{self.path}/{quote(str(item_id), safe='')}"

    def _parse(self, raw: Any) -> T:
        return self.model.model_validate(raw)

    def _body(self, item: T | dict[str, Any]) -> dict[str, Any]:
        if isinstance(item, BaseModel):
            return item.model_dump(by_alias=True, exclude_none=True, mode="json")
        return dict(item)

    # ==================== Operations ====================

    async def list(self, page: int = 0, page_size: int = DEFAULT_PAGE_SIZE) -> Page[T]:
        """Fetch one page of the collection."""
        self._require(Capability.LIST)
        with log_context(resource=self.name, page=page):
            return await self.client.get_page(self.path, page, page_size, self._parse)

    async def get(self, item_id: str) -> T:
        self._require(Capability.GET)
        with log_context(resource=self.name):
            return self._parse(await self.client.get(self._item_path(item_id)))

    async def create(self, item: T | dict[str, Any], *, retry: bool = False) -> T:
        """Create an item. Not retried unless `retry` is set: creation is not idempotent."""
        self._require(Capability.CREATE)
        with log_context(resource=self.name):
            return self._parse(await self.client.post(self.path, self._body(item), retry=retry))

    async def update(self, item_id: str, item: T | dict[str, Any], *, retry: bool = False) -> T:
        self._require(Capability.UPDATE)
        with log_context(resource=self.name):
            return self._parse(
                await self.client.put(self._item_path(item_id), self._body(item), retry=retry)
            )

    async def delete(self, item_id: str, *, retry: bool = False) -> None:
        self._require(Capability.DELETE)
        with log_context(resource=self.name):
            await self.client.delete(self._item_path(item_id), retry=retry)

    async def search(
        self,
        filter: str | None = None,
        select: str | None = None,
        page: int | None = None,
        page_size: int | None = None,
        **params: Any,
    ) -> Page[T]:
        """Query the collection.

        Args:
            filter: Raw OData filter expression, e.g. ``"IsActive eq true"``
            select: Comma-separated field list, e.g. ``"Id,Name"``
            page: Page index (default 0)
            page_size: Items per page
            **params: Additional query parameters passed through as-is
        """
        self._require(Capability.SEARCH)
        query = dict(params)
        if filter:
            query["$filter"] = filter
        if select:
            query["$select"] = select
        with log_context(resource=self.name, page=page or 0):
            return await self.client.get_page(
                self.path,
                page or 0,
                page_size or DEFAULT_PAGE_SIZE,
                self._parse,
                params=query,
            )

    async def fetch_page(self, page_index: int, page_size: int, **params: Any) -> Page[T]:
        """Single un-retried page fetch; the PageFetcher used by `stream()`."""
        return await self.client.get_page(
            self.path, page_index, page_size, self._parse, params=params, retry=False
        )

    def stream(
        self,
        page_size: int = DEFAULT_PAGE_SIZE,
        policy: RetryPolicy | None = None,
        max_pages: int | None = None,
        **params: Any,
    ) -> PaginationStream[T]:
        """Lazily iterate every item across all pages.

        Each page fetch is retried under `policy` (the client's policy by
        default).
        """
        self._require(Capability.STREAM)

        async def fetcher(page_index: int, size: int) -> Page[T]:
            with log_context(resource=self.name, page=page_index):
                return await self.fetch_page(page_index, size, **params)

        return PaginationStream(
            fetcher,
            page_size=page_size,
            policy=policy or self.client.config.retry_policy,
            max_pages=max_pages,
            name=self.name,
        )


class InvoiceEndpoint(ResourceEndpoint[T]):
    """Customer invoices, with payments, PDF and e-invoice delivery."""

    async def register_payment(self, invoice_id: str, payment: InvoicePayment | dict[str, Any]) -> None:
        await self.client.post(f"{self._item_path(invoice_id)}/payments", self._body(payment))

    async def get_pdf(self, invoice_id: str) -> bytes:
        return await self.client.get_bytes(f"{self._item_path(invoice_id)}/pdf")

    async def send_einvoice(self, invoice_id: str) -> None:
        await self.client.post(f"{self._item_path(invoice_id)}/einvoice", {})


class SupplierInvoiceEndpoint(ResourceEndpoint[T]):
    async def register_payment(self, invoice_id: str, payment: InvoicePayment | dict[str, Any]) -> None:
        await self.client.post(f"{self._item_path(invoice_id)}/payments", self._body(payment))


class DraftEndpoint(ResourceEndpoint[T]):
    """Invoice drafts, convertible into real invoices."""

    def __init__(self, *args: Any, converts_to: type[BaseModel], **kwargs: Any):
        super().__init__(*args, **kwargs)
        self.converts_to = converts_to

    async def convert(self, draft_id: str, send_type: int | None = None) -> BaseModel:
        options = ConvertDraftOptions(send_type=send_type)
        raw = await self.client.post(f"{self._item_path(draft_id)}/convert", self._body(options))
        return self.converts_to.model_validate(raw)


class AccountEndpoint(ResourceEndpoint[T]):
    """Ledger accounts are scoped by fiscal year."""

    async def list_by_fiscal_year(
        self, fiscal_year_id: str, page: int = 0, page_size: int = DEFAULT_PAGE_SIZE
    ) -> Page[T]:
        self._require(Capability.LIST)
        return await self.client.get_page(
            self._item_path(fiscal_year_id), page, page_size, self._parse
        )

    async def get_in_year(self, fiscal_year_id: str, account_number: str) -> T:
        self._require(Capability.GET)
        path = f"{self._item_path(fiscal_year_id)}/{quote(account_number, safe='')}"
        return self._parse(await self.client.get(path))

    async def balances(
        self, date: str, page: int = 0, page_size: int = DEFAULT_PAGE_SIZE
    ) -> Page[AccountBalance]:
        """Balances of all accounts at `date` (``YYYY-MM-DD``)."""
        return await self.client.get_page(
            f"accountbalances/{quote(date, safe='')}", page, page_size, AccountBalance.model_validate
        )

    async def balance(self, account_number: str, date: str) -> AccountBalance:
        """Balance of one account at `date`."""
        path = f"accountbalances/{quote(account_number, safe='')}/{quote(date, safe='')}"
        return AccountBalance.model_validate(await self.client.get(path))


class AttachmentEndpoint(ResourceEndpoint[T]):
    async def content(self, attachment_id: str) -> bytes:
        """Raw attachment bytes."""
        return await self.client.get_bytes(f"{self._item_path(attachment_id)}/content")


class Resource(Generic[T]):
    """Class-level declaration of an endpoint on SpirisClient.

    Accessing the attribute on a client instance builds the endpoint once and
    caches it on that instance.
    """

    def __init__(
        self,
        path: str,
        model: type[T],
        capabilities: frozenset[Capability],
        *,
        endpoint_cls: type[ResourceEndpoint] = ResourceEndpoint,
        **endpoint_kwargs: Any,
    ):
        self.path = path
        self.model = model
        self.capabilities = frozenset(capabilities)
        self.endpoint_cls = endpoint_cls
        self.endpoint_kwargs = endpoint_kwargs
        self.name = path

    def __set_name__(self, owner: type, name: str) -> None:
        self.name = name

    def __get__(self, instance: SpirisClient | None, owner: type) -> Any:
        if instance is None:
            return self
        endpoint = self.endpoint_cls(
            instance,
            self.path,
            self.model,
            self.capabilities,
            name=self.name,
            **self.endpoint_kwargs,
        )
        # Non-data descriptor: later lookups hit the instance dict directly
        instance.__dict__[self.name] = endpoint
        return endpoint
