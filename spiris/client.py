"""
Spiris (Visma eAccounting) API Client

Async REST client for the Spiris Bokföring och Fakturering v2 API.

Usage:
    from spiris import AccessToken, SpirisClient, TokenHolder

    holder = TokenHolder(AccessToken.new("your-access-token"))
    async with SpirisClient(holder) as client:
        page = await client.customers.list(page=0, page_size=50)
        async for invoice in client.invoices.stream():
            print(invoice.invoice_number)

Rate Limits:
    - 600 requests per minute (token bucket, shareable across clients)
    - Transient failures (network, 429, 5xx) are retried with exponential backoff
    - Only GET is retried by default; writes opt in with retry=True
"""

from __future__ import annotations

import asyncio
import json
import time
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import aiohttp

from spiris import models
from spiris.auth import AccessToken, TokenHolder
from spiris.config.constants import DEFAULT_BASE_URL, DEFAULT_REQUEST_TIMEOUT, USER_AGENT
from spiris.core.errors import ApiError, InvalidResponseError, NetworkError
from spiris.core.types import Page, PageRequest
from spiris.endpoints import (
    CRUD,
    CRUD_SEARCH,
    READ_ONLY,
    AccountEndpoint,
    AttachmentEndpoint,
    Capability,
    DraftEndpoint,
    InvoiceEndpoint,
    Resource,
    SupplierInvoiceEndpoint,
)
from spiris.middleware import MiddlewareStack, RequestContext, ResponseContext
from spiris.observability.logger import get_logger, log_context
from spiris.resilience import RateLimiter, RetryExecutor, RetryPolicy

logger = get_logger(__name__)

T = TypeVar("T")

_LIST = frozenset({Capability.LIST, Capability.STREAM})
_LIST_GET = READ_ONLY
_LIST_GET_CREATE = READ_ONLY | {Capability.CREATE}
_LEDGER = READ_ONLY | {Capability.CREATE, Capability.SEARCH}


@dataclass
class ClientConfig:
    """Transport configuration for one SpirisClient."""

    base_url: str = DEFAULT_BASE_URL
    user_agent: str = USER_AGENT
    timeout_seconds: float = DEFAULT_REQUEST_TIMEOUT
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    # May be shared by several clients to respect one API-wide quota
    rate_limiter: RateLimiter | None = None
    middleware: MiddlewareStack = field(default_factory=MiddlewareStack)


def _parse_retry_after(value: str | None) -> float | None:
    if not value:
        return None
    try:
        return max(0.0, float(value))
    except ValueError:
        # HTTP-date form is not used by this API
        return None


class SpirisClient:
    """Spiris API client.

    Resource endpoints are attributes: ``client.customers``,
    ``client.invoices``, ``client.vat_codes`` and so on.
    """

    # ==================== Sales ====================
    customers = Resource("customers", models.Customer, CRUD_SEARCH)
    invoices = Resource("customerinvoices", models.Invoice, CRUD_SEARCH, endpoint_cls=InvoiceEndpoint)
    customer_invoice_drafts = Resource(
        "customerinvoicedrafts",
        models.CustomerInvoiceDraft,
        CRUD_SEARCH,
        endpoint_cls=DraftEndpoint,
        converts_to=models.Invoice,
    )
    customer_ledger_items = Resource("customerledgeritems", models.CustomerLedgerItem, _LEDGER)
    customer_labels = Resource("customerlabels", models.CustomerLabel, CRUD)
    orders = Resource("orders", models.Order, CRUD_SEARCH)
    quotations = Resource("quotations", models.Quotation, CRUD_SEARCH)

    # ==================== Articles ====================
    articles = Resource("articles", models.Article, CRUD_SEARCH)
    article_labels = Resource("articlelabels", models.ArticleLabel, CRUD)
    article_account_codings = Resource("articleaccountcodings", models.ArticleAccountCoding, _LIST_GET)
    units = Resource("units", models.Unit, CRUD)

    # ==================== Purchasing ====================
    suppliers = Resource("suppliers", models.Supplier, CRUD_SEARCH)
    supplier_invoices = Resource(
        "supplierinvoices", models.SupplierInvoice, CRUD_SEARCH, endpoint_cls=SupplierInvoiceEndpoint
    )
    supplier_invoice_drafts = Resource(
        "supplierinvoicedrafts",
        models.SupplierInvoiceDraft,
        CRUD_SEARCH,
        endpoint_cls=DraftEndpoint,
        converts_to=models.SupplierInvoice,
    )
    supplier_ledger_items = Resource("supplierledgeritems", models.SupplierLedgerItem, _LEDGER)
    supplier_labels = Resource("supplierlabels", models.SupplierLabel, CRUD)

    # ==================== Bookkeeping ====================
    accounts = Resource(
        "accounts",
        models.Account,
        READ_ONLY | {Capability.CREATE, Capability.UPDATE},
        endpoint_cls=AccountEndpoint,
    )
    fiscal_years = Resource("fiscalyears", models.FiscalYear, _LIST_GET_CREATE)
    vat_codes = Resource("vatcodes", models.VatCode, _LIST_GET)
    vouchers = Resource("vouchers", models.Voucher, CRUD_SEARCH)
    allocation_periods = Resource("allocationperiods", models.AllocationPeriod, _LIST_GET_CREATE)
    projects = Resource("projects", models.Project, CRUD_SEARCH)
    cost_centers = Resource("costcenters", models.CostCenter, _LIST | {Capability.UPDATE})
    cost_center_items = Resource(
        "costcenteritems", models.CostCenterItem, READ_ONLY | {Capability.CREATE, Capability.UPDATE}
    )

    # ==================== Banking ====================
    bank_accounts = Resource("bankaccounts", models.BankAccount, CRUD)
    banks = Resource("banks", models.Bank, _LIST)

    # ==================== Reference data ====================
    terms_of_payment = Resource("termsofpayments", models.TermsOfPayment, CRUD)
    delivery_methods = Resource("deliverymethods", models.DeliveryMethod, _LIST_GET)
    delivery_terms = Resource("deliveryterms", models.DeliveryTerm, _LIST_GET)
    countries = Resource("countries", models.Country, _LIST_GET)
    currencies = Resource("currencies", models.Currency, _LIST)
    users = Resource("users", models.User, _LIST_GET)
    attachments = Resource(
        "attachments",
        models.Attachment,
        READ_ONLY | {Capability.DELETE},
        endpoint_cls=AttachmentEndpoint,
    )

    def __init__(
        self,
        token: TokenHolder | AccessToken,
        config: ClientConfig | None = None,
    ):
        """
        Initialize the client.

        Args:
            token: Token holder (shared with whoever refreshes it) or a bare token
            config: Transport configuration; defaults to ClientConfig()
        """
        self.token_holder = token if isinstance(token, TokenHolder) else TokenHolder(token)
        self.config = config or ClientConfig()

        # Session
        self._session: aiohttp.ClientSession | None = None

    @classmethod
    def resource_names(cls) -> list[str]:
        """Names of all declared resource endpoints."""
        return sorted(name for name, value in vars(cls).items() if isinstance(value, Resource))

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.config.timeout_seconds)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Close the session."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def __aenter__(self) -> SpirisClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def build_url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"

    # ==================== HTTP ====================

    async def get(self, path: str, params: dict[str, Any] | None = None, *, retry: bool | None = None) -> Any:
        return await self._request("GET", path, params=params, retry=retry)

    async def get_page(
        self,
        path: str,
        page_index: int,
        page_size: int,
        parse_item: Callable[[Any], T] | None = None,
        *,
        params: dict[str, Any] | None = None,
        retry: bool | None = None,
    ) -> Page[T]:
        """GET one page of a list endpoint (``page`` / ``pagesize`` query)."""
        request = PageRequest(page=page_index, page_size=page_size, extra=dict(params or {}))
        payload = await self._request("GET", path, params=request.to_params(), retry=retry)
        return Page.from_api(
            payload or {},
            parse_item or (lambda raw: raw),
            page_index=page_index,
            page_size=page_size,
        )

    async def post(self, path: str, body: Any = None, *, retry: bool = False) -> Any:
        return await self._request("POST", path, json_body=body, retry=retry)

    async def put(self, path: str, body: Any = None, *, retry: bool = False) -> Any:
        return await self._request("PUT", path, json_body=body, retry=retry)

    async def delete(self, path: str, *, retry: bool = False) -> None:
        await self._request("DELETE", path, retry=retry)

    async def get_bytes(self, path: str, *, retry: bool | None = None) -> bytes:
        """GET a binary resource such as an invoice PDF."""
        return await self._request("GET", path, retry=retry, raw=True)

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
        retry: bool | None = None,
        raw: bool = False,
    ) -> Any:
        """Make API request with retries, rate limiting and error mapping."""
        if retry is None:
            retry = method == "GET"
        policy = self.config.retry_policy if retry else RetryPolicy.no_retry()
        executor = RetryExecutor(policy)

        with log_context(request_id=uuid.uuid4().hex[:8]):
            return await executor.execute(
                lambda: self._send_once(method, path, params=params, json_body=json_body, raw=raw)
            )

    async def _send_once(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None,
        json_body: Any,
        raw: bool,
    ) -> Any:
        """One attempt: token check, rate-limit permit, HTTP exchange."""
        # Raises TokenExpiredError before any I/O
        authorization = self.token_holder.authorization_header()

        if self.config.rate_limiter is not None:
            await self.config.rate_limiter.acquire()

        url = self.build_url(path)
        body = json.dumps(json_body) if json_body is not None else None
        ctx = RequestContext(
            method=method,
            url=url,
            headers={
                "Authorization": authorization,
                "User-Agent": self.config.user_agent,
                "Accept": "application/json",
            },
            body=body,
        )
        if body is not None:
            ctx.add_header("Content-Type", "application/json")
        self.config.middleware.on_request(ctx)

        query = {k: v for k, v in (params or {}).items() if v is not None}
        session = await self._get_session()
        started = time.monotonic()

        try:
            async with session.request(method, url, headers=ctx.headers, params=query, data=body) as resp:
                status = resp.status
                if not 200 <= status < 300:
                    text = await resp.text()
                    raise ApiError.from_response(
                        status,
                        text,
                        retry_after=_parse_retry_after(resp.headers.get("Retry-After")),
                    )
                if raw:
                    result = await resp.read()
                else:
                    try:
                        text = await resp.text()
                        result = json.loads(text) if text.strip() else None
                    except ValueError as e:
                        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
                        raise InvalidResponseError(
                            f"{method} {url} returned a non-JSON body: {e}",
                            status_code=status,
                        ) from e
        except (ApiError, InvalidResponseError) as e:
            self._finish(ctx, e.status_code or 0, started, str(e))
            raise
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            self._finish(ctx, 0, started, str(e) or type(e).__name__)
            raise NetworkError(f"{method} {url} failed: {e or type(e).__name__}") from e

        self._finish(ctx, status, started)
        return result

    def _finish(self, ctx: RequestContext, status: int, started: float, error: str | None = None) -> None:
        self.config.middleware.on_response(
            ResponseContext(
                method=ctx.method,
                url=ctx.url,
                status=status,
                duration=time.monotonic() - started,
                error=error,
                extensions=ctx.extensions,
            )
        )
