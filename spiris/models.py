"""Spiris entity models.

The API speaks PascalCase JSON (``CustomerNumber``, ``InvoiceDate``); models
use snake_case attributes with PascalCase aliases and accept either form.
Unknown fields are kept, so a newer API version does not break parsing.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_pascal


class SpirisModel(BaseModel):
    """Base model for API entities."""

    model_config = ConfigDict(
        alias_generator=to_pascal,
        populate_by_name=True,
        extra="allow",
    )


# =============================================================================
# Shared
# =============================================================================


class Address(SpirisModel):
    address1: str | None = None
    address2: str | None = None
    postal_code: str | None = None
    city: str | None = None
    country_code: str | None = None


# =============================================================================
# Customers & sales
# =============================================================================


class Customer(SpirisModel):
    """Customer in the accounting system."""

    id: str | None = None
    customer_number: str | None = None
    corporate_identity_number: str | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    mobile_phone: str | None = None
    website: str | None = None
    invoice_address: Address | None = None
    delivery_address: Address | None = None
    payment_terms_in_days: int | None = None
    is_active: bool | None = None
    is_private_person: bool | None = None
    created_utc: datetime | None = None
    modified_utc: datetime | None = None


class InvoiceRow(SpirisModel):
    id: str | None = None
    article_id: str | None = None
    text: str | None = None
    unit_price: float | None = None
    quantity: float | None = None
    discount_percentage: float | None = None
    vat_rate_id: str | None = None
    total_amount: float | None = None


class Invoice(SpirisModel):
    """Customer invoice."""

    id: str | None = None
    invoice_number: str | None = None
    customer_id: str | None = None
    invoice_date: datetime | None = None
    due_date: datetime | None = None
    delivery_date: datetime | None = None
    currency_code: str | None = None
    rows: list[InvoiceRow] = Field(default_factory=list)
    total_amount: float | None = None
    total_vat_amount: float | None = None
    total_amount_including_vat: float | None = None
    is_sent: bool | None = None
    remarks: str | None = None
    created_utc: datetime | None = None
    modified_utc: datetime | None = None


class InvoicePayment(SpirisModel):
    """Payment registered against a customer or supplier invoice."""

    amount: float | None = None
    payment_date: datetime | None = None
    bank_account_id: str | None = None
    payment_reference_number: str | None = None
    currency_rate: float | None = None


class CustomerInvoiceDraft(SpirisModel):
    id: str | None = None
    customer_id: str | None = None
    invoice_date: datetime | None = None
    due_date: datetime | None = None
    delivery_date: datetime | None = None
    currency_code: str | None = None
    rows: list[InvoiceRow] = Field(default_factory=list)
    total_amount: float | None = None
    total_vat_amount: float | None = None
    total_amount_including_vat: float | None = None
    remarks: str | None = None
    your_reference: str | None = None
    our_reference: str | None = None
    created_utc: datetime | None = None
    modified_utc: datetime | None = None


class ConvertDraftOptions(SpirisModel):
    send_type: int | None = None


class CustomerLedgerItem(SpirisModel):
    id: str | None = None
    customer_id: str | None = None
    customer_invoice_id: str | None = None
    currency_amount: float | None = None
    currency_code: str | None = None
    amount: float | None = None
    payment_date: datetime | None = None
    payment_reference_number: str | None = None
    voucher_id: str | None = None
    voucher_number: str | None = None
    created_utc: datetime | None = None


class OrderRow(SpirisModel):
    id: str | None = None
    article_id: str | None = None
    text: str | None = None
    unit_price: float | None = None
    quantity: float | None = None
    discount_percentage: float | None = None
    delivered_quantity: float | None = None


class Order(SpirisModel):
    id: str | None = None
    order_number: str | None = None
    customer_id: str | None = None
    order_date: datetime | None = None
    delivery_date: datetime | None = None
    currency_code: str | None = None
    rows: list[OrderRow] = Field(default_factory=list)
    total_amount: float | None = None
    total_vat_amount: float | None = None
    status: int | None = None
    your_reference: str | None = None
    our_reference: str | None = None
    created_utc: datetime | None = None
    modified_utc: datetime | None = None


class QuotationRow(SpirisModel):
    id: str | None = None
    article_id: str | None = None
    text: str | None = None
    unit_price: float | None = None
    quantity: float | None = None
    discount_percentage: float | None = None


class Quotation(SpirisModel):
    id: str | None = None
    quotation_number: str | None = None
    customer_id: str | None = None
    quotation_date: datetime | None = None
    valid_until_date: datetime | None = None
    currency_code: str | None = None
    rows: list[QuotationRow] = Field(default_factory=list)
    total_amount: float | None = None
    total_vat_amount: float | None = None
    status: int | None = None
    created_utc: datetime | None = None
    modified_utc: datetime | None = None


# =============================================================================
# Articles
# =============================================================================


class Article(SpirisModel):
    """Product or service that can be put on an invoice row."""

    id: str | None = None
    article_number: str | None = None
    name: str | None = None
    unit: str | None = None
    sales_price: float | None = None
    purchase_price: float | None = None
    is_active: bool | None = None
    vat_rate_id: str | None = None
    created_utc: datetime | None = None
    modified_utc: datetime | None = None


class ArticleAccountCoding(SpirisModel):
    id: str | None = None
    name: str | None = None
    sales_account_number: str | None = None
    purchase_account_number: str | None = None


class Unit(SpirisModel):
    id: str | None = None
    code: str | None = None
    name: str | None = None


# =============================================================================
# Suppliers & purchasing
# =============================================================================


class Supplier(SpirisModel):
    id: str | None = None
    supplier_number: str | None = None
    corporate_identity_number: str | None = None
    name: str | None = None
    email: str | None = None
    phone: str | None = None
    mobile_phone: str | None = None
    website: str | None = None
    address: Address | None = None
    bank_account_number: str | None = None
    bank_giro_number: str | None = None
    plus_giro_number: str | None = None
    is_active: bool | None = None
    created_utc: datetime | None = None
    modified_utc: datetime | None = None


class SupplierInvoiceRow(SpirisModel):
    id: str | None = None
    account_number: str | None = None
    text: str | None = None
    amount: float | None = None
    vat_amount: float | None = None
    vat_rate_id: str | None = None
    cost_center_item_id: str | None = None
    project_id: str | None = None


class SupplierInvoice(SpirisModel):
    id: str | None = None
    supplier_id: str | None = None
    invoice_number: str | None = None
    invoice_date: datetime | None = None
    due_date: datetime | None = None
    currency_code: str | None = None
    currency_rate: float | None = None
    rows: list[SupplierInvoiceRow] = Field(default_factory=list)
    total_amount: float | None = None
    total_vat_amount: float | None = None
    total_amount_including_vat: float | None = None
    is_paid: bool | None = None
    payment_date: datetime | None = None
    ocr_number: str | None = None
    created_utc: datetime | None = None
    modified_utc: datetime | None = None


class SupplierInvoiceDraft(SpirisModel):
    id: str | None = None
    supplier_id: str | None = None
    invoice_number: str | None = None
    invoice_date: datetime | None = None
    due_date: datetime | None = None
    currency_code: str | None = None
    rows: list[SupplierInvoiceRow] = Field(default_factory=list)
    total_amount: float | None = None
    created_utc: datetime | None = None
    modified_utc: datetime | None = None


class SupplierLedgerItem(SpirisModel):
    id: str | None = None
    supplier_id: str | None = None
    supplier_invoice_id: str | None = None
    currency_amount: float | None = None
    currency_code: str | None = None
    amount: float | None = None
    payment_date: datetime | None = None
    voucher_id: str | None = None
    created_utc: datetime | None = None


# =============================================================================
# Labels
# =============================================================================


class Label(SpirisModel):
    id: str | None = None
    name: str | None = None
    description: str | None = None


class CustomerLabel(Label):
    pass


class SupplierLabel(Label):
    pass


class ArticleLabel(Label):
    pass


# =============================================================================
# Bookkeeping
# =============================================================================


class Account(SpirisModel):
    """Ledger account; identified by (fiscal year, account number)."""

    account_number: str | None = None
    name: str | None = None
    account_type: int | None = None
    vat_code_id: str | None = None
    fiscal_year_id: str | None = None
    is_active: bool | None = None
    opening_balance: float | None = None


class AccountBalance(SpirisModel):
    account_number: str | None = None
    name: str | None = None
    balance: float | None = None


class AccountType(SpirisModel):
    id: int | None = None
    name: str | None = None


class FiscalYear(SpirisModel):
    id: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_locked: bool | None = None
    bookkeeping_method: int | None = None


class VatCode(SpirisModel):
    id: str | None = None
    code: str | None = None
    description: str | None = None
    vat_rate: float | None = None


class VoucherRow(SpirisModel):
    account_number: str | None = None
    debit_amount: float | None = None
    credit_amount: float | None = None
    transaction_text: str | None = None
    cost_center_item_id: str | None = None
    project_id: str | None = None


class Voucher(SpirisModel):
    id: str | None = None
    voucher_number: str | None = None
    voucher_date: datetime | None = None
    voucher_type: int | None = None
    voucher_text: str | None = None
    rows: list[VoucherRow] = Field(default_factory=list)
    created_utc: datetime | None = None
    modified_utc: datetime | None = None


class AllocationPeriod(SpirisModel):
    id: str | None = None
    name: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None


class Project(SpirisModel):
    id: str | None = None
    project_number: str | None = None
    name: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    customer_id: str | None = None
    is_completed: bool | None = None
    notes: str | None = None
    created_utc: datetime | None = None
    modified_utc: datetime | None = None


class CostCenterItem(SpirisModel):
    id: str | None = None
    cost_center_id: str | None = None
    name: str | None = None
    short_name: str | None = None
    is_active: bool | None = None


class CostCenter(SpirisModel):
    id: str | None = None
    name: str | None = None
    is_active: bool | None = None
    items: list[CostCenterItem] = Field(default_factory=list)


# =============================================================================
# Banking
# =============================================================================


class BankAccount(SpirisModel):
    id: str | None = None
    name: str | None = None
    account_number: str | None = None
    iban: str | None = None
    bic: str | None = None
    ledger_account_number: str | None = None
    currency_code: str | None = None
    is_default: bool | None = None
    is_active: bool | None = None


class Bank(SpirisModel):
    id: str | None = None
    name: str | None = None
    bic: str | None = None


# =============================================================================
# Reference data
# =============================================================================


class TermsOfPayment(SpirisModel):
    id: str | None = None
    name: str | None = None
    name_english: str | None = None
    number_of_days: int | None = None
    terms_of_payment_type: int | None = None


class DeliveryMethod(SpirisModel):
    id: str | None = None
    code: str | None = None
    name: str | None = None


class DeliveryTerm(SpirisModel):
    id: str | None = None
    code: str | None = None
    name: str | None = None


class Country(SpirisModel):
    code: str | None = None
    name: str | None = None
    english_name: str | None = None


class Currency(SpirisModel):
    code: str | None = None
    name: str | None = None


class User(SpirisModel):
    id: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    is_active: bool | None = None



class Attachment(SpirisModel):
    id: str | None = None
    file_name: str | None = None
    content_type: str | None = None
    temporary_url: str | None = None
    created_utc: datetime | None = None
