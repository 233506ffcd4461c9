"""API response fixtures for Spiris client tests.

These fixtures mimic the structure of actual Spiris API responses.
"""

import json

# OAuth Token Response (success)
TOKEN_RESPONSE_SUCCESS = {
    "access_token": "eyJhbGciOiJSUzI1NiIsImtpZCI6IjEifQ.mock_token",
    "token_type": "Bearer",
    "expires_in": 3600,
    "refresh_token": "mock-refresh-token",
    "scope": "ea:api ea:sales offline_access",
}

# OAuth Token Response (no expires_in)
TOKEN_RESPONSE_MINIMAL = {
    "access_token": "minimal-token",
}

CUSTOMER = {
    "Id": "0b6b2a1e-3c6f-4b2a-9f52-5d1f2c3a4b5c",
    "CustomerNumber": "1001",
    "Name": "Acme AB",
    "Email": "billing@acme.se",
    "InvoiceAddress": {
        "Address1": "Storgatan 1",
        "PostalCode": "111 22",
        "City": "Stockholm",
        "CountryCode": "SE",
    },
    "IsActive": True,
    "IsPrivatePerson": False,
    "CreatedUtc": "2024-01-15T09:30:00Z",
    "PriceListId": "extra-field-kept",
}

# Customer list, first page of two
CUSTOMERS_PAGE_0 = {
    "Meta": {
        "CurrentPage": 0,
        "PageSize": 2,
        "TotalNumberOfPages": 2,
        "TotalNumberOfResults": 3,
        "HasNextPage": True,
        "HasPreviousPage": False,
    },
    "Data": [
        {"Id": "c1", "CustomerNumber": "1001", "Name": "Acme AB"},
        {"Id": "c2", "CustomerNumber": "1002", "Name": "Beta AB"},
    ],
}

# Customer list, last page
CUSTOMERS_PAGE_1 = {
    "Meta": {
        "CurrentPage": 1,
        "PageSize": 2,
        "TotalNumberOfPages": 2,
        "TotalNumberOfResults": 3,
        "HasNextPage": False,
        "HasPreviousPage": True,
    },
    "Data": [
        {"Id": "c3", "CustomerNumber": "1003", "Name": "Gamma AB"},
    ],
}

EMPTY_PAGE = {
    "Meta": {
        "CurrentPage": 0,
        "PageSize": 50,
        "TotalNumberOfResults": 0,
        "HasNextPage": False,
        "HasPreviousPage": False,
    },
    "Data": [],
}

INVOICE = {
    "Id": "inv-1",
    "InvoiceNumber": "20240001",
    "CustomerId": "c1",
    "InvoiceDate": "2024-02-01T00:00:00",
    "Rows": [
        {"ArticleId": "a1", "Text": "Consulting", "UnitPrice": 1200.0, "Quantity": 2.0},
    ],
    "TotalAmount": 2400.0,
}

VALIDATION_ERROR_BODY = json.dumps(
    {
        "ErrorCode": 4000,
        "Message": "Validation failed",
        "ValidationErrors": [
            {"Field": "Name", "Message": "Name is required"},
            {"Field": "Email", "Message": "Invalid email"},
        ],
    }
)
