# products/services/exceptions.py

"""
INVENTORY SERVICE ERRORS

Centralized domain errors for stock-affecting services
(stock mutator, order line processor, sale/purchase services).

Each error carries the HTTP status the API layer answers with, so
backend.exceptions.api_exception_handler can translate without a lookup table.
"""

from rest_framework import status


class InventoryServiceError(Exception):
    """Base exception for all inventory service failures."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Inventory operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(InventoryServiceError):
    """Raised when a referenced product / order / party does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InsufficientStockError(InventoryServiceError):
    """Raised when a negative delta would drive a product quantity below zero."""

    default_message = "Insufficient stock"

    def __init__(self, message: str | None = None, *, product_id=None, available=None, requested=None):
        self.product_id = product_id
        self.available = available
        self.requested = requested
        super().__init__(message)


class InvalidStateError(InventoryServiceError):
    """Raised when a mutation is attempted on a COMPLETED / terminal order."""

    default_message = "Operation not allowed in the current state"


class InputValidationError(InventoryServiceError):
    """Raised on malformed input from the caller."""

    default_message = "Invalid input"
