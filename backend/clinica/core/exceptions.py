"""
Custom exceptions for the application.
Centralized error taxonomy shared by repositories and services.

Services catch these at their boundary and turn them into a message-bearing
result, so none of them is fatal to the process.
"""

from typing import Optional


class ClinicaError(Exception):
    """Base class for every error raised by the clinic core."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ClinicaError, ValueError):
    """
    Raised before any write when input breaks a business rule
    (invalid date, Sunday/holiday, empty cart, short payment, blank field).
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InsufficientStockError(ValidationError):
    """Raised at commit time when a product no longer has enough stock."""

    def __init__(self, product_name: str, available: int, requested: int):
        super().__init__(
            f"Not enough stock for {product_name}. "
            f"Only {available} units left (requested {requested}).",
            field="quantity",
        )
        self.product_name = product_name
        self.available = available
        self.requested = requested


class NotFoundError(ClinicaError):
    """Raised when a row the caller expected to exist is missing."""

    pass


class PermissionDeniedError(ClinicaError):
    """Raised when an admin-only operation is invoked without the admin role."""

    pass


class StoreError(ClinicaError):
    """
    Raised when the persistent store fails.
    The underlying cause text is kept so callers can surface it verbatim.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class ConstraintError(StoreError):
    """Foreign-key or uniqueness violation reported by the store."""

    pass
