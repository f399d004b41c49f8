"""
Data Transfer Objects (DTOs) and result types.

Request DTOs carry raw caller input and validate it into clean values.
Result types are what services hand back to the presentation layer: a
success flag plus a human-readable message, never a raw store exception.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Optional, Union

from clinica.core.exceptions import ValidationError
from clinica.core.validation import (
    parse_amount,
    parse_non_negative_int,
    require_text,
    validate_email,
)
from clinica.domain.entities import PurchaseWithItems, Receipt, User


@dataclass
class ServiceResult:
    """Standardized outcome of a service operation."""

    success: bool
    message: str
    data: Optional[Any] = None
    # Non-fatal notice, e.g. a cart quantity clamped to the available stock
    warning: Optional[str] = None

    @classmethod
    def ok(cls, message: str, data: Any = None, warning: Optional[str] = None) -> "ServiceResult":
        return cls(success=True, message=message, data=data, warning=warning)

    @classmethod
    def fail(cls, message: str) -> "ServiceResult":
        return cls(success=False, message=message)


@dataclass
class CheckoutResult:
    success: bool
    message: str
    purchase: Optional[PurchaseWithItems] = None
    receipt: Optional[Receipt] = None


@dataclass(frozen=True)
class AuthIdle:
    """No authentication attempt has been made yet."""


@dataclass(frozen=True)
class AuthSuccess:
    user: User


@dataclass(frozen=True)
class AuthError:
    message: str


AuthResult = Union[AuthIdle, AuthSuccess, AuthError]


@dataclass
class RegisterRequest:
    """DTO for user registration requests."""

    name: str
    dni: str
    email: str
    password: str

    def validate(self) -> None:
        """Validate and normalize the request data."""
        self.name = require_text(self.name, "name")
        self.dni = require_text(self.dni, "dni")
        self.email = validate_email(self.email)
        if not self.password:
            raise ValidationError("password is required", "password")


@dataclass
class DoctorRequest:
    """DTO for doctor create/update requests."""

    name: str
    specialty: str
    schedule: str = ""
    id: Optional[int] = None

    def validate(self) -> None:
        self.name = require_text(self.name, "name")
        self.specialty = require_text(self.specialty, "specialty")
        self.schedule = (self.schedule or "").strip()


@dataclass
class ProductRequest:
    """DTO for pharmacy product create/update requests."""

    name: str
    description: str = ""
    price: Any = Decimal("0")
    stock: Any = 0
    image_url: Optional[str] = None
    id: Optional[int] = None
    cleaned_price: Decimal = field(default=Decimal("0"), init=False)
    cleaned_stock: int = field(default=0, init=False)

    def validate(self) -> None:
        self.name = require_text(self.name, "name")
        self.description = (self.description or "").strip()
        self.cleaned_price = parse_amount(self.price, "price")
        self.cleaned_stock = parse_non_negative_int(self.stock, "stock")
        self.image_url = (self.image_url or "").strip() or None
