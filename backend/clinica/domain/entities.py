"""
Domain entities - Pure business logic, no framework dependencies.

These are the representations services and callers work with,
independent of the SQLAlchemy models in ``clinica.db.base``.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from typing import List, Optional

ROLE_USER = "user"
ROLE_ADMIN = "admin"
ROLES = (ROLE_USER, ROLE_ADMIN)


@dataclass
class User:
    """Domain entity representing a registered person.

    The password credential never travels on the entity; repositories keep
    it behind ``get_password_hash``/``set_password``.
    """

    id: Optional[int] = None
    name: str = ""
    email: str = ""
    dni: str = ""
    role: str = ROLE_USER

    def __post_init__(self):
        """Validate domain rules."""
        if not self.name:
            raise ValueError("Name is required")
        if not self.email or "@" not in self.email:
            raise ValueError("Invalid email format")
        if self.role not in ROLES:
            raise ValueError(f"Unknown role: {self.role}")

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


@dataclass
class Doctor:
    id: Optional[int] = None
    name: str = ""
    specialty: str = ""
    schedule: str = ""

    def __post_init__(self):
        if not self.name.strip():
            raise ValueError("Doctor name is required")
        if not self.specialty.strip():
            raise ValueError("Specialty is required")


@dataclass
class Appointment:
    """Domain entity for a booked appointment.

    ``is_cancelled`` only ever moves from False to True.
    """

    user_id: int = 0
    doctor_id: int = 0
    date: Optional[date] = None
    time: Optional[time] = None
    is_cancelled: bool = False
    id: Optional[int] = None

    def __post_init__(self):
        if self.user_id <= 0:
            raise ValueError("Valid user_id is required")
        if self.doctor_id <= 0:
            raise ValueError("Valid doctor_id is required")
        if self.date is None or self.time is None:
            raise ValueError("Date and time are required")


@dataclass
class AppointmentWithDoctor:
    """Read model: an appointment joined with its doctor."""

    appointment: Appointment
    doctor: Doctor


@dataclass
class PharmacyProduct:
    name: str = ""
    description: str = ""
    price: Decimal = Decimal("0")
    stock: int = 0
    image_url: Optional[str] = None
    id: Optional[int] = None

    def __post_init__(self):
        """Validate business rules."""
        if not self.name.strip():
            raise ValueError("Product name is required")
        if self.price < 0:
            raise ValueError("Price cannot be negative")
        if self.stock < 0:
            raise ValueError("Stock cannot be negative")


@dataclass
class PurchaseItem:
    """Line of a purchase with the product fields captured at sale time."""

    product_id: int
    product_name: str
    product_description: str
    product_price: Decimal
    quantity: int
    purchase_id: Optional[int] = None

    def __post_init__(self):
        if self.quantity <= 0:
            raise ValueError("Quantity must be positive")

    @property
    def subtotal(self) -> Decimal:
        return self.product_price * self.quantity


@dataclass
class Purchase:
    user_id: int
    purchase_date: datetime
    total_amount: Decimal
    paid_amount: Decimal
    change_amount: Decimal
    id: Optional[int] = None

    def __post_init__(self):
        if self.change_amount < 0:
            raise ValueError("Change cannot be negative")
        if self.paid_amount < self.total_amount:
            raise ValueError("Paid amount cannot be lower than the total")


@dataclass
class PurchaseWithItems:
    purchase: Purchase
    items: List[PurchaseItem] = field(default_factory=list)


@dataclass
class CartItem:
    """Transient cart line; lives only while the shopping session is open."""

    product: PharmacyProduct
    quantity: int

    @property
    def subtotal(self) -> Decimal:
        return self.product.price * self.quantity


@dataclass
class Receipt:
    """Everything the receipt renderer needs; formatting is its job."""

    user_name: str
    items: List[PurchaseItem]
    total: Decimal
    tendered: Decimal
    change: Decimal
    purchase_id: Optional[int] = None
    purchase_date: Optional[datetime] = None
