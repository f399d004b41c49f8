"""
Domain package - Pure business logic layer.

This package contains:
- entities.py: Domain entities with business rules
- interfaces.py: Repository contracts
"""

from .entities import (
    Appointment,
    AppointmentWithDoctor,
    CartItem,
    Doctor,
    PharmacyProduct,
    Purchase,
    PurchaseItem,
    PurchaseWithItems,
    Receipt,
    User,
)
from .interfaces import (
    IAppointmentRepository,
    IDoctorRepository,
    IPharmacyProductRepository,
    IPurchaseRepository,
    IUserRepository,
)

__all__ = [
    # Domain entities
    "User",
    "Doctor",
    "Appointment",
    "AppointmentWithDoctor",
    "PharmacyProduct",
    "Purchase",
    "PurchaseItem",
    "PurchaseWithItems",
    "CartItem",
    "Receipt",
    # Repository interfaces
    "IUserRepository",
    "IDoctorRepository",
    "IPharmacyProductRepository",
    "IAppointmentRepository",
    "IPurchaseRepository",
]
