from .appointment_repo import AppointmentRepository
from .doctor_repo import DoctorRepository
from .pharmacy_product_repo import PharmacyProductRepository
from .purchase_repo import PurchaseRepository
from .user_repo import UserRepository

__all__ = [
    "AppointmentRepository",
    "DoctorRepository",
    "PharmacyProductRepository",
    "PurchaseRepository",
    "UserRepository",
]
