from .appointment_service import AdminAppointmentBoard, AppointmentService
from .cart_service import CartService
from .doctor_service import DoctorService
from .pharmacy_product_service import PharmacyProductService
from .purchase_service import PurchaseService
from .user_service import UserService

__all__ = [
    "AdminAppointmentBoard",
    "AppointmentService",
    "CartService",
    "DoctorService",
    "PharmacyProductService",
    "PurchaseService",
    "UserService",
]
