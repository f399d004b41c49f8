from .dtos import (
    AuthError,
    AuthIdle,
    AuthResult,
    AuthSuccess,
    CheckoutResult,
    DoctorRequest,
    ProductRequest,
    RegisterRequest,
    ServiceResult,
)

__all__ = [
    "AuthError",
    "AuthIdle",
    "AuthResult",
    "AuthSuccess",
    "CheckoutResult",
    "DoctorRequest",
    "ProductRequest",
    "RegisterRequest",
    "ServiceResult",
]
