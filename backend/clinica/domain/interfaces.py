"""
Abstract interfaces for repositories following Interface Segregation Principle.

These interfaces define contracts without implementation details,
enabling dependency injection and mock-based service tests.
Read-many operations return live queries (see ``clinica.db.live``).
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List, Optional

from .entities import (
    Appointment,
    AppointmentWithDoctor,
    Doctor,
    PharmacyProduct,
    Purchase,
    PurchaseItem,
    PurchaseWithItems,
    User,
)

if TYPE_CHECKING:
    from clinica.db.live import LiveQuery


class IUserReader(ABC):
    """Interface for user read operations."""

    @abstractmethod
    def get_by_id(self, user_id: int) -> Optional[User]:
        """Get user by ID."""
        pass

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        pass

    @abstractmethod
    def get_password_hash(self, user_id: int) -> Optional[str]:
        """Get the stored credential hash of a user."""
        pass


class IUserWriter(ABC):
    """Interface for user write operations."""

    @abstractmethod
    def create(self, user: User, password_hash: str) -> User:
        """Create a new user."""
        pass

    @abstractmethod
    def update(self, user: User) -> User:
        """Update an existing user."""
        pass

    @abstractmethod
    def set_password(self, user_id: int, password_hash: str) -> bool:
        """Replace the stored credential hash."""
        pass


class IUserRepository(IUserReader, IUserWriter):
    """Complete user repository interface combining read/write operations."""

    pass


class IDoctorReader(ABC):
    @abstractmethod
    def get_by_id(self, doctor_id: int) -> Optional[Doctor]:
        pass

    @abstractmethod
    def observe_all(self) -> "LiveQuery[Doctor]":
        """All doctors, name ascending."""
        pass

    @abstractmethod
    def observe_by_specialty(self, specialty: str) -> "LiveQuery[Doctor]":
        pass

    @abstractmethod
    def get_specialties(self) -> List[str]:
        pass


class IDoctorWriter(ABC):
    @abstractmethod
    def create(self, doctor: Doctor) -> Doctor:
        pass

    @abstractmethod
    def update(self, doctor: Doctor) -> Doctor:
        pass

    @abstractmethod
    def delete(self, doctor_id: int) -> bool:
        pass


class IDoctorRepository(IDoctorReader, IDoctorWriter):
    pass


class IPharmacyProductReader(ABC):
    @abstractmethod
    def get_by_id(self, product_id: int) -> Optional[PharmacyProduct]:
        pass

    @abstractmethod
    def observe_all(self) -> "LiveQuery[PharmacyProduct]":
        """All products, name ascending."""
        pass

    @abstractmethod
    def observe_search(self, query: str) -> "LiveQuery[PharmacyProduct]":
        pass


class IPharmacyProductWriter(ABC):
    @abstractmethod
    def create(self, product: PharmacyProduct) -> PharmacyProduct:
        pass

    @abstractmethod
    def update(self, product: PharmacyProduct) -> PharmacyProduct:
        pass

    @abstractmethod
    def delete(self, product_id: int) -> bool:
        pass


class IPharmacyProductRepository(IPharmacyProductReader, IPharmacyProductWriter):
    pass


class IAppointmentReader(ABC):
    """Interface for appointment read operations."""

    @abstractmethod
    def get_by_id(self, appointment_id: int) -> Optional[Appointment]:
        """Get appointment by ID."""
        pass

    @abstractmethod
    def observe_for_user(self, user_id: int) -> "LiveQuery[AppointmentWithDoctor]":
        pass

    @abstractmethod
    def observe_for_doctor(self, doctor_id: int) -> "LiveQuery[AppointmentWithDoctor]":
        pass

    @abstractmethod
    def observe_all(self) -> "LiveQuery[AppointmentWithDoctor]":
        pass


class IAppointmentWriter(ABC):
    """Interface for appointment write operations."""

    @abstractmethod
    def create(self, appointment: Appointment) -> Appointment:
        """Create a new appointment."""
        pass

    @abstractmethod
    def cancel(self, appointment_id: int) -> bool:
        """Cancel an appointment."""
        pass

    @abstractmethod
    def delete(self, appointment_id: int) -> bool:
        """Remove an appointment permanently."""
        pass


class IAppointmentRepository(IAppointmentReader, IAppointmentWriter):
    """Complete appointment repository interface."""

    pass


class IPurchaseReader(ABC):
    @abstractmethod
    def get_by_id(self, purchase_id: int) -> Optional[PurchaseWithItems]:
        pass

    @abstractmethod
    def observe_for_user(self, user_id: int) -> "LiveQuery[PurchaseWithItems]":
        pass

    @abstractmethod
    def observe_all(self) -> "LiveQuery[PurchaseWithItems]":
        pass

    @abstractmethod
    def list_all(self) -> List[PurchaseWithItems]:
        pass


class IPurchaseWriter(ABC):
    @abstractmethod
    def record_purchase(
        self, purchase: Purchase, items: List[PurchaseItem]
    ) -> PurchaseWithItems:
        """Store header, items and stock decrements as one transaction."""
        pass


class IPurchaseRepository(IPurchaseReader, IPurchaseWriter):
    pass
