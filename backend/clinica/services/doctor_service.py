import logging
from typing import List, Optional

from clinica.core.exceptions import ClinicaError
from clinica.core.security import require_admin
from clinica.db.live import LiveQuery
from clinica.domain.entities import Doctor
from clinica.domain.interfaces import IDoctorRepository
from clinica.schemas.dtos import DoctorRequest, ServiceResult

logger = logging.getLogger(__name__)

ALL_SPECIALTIES = "All"


class DoctorService:
    """Doctor directory: anyone can browse, only admins can change it."""

    def __init__(self, repository: IDoctorRepository):
        self.repository = repository

    def get_doctor(self, doctor_id: int) -> Optional[Doctor]:
        return self.repository.get_by_id(doctor_id)

    def watch_doctors(self, specialty: Optional[str] = None) -> LiveQuery[Doctor]:
        """All doctors, or only one specialty (None, blank or "All" mean all)."""
        if specialty is None or not specialty.strip() or specialty == ALL_SPECIALTIES:
            return self.repository.observe_all()
        return self.repository.observe_by_specialty(specialty.strip())

    def list_specialties(self) -> List[str]:
        return self.repository.get_specialties()

    def add_doctor(self, request: DoctorRequest, role: str) -> ServiceResult:
        try:
            require_admin(role, "manage doctors")
            request.validate()
            doctor = self.repository.create(
                Doctor(name=request.name, specialty=request.specialty, schedule=request.schedule)
            )
        except ClinicaError as e:
            return ServiceResult.fail(e.message)

        logger.info("Doctor added", extra={"context": {"doctor_id": doctor.id}})
        return ServiceResult.ok(f"Doctor {doctor.name} added successfully.", data=doctor)

    def update_doctor(self, request: DoctorRequest, role: str) -> ServiceResult:
        try:
            require_admin(role, "manage doctors")
            request.validate()
            if request.id is None or self.repository.get_by_id(request.id) is None:
                return ServiceResult.fail("Doctor not found.")
            doctor = self.repository.update(
                Doctor(
                    id=request.id,
                    name=request.name,
                    specialty=request.specialty,
                    schedule=request.schedule,
                )
            )
        except ClinicaError as e:
            return ServiceResult.fail(e.message)

        logger.info("Doctor updated", extra={"context": {"doctor_id": doctor.id}})
        return ServiceResult.ok(f"Doctor {doctor.name} updated successfully.", data=doctor)

    def delete_doctor(self, doctor_id: int, role: str) -> ServiceResult:
        """Delete a doctor; their appointments go with them."""
        try:
            require_admin(role, "manage doctors")
            doctor = self.repository.get_by_id(doctor_id)
            if doctor is None or not self.repository.delete(doctor_id):
                return ServiceResult.fail("Doctor not found.")
        except ClinicaError as e:
            return ServiceResult.fail(e.message)

        logger.info("Doctor deleted", extra={"context": {"doctor_id": doctor_id}})
        return ServiceResult.ok(f"Doctor {doctor.name} deleted successfully.")
