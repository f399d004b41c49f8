"""
Appointment booking service following SOLID principles.

Lifecycle of an appointment: booked as active, optionally cancelled (one way,
never un-cancelled), and permanently deleted only by an administrator.
"""

import logging
from datetime import date, time
from typing import Any, Callable, List, Optional

from clinica.core.exceptions import ClinicaError, StoreError, ValidationError
from clinica.core.security import require_admin
from clinica.core.validation import parse_date, parse_time
from clinica.db.live import LiveFeed, LiveQuery
from clinica.domain.entities import Appointment as DomainAppointment
from clinica.domain.entities import AppointmentWithDoctor
from clinica.domain.interfaces import IAppointmentRepository
from clinica.schemas.dtos import ServiceResult
from clinica.services.holiday_calendar import non_bookable_reason

logger = logging.getLogger(__name__)

BOOKED = "Appointment booked successfully."
CANCELLED = "Appointment cancelled successfully."
DELETED = "Appointment deleted successfully."
NOT_FOUND = "Appointment not found."
NOT_OWNER = "You can only cancel your own appointments."


def _require_id(value: Any, field_name: str) -> int:
    try:
        ident = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is required", field_name)
    if ident <= 0:
        raise ValidationError(f"{field_name} is required", field_name)
    return ident


class AppointmentService:
    """Application service for appointment-related use-cases."""

    def __init__(self, appointment_repo: IAppointmentRepository):
        self.appointment_repo = appointment_repo

    def check_date(self, day: Any) -> ServiceResult:
        """Tell whether ``day`` can be booked (used when the user picks a date)."""
        try:
            parsed = parse_date(day)
        except ValidationError as e:
            return ServiceResult.fail(e.message)
        reason = non_bookable_reason(parsed)
        if reason:
            return ServiceResult.fail(reason)
        return ServiceResult.ok("Date available.", data=parsed)

    def book_appointment(
        self, user_id: Any, doctor_id: Any, day: Any, at: Any
    ) -> ServiceResult:
        """Book an appointment with business rule validation.

        Business Rules:
        - user, doctor, date and time are required
        - Sundays and holidays cannot be booked (re-checked here even if the
          caller already used ``check_date``)
        - a new appointment is never cancelled
        """
        try:
            user_id = _require_id(user_id, "user")
            doctor_id = _require_id(doctor_id, "doctor")
            booking_date: date = parse_date(day)
            booking_time: time = parse_time(at)
        except ValidationError as e:
            return ServiceResult.fail(e.message)

        reason = non_bookable_reason(booking_date)
        if reason:
            logger.info(
                "Booking rejected",
                extra={"context": {"date": booking_date.isoformat(), "reason": reason}},
            )
            return ServiceResult.fail(reason)

        appointment = DomainAppointment(
            user_id=user_id,
            doctor_id=doctor_id,
            date=booking_date,
            time=booking_time,
            is_cancelled=False,
        )
        try:
            created = self.appointment_repo.create(appointment)
        except StoreError as e:
            logger.error(
                "Failed to book appointment",
                extra={"context": {"user_id": user_id, "doctor_id": doctor_id, "error": e.message}},
            )
            return ServiceResult.fail(f"Error booking appointment: {e.message}")

        logger.info(
            "Appointment booked",
            extra={
                "context": {
                    "appointment_id": created.id,
                    "user_id": user_id,
                    "doctor_id": doctor_id,
                    "date": booking_date.isoformat(),
                }
            },
        )
        return ServiceResult.ok(BOOKED, data=created)

    def cancel_appointment(
        self, appointment_id: int, user_id: Optional[int] = None
    ) -> ServiceResult:
        """Mark an appointment as cancelled.

        When ``user_id`` is given the appointment must belong to that user.
        Cancelling an already cancelled appointment succeeds again.
        """
        try:
            appointment = self.appointment_repo.get_by_id(appointment_id)
            if appointment is None:
                return ServiceResult.fail(NOT_FOUND)
            if user_id is not None and appointment.user_id != user_id:
                return ServiceResult.fail(NOT_OWNER)
            if not self.appointment_repo.cancel(appointment_id):
                return ServiceResult.fail(NOT_FOUND)
        except ClinicaError as e:
            return ServiceResult.fail(e.message)

        logger.info(
            "Appointment cancelled",
            extra={"context": {"appointment_id": appointment_id, "user_id": user_id}},
        )
        return ServiceResult.ok(CANCELLED)

    def delete_appointment(self, appointment_id: int, role: str) -> ServiceResult:
        """Remove an appointment permanently (admin only)."""
        try:
            require_admin(role, "delete appointments")
            if not self.appointment_repo.delete(appointment_id):
                return ServiceResult.fail(NOT_FOUND)
        except ClinicaError as e:
            return ServiceResult.fail(e.message)

        logger.info(
            "Appointment deleted", extra={"context": {"appointment_id": appointment_id}}
        )
        return ServiceResult.ok(DELETED)

    def get_appointment(self, appointment_id: int) -> Optional[DomainAppointment]:
        return self.appointment_repo.get_by_id(appointment_id)

    def watch_user_appointments(self, user_id: int) -> LiveQuery[AppointmentWithDoctor]:
        return self.appointment_repo.observe_for_user(user_id)

    def watch_appointments(
        self, role: str, doctor_id: Optional[int] = None
    ) -> LiveQuery[AppointmentWithDoctor]:
        """All appointments, or one doctor's, for the admin board.

        Raises:
            PermissionDeniedError: if ``role`` is not admin
        """
        require_admin(role, "view all appointments")
        if doctor_id is None:
            return self.appointment_repo.observe_all()
        return self.appointment_repo.observe_for_doctor(doctor_id)


class AdminAppointmentBoard:
    """Admin view of appointments with a doctor filter.

    Switching the filter cancels the previous subscription and subscribes to
    the new scope; rows are never filtered client-side.
    """

    def __init__(
        self,
        service: AppointmentService,
        role: str,
        on_change: Callable[[List[AppointmentWithDoctor]], None],
    ):
        require_admin(role, "view all appointments")
        self._service = service
        self._role = role
        self._feed: LiveFeed[AppointmentWithDoctor] = LiveFeed(on_change)
        self.doctor_id: Optional[int] = None

    def show_all(self) -> List[AppointmentWithDoctor]:
        self.doctor_id = None
        return self._feed.switch(self._service.watch_appointments(self._role))

    def show_doctor(self, doctor_id: int) -> List[AppointmentWithDoctor]:
        self.doctor_id = doctor_id
        return self._feed.switch(
            self._service.watch_appointments(self._role, doctor_id=doctor_id)
        )

    def close(self) -> None:
        self._feed.close()
