"""
Appointment repository implementation following SOLID principles.
"""

from typing import List, Optional

from clinica.db.base import Appointment as DbAppointment
from clinica.db.base import Doctor as DbDoctor
from clinica.db.live import ChangeNotifier, LiveQuery
from clinica.db.session import SessionLocal, get_change_notifier, store_transaction
from clinica.domain.entities import Appointment as DomainAppointment
from clinica.domain.entities import AppointmentWithDoctor
from clinica.domain.interfaces import IAppointmentRepository

from .doctor_repo import doctor_to_domain

# Joined views change with either table
APPOINTMENT_TABLES = {"appointments", "doctors"}


class AppointmentRepository(IAppointmentRepository):
    """Repository for Appointment persistence operations.

    Joined views are ordered by date descending, then time descending.
    """

    def __init__(self, db_session=None, notifier: Optional[ChangeNotifier] = None) -> None:
        self.db = db_session or SessionLocal()
        self.notifier = notifier or get_change_notifier()

    def get_by_id(self, appointment_id: int) -> Optional[DomainAppointment]:
        """Get appointment by ID."""
        db_appointment = self.db.get(
            DbAppointment, appointment_id, populate_existing=True
        )
        return self._to_domain(db_appointment) if db_appointment else None

    def observe_for_user(self, user_id: int) -> LiveQuery[AppointmentWithDoctor]:
        return self._observe(DbAppointment.user_id == user_id)

    def observe_for_doctor(self, doctor_id: int) -> LiveQuery[AppointmentWithDoctor]:
        return self._observe(DbAppointment.doctor_id == doctor_id)

    def observe_all(self) -> LiveQuery[AppointmentWithDoctor]:
        return self._observe(None)

    def create(self, appointment: DomainAppointment) -> DomainAppointment:
        """Create a new appointment; unknown user/doctor raise ConstraintError."""
        db_appointment = DbAppointment(
            user_id=appointment.user_id,
            doctor_id=appointment.doctor_id,
            date=appointment.date,
            time=appointment.time,
            is_cancelled=appointment.is_cancelled,
        )
        with store_transaction(self.db):
            self.db.add(db_appointment)
        self.db.refresh(db_appointment)
        return self._to_domain(db_appointment)

    def cancel(self, appointment_id: int) -> bool:
        """Cancel an appointment."""
        db_appointment = self.db.get(DbAppointment, appointment_id, populate_existing=True)
        if not db_appointment:
            return False
        with store_transaction(self.db):
            db_appointment.is_cancelled = True
        return True

    def delete(self, appointment_id: int) -> bool:
        db_appointment = self.db.get(DbAppointment, appointment_id)
        if not db_appointment:
            return False
        with store_transaction(self.db):
            self.db.delete(db_appointment)
        return True

    def _observe(self, criterion) -> LiveQuery[AppointmentWithDoctor]:
        def load(session) -> List[AppointmentWithDoctor]:
            query = session.query(DbAppointment, DbDoctor).join(
                DbDoctor, DbAppointment.doctor_id == DbDoctor.id
            )
            if criterion is not None:
                query = query.filter(criterion)
            rows = query.order_by(
                DbAppointment.date.desc(),
                DbAppointment.time.desc(),
                DbAppointment.id.desc(),
            ).all()
            return [
                AppointmentWithDoctor(
                    appointment=self._to_domain(appointment),
                    doctor=doctor_to_domain(doctor),
                )
                for appointment, doctor in rows
            ]

        return LiveQuery(self.notifier, APPOINTMENT_TABLES, load)

    def _to_domain(self, db_appointment: DbAppointment) -> DomainAppointment:
        """Convert database model to domain entity."""
        return DomainAppointment(
            id=db_appointment.id,
            user_id=db_appointment.user_id,
            doctor_id=db_appointment.doctor_id,
            date=db_appointment.date,
            time=db_appointment.time,
            is_cancelled=bool(db_appointment.is_cancelled),
        )
