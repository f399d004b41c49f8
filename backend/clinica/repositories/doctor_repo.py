from typing import List, Optional

from clinica.db.base import Doctor as DbDoctor
from clinica.db.live import ChangeNotifier, LiveQuery
from clinica.db.session import SessionLocal, get_change_notifier, store_transaction
from clinica.domain.entities import Doctor as DomainDoctor
from clinica.domain.interfaces import IDoctorRepository

DOCTOR_TABLES = {"doctors"}


def doctor_to_domain(db_doctor: DbDoctor) -> DomainDoctor:
    return DomainDoctor(
        id=db_doctor.id,
        name=db_doctor.name,
        specialty=db_doctor.specialty,
        schedule=db_doctor.schedule or "",
    )


class DoctorRepository(IDoctorRepository):
    def __init__(self, db_session=None, notifier: Optional[ChangeNotifier] = None):
        self.db = db_session or SessionLocal()
        self.notifier = notifier or get_change_notifier()

    def get_by_id(self, doctor_id: int) -> Optional[DomainDoctor]:
        db_doctor = self.db.get(DbDoctor, doctor_id, populate_existing=True)
        return doctor_to_domain(db_doctor) if db_doctor else None

    def observe_all(self) -> LiveQuery[DomainDoctor]:
        def load(session) -> List[DomainDoctor]:
            rows = session.query(DbDoctor).order_by(DbDoctor.name.asc(), DbDoctor.id).all()
            return [doctor_to_domain(d) for d in rows]

        return LiveQuery(self.notifier, DOCTOR_TABLES, load)

    def observe_by_specialty(self, specialty: str) -> LiveQuery[DomainDoctor]:
        def load(session) -> List[DomainDoctor]:
            rows = (
                session.query(DbDoctor)
                .filter(DbDoctor.specialty == specialty)
                .order_by(DbDoctor.name.asc(), DbDoctor.id)
                .all()
            )
            return [doctor_to_domain(d) for d in rows]

        return LiveQuery(self.notifier, DOCTOR_TABLES, load)

    def get_specialties(self) -> List[str]:
        rows = self.db.query(DbDoctor.specialty).distinct().order_by(DbDoctor.specialty).all()
        return [specialty for (specialty,) in rows]

    def create(self, doctor: DomainDoctor) -> DomainDoctor:
        db_doctor = DbDoctor(
            name=doctor.name, specialty=doctor.specialty, schedule=doctor.schedule
        )
        with store_transaction(self.db):
            self.db.add(db_doctor)
        self.db.refresh(db_doctor)
        return doctor_to_domain(db_doctor)

    def update(self, doctor: DomainDoctor) -> DomainDoctor:
        db_doctor = self.db.get(DbDoctor, doctor.id) if doctor.id else None
        if not db_doctor:
            raise ValueError("Doctor not found")
        with store_transaction(self.db):
            db_doctor.name = doctor.name
            db_doctor.specialty = doctor.specialty
            db_doctor.schedule = doctor.schedule
        self.db.refresh(db_doctor)
        return doctor_to_domain(db_doctor)

    def delete(self, doctor_id: int) -> bool:
        """Delete a doctor; the store cascades its appointments."""
        db_doctor = self.db.get(DbDoctor, doctor_id)
        if not db_doctor:
            return False
        with store_transaction(self.db):
            self.db.delete(db_doctor)
        return True
