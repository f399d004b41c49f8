"""
Repository integration tests against a temporary SQLite store.
"""

from datetime import date, time
from decimal import Decimal

import pytest

from clinica.core.exceptions import ConstraintError
from clinica.core.security import verify_password
from clinica.domain.entities import Appointment, Doctor, PharmacyProduct, User


@pytest.mark.repositories
class TestUserRepository:
    def test_create_and_lookup(self, user_repo, ana):
        assert ana.id is not None
        assert user_repo.get_by_id(ana.id) == ana
        assert user_repo.get_by_email("ANA@x.com") == ana
        assert verify_password("secret", user_repo.get_password_hash(ana.id))

    def test_missing_rows_return_none(self, user_repo):
        assert user_repo.get_by_id(999) is None
        assert user_repo.get_by_email("ghost@x.com") is None
        assert user_repo.get_password_hash(999) is None
        assert user_repo.set_password(999, "hash") is False

    def test_duplicate_email_is_a_constraint_error(self, user_repo, ana):
        with pytest.raises(ConstraintError):
            user_repo.create(User(name="Other Ana", email="ana@x.com", dni="1"), "hash")

        # The session is still usable after the rollback
        assert user_repo.get_by_email("ana@x.com").name == "Ana"

    def test_update(self, user_repo, ana):
        ana.name = "Ana María"
        updated = user_repo.update(ana)

        assert updated.name == "Ana María"
        assert user_repo.get_by_id(ana.id).name == "Ana María"


@pytest.mark.repositories
class TestDoctorRepository:
    def test_observe_all_orders_by_name(self, doctor_repo, pediatrician, cardiologist):
        names = [d.name for d in doctor_repo.observe_all().snapshot()]

        assert names == ["Dr. Ana Gómez", "Dr. Carlos Ruiz"]

    def test_specialties_are_distinct_and_sorted(self, doctor_repo, pediatrician, cardiologist):
        doctor_repo.create(Doctor(name="Dr. Zeta", specialty="Pediatría"))

        assert doctor_repo.get_specialties() == ["Cardiología", "Pediatría"]

    def test_observe_by_specialty(self, doctor_repo, pediatrician, cardiologist):
        doctors = doctor_repo.observe_by_specialty("Cardiología").snapshot()

        assert [d.id for d in doctors] == [cardiologist.id]

    def test_update_and_delete(self, doctor_repo, pediatrician):
        pediatrician.schedule = "L-S 8-12"
        assert doctor_repo.update(pediatrician).schedule == "L-S 8-12"

        assert doctor_repo.delete(pediatrician.id) is True
        assert doctor_repo.get_by_id(pediatrician.id) is None
        assert doctor_repo.delete(pediatrician.id) is False


@pytest.mark.repositories
class TestPharmacyProductRepository:
    def test_price_roundtrip_as_decimal(self, product_repo, paracetamol):
        stored = product_repo.get_by_id(paracetamol.id)

        assert stored.price == Decimal("5.50")
        assert stored.stock == 10

    def test_search_by_name_fragment(self, product_repo, paracetamol, ibuprofen):
        assert [p.name for p in product_repo.observe_search("profeno").snapshot()] == [
            "Ibuprofeno 400mg"
        ]
        assert [p.name for p in product_repo.observe_all().snapshot()] == [
            "Ibuprofeno 400mg",
            "Paracetamol 500mg",
        ]

    def test_image_url_is_optional(self, product_repo):
        created = product_repo.create(
            PharmacyProduct(name="Gasa", price=Decimal("1.00"), stock=1, image_url="https://img/gasa.png")
        )

        assert product_repo.get_by_id(created.id).image_url == "https://img/gasa.png"


@pytest.mark.repositories
@pytest.mark.appointment
class TestAppointmentRepository:
    def test_unknown_doctor_violates_foreign_key(self, appointment_repo, ana):
        with pytest.raises(ConstraintError):
            appointment_repo.create(
                Appointment(user_id=ana.id, doctor_id=999, date=date(2024, 12, 2), time=time(9, 0))
            )

    def test_cancel_is_one_way_and_repeatable(self, appointment_repo, booked_appointment):
        assert appointment_repo.cancel(booked_appointment.id) is True
        assert appointment_repo.cancel(booked_appointment.id) is True

        assert appointment_repo.get_by_id(booked_appointment.id).is_cancelled is True

    def test_deleting_user_cascades_to_appointments(
        self, db_session, appointment_repo, booked_appointment, ana
    ):
        from clinica.db.base import User as DbUser

        db_session.delete(db_session.get(DbUser, ana.id))
        db_session.commit()

        assert appointment_repo.get_by_id(booked_appointment.id) is None

    def test_joined_views_order_by_date_then_time_descending(
        self, appointment_repo, ana, pediatrician, cardiologist
    ):
        for doctor, day, at in [
            (pediatrician, date(2024, 12, 2), time(9, 0)),
            (cardiologist, date(2024, 12, 3), time(8, 0)),
            (pediatrician, date(2024, 12, 2), time(15, 0)),
        ]:
            appointment_repo.create(
                Appointment(user_id=ana.id, doctor_id=doctor.id, date=day, time=at)
            )

        rows = appointment_repo.observe_for_user(ana.id).snapshot()

        assert [(r.appointment.date, r.appointment.time) for r in rows] == [
            (date(2024, 12, 3), time(8, 0)),
            (date(2024, 12, 2), time(15, 0)),
            (date(2024, 12, 2), time(9, 0)),
        ]
        assert rows[0].doctor.name == "Dr. Carlos Ruiz"
        assert len(appointment_repo.observe_for_doctor(pediatrician.id).snapshot()) == 2
        assert len(appointment_repo.observe_all().snapshot()) == 3
