"""
Live query integration tests.

Subscribers get a fresh snapshot after every commit touching their tables,
nothing after a rollback, and nothing once cancelled.
"""

from datetime import date, time
from decimal import Decimal
from unittest.mock import Mock

import pytest

from clinica.core.exceptions import ConstraintError
from clinica.db.live import LiveFeed, cascade_map
from clinica.db.session import Base
from clinica.domain.entities import Appointment, Doctor, PharmacyProduct


@pytest.mark.live
class TestLiveQueries:
    def test_subscribe_returns_initial_snapshot(self, doctor_repo, pediatrician):
        initial, subscription = doctor_repo.observe_all().subscribe(Mock())

        assert [d.name for d in initial] == ["Dr. Ana Gómez"]
        assert subscription.active is True

    def test_commit_emits_new_snapshot(self, doctor_repo, pediatrician):
        on_change = Mock()
        doctor_repo.observe_all().subscribe(on_change)

        doctor_repo.create(Doctor(name="Dr. Beto Paz", specialty="Cardiología"))

        on_change.assert_called_once()
        assert [d.name for d in on_change.call_args.args[0]] == [
            "Dr. Ana Gómez",
            "Dr. Beto Paz",
        ]

    def test_unrelated_table_does_not_emit(self, doctor_repo, product_repo):
        on_change = Mock()
        doctor_repo.observe_all().subscribe(on_change)

        product_repo.create(PharmacyProduct(name="Gasa", price=Decimal("1.00"), stock=1))

        on_change.assert_not_called()

    def test_no_emission_after_cancel(self, doctor_repo):
        on_change = Mock()
        _, subscription = doctor_repo.observe_all().subscribe(on_change)

        subscription.cancel()
        doctor_repo.create(Doctor(name="Dr. Beto Paz", specialty="Cardiología"))

        on_change.assert_not_called()
        assert subscription.active is False

    def test_rollback_does_not_emit(self, user_repo, ana, appointment_repo):
        on_change = Mock()
        appointment_repo.observe_all().subscribe(on_change)

        with pytest.raises(ConstraintError):
            appointment_repo.create(
                Appointment(user_id=ana.id, doctor_id=999, date=date(2024, 12, 2), time=time(9, 0))
            )

        on_change.assert_not_called()

    def test_failing_subscriber_does_not_block_others(self, doctor_repo):
        broken = Mock(side_effect=RuntimeError("screen gone"))
        healthy = Mock()
        live = doctor_repo.observe_all()
        live.subscribe(broken)
        live.subscribe(healthy)

        created = doctor_repo.create(Doctor(name="Dr. Beto Paz", specialty="Cardiología"))

        assert created.id is not None
        healthy.assert_called_once()

    def test_cancelling_an_appointment_updates_user_view(
        self, appointment_repo, booked_appointment, ana
    ):
        on_change = Mock()
        appointment_repo.observe_for_user(ana.id).subscribe(on_change)

        appointment_repo.cancel(booked_appointment.id)

        rows = on_change.call_args.args[0]
        assert rows[0].appointment.is_cancelled is True

    def test_deleting_doctor_removes_joined_rows(
        self, doctor_repo, appointment_repo, booked_appointment, ana, pediatrician
    ):
        on_change = Mock()
        initial, _ = appointment_repo.observe_for_user(ana.id).subscribe(on_change)
        assert len(initial) == 1

        doctor_repo.delete(pediatrician.id)

        on_change.assert_called_once_with([])

    def test_writes_from_another_session_are_published(
        self, other_session, notifier, doctor_repo, pediatrician
    ):
        from clinica.repositories import DoctorRepository

        on_change = Mock()
        doctor_repo.observe_all().subscribe(on_change)

        DoctorRepository(other_session, notifier).delete(pediatrician.id)

        on_change.assert_called_once_with([])


@pytest.mark.live
class TestCascadeMap:
    def test_user_delete_reaches_grandchildren(self, engine):
        cascades = cascade_map(Base.metadata)

        assert cascades["users"] == {"appointments", "purchases", "purchase_items"}
        assert cascades["doctors"] == {"appointments"}
        assert cascades["pharmacy_products"] == {"purchase_items"}
        assert cascades["purchase_items"] == set()


@pytest.mark.live
class TestLiveFeed:
    def test_switch_moves_subscription_to_new_scope(
        self, doctor_repo, pediatrician, cardiologist, notifier
    ):
        on_change = Mock()
        feed = LiveFeed(on_change)

        first = feed.switch(doctor_repo.observe_by_specialty("Pediatría"))
        second = feed.switch(doctor_repo.observe_by_specialty("Cardiología"))

        assert [d.name for d in first] == ["Dr. Ana Gómez"]
        assert [d.name for d in second] == ["Dr. Carlos Ruiz"]
        assert notifier.subscriber_count() == 1

        doctor_repo.create(Doctor(name="Dr. Beto Paz", specialty="Cardiología"))
        assert [d.name for d in on_change.call_args.args[0]] == [
            "Dr. Beto Paz",
            "Dr. Carlos Ruiz",
        ]

        feed.close()
        assert notifier.subscriber_count() == 0
