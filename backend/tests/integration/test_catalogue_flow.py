"""
Store-backed tests for the catalogue and history services: lookups, edits
and what the screens read back afterwards.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from clinica.core.config import APP_TZ
from clinica.schemas.dtos import ProductRequest
from clinica.services import CartService, DoctorService, PharmacyProductService, PurchaseService
from clinica.services.user_service import UserService


@pytest.mark.services
class TestDoctorLookups:
    def test_get_doctor_and_specialties(self, doctor_repo, pediatrician, cardiologist):
        service = DoctorService(doctor_repo)

        assert service.get_doctor(pediatrician.id).name == "Dr. Ana Gómez"
        assert service.get_doctor(999) is None
        assert service.list_specialties() == ["Cardiología", "Pediatría"]


@pytest.mark.services
@pytest.mark.pharmacy
class TestProductEdits:
    def test_update_product_is_visible_on_lookup(self, product_repo, paracetamol):
        service = PharmacyProductService(product_repo)

        result = service.update_product(
            ProductRequest(
                id=paracetamol.id,
                name="Paracetamol 1g",
                description="Analgésico",
                price="6.10",
                stock="12",
            ),
            "admin",
        )

        assert result.success is True
        assert result.message == "Product Paracetamol 1g updated successfully."
        stored = service.get_product(paracetamol.id)
        assert stored.price == Decimal("6.10")
        assert stored.stock == 12

    def test_update_unknown_product(self, product_repo):
        result = PharmacyProductService(product_repo).update_product(
            ProductRequest(id=404, name="Nada", price="1", stock="1"), "admin"
        )

        assert result.success is False
        assert result.message == "Product not found."


@pytest.mark.services
class TestHistoryLookups:
    def test_get_purchase_after_checkout(self, purchase_repo, ana, paracetamol):
        cart = CartService(purchase_repo, clock=lambda: datetime(2024, 12, 2, 10, 0, tzinfo=APP_TZ))
        cart.add_to_cart(paracetamol, 2)
        cart.set_tendered_amount("20")
        checkout = cart.checkout(ana.id, "Ana")

        stored = PurchaseService(purchase_repo).get_purchase(checkout.purchase.purchase.id)

        assert stored.purchase.total_amount == Decimal("11.00")
        assert [(i.product_name, i.quantity) for i in stored.items] == [("Paracetamol 500mg", 2)]
        assert purchase_repo.count_items() == 1

    def test_get_user(self, user_repo, ana):
        service = UserService(user_repo)

        assert service.get_user(ana.id).email == "ana@x.com"
        assert service.get_user(999) is None
