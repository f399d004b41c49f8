"""
Shopping cart and checkout.

The cart lives in memory for one shopping session and is owned by a single
caller, so it needs no locking. Only ``checkout`` touches the store, and it
does so through ``IPurchaseRepository.record_purchase`` which commits the
purchase header, its items and the stock decrements as one transaction.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from clinica.core.config import APP_TZ, CURRENCY_LABEL
from clinica.core.exceptions import ClinicaError, ValidationError
from clinica.core.validation import parse_amount
from clinica.domain.entities import CartItem, PharmacyProduct, Purchase, PurchaseItem, Receipt
from clinica.domain.interfaces import IPurchaseRepository
from clinica.schemas.dtos import CheckoutResult, ServiceResult

logger = logging.getLogger(__name__)

EMPTY_CART = "The cart is empty. Add products before paying."

Clock = Callable[[], datetime]


def _now() -> datetime:
    return datetime.now(APP_TZ)


def stock_warning(product: PharmacyProduct) -> str:
    return f"Not enough stock for {product.name}. Only {product.stock} units left."


def format_money(amount: Decimal) -> str:
    return f"{CURRENCY_LABEL} {amount:.2f}"


class CartService:
    def __init__(self, purchase_repo: IPurchaseRepository, clock: Optional[Clock] = None):
        self.purchase_repo = purchase_repo
        self.clock = clock or _now
        self._lines: Dict[int, CartItem] = {}
        self._tendered = Decimal("0")

    # Read accessors

    @property
    def items(self) -> List[CartItem]:
        return list(self._lines.values())

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self._lines.values()), Decimal("0"))

    @property
    def tendered(self) -> Decimal:
        return self._tendered

    @property
    def change(self) -> Decimal:
        return max(Decimal("0"), self._tendered - self.total)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    # Cart edits

    def add_to_cart(self, product: PharmacyProduct, quantity: int = 1) -> ServiceResult:
        """Add ``quantity`` units, merging with an existing line.

        The line never exceeds the product's stock: the excess is dropped and
        reported as a warning.
        """
        if quantity <= 0:
            return ServiceResult.fail("Quantity must be positive.")

        current = self._lines[product.id].quantity if product.id in self._lines else 0
        return self._set_line(product, current + quantity, f"{product.name} added to cart.")

    def update_quantity(self, product: PharmacyProduct, new_quantity: int) -> ServiceResult:
        if new_quantity <= 0:
            return self.remove_from_cart(product)
        return self._set_line(product, new_quantity, f"{product.name} quantity updated.")

    def remove_from_cart(self, product: PharmacyProduct) -> ServiceResult:
        self._lines.pop(product.id, None)
        return ServiceResult.ok(f"{product.name} removed from cart.")

    def clear_cart(self) -> None:
        self._lines.clear()
        self._tendered = Decimal("0")

    def set_tendered_amount(self, amount: Any) -> Decimal:
        """Record the amount handed over; anything unparseable counts as zero."""
        try:
            self._tendered = parse_amount(amount, "tendered")
        except ValidationError:
            self._tendered = Decimal("0")
        return self._tendered

    def _set_line(self, product: PharmacyProduct, wanted: int, message: str) -> ServiceResult:
        warning = None
        quantity = wanted
        if wanted > product.stock:
            quantity = product.stock
            warning = stock_warning(product)
            logger.info(
                "Cart quantity clamped to stock",
                extra={"context": {"product_id": product.id, "requested": wanted, "stock": product.stock}},
            )

        if quantity <= 0:
            self._lines.pop(product.id, None)
            return ServiceResult(success=False, message=warning or message, warning=warning)

        self._lines[product.id] = CartItem(product=product, quantity=quantity)
        return ServiceResult.ok(message, data=self._lines[product.id], warning=warning)

    # Checkout

    def checkout(self, user_id: int, user_name: Optional[str] = None) -> CheckoutResult:
        """Pay for the cart.

        Business Rules:
        - the cart must not be empty
        - the tendered amount must cover the total
        - header, items and stock decrements are stored together or not at all
        - item rows keep the product name, description and price of this sale
        """
        if self.is_empty:
            return CheckoutResult(success=False, message=EMPTY_CART)

        total = self.total
        tendered = self._tendered
        if tendered < total:
            return CheckoutResult(
                success=False,
                message=f"Insufficient amount. Missing {format_money(total - tendered)}",
            )

        change = tendered - total
        items = [
            PurchaseItem(
                product_id=line.product.id,
                product_name=line.product.name,
                product_description=line.product.description,
                product_price=line.product.price,
                quantity=line.quantity,
            )
            for line in self._lines.values()
        ]
        purchase = Purchase(
            user_id=user_id,
            purchase_date=self.clock(),
            total_amount=total,
            paid_amount=tendered,
            change_amount=change,
        )

        try:
            stored = self.purchase_repo.record_purchase(purchase, items)
        except ClinicaError as e:
            logger.warning(
                "Checkout failed",
                extra={"context": {"user_id": user_id, "error": e.message}},
            )
            return CheckoutResult(success=False, message=e.message)

        receipt = Receipt(
            user_name=user_name or "",
            items=stored.items,
            total=total,
            tendered=tendered,
            change=change,
            purchase_id=stored.purchase.id,
            purchase_date=stored.purchase.purchase_date,
        )
        self.clear_cart()
        logger.info(
            "Checkout completed",
            extra={"context": {"user_id": user_id, "purchase_id": stored.purchase.id}},
        )
        return CheckoutResult(
            success=True,
            message=f"Payment successful. Change: {format_money(change)}",
            purchase=stored,
            receipt=receipt,
        )
