"""
Purchase repository.

``record_purchase`` is the one multi-table write of the clinic: the purchase
header, its denormalized items and the stock decrement of every product are
committed together or not at all.
"""

import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import selectinload

from clinica.core.exceptions import InsufficientStockError, NotFoundError
from clinica.db.base import PharmacyProduct as DbProduct
from clinica.db.base import Purchase as DbPurchase
from clinica.db.base import PurchaseItem as DbPurchaseItem
from clinica.db.live import ChangeNotifier, LiveQuery
from clinica.db.session import SessionLocal, get_change_notifier, store_transaction
from clinica.domain.entities import Purchase, PurchaseItem, PurchaseWithItems
from clinica.domain.interfaces import IPurchaseRepository

logger = logging.getLogger(__name__)

PURCHASE_TABLES = {"purchases", "purchase_items"}


def purchase_to_domain(db_purchase: DbPurchase) -> PurchaseWithItems:
    return PurchaseWithItems(
        purchase=Purchase(
            id=db_purchase.id,
            user_id=db_purchase.user_id,
            purchase_date=db_purchase.purchase_date,
            total_amount=db_purchase.total_amount,
            paid_amount=db_purchase.paid_amount,
            change_amount=db_purchase.change_amount,
        ),
        items=[
            PurchaseItem(
                purchase_id=item.purchase_id,
                product_id=item.product_id,
                product_name=item.product_name,
                product_description=item.product_description,
                product_price=item.product_price,
                quantity=item.quantity,
            )
            for item in db_purchase.items
        ],
    )


class PurchaseRepository(IPurchaseRepository):
    def __init__(self, db_session=None, notifier: Optional[ChangeNotifier] = None):
        self.db = db_session or SessionLocal()
        self.notifier = notifier or get_change_notifier()

    def record_purchase(
        self, purchase: Purchase, items: List[PurchaseItem]
    ) -> PurchaseWithItems:
        """
        Store header, items and stock decrements as one transaction.

        Stock is revalidated against the current row of each product; a
        shortfall raises InsufficientStockError and nothing is kept.
        """
        db_purchase = DbPurchase(
            user_id=purchase.user_id,
            purchase_date=purchase.purchase_date,
            total_amount=purchase.total_amount,
            paid_amount=purchase.paid_amount,
            change_amount=purchase.change_amount,
        )
        with store_transaction(self.db):
            self.db.add(db_purchase)
            self.db.flush()

            self.db.add_all(
                DbPurchaseItem(
                    purchase_id=db_purchase.id,
                    product_id=item.product_id,
                    product_name=item.product_name,
                    product_description=item.product_description,
                    product_price=item.product_price,
                    quantity=item.quantity,
                )
                for item in items
            )
            self.db.flush()

            for item in items:
                self._decrement_stock(item.product_id, item.quantity)

        logger.info(
            "Purchase recorded",
            extra={
                "context": {
                    "purchase_id": db_purchase.id,
                    "user_id": purchase.user_id,
                    "items": len(items),
                    "total": str(purchase.total_amount),
                }
            },
        )
        return self.get_by_id(db_purchase.id)  # type: ignore[return-value]

    def _decrement_stock(self, product_id: int, quantity: int) -> None:
        db_product = self.db.get(DbProduct, product_id, populate_existing=True)
        if db_product is None:
            raise NotFoundError(f"Product {product_id} not found")
        if db_product.stock < quantity:
            raise InsufficientStockError(db_product.name, db_product.stock, quantity)
        db_product.stock = db_product.stock - quantity
        self.db.flush()

    def get_by_id(self, purchase_id: int) -> Optional[PurchaseWithItems]:
        db_purchase = (
            self.db.query(DbPurchase)
            .options(selectinload(DbPurchase.items))
            .populate_existing()
            .filter_by(id=purchase_id)
            .first()
        )
        return purchase_to_domain(db_purchase) if db_purchase else None

    def observe_for_user(self, user_id: int) -> LiveQuery[PurchaseWithItems]:
        return self._observe(user_id)

    def observe_all(self) -> LiveQuery[PurchaseWithItems]:
        return self._observe(None)

    def list_all(self) -> List[PurchaseWithItems]:
        return self._observe(None).snapshot()

    def count(self) -> int:
        return self.db.query(func.count(DbPurchase.id)).scalar() or 0

    def count_items(self) -> int:
        return self.db.query(func.count()).select_from(DbPurchaseItem).scalar() or 0

    def _observe(self, user_id: Optional[int]) -> LiveQuery[PurchaseWithItems]:
        def load(session) -> List[PurchaseWithItems]:
            query = session.query(DbPurchase).options(selectinload(DbPurchase.items))
            if user_id is not None:
                query = query.filter(DbPurchase.user_id == user_id)
            rows = query.order_by(
                DbPurchase.purchase_date.desc(), DbPurchase.id.desc()
            ).all()
            return [purchase_to_domain(p) for p in rows]

        return LiveQuery(self.notifier, PURCHASE_TABLES, load)
