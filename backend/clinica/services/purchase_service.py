from decimal import Decimal
from typing import Dict, Optional

from clinica.core.security import require_admin
from clinica.db.live import LiveQuery
from clinica.domain.entities import PurchaseWithItems
from clinica.domain.interfaces import IPurchaseRepository


class PurchaseService:
    """Purchase history for users and sales vouchers for admins."""

    def __init__(self, repository: IPurchaseRepository):
        self.repository = repository

    def get_purchase(self, purchase_id: int) -> Optional[PurchaseWithItems]:
        return self.repository.get_by_id(purchase_id)

    def watch_user_purchases(self, user_id: int) -> LiveQuery[PurchaseWithItems]:
        return self.repository.observe_for_user(user_id)

    def watch_all_purchases(self, role: str) -> LiveQuery[PurchaseWithItems]:
        require_admin(role, "view all purchases")
        return self.repository.observe_all()

    def sales_summary(self, role: str) -> Dict[str, object]:
        """Number of purchases and their summed total."""
        require_admin(role, "view sales")
        purchases = self.repository.list_all()
        total = sum((p.purchase.total_amount for p in purchases), Decimal("0"))
        return {"count": len(purchases), "total_amount": total}
