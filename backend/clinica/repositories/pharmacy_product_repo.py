from typing import List, Optional

from clinica.db.base import PharmacyProduct as DbProduct
from clinica.db.live import ChangeNotifier, LiveQuery
from clinica.db.session import SessionLocal, get_change_notifier, store_transaction
from clinica.domain.entities import PharmacyProduct as DomainProduct
from clinica.domain.interfaces import IPharmacyProductRepository

PRODUCT_TABLES = {"pharmacy_products"}


def product_to_domain(db_product: DbProduct) -> DomainProduct:
    return DomainProduct(
        id=db_product.id,
        name=db_product.name,
        description=db_product.description or "",
        price=db_product.price,
        stock=db_product.stock,
        image_url=db_product.image_url,
    )


class PharmacyProductRepository(IPharmacyProductRepository):
    def __init__(self, db_session=None, notifier: Optional[ChangeNotifier] = None):
        self.db = db_session or SessionLocal()
        self.notifier = notifier or get_change_notifier()

    def get_by_id(self, product_id: int) -> Optional[DomainProduct]:
        db_product = self.db.get(DbProduct, product_id, populate_existing=True)
        return product_to_domain(db_product) if db_product else None

    def observe_all(self) -> LiveQuery[DomainProduct]:
        def load(session) -> List[DomainProduct]:
            rows = session.query(DbProduct).order_by(DbProduct.name.asc(), DbProduct.id).all()
            return [product_to_domain(p) for p in rows]

        return LiveQuery(self.notifier, PRODUCT_TABLES, load)

    def observe_search(self, query: str) -> LiveQuery[DomainProduct]:
        """Products whose name contains ``query`` (case-insensitive)."""
        pattern = f"%{query}%"

        def load(session) -> List[DomainProduct]:
            rows = (
                session.query(DbProduct)
                .filter(DbProduct.name.ilike(pattern))
                .order_by(DbProduct.name.asc(), DbProduct.id)
                .all()
            )
            return [product_to_domain(p) for p in rows]

        return LiveQuery(self.notifier, PRODUCT_TABLES, load)

    def create(self, product: DomainProduct) -> DomainProduct:
        db_product = DbProduct(
            name=product.name,
            description=product.description,
            price=product.price,
            stock=product.stock,
            image_url=product.image_url,
        )
        with store_transaction(self.db):
            self.db.add(db_product)
        self.db.refresh(db_product)
        return product_to_domain(db_product)

    def update(self, product: DomainProduct) -> DomainProduct:
        db_product = self.db.get(DbProduct, product.id) if product.id else None
        if not db_product:
            raise ValueError("Product not found")
        with store_transaction(self.db):
            db_product.name = product.name
            db_product.description = product.description
            db_product.price = product.price
            db_product.stock = product.stock
            db_product.image_url = product.image_url
        self.db.refresh(db_product)
        return product_to_domain(db_product)

    def delete(self, product_id: int) -> bool:
        db_product = self.db.get(DbProduct, product_id)
        if not db_product:
            return False
        with store_transaction(self.db):
            self.db.delete(db_product)
        return True
