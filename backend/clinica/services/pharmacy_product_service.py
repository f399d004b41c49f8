import logging
from typing import Optional

from clinica.core.exceptions import ClinicaError
from clinica.core.security import require_admin
from clinica.db.live import LiveQuery
from clinica.domain.entities import PharmacyProduct
from clinica.domain.interfaces import IPharmacyProductRepository
from clinica.schemas.dtos import ProductRequest, ServiceResult

logger = logging.getLogger(__name__)


class PharmacyProductService:
    def __init__(self, repository: IPharmacyProductRepository):
        self.repository = repository

    def get_product(self, product_id: int) -> Optional[PharmacyProduct]:
        return self.repository.get_by_id(product_id)

    def watch_products(self, query: str = "") -> LiveQuery[PharmacyProduct]:
        """The catalogue, optionally narrowed to names containing ``query``."""
        if not query or not query.strip():
            return self.repository.observe_all()
        return self.repository.observe_search(query.strip())

    def add_product(self, request: ProductRequest, role: str) -> ServiceResult:
        try:
            require_admin(role, "manage products")
            request.validate()
            product = self.repository.create(self._from_request(request))
        except ClinicaError as e:
            return ServiceResult.fail(e.message)

        logger.info("Product added", extra={"context": {"product_id": product.id}})
        return ServiceResult.ok(f"Product {product.name} added successfully.", data=product)

    def update_product(self, request: ProductRequest, role: str) -> ServiceResult:
        try:
            require_admin(role, "manage products")
            request.validate()
            if request.id is None or self.repository.get_by_id(request.id) is None:
                return ServiceResult.fail("Product not found.")
            product = self.repository.update(self._from_request(request))
        except ClinicaError as e:
            return ServiceResult.fail(e.message)

        logger.info("Product updated", extra={"context": {"product_id": product.id}})
        return ServiceResult.ok(f"Product {product.name} updated successfully.", data=product)

    def delete_product(self, product_id: int, role: str) -> ServiceResult:
        try:
            require_admin(role, "manage products")
            product = self.repository.get_by_id(product_id)
            if product is None or not self.repository.delete(product_id):
                return ServiceResult.fail("Product not found.")
        except ClinicaError as e:
            return ServiceResult.fail(e.message)

        logger.info("Product deleted", extra={"context": {"product_id": product_id}})
        return ServiceResult.ok(f"Product {product.name} deleted successfully.")

    @staticmethod
    def _from_request(request: ProductRequest) -> PharmacyProduct:
        return PharmacyProduct(
            id=request.id,
            name=request.name,
            description=request.description,
            price=request.cleaned_price,
            stock=request.cleaned_stock,
            image_url=request.image_url,
        )
