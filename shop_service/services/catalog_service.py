"""Product catalog store."""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from shop_service.models import Product
from shop_service.schemas import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class CatalogService:
    """CRUD over product documents plus the conditional stock decrement."""

    def list_products(self, db: Session) -> List[Product]:
        return list(db.execute(select(Product).order_by(Product.created_at)).scalars())

    def get_product(self, db: Session, product_id: str) -> Optional[Product]:
        return db.get(Product, product_id)

    def get_products(self, db: Session, product_ids: List[str]) -> Dict[str, Product]:
        """Fetch several products at once, keyed by id. Unknown ids are absent."""
        if not product_ids:
            return {}
        rows = db.execute(select(Product).where(Product.id.in_(set(product_ids)))).scalars()
        return {product.id: product for product in rows}

    def create_product(self, db: Session, data: ProductCreate) -> Product:
        product = Product(**data.model_dump())
        db.add(product)
        db.commit()
        db.refresh(product)
        logger.info("Product created", extra={
            "product_id": product.id,
            "product_name": product.name,
            "stock": product.stock
        })
        return product

    def update_product(
        self,
        db: Session,
        product_id: str,
        data: ProductUpdate
    ) -> Optional[Product]:
        """
        Apply the fields set on ``data`` to a product.

        Returns:
            The updated product, or None if no product has this id
        """
        product = db.get(Product, product_id)
        if product is None:
            return None

        changes: Dict[str, Any] = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None
        }
        for field, value in changes.items():
            setattr(product, field, value)
        db.commit()
        db.refresh(product)
        logger.info("Product updated", extra={
            "product_id": product_id,
            "fields": sorted(changes)
        })
        return product

    def delete_product(self, db: Session, product_id: str) -> bool:
        """Delete a product. Returns False if it did not exist."""
        product = db.get(Product, product_id)
        if product is None:
            return False
        db.delete(product)
        db.commit()
        logger.info("Product deleted", extra={"product_id": product_id})
        return True

    def decrement_stock(self, db: Session, product_id: str, quantity: int) -> bool:
        """
        Remove ``quantity`` units from a product's stock if enough remain.

        The check and the write are a single conditional UPDATE, so two
        concurrent orders can never both take the last units. The change is
        left uncommitted; the caller decides the transaction boundary.

        Returns:
            True if the stock was decremented, False if the product is missing
            or holds fewer than ``quantity`` units
        """
        result = db.execute(
            update(Product)
            .where(Product.id == product_id, Product.stock >= quantity)
            .values(stock=Product.stock - quantity)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1
