"""Order placement and order management service."""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from opentelemetry import trace
from sqlalchemy import select
from sqlalchemy.orm import Session

from shop_service.models import Order, OrderItem
from shop_service.schemas import (
    LineItem,
    OrderCreate,
    OrderDetailItem,
    OrderDetailResponse,
    OrderUpdate,
    ProductResponse,
)
from shop_service.services.catalog_service import CatalogService
from shop_service.monitoring import (
    order_amount_histogram,
    order_rejections_counter,
    orders_placed_counter,
    stock_decrements_counter,
)

logger = logging.getLogger(__name__)

ATOMIC = "atomic"
SEQUENTIAL = "sequential"


class OrderErrorKind(str, Enum):
    INSUFFICIENT_STOCK = "insufficient_stock"
    PRODUCT_NOT_FOUND = "product_not_found"


@dataclass(frozen=True)
class PlacementError:
    """Why an order was refused, and for which product."""
    kind: OrderErrorKind
    product_id: str
    requested: int
    available: Optional[int] = None


@dataclass(frozen=True)
class PlacementResult:
    """Outcome of ``OrderService.place_order``: exactly one of order/error is set."""
    order: Optional[Order] = None
    error: Optional[PlacementError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class OrderService:
    """
    Service for placing and managing orders.

    Two stock policies are supported:

    - ``atomic``: every line item is resolved and checked first, then all
      decrements and the order insert commit in one transaction. A refused
      order leaves stock untouched.
    - ``sequential``: line items are checked and decremented one at a time in
      the order given, each decrement committed on its own. A refusal on a
      later item leaves the earlier decrements in place.

    In both policies each decrement is conditional on the remaining stock,
    so concurrent orders cannot oversell a product.
    """

    def __init__(self, catalog_service: CatalogService, stock_policy: str = ATOMIC):
        if stock_policy not in (ATOMIC, SEQUENTIAL):
            raise ValueError(f"Unknown stock policy: {stock_policy!r}")
        self.catalog_service = catalog_service
        self.stock_policy = stock_policy
        self.tracer = trace.get_tracer(__name__)

    def place_order(self, db: Session, request: OrderCreate) -> PlacementResult:
        """
        Commit an order and decrement stock for its line items.

        Args:
            db: Database session
            request: Validated order request

        Returns:
            PlacementResult holding the persisted order or the refusal reason
        """
        span = trace.get_current_span()
        span.set_attribute("order.stock_policy", self.stock_policy)
        span.set_attribute("order.line_items", len(request.products))

        if self.stock_policy == SEQUENTIAL:
            result = self._place_sequential(db, request)
        else:
            result = self._place_atomic(db, request)

        if result.ok:
            order = result.order
            orders_placed_counter.add(1, {"policy": self.stock_policy})
            order_amount_histogram.record(order.total_amount, {"policy": self.stock_policy})
            logger.info("Order placed", extra={
                "order_id": order.id,
                "line_items": len(order.items),
                "total_amount": order.total_amount,
                "policy": self.stock_policy
            })
        else:
            error = result.error
            order_rejections_counter.add(1, {
                "reason": error.kind.value,
                "policy": self.stock_policy
            })
            logger.warning("Order rejected", extra={
                "reason": error.kind.value,
                "product_id": error.product_id,
                "requested": error.requested,
                "available": error.available,
                "policy": self.stock_policy
            })
        return result

    def _place_atomic(self, db: Session, request: OrderCreate) -> PlacementResult:
        requested = self._combined_quantities(request.products)

        with self.tracer.start_as_current_span("db.query.get_products") as db_span:
            db_span.set_attribute("db.operation", "SELECT")
            db_span.set_attribute("db.table", "products")
            products = self.catalog_service.get_products(db, list(requested))
            db_span.set_attribute("db.rows_returned", len(products))

        for product_id, quantity in requested.items():
            product = products.get(product_id)
            if product is None:
                return self._refuse(OrderErrorKind.PRODUCT_NOT_FOUND, product_id, quantity)
            if product.stock < quantity:
                return self._refuse(
                    OrderErrorKind.INSUFFICIENT_STOCK, product_id, quantity, product.stock
                )

        try:
            for product_id, quantity in requested.items():
                if not self._decrement(db, product_id, quantity):
                    # Stock changed since the check above
                    db.rollback()
                    return self._refuse_after_race(db, product_id, quantity)

            order = self._build_order(request)
            db.add(order)
            db.commit()
        except Exception:
            db.rollback()
            raise

        for product_id, quantity in requested.items():
            stock_decrements_counter.add(quantity, {"product_id": product_id})
        db.refresh(order)
        return PlacementResult(order=order)

    def _place_sequential(self, db: Session, request: OrderCreate) -> PlacementResult:
        committed: List[str] = []

        for item in request.products:
            with self.tracer.start_as_current_span("db.query.get_product") as db_span:
                db_span.set_attribute("db.operation", "SELECT")
                db_span.set_attribute("db.table", "products")
                db_span.set_attribute("product.id", item.product_id)
                product = self.catalog_service.get_product(db, item.product_id)

            if product is None:
                self._log_partial(committed)
                return self._refuse(
                    OrderErrorKind.PRODUCT_NOT_FOUND, item.product_id, item.quantity
                )
            if product.stock < item.quantity:
                self._log_partial(committed)
                return self._refuse(
                    OrderErrorKind.INSUFFICIENT_STOCK,
                    item.product_id,
                    item.quantity,
                    product.stock
                )

            try:
                decremented = self._decrement(db, item.product_id, item.quantity)
                if decremented:
                    db.commit()
                else:
                    db.rollback()
            except Exception:
                db.rollback()
                raise

            if not decremented:
                self._log_partial(committed)
                return self._refuse_after_race(db, item.product_id, item.quantity)

            committed.append(item.product_id)
            stock_decrements_counter.add(item.quantity, {"product_id": item.product_id})

        try:
            order = self._build_order(request)
            db.add(order)
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(order)
        return PlacementResult(order=order)

    def _decrement(self, db: Session, product_id: str, quantity: int) -> bool:
        with self.tracer.start_as_current_span("db.query.decrement_stock") as update_span:
            update_span.set_attribute("db.operation", "UPDATE")
            update_span.set_attribute("db.table", "products")
            update_span.set_attribute("product.id", product_id)
            update_span.set_attribute("product.quantity", quantity)

            decremented = self.catalog_service.decrement_stock(db, product_id, quantity)
            update_span.set_attribute("db.rows_affected", 1 if decremented else 0)
            return decremented

    def _refuse_after_race(self, db: Session, product_id: str, quantity: int) -> PlacementResult:
        product = self.catalog_service.get_product(db, product_id)
        if product is None:
            return self._refuse(OrderErrorKind.PRODUCT_NOT_FOUND, product_id, quantity)
        return self._refuse(OrderErrorKind.INSUFFICIENT_STOCK, product_id, quantity, product.stock)

    @staticmethod
    def _refuse(
        kind: OrderErrorKind,
        product_id: str,
        requested: int,
        available: Optional[int] = None
    ) -> PlacementResult:
        return PlacementResult(error=PlacementError(kind, product_id, requested, available))

    @staticmethod
    def _combined_quantities(items: List[LineItem]) -> Dict[str, int]:
        """Total quantity per product, in first-seen order."""
        quantities: Dict[str, int] = {}
        for item in items:
            quantities[item.product_id] = quantities.get(item.product_id, 0) + item.quantity
        return quantities

    @staticmethod
    def _build_order(request: OrderCreate) -> Order:
        # The total is taken as sent by the client, not recomputed from prices
        return Order(
            customer_name=request.customer_name,
            phone=request.phone,
            address=request.address,
            total_amount=request.total_amount,
            status="pending",
            items=[
                OrderItem(position=position, product_id=item.product_id, quantity=item.quantity)
                for position, item in enumerate(request.products)
            ],
        )

    @staticmethod
    def _log_partial(committed: List[str]) -> None:
        if committed:
            logger.warning("Order aborted after partial stock decrement", extra={
                "decremented_product_ids": committed
            })

    def list_orders(self, db: Session) -> List[OrderDetailResponse]:
        """All orders with each line item's product resolved inline."""
        orders = list(db.execute(select(Order).order_by(Order.created_at)).scalars())
        product_ids = [item.product_id for order in orders for item in order.items]
        products = self.catalog_service.get_products(db, product_ids)

        details = []
        for order in orders:
            items = []
            for item in order.items:
                product = products.get(item.product_id)
                items.append(OrderDetailItem(
                    product_id=item.product_id,
                    quantity=item.quantity,
                    product=ProductResponse.model_validate(product) if product else None,
                ))
            details.append(OrderDetailResponse(
                id=order.id,
                customer_name=order.customer_name,
                phone=order.phone,
                address=order.address,
                products=items,
                total_amount=order.total_amount,
                status=order.status,
                created_at=order.created_at,
            ))
        return details

    def update_order(self, db: Session, order_id: str, data: OrderUpdate) -> Optional[Order]:
        """
        Apply an admin's partial update to an order.

        Returns:
            The updated order, or None if no order has this id
        """
        order = db.get(Order, order_id)
        if order is None:
            return None

        changes = {
            field: value
            for field, value in data.model_dump(exclude_unset=True).items()
            if value is not None
        }
        for field, value in changes.items():
            setattr(order, field, value)
        db.commit()
        db.refresh(order)
        logger.info("Order updated", extra={
            "order_id": order_id,
            "fields": sorted(changes),
            "status": order.status
        })
        return order
