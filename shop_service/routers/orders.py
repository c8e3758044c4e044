"""Orders API router."""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from shop_service.auth import get_current_admin
from shop_service.database import get_db
from shop_service.dependencies import get_order_service
from shop_service.models import Admin
from shop_service.schemas import OrderCreate, OrderDetailResponse, OrderResponse, OrderUpdate
from shop_service.services.order_service import OrderErrorKind, OrderService

router = APIRouter(prefix="/api/orders", tags=["orders"])

PLACEMENT_ERRORS = {
    OrderErrorKind.INSUFFICIENT_STOCK: (400, "Insufficient stock"),
    OrderErrorKind.PRODUCT_NOT_FOUND: (404, "Product not found"),
}


@router.post("", response_model=OrderResponse, status_code=201)
async def place_order(
    request: OrderCreate,
    db: Session = Depends(get_db),
    order_service: OrderService = Depends(get_order_service)
):
    """Place an order and take its quantities out of stock."""
    result = order_service.place_order(db, request)
    if not result.ok:
        status_code, message = PLACEMENT_ERRORS[result.error.kind]
        raise HTTPException(status_code=status_code, detail={
            "error": message,
            "productId": result.error.product_id,
        })
    return result.order


@router.get("", response_model=List[OrderDetailResponse])
async def list_orders(
    db: Session = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
    order_service: OrderService = Depends(get_order_service)
):
    """List all orders with their products resolved - admin only."""
    return order_service.list_orders(db)


@router.put("/{order_id}", response_model=OrderResponse)
async def update_order(
    request: OrderUpdate,
    order_id: str = Path(..., description="Order ID"),
    db: Session = Depends(get_db),
    admin: Admin = Depends(get_current_admin),
    order_service: OrderService = Depends(get_order_service)
):
    """Update an order's status or customer details - admin only."""
    order = order_service.update_order(db, order_id, request)
    if order is None:
        raise HTTPException(status_code=404, detail="Order not found")
    return order
