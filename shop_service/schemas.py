"""Pydantic schemas for request/response validation.

Field names are snake_case in Python and camelCase on the wire.
"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialised with camelCase field names."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class LoginRequest(CamelModel):
    """Admin login request."""
    username: str
    password: str


class LoginResponse(CamelModel):
    """Admin login response."""
    token: str


class MessageResponse(CamelModel):
    message: str


class ProductCreate(CamelModel):
    """Schema for creating a product."""
    name: str = Field(min_length=1)
    name_si: str = Field(min_length=1)
    description: str = Field(min_length=1)
    description_si: str = Field(min_length=1)
    price: float = Field(ge=0)
    stock: int = Field(ge=0)
    category: str = Field(min_length=1)
    image: Optional[str] = None


class ProductUpdate(CamelModel):
    """Schema for a partial product update; only set fields are applied."""
    name: Optional[str] = Field(default=None, min_length=1)
    name_si: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    description_si: Optional[str] = Field(default=None, min_length=1)
    price: Optional[float] = Field(default=None, ge=0)
    stock: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = Field(default=None, min_length=1)
    image: Optional[str] = None


class ProductResponse(CamelModel):
    """Schema for product response."""
    id: str
    name: str
    name_si: str
    description: str
    description_si: str
    price: float
    stock: int
    image: Optional[str] = None
    category: str
    created_at: datetime


class LineItem(CamelModel):
    """One (product, quantity) pair of an order request."""
    product_id: str = Field(min_length=1)
    quantity: int = Field(gt=0)


class OrderCreate(CamelModel):
    """Schema for placing an order."""
    customer_name: str = Field(min_length=1)
    phone: str = Field(min_length=1)
    address: str = Field(min_length=1)
    products: List[LineItem] = Field(min_length=1)
    total_amount: float = Field(ge=0)


class OrderUpdate(CamelModel):
    """Admin-side partial order update. Line items are not editable."""
    status: Optional[str] = Field(default=None, min_length=1)
    customer_name: Optional[str] = Field(default=None, min_length=1)
    phone: Optional[str] = Field(default=None, min_length=1)
    address: Optional[str] = Field(default=None, min_length=1)
    total_amount: Optional[float] = Field(default=None, ge=0)


class OrderItemResponse(CamelModel):
    product_id: str
    quantity: int


class OrderResponse(CamelModel):
    """Schema for order response."""
    id: str
    customer_name: str
    phone: str
    address: str
    products: List[OrderItemResponse]
    total_amount: float
    status: str
    created_at: datetime


class OrderDetailItem(OrderItemResponse):
    """Line item with the referenced product resolved (None once deleted)."""
    product: Optional[ProductResponse] = None


class OrderDetailResponse(OrderResponse):
    """Order as listed for admins."""
    products: List[OrderDetailItem]
