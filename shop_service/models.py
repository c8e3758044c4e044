"""Database models for the shop service."""
import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import declarative_base, relationship, synonym

Base = declarative_base()


def new_id() -> str:
    """Generate an opaque document identity."""
    return uuid.uuid4().hex


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Product(Base):
    """Product model."""
    __tablename__ = "products"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String, nullable=False, index=True)
    name_si = Column(String, nullable=False)
    description = Column(Text, nullable=False)
    description_si = Column(Text, nullable=False)
    price = Column(Float, nullable=False)
    stock = Column(Integer, nullable=False)
    image = Column(String, nullable=True)
    category = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)


class Order(Base):
    """Order model."""
    __tablename__ = "orders"

    id = Column(String(32), primary_key=True, default=new_id)
    customer_name = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    address = Column(String, nullable=False)
    total_amount = Column(Float, nullable=False)
    status = Column(String, nullable=False, default="pending")
    created_at = Column(DateTime(timezone=True), default=utcnow)

    items = relationship(
        "OrderItem",
        order_by="OrderItem.position",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    # Wire name of the line items
    products = synonym("items")


class OrderItem(Base):
    """Line item of an order.

    ``product_id`` is a plain identity rather than a foreign key: products may
    be deleted while the orders that referenced them are kept.
    """
    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(String(32), ForeignKey("orders.id"), nullable=False, index=True)
    position = Column(Integer, nullable=False)
    product_id = Column(String(32), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)


class Admin(Base):
    """Admin account model."""
    __tablename__ = "admins"

    id = Column(String(32), primary_key=True, default=new_id)
    username = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow)
