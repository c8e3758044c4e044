"""Shared fixtures: a per-test SQLite file, upload directory and application."""
from typing import Callable

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from shop_service.app import create_app
from shop_service.config import Settings
from shop_service.database import Database
from shop_service.models import Admin, Product
from shop_service.schemas import LineItem, OrderCreate, ProductCreate
from shop_service.security import create_access_token
from shop_service.services.admin_service import AdminService
from shop_service.services.catalog_service import CatalogService

TEST_SECRET = "test-signing-secret"
ADMIN_PASSWORD = "s3cret-pass"


def make_settings(tmp_path, stock_policy: str = "atomic") -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'shop.db'}",
        jwt_secret=TEST_SECRET,
        upload_dir=str(tmp_path / "uploads"),
        stock_policy=stock_policy,
        admin_username=None,
        admin_password=None,
        otlp_endpoint=None,
        pyroscope_server=None,
    )


def product_data(stock: int = 10, price: float = 250.0, name: str = "Vanilla Cream") -> ProductCreate:
    return ProductCreate(
        name=name,
        name_si="වැනිලා ක්‍රීම්",
        description="Fresh vanilla cream",
        description_si="නැවුම් වැනිලා ක්‍රීම්",
        price=price,
        stock=stock,
        category="cream",
    )


def order_request(*items, total: float = 500.0) -> OrderCreate:
    """Order request for (product_id, quantity) pairs."""
    return OrderCreate(
        customer_name="Nimal Perera",
        phone="0771234567",
        address="12 Galle Road, Colombo",
        products=[LineItem(product_id=pid, quantity=qty) for pid, qty in items],
        total_amount=total,
    )


def order_payload(*items, total: float = 500.0) -> dict:
    """JSON body for POST /api/orders."""
    return {
        "customerName": "Nimal Perera",
        "phone": "0771234567",
        "address": "12 Galle Road, Colombo",
        "products": [{"productId": pid, "quantity": qty} for pid, qty in items],
        "totalAmount": total,
    }


def stock_of(database: Database, product_id: str) -> int:
    with database.session() as db:
        return db.get(Product, product_id).stock


@pytest.fixture
def settings(tmp_path) -> Settings:
    return make_settings(tmp_path)


@pytest.fixture
def database(settings):
    database = Database(settings.database_url)
    database.init_db()
    yield database
    database.close()


@pytest.fixture
def session(database):
    db = database.session()
    yield db
    db.close()


@pytest.fixture
def app(settings, database) -> FastAPI:
    return create_app(settings, database)


@pytest.fixture
def client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def admin(session) -> Admin:
    return AdminService().create_admin(session, "admin", ADMIN_PASSWORD)


@pytest.fixture
def auth_headers(admin) -> dict:
    return {"Authorization": f"Bearer {create_access_token(admin.id, TEST_SECRET)}"}


@pytest.fixture
def make_product(session) -> Callable[..., Product]:
    catalog = CatalogService()

    def _make(**kwargs) -> Product:
        return catalog.create_product(session, product_data(**kwargs))

    return _make
