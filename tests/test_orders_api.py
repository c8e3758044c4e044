"""Tests for the order routes, including concurrent submissions."""
import pytest
from fastapi.testclient import TestClient

from shop_service.app import create_app
from shop_service.database import Database
from shop_service.security import create_access_token
from shop_service.services.admin_service import AdminService
from tests.conftest import TEST_SECRET, make_settings, order_payload, stock_of


class TestPlaceOrder:

    def test_created_and_stock_decremented(self, client, database, make_product):
        product_id = make_product(stock=10).id

        r = client.post("/api/orders", json=order_payload((product_id, 4), total=1000.0))

        assert r.status_code == 201
        body = r.json()
        assert body["id"]
        assert body["status"] == "pending"
        assert body["customerName"] == "Nimal Perera"
        assert body["totalAmount"] == 1000.0
        assert body["products"] == [{"productId": product_id, "quantity": 4}]
        assert stock_of(database, product_id) == 6

    def test_insufficient_stock(self, client, database, make_product):
        product_id = make_product(stock=1).id

        r = client.post("/api/orders", json=order_payload((product_id, 2)))

        assert r.status_code == 400
        assert r.json() == {"error": "Insufficient stock", "productId": product_id}
        assert stock_of(database, product_id) == 1

    def test_unknown_product(self, client):
        r = client.post("/api/orders", json=order_payload(("does-not-exist", 1)))

        assert r.status_code == 404
        assert r.json() == {"error": "Product not found", "productId": "does-not-exist"}

    @pytest.mark.parametrize("field", ["customerName", "phone", "address", "totalAmount"])
    def test_missing_required_field(self, client, make_product, field):
        payload = order_payload((make_product().id, 1))
        del payload[field]

        assert client.post("/api/orders", json=payload).status_code == 400

    def test_blank_customer_name(self, client, make_product):
        payload = {**order_payload((make_product().id, 1)), "customerName": ""}
        assert client.post("/api/orders", json=payload).status_code == 400

    def test_empty_products(self, client):
        assert client.post("/api/orders", json=order_payload()).status_code == 400

    @pytest.mark.parametrize("quantity", [0, -2])
    def test_non_positive_quantity(self, client, database, make_product, quantity):
        product_id = make_product(stock=5).id

        r = client.post("/api/orders", json=order_payload((product_id, quantity)))

        assert r.status_code == 400
        assert stock_of(database, product_id) == 5


class TestStockPolicyOverHttp:

    def _client(self, tmp_path, policy):
        settings = make_settings(tmp_path, stock_policy=policy)
        database = Database(settings.database_url)
        return TestClient(create_app(settings, database))

    def _create(self, client, headers, stock):
        r = client.post(
            "/api/products",
            data={
                "name": "Cream",
                "nameSi": "ක්‍රීම්",
                "description": "Cream",
                "descriptionSi": "ක්‍රීම්",
                "price": "100",
                "stock": str(stock),
                "category": "cream",
            },
            headers=headers,
        )
        return r.json()["id"]

    def _stocks(self, client):
        return {p["id"]: p["stock"] for p in client.get("/api/products").json()}

    @pytest.mark.parametrize("policy,expected_first_stock", [
        ("atomic", 10),
        ("sequential", 5),
    ])
    def test_failed_order_side_effects(self, tmp_path, policy, expected_first_stock):
        with self._client(tmp_path, policy) as client:
            database = client.app.state.database
            with database.session() as db:
                admin_id = AdminService().create_admin(db, "admin", "pw").id
            headers = {"Authorization": f"Bearer {create_access_token(admin_id, TEST_SECRET)}"}

            first = self._create(client, headers, stock=10)
            second = self._create(client, headers, stock=1)

            r = client.post("/api/orders", json=order_payload((first, 5), (second, 2)))

            assert r.status_code == 400
            stocks = self._stocks(client)
            assert stocks[first] == expected_first_stock
            assert stocks[second] == 1


class TestListOrders:

    def test_resolves_products_inline(self, client, auth_headers, make_product):
        product = make_product(stock=5)
        client.post("/api/orders", json=order_payload((product.id, 2)))

        r = client.get("/api/orders", headers=auth_headers)

        assert r.status_code == 200
        orders = r.json()
        assert len(orders) == 1
        item = orders[0]["products"][0]
        assert item["productId"] == product.id
        assert item["quantity"] == 2
        assert item["product"]["name"] == "Vanilla Cream"
        assert item["product"]["stock"] == 3

    def test_deleted_product_resolves_to_null(self, client, auth_headers, make_product):
        product_id = make_product(stock=5).id
        client.post("/api/orders", json=order_payload((product_id, 1)))
        client.delete(f"/api/products/{product_id}", headers=auth_headers)

        orders = client.get("/api/orders", headers=auth_headers).json()

        assert orders[0]["products"][0]["productId"] == product_id
        assert orders[0]["products"][0]["product"] is None


class TestUpdateOrder:

    def test_status_update(self, client, auth_headers, make_product):
        order_id = client.post(
            "/api/orders", json=order_payload((make_product().id, 1))
        ).json()["id"]

        r = client.put(f"/api/orders/{order_id}", json={"status": "delivered"}, headers=auth_headers)

        assert r.status_code == 200
        assert r.json()["status"] == "delivered"
        assert r.json()["customerName"] == "Nimal Perera"

    def test_customer_fields_update(self, client, auth_headers, make_product):
        order_id = client.post(
            "/api/orders", json=order_payload((make_product().id, 1))
        ).json()["id"]

        r = client.put(
            f"/api/orders/{order_id}",
            json={"address": "7 Temple Road, Kandy", "phone": "0719876543"},
            headers=auth_headers,
        )

        assert r.json()["address"] == "7 Temple Road, Kandy"
        assert r.json()["phone"] == "0719876543"
        assert r.json()["status"] == "pending"

    def test_unknown_order(self, client, auth_headers):
        r = client.put("/api/orders/missing", json={"status": "shipped"}, headers=auth_headers)
        assert r.status_code == 404

    def test_requires_admin(self, client, make_product):
        order_id = client.post(
            "/api/orders", json=order_payload((make_product().id, 1))
        ).json()["id"]

        assert client.put(f"/api/orders/{order_id}", json={"status": "x"}).status_code == 401
