"""
API tests for orders, order items and statuses
"""
import pytest


@pytest.fixture
def reservation_id(client, reservation_payload):
    return client.post("/api/marketplace/reservations", json=reservation_payload).json()["data"]["id"]


@pytest.fixture
def order(client, reservation_id):
    return client.post("/api/marketplace/orders", json={"reservation_id": reservation_id}).json()["order"]


class TestCreateOrder:
    """Test POST /api/marketplace/orders"""

    def test_order_from_reservation(self, client, seed, order):
        assert order["is_active"] is True
        assert order["state"]["name"] == "new"
        assert order["order_items"][0]["sku"] == "SKU-OLV-1"
        assert seed.stock.stock_quantity == 95

    def test_inactive_order(self, client, seed, reservation_id):
        response = client.post(
            "/api/marketplace/orders", json={"reservation_id": reservation_id, "is_active": False}
        )

        assert response.status_code == 201
        assert response.json()["order"]["state"]["name"] == "canceled"

    def test_unknown_reservation(self, client, seed):
        response = client.post("/api/marketplace/orders", json={"reservation_id": "missing"})

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "RESERVATION_NOT_FOUND"


class TestUpdateOrder:
    """Test PATCH /api/marketplace/orders/{id}"""

    def test_bearer_token_required(self, client, seed, order):
        response = client.patch(f"/api/marketplace/orders/{order['id']}", json={"comment": "x"})

        assert response.status_code == 401

    def test_notification_names_the_user(self, client, seed, order, auth_headers):
        response = client.patch(
            f"/api/marketplace/orders/{order['id']}",
            json={"comment": "Livrer avant 10h"},
            headers=auth_headers,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["order"]["comment"] == "Livrer avant 10h"
        assert body["notification"]["name"] == "Amine Ben Salah"

    def test_unknown_order(self, client, seed, auth_headers):
        response = client.patch("/api/marketplace/orders/missing", json={}, headers=auth_headers)

        assert response.status_code == 404

    def test_unknown_status_and_customer(self, client, seed, order, auth_headers):
        response = client.patch(
            f"/api/marketplace/orders/{order['id']}",
            json={"status_id": "missing-status", "customer_id": "missing-customer", "comment": "x"},
            headers=auth_headers,
        )

        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["code"] == "RELATION_NOT_FOUND"
        assert detail["message"] == "Relations not found: Status (missing-status) Customer (missing-customer)"
        reloaded = client.get(f"/api/marketplace/orders/{order['id']}").json()
        assert reloaded["order"]["comment"] != "x"

    def test_get_and_delete(self, client, seed, order):
        assert client.get(f"/api/marketplace/orders/{order['id']}").status_code == 200
        assert client.delete(f"/api/marketplace/orders/{order['id']}").status_code == 200
        assert client.get(f"/api/marketplace/orders/{order['id']}").status_code == 404


class TestOrderItems:
    """Test PATCH /api/marketplace/order-items"""

    def test_single_update_moves_stock(self, client, seed, order):
        item_id = order["order_items"][0]["id"]

        response = client.patch("/api/marketplace/order-items", json={"id": item_id, "qte_shipped": 1})

        assert response.status_code == 200
        assert response.json()["amounts"]["shipped"] == 12.5
        assert seed.stock.stock_quantity == 94

    def test_bulk_update(self, client, seed, order):
        item_id = order["order_items"][0]["id"]

        response = client.patch(
            "/api/marketplace/order-items",
            json={"updates": [{"id": item_id, "qte_canceled": 2}]},
        )

        assert response.status_code == 200
        assert response.json()["message"] == "1 order items updated"
        assert seed.stock.stock_quantity == 97

    def test_bad_requests(self, client, seed, order):
        assert client.patch("/api/marketplace/order-items", json={"qte_shipped": 1}).status_code == 400
        assert client.patch("/api/marketplace/order-items", json={"updates": "all"}).status_code == 400
        missing = client.patch("/api/marketplace/order-items", json={"updates": [{"qte_shipped": 1}]})
        assert missing.json()["detail"]["code"] == "ORDER_ITEM_ID_REQUIRED"

    def test_non_numeric_quantity(self, client, seed, order):
        item_id = order["order_items"][0]["id"]

        single = client.patch("/api/marketplace/order-items", json={"id": item_id, "qte_shipped": "abc"})
        bulk = client.patch(
            "/api/marketplace/order-items",
            json={"updates": [{"id": item_id, "qte_shipped": "abc"}]},
        )

        assert single.status_code == 400
        assert bulk.status_code == 400
        assert seed.stock.stock_quantity == 95

    def test_delete_item(self, client, seed, order):
        item_id = order["order_items"][0]["id"]

        assert client.delete(f"/api/marketplace/order-items/{item_id}").status_code == 200
        assert client.delete(f"/api/marketplace/order-items/{item_id}").status_code == 404


class TestStatuses:
    """Test POST /api/marketplace/statuses"""

    def test_create_and_duplicate(self, client, seed):
        body = {"name": "preparing", "state_id": seed.state_new.id}

        created = client.post("/api/marketplace/statuses", json=body)
        duplicate = client.post("/api/marketplace/statuses", json=body)

        assert created.status_code == 201
        assert created.json()["status"]["name"] == "preparing"
        assert duplicate.status_code == 409

    def test_unknown_state_and_missing_fields(self, client, seed):
        assert client.post("/api/marketplace/statuses", json={"name": "x", "state_id": "missing"}).status_code == 404
        assert client.post("/api/marketplace/statuses", json={"name": "x"}).status_code == 400
