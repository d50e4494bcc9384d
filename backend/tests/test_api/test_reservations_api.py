"""
API tests for reservations and reservation items
"""
import copy


class TestCreateReservations:
    """Test POST /api/marketplace/reservations"""

    def test_single_reservation(self, client, seed, reservation_payload):
        reservation_payload["reservation_items"][0]["delivery_date"] = "2025-03-10T09:00:00"

        response = client.post("/api/marketplace/reservations", json=reservation_payload)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["customer"]["id"] == seed.customer.id
        assert data["reservation_items"][0]["product"]["name"] == "Huile Olive 1L"
        assert data["reservation_items"][0]["delivery_date"].startswith("2025-03-10T09:00:00")
        assert seed.stock.sealable == 45

    def test_batch_returns_a_list(self, client, seed, reservation_payload):
        response = client.post("/api/marketplace/reservations", json=[reservation_payload, reservation_payload])

        assert response.status_code == 201
        assert response.json()["message"] == "Reservations created successfully"
        assert len(response.json()["data"]) == 2
        assert seed.stock.sealable == 40

    def test_batch_with_insufficient_stock_is_rejected(self, client, seed, reservation_payload):
        too_big = copy.deepcopy(reservation_payload)
        too_big["reservation_items"][0]["qte_reserved"] = 46

        response = client.post("/api/marketplace/reservations", json=[reservation_payload, too_big])

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "STOCK_INSUFFICIENT"
        assert seed.stock.sealable == 50


class TestUpdateReservation:
    """Test PATCH /api/marketplace/reservations/{id}"""

    def _create(self, client, payload):
        return client.post("/api/marketplace/reservations", json=payload).json()["data"]["id"]

    def test_activation_returns_the_order(self, client, seed, reservation_payload):
        reservation_id = self._create(client, reservation_payload)

        response = client.patch(f"/api/marketplace/reservations/{reservation_id}", json={"is_active": True})

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Reservation activated and order created"
        assert body["reservation"]["is_active"] is True
        assert body["order"]["state"]["name"] == "new"
        assert body["order"]["status"]["name"] == "open"
        assert body["order"]["order_items"][0]["qte_ordered"] == 5

    def test_deactivation_is_refused(self, client, seed, reservation_payload):
        reservation_id = self._create(client, reservation_payload)

        response = client.patch(f"/api/marketplace/reservations/{reservation_id}", json={"is_active": False})

        assert response.status_code == 400
        assert response.json()["detail"]["code"] == "ACTIVE_RESERVATION_MODIFICATION"

    def test_delivery_dates(self, client, seed, reservation_payload):
        reservation_id = self._create(client, reservation_payload)

        response = client.patch(
            f"/api/marketplace/reservations/{reservation_id}",
            json={"delivery_dates": [{"partner_id": seed.partner.id, "delivery_date": "2025-03-12T08:00:00"}]},
        )

        assert response.status_code == 200
        assert "order" not in response.json()
        item = response.json()["reservation"]["reservation_items"][0]
        assert item["delivery_date"].startswith("2025-03-12T08:00:00")

    def test_get_and_delete(self, client, seed, reservation_payload):
        reservation_id = self._create(client, reservation_payload)

        assert client.get(f"/api/marketplace/reservations/{reservation_id}").status_code == 200
        assert client.delete(f"/api/marketplace/reservations/{reservation_id}").status_code == 200
        assert client.get(f"/api/marketplace/reservations/{reservation_id}").status_code == 404


class TestReservationItems:
    def test_create_and_list_by_customer(self, client, seed):
        created = client.post(
            "/api/marketplace/reservation-items",
            json={
                "customer_id": seed.customer.id,
                "product_id": seed.product.id,
                "partner_id": seed.partner.id,
                "source_id": seed.source.id,
                "qte_reserved": 3,
            },
        )

        listed = client.get("/api/marketplace/reservation-items", params={"customer_id": seed.customer.id})

        assert created.status_code == 201
        [item] = listed.json()["data"]
        assert item["qte_reserved"] == 3
        assert item["partner"]["username"] == "fresh-dist"
        assert item["source"]["name"] == "Depot Tunis"

    def test_required_fields(self, client, seed):
        response = client.post("/api/marketplace/reservation-items", json={"product_id": seed.product.id})

        assert response.status_code == 400
        assert client.get("/api/marketplace/reservation-items").status_code == 400

    def test_unknown_product_and_reservation(self, client, seed):
        response = client.post(
            "/api/marketplace/reservation-items",
            json={
                "customer_id": seed.customer.id,
                "product_id": "missing-product",
                "partner_id": seed.partner.id,
                "reservation_id": "missing-reservation",
                "qte_reserved": 3,
            },
        )

        assert response.status_code == 404
        detail = response.json()["detail"]
        assert detail["code"] == "RELATION_NOT_FOUND"
        assert "Product (missing-product)" in detail["message"]
        assert "Reservation (missing-reservation)" in detail["message"]
        listed = client.get("/api/marketplace/reservation-items", params={"customer_id": seed.customer.id})
        assert listed.json()["data"] == []
