"""
API tests for persisted carts
"""


def _item(seed, quantity=2):
    return {
        "product_id": seed.product.id,
        "partner_id": seed.partner.id,
        "source_id": seed.source.id,
        "name": "Huile Olive 1L",
        "quantity": quantity,
        "price": 12.5,
    }


class TestCart:
    def test_missing_cart_is_empty(self, client, seed):
        assert client.get(f"/api/marketplace/cart/{seed.customer.id}").json() == {"items": []}

    def test_replace_then_merge(self, client, seed):
        url = f"/api/marketplace/cart/{seed.customer.id}"

        created = client.post(url, json={"items": [_item(seed)]})
        merged = client.put(url, json={"items": [_item(seed, quantity=6)]})

        assert created.status_code == 200
        assert created.json()["items"][0]["product_name"] == "Huile Olive 1L"
        assert [i["quantity"] for i in merged.json()["items"]] == [6]
        assert client.get(url).json()["items"][0]["quantity"] == 6

    def test_items_must_be_an_array_of_objects(self, client, seed):
        url = f"/api/marketplace/cart/{seed.customer.id}"

        assert client.post(url, json={"items": "all"}).status_code == 400
        assert client.post(url, json={"items": [1, 2]}).status_code == 400
        assert client.post(url).status_code == 400

    def test_unknown_customer(self, client, seed):
        response = client.post("/api/marketplace/cart/missing", json={"items": []})

        assert response.status_code == 404

    def test_merge_without_cart(self, client, seed):
        response = client.put(f"/api/marketplace/cart/{seed.customer.id}", json={"items": [_item(seed)]})

        assert response.status_code == 404
        assert response.json()["detail"]["code"] == "CART_NOT_FOUND"

    def test_delete_requires_customer_id_in_body(self, client, seed):
        url = f"/api/marketplace/cart/{seed.customer.id}"
        client.post(url, json={"items": [_item(seed)]})

        without_body = client.delete(url)
        with_body = client.request("DELETE", url, json={"customer_id": seed.customer.id})

        assert without_body.status_code == 400
        assert with_body.status_code == 200
        assert client.get(url).json() == {"items": []}
