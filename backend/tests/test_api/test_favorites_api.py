"""
API tests for favorite products and partners
"""
from kamioun.models import Partner


class TestFavoriteProducts:
    def test_customer_id_is_required(self, client, seed):
        response = client.get("/api/marketplace/favorite-products")

        assert response.status_code == 400
        assert response.json()["detail"] == "customer_id is required"

    def test_create_then_list(self, client, seed):
        created = client.post(
            "/api/marketplace/favorite-products",
            json={"customer_id": seed.customer.id, "product_id": seed.product.id},
        )

        listed = client.get("/api/marketplace/favorite-products", params={"customer_id": seed.customer.id})

        assert created.status_code == 201
        assert created.json()["data"]["partner_names"] == ["fresh-dist"]
        [favorite] = listed.json()["data"]
        assert favorite["product"]["name"] == "Huile Olive 1L"
        assert favorite["product_image"] == "/uploads/olive-front.png"

    def test_duplicate(self, client, seed):
        body = {"customer_id": seed.customer.id, "product_id": seed.product.id}
        client.post("/api/marketplace/favorite-products", json=body)

        response = client.post("/api/marketplace/favorite-products", json=body)

        assert response.status_code == 409
        assert response.json()["detail"]["code"] == "FAVORITE_EXISTS"

    def test_missing_fields_and_unknown_product(self, client, seed):
        missing = client.post("/api/marketplace/favorite-products", json={"customer_id": seed.customer.id})
        unknown = client.post(
            "/api/marketplace/favorite-products",
            json={"customer_id": seed.customer.id, "product_id": "missing"},
        )

        assert missing.status_code == 400
        assert unknown.status_code == 404
        assert unknown.json()["detail"]["code"] == "PRODUCT_NOT_FOUND"

    def test_patch_and_delete(self, client, seed):
        favorite_id = client.post(
            "/api/marketplace/favorite-products",
            json={"customer_id": seed.customer.id, "product_id": seed.product.id},
        ).json()["data"]["id"]

        patched = client.patch(f"/api/marketplace/favorite-products/{favorite_id}", json={"partner_names": []})
        deleted = client.delete(f"/api/marketplace/favorite-products/{favorite_id}")

        assert patched.json()["favorite_product"]["partner_names"] == []
        assert deleted.status_code == 200
        assert client.get(f"/api/marketplace/favorite-products/{favorite_id}").status_code == 404


class TestFavoritePartners:
    def test_delete_requires_owner(self, client, seed):
        favorite_id = client.post(
            "/api/marketplace/favorite-partners",
            json={"customer_id": seed.customer.id, "partner_id": seed.partner.id},
        ).json()["data"]["id"]

        without_owner = client.request("DELETE", f"/api/marketplace/favorite-partners/{favorite_id}", json={})
        wrong_owner = client.request(
            "DELETE", f"/api/marketplace/favorite-partners/{favorite_id}", json={"customer_id": "someone-else"}
        )
        owner = client.request(
            "DELETE", f"/api/marketplace/favorite-partners/{favorite_id}", json={"customer_id": seed.customer.id}
        )

        assert without_owner.status_code == 400
        assert wrong_owner.status_code == 404
        assert owner.status_code == 200

    def test_list_embeds_partner(self, client, seed):
        client.post(
            "/api/marketplace/favorite-partners",
            json={"customer_id": seed.customer.id, "partner_id": seed.partner.id},
        )

        response = client.get("/api/marketplace/favorite-partners", params={"customer_id": seed.customer.id})

        [favorite] = response.json()["data"]
        assert favorite["partner"]["username"] == "fresh-dist"
        assert "password" not in favorite["partner"]

    def test_patch_onto_bookmarked_or_unknown_partner(self, client, db_session, seed):
        other = Partner(username="atlas-dist", email="contact@atlas.tn")
        db_session.add(other)
        db_session.commit()
        favorite_id = client.post(
            "/api/marketplace/favorite-partners",
            json={"customer_id": seed.customer.id, "partner_id": seed.partner.id},
        ).json()["data"]["id"]
        client.post(
            "/api/marketplace/favorite-partners",
            json={"customer_id": seed.customer.id, "partner_id": other.id},
        )

        duplicate = client.patch(f"/api/marketplace/favorite-partners/{favorite_id}", json={"partner_id": other.id})
        unknown = client.patch(f"/api/marketplace/favorite-partners/{favorite_id}", json={"partner_id": "missing"})

        assert duplicate.status_code == 409
        assert duplicate.json()["detail"]["code"] == "FAVORITE_EXISTS"
        assert unknown.status_code == 404
        assert unknown.json()["detail"]["code"] == "PARTNER_NOT_FOUND"
