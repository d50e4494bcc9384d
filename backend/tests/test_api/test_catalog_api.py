"""
API tests for the catalog: products, brands, offers, partners and suppliers
"""
from kamioun.core.storage import MARKETPLACE_BUCKET
from kamioun.models import (
    Category,
    PartnerSettings,
    Product,
    ProductSubCategory,
    RelatedProduct,
    Schedule,
    Subcategory,
)


class TestProducts:
    def test_list_with_offers(self, client, seed):
        response = client.get("/api/marketplace/products")

        assert response.status_code == 200
        [product] = response.json()["data"]
        assert product["images"][0]["url"] == "/uploads/olive-front.png"
        offer = product["sku_partners"][0]
        assert offer["partner"]["username"] == "fresh-dist"
        assert offer["stock"][0]["sealable"] == 50
        assert offer["stock"][0]["source"]["name"] == "Depot Tunis"

    def test_unaccepted_products_are_hidden(self, client, db_session, seed):
        db_session.add(Product(name="Brouillon", accepted=False))
        db_session.commit()

        response = client.get("/api/marketplace/products")

        assert [p["name"] for p in response.json()["data"]] == ["Huile Olive 1L"]

    def test_get_includes_brand(self, client, seed):
        response = client.get(f"/api/marketplace/products/{seed.product.id}")

        assert response.json()["data"]["brand"]["name"] == "Zitouna"
        assert client.get("/api/marketplace/products/missing").status_code == 404

    def test_related_products(self, client, db_session, seed):
        assert client.get(f"/api/marketplace/related-products/{seed.product.id}").status_code == 404

        other = Product(name="Huile Olive 5L", accepted=True)
        db_session.add_all([other, RelatedProduct(product=seed.product, related_product=other)])
        db_session.commit()

        response = client.get(f"/api/marketplace/related-products/{seed.product.id}")

        [related] = response.json()["related_products"]
        assert related["related_product"]["name"] == "Huile Olive 5L"
        assert related["product"]["partners"] == [{"id": seed.partner.id, "username": "fresh-dist", "logo": None}]
        assert related["product"]["image_urls"] == ["/uploads/olive-front.png"]

    def test_update_and_delete_related_product(self, client, db_session, seed):
        other = Product(name="Huile Olive 5L", accepted=True)
        replacement = Product(name="Huile Olive 2L", accepted=True)
        related = RelatedProduct(product=seed.product, related_product=other)
        db_session.add_all([other, replacement, related])
        db_session.commit()
        related_id = related.id

        response = client.patch(
            f"/api/marketplace/related-products/{related_id}",
            json={"related_product_id": replacement.id},
        )

        assert response.json()["related_product"]["related_product_id"] == replacement.id
        assert client.delete(f"/api/marketplace/related-products/{related_id}").status_code == 200
        assert client.delete(f"/api/marketplace/related-products/{related_id}").status_code == 404
        assert client.patch("/api/marketplace/related-products/missing", json={}).status_code == 404

    def test_product_subcategories(self, client, db_session, seed):
        category = Category(name_category="Epicerie")
        subcategory = Subcategory(name="Huiles", category=category)
        db_session.add_all([category, subcategory, ProductSubCategory(product=seed.product, subcategory=subcategory)])
        db_session.commit()

        [row] = client.get("/api/marketplace/product-subcategories").json()["data"]

        assert row["product"]["name"] == "Huile Olive 1L"
        assert row["subcategory"]["name"] == "Huiles"
        assert row["subcategory"]["category"]["name_category"] == "Epicerie"


class TestOffers:
    """Test GET /api/marketplace/sku-partners"""

    def test_partners_with_sealable_stock(self, client, seed):
        response = client.get("/api/marketplace/sku-partners", params={"product_id": seed.product.id})

        data = response.json()["data"]
        assert data["product"]["sku"] == "OLV-1"
        [offer] = data["partners_data"]
        assert offer["partner"]["minimum_amount"] == 100
        assert offer["sources"][0]["stock"]["sealable"] == 50

    def test_sold_out_partner_is_left_out(self, client, db_session, seed):
        seed.stock.sealable = 0
        db_session.commit()

        response = client.get("/api/marketplace/sku-partners", params={"product_id": seed.product.id})

        assert response.json()["data"]["partners_data"] == []

    def test_product_id_required(self, client, seed):
        assert client.get("/api/marketplace/sku-partners").status_code == 400
        assert client.get("/api/marketplace/sku-partners", params={"product_id": "missing"}).status_code == 404

    def test_stock_sources_and_payment_methods(self, client, seed):
        stock = client.get("/api/marketplace/stock", params={"source_id": seed.source.id}).json()["data"]
        sources = client.get("/api/marketplace/sources").json()["data"]
        methods = client.get("/api/marketplace/payment-methods").json()["data"]

        assert stock[0]["sku_partner"]["product"]["name"] == "Huile Olive 1L"
        assert sources[0]["partner"]["username"] == "fresh-dist"
        assert [m["name"] for m in methods] == ["cash"]


class TestBrands:
    def test_list_counts_products(self, client, seed):
        [brand] = client.get("/api/marketplace/brands").json()["data"]

        assert brand["products_count"] == 1
        assert brand["products"][0]["partners"][0]["username"] == "fresh-dist"

    def test_get_with_products(self, client, seed):
        response = client.get(f"/api/marketplace/brands/{seed.brand.id}", params={"include_products": "true"})

        brand = response.json()["brand"]
        assert brand["products_count"] == 1
        assert [p["name"] for p in brand["products"]] == ["Huile Olive 1L"]

    def test_patch_image(self, client, storage, seed):
        response = client.patch(
            f"/api/marketplace/brands/{seed.brand.id}",
            data={"name": "Zitouna Bio"},
            files={"image": ("logo.webp", b"RIFF", "image/webp")},
        )

        assert response.status_code == 200
        assert response.json()["brand"]["name"] == "Zitouna Bio"
        assert response.json()["brand"]["img"] == storage.upload_file.return_value
        args = storage.upload_file.call_args
        assert args.args[:2] == (MARKETPLACE_BUCKET, "brands")
        assert args.kwargs == {"prefix": "brand"}

    def test_delete(self, client, seed):
        brand_id = seed.brand.id

        assert client.delete(f"/api/marketplace/brands/{brand_id}").status_code == 200
        assert client.get(f"/api/marketplace/brands/{brand_id}").status_code == 404

    def test_brand_products(self, client, seed):
        response = client.get(f"/api/marketplace/brands/{seed.brand.id}/products")

        [product] = response.json()["brand"]["products"]
        assert product["images"][0]["url"] == "/uploads/olive-front.png"
        assert client.get("/api/marketplace/brands/missing/products").status_code == 404


class TestPartners:
    def test_list_and_get(self, client, seed):
        listed = client.get("/api/marketplace/partners").json()
        fetched = client.get(f"/api/marketplace/partners/{seed.partner.id}")

        assert listed["meta"] == {"count": 1}
        assert fetched.json()["partner"]["sku_partners"][0]["sku_product"] == "SKU-OLV-1"
        assert client.get("/api/marketplace/partners/missing").status_code == 404

    def test_patch_form(self, client, seed):
        response = client.patch(
            f"/api/marketplace/partners/{seed.partner.id}",
            data={"coverage_area": "Cap Bon", "minimum_amount": "80"},
        )

        assert response.status_code == 200
        assert response.json()["partner"]["coverage_area"] == "Cap Bon"
        assert response.json()["partner"]["minimum_amount"] == 80

    def test_settings(self, client, db_session, seed):
        assert client.get(f"/api/marketplace/settings/{seed.partner.id}").status_code == 404

        db_session.add(PartnerSettings(
            partner=seed.partner,
            delivery_type="own_fleet",
            schedules=[Schedule(day="monday", start_time="08:00", end_time="12:00")],
        ))
        db_session.commit()

        response = client.get(f"/api/marketplace/settings/{seed.partner.id}")

        assert response.json()["data"][0]["schedules"][0]["day"] == "monday"


class TestSuppliers:
    def test_pagination_meta(self, client, seed):
        response = client.get("/api/marketplace/suppliers", params={"page": 1, "limit": 10})

        body = response.json()
        assert body["meta"] == {"total": 1, "current_page": 1, "total_pages": 1, "limit": 10}
        assert body["data"][0]["products_count"] == 1
        assert body["data"][0]["assigned_products"][0]["sku"] == "OLV-1"

    def test_invalid_pagination(self, client, seed):
        assert client.get("/api/marketplace/suppliers", params={"page": 0}).status_code == 400
        assert client.get("/api/marketplace/suppliers", params={"limit": "ten"}).status_code == 400

    def test_supplier_products(self, client, seed):
        response = client.get("/api/marketplace/suppliers/1/products")

        assert response.json()["data"][0]["partners"][0]["username"] == "fresh-dist"
        assert client.get("/api/marketplace/suppliers/99/products").status_code == 404

    def test_manufacturers(self, client, seed):
        assert client.get("/api/manufacturers").json()["meta"] == {"total": 1}
