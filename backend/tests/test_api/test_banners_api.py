"""
API tests for banners; storage is faked
"""
from kamioun.core.storage import BANNERS_BUCKET, FileUpload, StorageError

IMAGE = {"image": ("promo ramadan.png", b"\x89PNG", "image/png")}


class TestCreateBanner:
    """Test POST /api/marketplace/banners"""

    def test_image_is_uploaded_to_banners_bucket(self, client, storage, seed):
        response = client.post("/api/marketplace/banners", data={"alt_text": "Promo"}, files=IMAGE)

        assert response.status_code == 201
        banner = response.json()["banner"]
        assert banner["url"] == storage.upload_file.return_value
        assert banner["alt_text"] == "Promo"
        storage.upload_file.assert_called_once_with(
            BANNERS_BUCKET,
            "banner-images",
            FileUpload("promo ramadan.png", "image/png", b"\x89PNG"),
            prefix=None,
        )

    def test_image_is_required(self, client, storage, seed):
        response = client.post("/api/marketplace/banners", data={"alt_text": "Promo"})

        assert response.status_code == 400
        assert response.json()["detail"] == "Image is required"

    def test_image_type_is_checked(self, client, storage, seed):
        response = client.post("/api/marketplace/banners", files={"image": ("promo.txt", b"hi", "text/plain")})

        assert response.status_code == 400
        storage.upload_file.assert_not_called()

    def test_storage_failure_is_a_bad_gateway(self, client, storage, seed):
        storage.upload_file.side_effect = StorageError("bucket not found")

        response = client.post("/api/marketplace/banners", files=IMAGE)

        assert response.status_code == 502
        assert response.json()["detail"]["code"] == "FILE_UPLOAD_FAILED"


class TestBannerLifecycle:
    def test_update_replaces_image_and_delete_removes_it(self, client, storage, seed):
        banner_id = client.post("/api/marketplace/banners", files=IMAGE).json()["banner"]["id"]
        old_url = storage.upload_file.return_value
        storage.upload_file.return_value = "https://demo.supabase.co/storage/v1/object/public/banners/banner-images/new.png"

        updated = client.patch(f"/api/marketplace/banners/{banner_id}", data={"description": "Mars"}, files=IMAGE)
        deleted = client.delete(f"/api/marketplace/banners/{banner_id}")

        assert updated.json()["banner"]["description"] == "Mars"
        storage.remove_url.assert_any_call(BANNERS_BUCKET, old_url)
        storage.remove_url.assert_called_with(BANNERS_BUCKET, storage.upload_file.return_value)
        assert deleted.status_code == 200
        assert client.get(f"/api/marketplace/banners/{banner_id}").status_code == 404

    def test_list(self, client, storage, seed):
        client.post("/api/marketplace/banners", files=IMAGE)

        response = client.get("/api/marketplace/banners")

        assert len(response.json()["data"]) == 1
