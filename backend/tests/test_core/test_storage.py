"""
Unit tests for storage helpers

The Supabase client is mocked; no network access.
"""
import asyncio
import re
from unittest.mock import MagicMock

import pytest

from kamioun.core.storage import (
    FileUpload,
    StorageError,
    StorageService,
    build_file_name,
    object_path_from_url,
    read_upload,
)


class FakeUploadFile:
    def __init__(self, filename, content_type, content):
        self.filename = filename
        self.content_type = content_type
        self._content = content

    async def read(self):
        return self._content


class TestFileNames:
    def test_whitespace_replaced_and_prefixed(self):
        name = build_file_name("my logo.png", prefix="brand")

        assert re.fullmatch(r"brand-\d{13}-my-logo\.png", name)

    def test_without_prefix(self):
        assert re.fullmatch(r"\d{13}-scan\.pdf", build_file_name("scan.pdf"))


class TestObjectPathFromUrl:
    def test_public_url(self):
        url = "https://demo.supabase.co/storage/v1/object/public/banners/banner-images/a.png"

        assert object_path_from_url(url, "banners") == "banner-images/a.png"

    def test_url_of_other_bucket(self):
        url = "https://demo.supabase.co/storage/v1/object/public/marketplace/brands/a.png"

        assert object_path_from_url(url, "banners") is None

    def test_empty_url(self):
        assert object_path_from_url(None, "banners") is None


class TestStorageService:
    @pytest.fixture
    def client(self):
        client = MagicMock()
        client.storage.from_.return_value.get_public_url.return_value = "https://cdn/products/olive.png"
        return client

    def test_resolve_product_image_converts_local_uploads(self, client):
        service = StorageService(client=client)

        assert service.resolve_product_image("/uploads/products/olive.png") == "https://cdn/products/olive.png"
        client.storage.from_.assert_called_with("marketplace")
        client.storage.from_.return_value.get_public_url.assert_called_with("products/olive.png")

    def test_resolve_product_image_keeps_external_urls(self, client):
        service = StorageService(client=client)

        assert service.resolve_product_image("https://img.example.com/a.png") == "https://img.example.com/a.png"
        assert service.resolve_product_image(None) is None
        client.storage.from_.assert_not_called()

    def test_upload_failure_raises_storage_error(self, client):
        client.storage.from_.return_value.upload.side_effect = RuntimeError("bucket not found")
        service = StorageService(client=client)

        with pytest.raises(StorageError):
            service.upload("banners", "banner-images/a.png", b"data", "image/png")

    def test_remove_reports_failure_without_raising(self, client):
        client.storage.from_.return_value.remove.side_effect = RuntimeError("permission denied")
        service = StorageService(client=client)

        assert service.remove("banners", ["banner-images/a.png"]) is False
        assert service.remove("banners", [None]) is True


class TestReadUpload:
    def test_reads_file_content(self):
        upload = asyncio.run(read_upload(FakeUploadFile("cin.png", "image/png", b"png")))

        assert upload == FileUpload("cin.png", "image/png", b"png")
        assert upload.has_type({"image/png"})

    def test_missing_or_empty_field_gives_none(self):
        assert asyncio.run(read_upload(None)) is None
        assert asyncio.run(read_upload("")) is None
        assert asyncio.run(read_upload(FakeUploadFile("", "image/png", b""))) is None
