"""
File storage (Supabase Storage)

Banner images, brand images, partner logos/patents and customer documents
are stored in Supabase Storage buckets; the database only keeps the public
URL. Routers receive a StorageService through the get_storage dependency so
tests can swap it for a fake.
"""
import logging
import re
import time
from typing import Iterable, List, NamedTuple, Optional

from supabase import create_client, Client

from kamioun.core.config import settings

logger = logging.getLogger(__name__)

BANNERS_BUCKET = "banners"
MARKETPLACE_BUCKET = "marketplace"
CUSTOMER_DOCUMENTS_BUCKET = "customer-documents"

IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}
DOCUMENT_TYPES = IMAGE_TYPES | {"application/pdf"}


class StorageError(Exception):
    """Raised when an upload to the storage backend fails"""


class FileUpload(NamedTuple):
    """File received from a multipart form"""
    filename: str
    content_type: str
    content: bytes

    def has_type(self, allowed: Iterable[str]) -> bool:
        return self.content_type in allowed


async def read_upload(file) -> Optional[FileUpload]:
    """Read a FastAPI UploadFile; an absent or empty file field gives None"""
    if file is None or isinstance(file, str) or not file.filename:
        return None
    return FileUpload(file.filename, file.content_type or "application/octet-stream", await file.read())


def build_file_name(original_name: str, prefix: Optional[str] = None) -> str:
    """<prefix>-<epoch ms>-<name with whitespace replaced by dashes>"""
    safe_name = re.sub(r"\s+", "-", original_name or "file")
    stamp = int(time.time() * 1000)
    return f"{prefix}-{stamp}-{safe_name}" if prefix else f"{stamp}-{safe_name}"


def object_path_from_url(url: Optional[str], bucket: str) -> Optional[str]:
    """Extract the object path of a public URL belonging to bucket"""
    if not url:
        return None
    marker = f"{bucket}/"
    public_marker = f"/storage/v1/object/public/{bucket}/"
    if public_marker in url:
        return url.split(public_marker, 1)[1] or None
    if marker in url:
        return url.split(marker, 1)[1] or None
    return None


class StorageService:
    """Thin wrapper around the Supabase Storage API"""

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
                raise StorageError("Supabase storage is not configured")
            self._client = create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)
        return self._client

    def upload(self, bucket: str, path: str, content: bytes, content_type: str, upsert: bool = True) -> str:
        """Upload bytes and return the public URL"""
        try:
            self.client.storage.from_(bucket).upload(
                path,
                content,
                {"content-type": content_type, "upsert": "true" if upsert else "false"},
            )
        except StorageError:
            raise
        except Exception as e:
            logger.error(f"Upload to {bucket}/{path} failed: {e}")
            raise StorageError(str(e)) from e
        return self.public_url(bucket, path)

    def upload_file(self, bucket: str, folder: str, upload: FileUpload, prefix: Optional[str] = None,
                    upsert: bool = True) -> str:
        """Upload a form file under folder/<generated name> and return its public URL"""
        path = f"{folder}/{build_file_name(upload.filename, prefix)}"
        return self.upload(bucket, path, upload.content, upload.content_type, upsert=upsert)

    def public_url(self, bucket: str, path: str) -> str:
        return self.client.storage.from_(bucket).get_public_url(path)

    def remove(self, bucket: str, paths: List[str]) -> bool:
        """Delete objects; failures are logged and reported, never raised"""
        paths = [p for p in paths if p]
        if not paths:
            return True
        try:
            self.client.storage.from_(bucket).remove(paths)
            return True
        except Exception as e:
            if "not found" in str(e).lower():
                return True
            logger.error(f"Error deleting {paths} from {bucket}: {e}")
            return False

    def remove_url(self, bucket: str, url: Optional[str]) -> bool:
        return self.remove(bucket, [object_path_from_url(url, bucket)])

    def resolve_product_image(self, image_path: Optional[str]) -> Optional[str]:
        """
        Map legacy local upload paths to their storage URL.

        External and already-public URLs are returned unchanged.
        """
        if not image_path:
            return None
        if "supabase.co" in image_path or image_path.startswith("http"):
            return image_path
        if image_path.startswith("/uploads/"):
            file_name = image_path.rsplit("/", 1)[-1]
            return self.public_url(MARKETPLACE_BUCKET, f"products/{file_name}")
        return image_path


_storage = StorageService()


def get_storage() -> StorageService:
    """FastAPI dependency returning the shared storage service"""
    return _storage
