"""
Shared handling of multipart file fields for the admin endpoints
"""
from typing import Iterable, Optional

from fastapi import HTTPException, status

from kamioun.core.storage import FileUpload, StorageError, StorageService


def check_type(upload: Optional[FileUpload], allowed: Iterable[str], label: str = "file") -> None:
    """400 when an uploaded file is not one of the allowed content types"""
    if upload is not None and not upload.has_type(allowed):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {label} type. Allowed: {', '.join(sorted(allowed))}",
        )


def store(storage: StorageService, bucket: str, folder: str, upload: FileUpload,
          prefix: Optional[str] = None) -> str:
    """Upload and return the public URL; storage failures answer 502"""
    try:
        return storage.upload_file(bucket, folder, upload, prefix=prefix)
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"message": f"File upload failed: {e}", "code": "FILE_UPLOAD_FAILED"},
        )
