"""
Banner API endpoints (home screen carousel)
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from kamioun.api.uploads import check_type, store
from kamioun.core.database import get_db
from kamioun.core.storage import BANNERS_BUCKET, IMAGE_TYPES, StorageService, get_storage, read_upload
from kamioun.models import Banner
from kamioun.repositories import BannerRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/marketplace/banners", tags=["Banners"])

BANNER_FOLDER = "banner-images"


def _get_banner_or_404(repo: BannerRepository, banner_id: str) -> Banner:
    banner = repo.find_by_id(banner_id)
    if not banner:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Banner not found")
    return banner


@router.get("")
def list_banners(db: Session = Depends(get_db)):
    banners = BannerRepository(db).find_all()
    return {"success": True, "data": [b.to_dict() for b in banners]}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_banner(
    image: Optional[UploadFile] = File(None),
    alt_text: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """Upload a banner image (jpeg, png, gif or webp) to the banners bucket"""
    upload = await read_upload(image)
    if upload is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Image is required")
    check_type(upload, IMAGE_TYPES, "image")

    url = store(storage, BANNERS_BUCKET, BANNER_FOLDER, upload)
    try:
        banner = BannerRepository(db).add(Banner(url=url, alt_text=alt_text, description=description))
        db.commit()
    except Exception:
        db.rollback()
        storage.remove_url(BANNERS_BUCKET, url)
        raise

    db.refresh(banner)
    logger.info(f"Banner {banner.id} created")
    return {"message": "Banner created successfully", "banner": banner.to_dict()}


@router.get("/{banner_id}")
def get_banner(banner_id: str, db: Session = Depends(get_db)):
    banner = _get_banner_or_404(BannerRepository(db), banner_id)
    return {"banner": banner.to_dict()}


@router.patch("/{banner_id}")
async def update_banner(
    banner_id: str,
    image: Optional[UploadFile] = File(None),
    alt_text: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    banner = _get_banner_or_404(BannerRepository(db), banner_id)

    upload = await read_upload(image)
    check_type(upload, IMAGE_TYPES, "image")

    if upload is not None:
        old_url = banner.url
        banner.url = store(storage, BANNERS_BUCKET, BANNER_FOLDER, upload)
        storage.remove_url(BANNERS_BUCKET, old_url)
    if alt_text is not None:
        banner.alt_text = alt_text
    if description is not None:
        banner.description = description

    db.commit()
    db.refresh(banner)
    return {"message": "Banner updated successfully", "banner": banner.to_dict()}


@router.delete("/{banner_id}")
def delete_banner(
    banner_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    repo = BannerRepository(db)
    banner = _get_banner_or_404(repo, banner_id)

    storage.remove_url(BANNERS_BUCKET, banner.url)
    repo.delete(banner)
    db.commit()
    return {"message": "Banner deleted successfully"}
