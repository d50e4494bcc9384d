"""
Brand API endpoints
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from kamioun.api.serializers import partner_public, product_summary
from kamioun.api.uploads import check_type, store
from kamioun.core.database import get_db
from kamioun.core.storage import IMAGE_TYPES, MARKETPLACE_BUCKET, StorageService, get_storage, read_upload
from kamioun.repositories import BrandRepository, ProductRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/marketplace/brands", tags=["Brands"])


def _get_brand_or_404(repo: BrandRepository, brand_id: str):
    brand = repo.find_by_id(brand_id)
    if not brand:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Brand not found")
    return brand


@router.get("")
def list_brands(db: Session = Depends(get_db)):
    """Brands with their products and products_count"""
    brands = BrandRepository(db).find_all()
    data = []
    for brand in brands:
        data.append({
            **brand.to_dict(),
            "products": [
                {
                    **product.to_dict(),
                    "partners": [partner_public(sp.partner) for sp in product.sku_partners],
                }
                for product in brand.products
            ],
            "products_count": len(brand.products),
        })
    return {"success": True, "data": data, "message": "Brands retrieved successfully"}


@router.get("/{brand_id}")
def get_brand(
    brand_id: str,
    include_products: bool = Query(False),
    db: Session = Depends(get_db),
):
    repo = BrandRepository(db)
    brand = _get_brand_or_404(repo, brand_id)

    data = brand.to_dict()
    data["products_count"] = repo.count_products(brand_id)
    if include_products:
        data["products"] = [p.to_dict() for p in ProductRepository(db).find_by_brand(brand_id, limit=10)]
    return {"message": "Brand retrieved successfully", "brand": data}


@router.get("/{brand_id}/products")
def list_brand_products(
    brand_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """All products of a brand, newest first"""
    brand = _get_brand_or_404(BrandRepository(db), brand_id)
    products = ProductRepository(db).find_by_brand(brand_id)

    data = brand.to_dict()
    data["products"] = [
        {
            **product_summary(product, storage),
            "images": [
                {**image.to_dict(), "url": storage.resolve_product_image(image.url)}
                for image in product.images
            ],
        }
        for product in products
    ]
    return {"success": True, "brand": data}


@router.patch("/{brand_id}")
async def update_brand(
    brand_id: str,
    name: Optional[str] = Form(None),
    image: Optional[UploadFile] = File(None),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """
    Update brand name and/or image (multipart)

    A new image is uploaded to the marketplace bucket under brands/ and the
    previous one is removed.
    """
    brand = _get_brand_or_404(BrandRepository(db), brand_id)

    upload = await read_upload(image)
    check_type(upload, IMAGE_TYPES, "image")

    if name is not None:
        brand.name = name
    if upload is not None:
        old_image = brand.img
        brand.img = store(storage, MARKETPLACE_BUCKET, "brands", upload, prefix="brand")
        if old_image and not storage.remove_url(MARKETPLACE_BUCKET, old_image):
            logger.warning(f"Old image of brand {brand_id} could not be removed")

    db.commit()
    db.refresh(brand)
    return {"message": "Brand updated successfully", "brand": brand.to_dict()}


@router.delete("/{brand_id}")
def delete_brand(
    brand_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    repo = BrandRepository(db)
    brand = _get_brand_or_404(repo, brand_id)

    storage.remove_url(MARKETPLACE_BUCKET, brand.img)
    repo.delete(brand)
    db.commit()
    return {"message": "Brand deleted successfully"}
