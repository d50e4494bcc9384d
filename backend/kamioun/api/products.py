"""
Product catalog API endpoints
- Accepted products with partner offers
- Related products
- Product subcategories
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from kamioun.api.serializers import product_detail
from kamioun.core.database import get_db
from kamioun.core.storage import StorageService, get_storage
from kamioun.models import Product
from kamioun.repositories import (
    ProductRepository,
    ProductSubCategoryRepository,
    RelatedProductRepository,
)

router = APIRouter(prefix="/api/marketplace", tags=["Products"])


class RelatedProductUpdate(BaseModel):
    product_id: Optional[str] = None
    related_product_id: Optional[str] = None


def _with_partners(product: Product, storage: StorageService) -> dict:
    """Product with resolved image URLs and the partners selling it"""
    data = product.to_dict()
    data["image"] = storage.resolve_product_image(product.image)
    image_urls = [storage.resolve_product_image(image.url) for image in product.images]
    data["images"] = [{**image.to_dict(), "url": url} for image, url in zip(product.images, image_urls)]
    data["image_urls"] = image_urls
    data["partners"] = [
        {
            "id": sku_partner.partner.id,
            "username": sku_partner.partner.username,
            "logo": storage.resolve_product_image(sku_partner.partner.logo),
        }
        for sku_partner in product.sku_partners
    ]
    return data


# =============================================================================
# Products
# =============================================================================

@router.get("/products")
def list_products(
    partner_id: Optional[str] = Query(None, description="Only products sold by this partner"),
    search: Optional[str] = Query(None, description="Case-insensitive name search"),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    """
    Accepted products with images, partner offers (stock per source),
    subcategories and related products
    """
    products = ProductRepository(db).find_all_accepted(partner_id=partner_id, search=search)
    return {
        "success": True,
        "message": "Products retrieved successfully" if products else "No products found",
        "data": [product_detail(p, storage) for p in products],
    }


@router.get("/products/{product_id}")
def get_product(
    product_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    product = ProductRepository(db).find_by_id(product_id, with_details=True)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")
    return {
        "success": True,
        "message": "Product retrieved successfully",
        "data": product_detail(product, storage, include_brand=True),
    }


# =============================================================================
# Related products
# =============================================================================

@router.get("/related-products/{product_id}")
def list_related_products(
    product_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    related = RelatedProductRepository(db).find_by_product(product_id)
    if not related:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No related products found")

    return {
        "message": "Related products retrieved",
        "related_products": [
            {
                "id": rel.id,
                "product_id": rel.product_id,
                "related_product_id": rel.related_product_id,
                "product": _with_partners(rel.product, storage),
                "related_product": _with_partners(rel.related_product, storage),
            }
            for rel in related
        ],
    }


@router.patch("/related-products/{related_id}")
def update_related_product(related_id: str, body: RelatedProductUpdate, db: Session = Depends(get_db)):
    repo = RelatedProductRepository(db)
    related = repo.find_by_id(related_id)
    if not related:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Related product not found")

    for field, value in body.model_dump(exclude_none=True).items():
        setattr(related, field, value)
    db.commit()
    db.refresh(related)
    return {"message": "Related product updated", "related_product": related.to_dict()}


@router.delete("/related-products/{related_id}")
def delete_related_product(related_id: str, db: Session = Depends(get_db)):
    repo = RelatedProductRepository(db)
    related = repo.find_by_id(related_id)
    if not related:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Related product not found")

    repo.delete(related)
    db.commit()
    return {"message": "Related product deleted"}


# =============================================================================
# Product subcategories
# =============================================================================

@router.get("/product-subcategories")
def list_product_subcategories(db: Session = Depends(get_db)):
    rows = ProductSubCategoryRepository(db).find_all()
    data = []
    for row in rows:
        subcategory = row.subcategory.to_dict() if row.subcategory else None
        if subcategory is not None:
            category = row.subcategory.category
            subcategory["category"] = category.to_dict() if category else None
        data.append({
            **row.to_dict(),
            "product": row.product.to_dict() if row.product else None,
            "subcategory": subcategory,
        })
    return {"success": True, "data": data}
