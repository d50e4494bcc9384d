"""
Favorites API endpoints
- Favorite products (with image and partner snapshot)
- Favorite partners
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from kamioun.api.serializers import partner_public, product_summary
from kamioun.core.database import get_db
from kamioun.core.storage import StorageService, get_storage
from kamioun.models import FavoritePartner, FavoriteProduct
from kamioun.repositories import FavoritePartnerRepository, FavoriteProductRepository
from kamioun.services.favorite_service import FavoriteService

router = APIRouter(prefix="/api/marketplace", tags=["Favorites"])


# =============================================================================
# Pydantic Models
# =============================================================================

class FavoriteProductCreate(BaseModel):
    customer_id: Optional[str] = None
    product_id: Optional[str] = None


class FavoriteProductUpdate(BaseModel):
    product_image: Optional[str] = None
    partner_names: Optional[List[str]] = None


class FavoritePartnerCreate(BaseModel):
    customer_id: Optional[str] = None
    partner_id: Optional[str] = None


class FavoritePartnerUpdate(BaseModel):
    partner_id: Optional[str] = None


class CustomerRef(BaseModel):
    customer_id: Optional[str] = None


def _require_customer(customer_id: Optional[str]) -> None:
    if not customer_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="customer_id is required")


def _favorite_product(favorite: FavoriteProduct, storage: StorageService) -> dict:
    data = favorite.to_dict()
    data["product_image"] = storage.resolve_product_image(favorite.product_image)
    data["product"] = product_summary(favorite.product, storage)
    return data


def _favorite_partner(favorite: FavoritePartner) -> dict:
    return {**favorite.to_dict(), "partner": partner_public(favorite.partner)}


# =============================================================================
# Favorite products
# =============================================================================

@router.get("/favorite-products")
def list_favorite_products(
    customer_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    _require_customer(customer_id)
    favorites = FavoriteProductRepository(db).find_by_customer(customer_id)
    return {"success": True, "data": [_favorite_product(f, storage) for f in favorites]}


@router.post("/favorite-products", status_code=status.HTTP_201_CREATED)
def create_favorite_product(
    body: FavoriteProductCreate,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    if not body.customer_id or not body.product_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="customer_id and product_id are required",
        )
    favorite = FavoriteService(db).add_product(body.customer_id, body.product_id)
    return {
        "success": True,
        "message": "Product added to favorites",
        "data": _favorite_product(favorite, storage),
    }


@router.get("/favorite-products/{favorite_id}")
def get_favorite_product(
    favorite_id: str,
    db: Session = Depends(get_db),
    storage: StorageService = Depends(get_storage),
):
    favorite = FavoriteProductRepository(db).find_by_id(favorite_id)
    if not favorite:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Favorite product not found")
    return {"message": "Favorite product retrieved successfully", "favorite_product": _favorite_product(favorite, storage)}


@router.patch("/favorite-products/{favorite_id}")
def update_favorite_product(favorite_id: str, body: FavoriteProductUpdate, db: Session = Depends(get_db)):
    favorite = FavoriteProductRepository(db).find_by_id(favorite_id)
    if not favorite:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Favorite product not found")

    for field, value in body.model_dump(exclude_none=True).items():
        setattr(favorite, field, value)
    db.commit()
    db.refresh(favorite)
    return {"message": "Favorite product updated successfully", "favorite_product": favorite.to_dict()}


@router.delete("/favorite-products/{favorite_id}")
def delete_favorite_product(favorite_id: str, db: Session = Depends(get_db)):
    FavoriteService(db).remove_product(favorite_id)
    return {"message": "Favorite product deleted successfully"}


# =============================================================================
# Favorite partners
# =============================================================================

@router.get("/favorite-partners")
def list_favorite_partners(customer_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    _require_customer(customer_id)
    favorites = FavoritePartnerRepository(db).find_by_customer(customer_id)
    return {"success": True, "data": [_favorite_partner(f) for f in favorites]}


@router.post("/favorite-partners", status_code=status.HTTP_201_CREATED)
def create_favorite_partner(body: FavoritePartnerCreate, db: Session = Depends(get_db)):
    if not body.customer_id or not body.partner_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="customer_id and partner_id are required",
        )
    favorite = FavoriteService(db).add_partner(body.customer_id, body.partner_id)
    return {
        "success": True,
        "message": "Partner added to favorites",
        "data": _favorite_partner(favorite),
    }


@router.get("/favorite-partners/{favorite_id}")
def get_favorite_partner(favorite_id: str, db: Session = Depends(get_db)):
    favorite = FavoritePartnerRepository(db).find_by_id(favorite_id)
    if not favorite:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Favorite partner not found")
    return {"message": "Favorite partner retrieved successfully", "favorite_partner": _favorite_partner(favorite)}


@router.patch("/favorite-partners/{favorite_id}")
def update_favorite_partner(favorite_id: str, body: FavoritePartnerUpdate, db: Session = Depends(get_db)):
    service = FavoriteService(db)
    if body.partner_id:
        favorite = service.change_partner(favorite_id, body.partner_id)
    else:
        favorite = FavoritePartnerRepository(db).find_by_id(favorite_id)
        if not favorite:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Favorite partner not found")
    return {"message": "Favorite partner updated successfully", "favorite_partner": favorite.to_dict()}


@router.delete("/favorite-partners/{favorite_id}")
def delete_favorite_partner(favorite_id: str, body: CustomerRef, db: Session = Depends(get_db)):
    """Remove a partner bookmark; the body must name the owning customer"""
    _require_customer(body.customer_id)
    FavoriteService(db).remove_partner(favorite_id, body.customer_id)
    return {"message": "Partner removed from favorites"}
