"""
Supplier (manufacturer) API endpoints
"""
import math
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from kamioun.api.serializers import partner_public
from kamioun.core.database import get_db
from kamioun.repositories import ManufacturerRepository, ProductRepository

router = APIRouter(prefix="/api", tags=["Suppliers"])


@router.get("/marketplace/suppliers")
def list_suppliers(
    page: int = Query(1, description="1-based page number"),
    limit: int = Query(25, description="Page size"),
    search: Optional[str] = Query(None, description="Case-insensitive search over supplier text fields"),
    db: Session = Depends(get_db),
):
    """
    Paginated suppliers with product counts

    Each supplier carries products_count and assigned_products
    (id, name, sku of its products).
    """
    if page < 1 or limit < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid pagination parameters",
        )

    manufacturers, total = ManufacturerRepository(db).find_paginated(page=page, limit=limit, search=search)

    return {
        "success": True,
        "data": [
            {
                **m.to_dict(),
                "products_count": len(m.products),
                "assigned_products": [{"id": p.id, "name": p.name, "sku": p.sku} for p in m.products],
            }
            for m in manufacturers
        ],
        "meta": {
            "total": total,
            "current_page": page,
            "total_pages": math.ceil(total / limit),
            "limit": limit,
        },
    }


@router.get("/marketplace/suppliers/{supplier_id}/products")
def list_supplier_products(supplier_id: int, db: Session = Depends(get_db)):
    supplier = ManufacturerRepository(db).find_by_id(supplier_id)
    if not supplier:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Supplier not found")

    products = ProductRepository(db).find_by_supplier(supplier_id)
    return {
        "success": True,
        "supplier": supplier.to_dict(),
        "data": [
            {
                **product.to_dict(),
                "partners": [partner_public(sp.partner) for sp in product.sku_partners],
            }
            for product in products
        ],
    }


@router.get("/manufacturers")
def list_manufacturers(db: Session = Depends(get_db)):
    manufacturers = ManufacturerRepository(db).find_all()
    return {
        "success": True,
        "data": [m.to_dict() for m in manufacturers],
        "meta": {"total": len(manufacturers)},
    }
