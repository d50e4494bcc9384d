"""
Offer lookup API endpoints
- Partner offers of a product with reservable stock
- Stock rows, sources and payment methods
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from kamioun.api.serializers import partner_public, product_summary
from kamioun.core.database import get_db
from kamioun.repositories import (
    PaymentMethodRepository,
    ProductRepository,
    SkuPartnerRepository,
    SourceRepository,
    StockRepository,
)

router = APIRouter(prefix="/api/marketplace", tags=["Catalog"])


@router.get("/sku-partners")
def list_sku_partners(product_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    """
    Partners selling a product, each with the sources where sealable stock
    is still available. Partners without such a source are left out.
    """
    if not product_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="product_id parameter is required")

    product = ProductRepository(db).find_by_id(product_id)
    if not product:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Product not found")

    partners_data = []
    for sku_partner in SkuPartnerRepository(db).find_for_product(product_id):
        sources = [
            {
                **stock.source.to_dict(),
                "stock": {
                    "sealable": stock.sealable,
                    "price": stock.price,
                    "special_price": stock.special_price,
                    "min_qty": stock.min_qty,
                    "max_qty": stock.max_qty,
                },
            }
            for stock in sku_partner.stock
            if stock.sealable > 0 and stock.source is not None
        ]
        if not sources:
            continue
        partner = sku_partner.partner
        partners_data.append({
            "partner": {
                "id": partner.id,
                "username": partner.username,
                "logo": partner.logo,
                "minimum_amount": partner.minimum_amount,
            },
            "sources": sources,
        })

    return {
        "success": True,
        "data": {
            "product": {
                "id": product.id,
                "name": product.name,
                "description": product.description,
                "weight": product.weight,
                "sku": product.sku,
                "brand_id": product.brand_id,
                "images": [image.to_dict() for image in product.images],
            },
            "partners_data": partners_data,
        },
    }


@router.get("/stock")
def list_stock(
    sku_partner_id: Optional[str] = Query(None),
    source_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    rows = StockRepository(db).find_all(sku_partner_id=sku_partner_id, source_id=source_id)
    data = []
    for stock in rows:
        sku_partner = stock.sku_partner
        data.append({
            **stock.to_dict(),
            "sku_partner": {
                **sku_partner.to_dict(),
                "product": product_summary(sku_partner.product),
                "partner": partner_public(sku_partner.partner),
            },
            "source": stock.source.to_dict() if stock.source else None,
        })
    return {"success": True, "data": data}


@router.get("/sources")
def list_sources(db: Session = Depends(get_db)):
    sources = SourceRepository(db).find_all()
    return {
        "success": True,
        "data": [
            {
                **source.to_dict(),
                "partner": partner_public(source.partner),
                "stock": [stock.to_dict() for stock in source.stock],
            }
            for source in sources
        ],
    }


@router.get("/payment-methods")
def list_payment_methods(db: Session = Depends(get_db)):
    methods = PaymentMethodRepository(db).find_all()
    return {"success": True, "data": [m.to_dict() for m in methods]}
