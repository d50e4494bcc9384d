"""
Cart API endpoints
"""
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from sqlalchemy.orm import Session

from kamioun.api.serializers import cart_detail
from kamioun.core.database import get_db
from kamioun.services.cart_service import CartService

router = APIRouter(prefix="/api/marketplace/cart", tags=["Cart"])


def _items(body: Any) -> list:
    items = body.get("items") if isinstance(body, dict) else None
    if not isinstance(items, list):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="items must be an array")
    if not all(isinstance(item, dict) for item in items):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Each item must be an object")
    return items


@router.get("/{customer_id}")
def get_cart(customer_id: str, db: Session = Depends(get_db)):
    return cart_detail(CartService(db).get_cart(customer_id))


@router.post("/{customer_id}")
def replace_cart(customer_id: str, body: Any = Body(None), db: Session = Depends(get_db)):
    """Create the cart if needed and replace all of its items"""
    cart = CartService(db).replace_items(customer_id, _items(body))
    return cart_detail(cart)


@router.put("/{customer_id}")
def merge_cart(customer_id: str, body: Any = Body(None), db: Session = Depends(get_db)):
    """Merge items on (product_id, partner_id, source_id) into the existing cart"""
    cart = CartService(db).merge_items(customer_id, _items(body))
    return cart_detail(cart)


@router.delete("/{customer_id}")
def delete_cart(customer_id: str, body: Any = Body(None), db: Session = Depends(get_db)):
    """Delete the cart; the body must carry the customer_id"""
    requested = body.get("customer_id") if isinstance(body, dict) else None
    if not requested:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="customer_id is required")

    CartService(db).delete_cart(requested)
    return {"message": "Cart deleted successfully"}
