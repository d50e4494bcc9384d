"""
Purchase order API endpoints (orders placed with manufacturers)
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, field_validator
from sqlalchemy.orm import Session

from kamioun.api.serializers import purchase_order_detail
from kamioun.core.database import get_db
from kamioun.models import PaymentMethod, PurchaseOrderState
from kamioun.services.purchase_order_service import PurchaseOrderService

router = APIRouter(prefix="/api/purchases", tags=["Purchases"])


# =============================================================================
# Pydantic Models
# =============================================================================

class CommentIn(BaseModel):
    content: Optional[str] = None


class PaymentIn(BaseModel):
    """Payment at creation; invalid entries are dropped, not rejected"""
    amount: Optional[float] = None
    payment_method: Optional[str] = None
    percentage: Optional[float] = None
    date: Optional[datetime] = None


class PaymentTypeIn(BaseModel):
    type: str
    amount: float
    percentage: Optional[float] = None
    payment_date: Optional[datetime] = None

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        value = v.upper()
        if value not in {m.value for m in PaymentMethod}:
            raise ValueError(f"type must be one of {[m.value for m in PaymentMethod]}")
        return value


class FileIn(BaseModel):
    name: Optional[str] = None
    url: str


class ProductOrderedIn(BaseModel):
    name: str
    sku: Optional[str] = None
    quantity: float = 0
    price_excl_tax: float = 0
    total: Optional[float] = None


class PurchaseOrderCreate(BaseModel):
    manufacturer_id: Optional[int] = None
    warehouse_id: Optional[int] = None
    delivery_date: Optional[datetime] = None
    total_amount: Optional[float] = None
    status: Optional[PurchaseOrderState] = None
    comments: Optional[List[CommentIn]] = None
    payments: Optional[List[PaymentIn]] = None
    file_references: Optional[List[FileIn]] = None
    products: Optional[List[ProductOrderedIn]] = None


class PurchaseOrderUpdate(BaseModel):
    delivery_date: Optional[datetime] = None
    total_amount: Optional[float] = None
    status: Optional[PurchaseOrderState] = None
    warehouse_id: Optional[int] = None
    supplier_id: Optional[int] = None
    comment: Optional[str] = None
    files: Optional[List[FileIn]] = None
    products: Optional[List[ProductOrderedIn]] = None
    payment_types: Optional[List[PaymentTypeIn]] = None


class FilesAppend(BaseModel):
    files: Optional[List[FileIn]] = None


# =============================================================================
# Endpoints
# =============================================================================

@router.post("", status_code=status.HTTP_201_CREATED)
def create_purchase_order(body: PurchaseOrderCreate, db: Session = Depends(get_db)):
    """
    Create a purchase order

    The order number is PO-<epoch ms>. Payments with a non-positive amount,
    unknown method or percentage outside [0, 100] are skipped.
    """
    purchase_order = PurchaseOrderService(db).create(body.model_dump())
    return {
        "success": True,
        "message": "Purchase order created successfully",
        "data": purchase_order_detail(purchase_order),
    }


@router.get("/{purchase_order_id}")
def get_purchase_order(purchase_order_id: str, db: Session = Depends(get_db)):
    purchase_order = PurchaseOrderService(db).get(purchase_order_id)
    return {"success": True, "data": purchase_order_detail(purchase_order)}


@router.put("/{purchase_order_id}")
def update_purchase_order(purchase_order_id: str, body: PurchaseOrderUpdate, db: Session = Depends(get_db)):
    """
    Update a purchase order

    comment replaces all comments; files, products and payment_types
    replace their collections when present.
    """
    purchase_order = PurchaseOrderService(db).update(purchase_order_id, body.model_dump(exclude_unset=True))
    return {
        "success": True,
        "message": "Purchase order updated successfully",
        "data": purchase_order_detail(purchase_order),
    }


@router.put("/{purchase_order_id}/files")
def add_purchase_order_files(purchase_order_id: str, body: FilesAppend, db: Session = Depends(get_db)):
    files = [f.model_dump() for f in body.files or []]
    purchase_order = PurchaseOrderService(db).add_files(purchase_order_id, files)
    return {
        "success": True,
        "message": "Files added successfully",
        "data": purchase_order_detail(purchase_order),
    }
