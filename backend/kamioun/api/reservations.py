"""
Reservation API endpoints
- Reservation creation (single or batch) against sealable stock
- Activation of a reservation into an order
- Standalone reservation items
"""
from datetime import datetime
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from kamioun.api.serializers import order_detail, partner_public, product_summary, reservation_detail
from kamioun.core.database import get_db
from kamioun.repositories import ReservationItemRepository, ReservationRepository
from kamioun.services.reservation_service import ReservationService

router = APIRouter(prefix="/api/marketplace", tags=["Reservations"])


# =============================================================================
# Pydantic Models
# =============================================================================

class ReservationItemIn(BaseModel):
    product_id: Optional[str] = None
    partner_id: Optional[str] = None
    source_id: Optional[str] = None
    tax_id: Optional[str] = None
    qte_reserved: Optional[float] = None
    price: Optional[float] = None
    discounted_price: Optional[float] = None
    weight: Optional[float] = None
    sku: Optional[str] = None
    delivery_date: Optional[datetime] = None


class ReservationCreate(BaseModel):
    customer_id: Optional[str] = None
    payment_method_id: Optional[str] = None
    amount_ttc: Optional[float] = None
    amount_ordered: Optional[float] = None
    shipping_amount: Optional[float] = None
    shipping_method: Optional[str] = None
    weight: Optional[float] = None
    from_mobile: bool = False
    is_active: bool = False
    comment: Optional[str] = None
    reservation_items: Optional[List[ReservationItemIn]] = None


class DeliveryDate(BaseModel):
    partner_id: str
    delivery_date: datetime


class ReservationUpdate(BaseModel):
    amount_ttc: Optional[float] = None
    amount_ordered: Optional[float] = None
    shipping_amount: Optional[float] = None
    shipping_method: Optional[str] = None
    weight: Optional[float] = None
    from_mobile: Optional[bool] = None
    comment: Optional[str] = None
    is_active: Optional[bool] = None
    delivery_dates: Optional[List[DeliveryDate]] = None


class ReservationItemCreate(BaseModel):
    customer_id: Optional[str] = None
    product_id: Optional[str] = None
    partner_id: Optional[str] = None
    source_id: Optional[str] = None
    reservation_id: Optional[str] = None
    qte_reserved: Optional[float] = None
    price: Optional[float] = None
    discounted_price: Optional[float] = None
    weight: Optional[float] = None
    sku: Optional[str] = None


# =============================================================================
# Reservations
# =============================================================================

@router.post("/reservations", status_code=status.HTTP_201_CREATED)
def create_reservations(
    body: Union[List[ReservationCreate], ReservationCreate],
    db: Session = Depends(get_db),
):
    """
    Create one reservation or a batch

    Sealable stock of every item is checked and decremented; the whole
    request is rejected if any reservation fails.
    """
    payloads = body if isinstance(body, list) else [body]
    reservations = ReservationService(db).create_reservations([p.model_dump() for p in payloads])

    data = [reservation_detail(r) for r in reservations]
    return {
        "success": True,
        "message": "Reservations created successfully" if isinstance(body, list) else "Reservation created successfully",
        "data": data if isinstance(body, list) else data[0],
    }


@router.get("/reservations/{reservation_id}")
def get_reservation(reservation_id: str, db: Session = Depends(get_db)):
    reservation = ReservationRepository(db).find_by_id(reservation_id)
    if not reservation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reservation not found")
    return {"message": "Reservation retrieved successfully", "reservation": reservation_detail(reservation)}


@router.patch("/reservations/{reservation_id}")
def update_reservation(reservation_id: str, body: ReservationUpdate, db: Session = Depends(get_db)):
    """
    Update a reservation

    is_active true on an inactive reservation creates the matching order
    (state "new", status "open"); is_active false is refused.
    """
    reservation, order = ReservationService(db).update_reservation(
        reservation_id, body.model_dump(exclude_unset=True)
    )
    response = {
        "message": "Reservation updated successfully",
        "reservation": reservation_detail(reservation),
    }
    if order is not None:
        response["message"] = "Reservation activated and order created"
        response["order"] = order_detail(order)
    return response


@router.delete("/reservations/{reservation_id}")
def delete_reservation(reservation_id: str, db: Session = Depends(get_db)):
    deleted = ReservationService(db).delete_reservation(reservation_id)
    return {"message": "Reservation deleted successfully", "reservation": deleted}


# =============================================================================
# Reservation items
# =============================================================================

@router.post("/reservation-items", status_code=status.HTTP_201_CREATED)
def create_reservation_item(body: ReservationItemCreate, db: Session = Depends(get_db)):
    if body.qte_reserved is None or not body.product_id or not body.customer_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="qte_reserved, product_id and customer_id are required",
        )

    item = ReservationService(db).add_item(body.model_dump())
    return {"message": "Reservation item created successfully", "reservation_item": item.to_dict()}


@router.get("/reservation-items")
def list_reservation_items(customer_id: Optional[str] = Query(None), db: Session = Depends(get_db)):
    if not customer_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="customer_id is required")

    items = ReservationItemRepository(db).find_by_customer(customer_id)
    return {
        "success": True,
        "data": [
            {
                **item.to_dict(),
                "product": product_summary(item.product),
                "partner": partner_public(item.partner),
                "source": item.source.to_dict() if item.source else None,
            }
            for item in items
        ],
    }
