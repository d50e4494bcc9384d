"""
Order API endpoints
- Order creation from reservations (physical stock decrement)
- Order updates by authenticated users
- Order item quantity changes with stock movements
- Order statuses
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kamioun.api.serializers import order_detail
from kamioun.core.auth import TokenUser, get_current_user
from kamioun.core.database import get_db
from kamioun.models import Status
from kamioun.repositories import OrderRepository, OrderStatusRepository
from kamioun.services.order_service import OrderService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/marketplace", tags=["Orders"])


# =============================================================================
# Pydantic Models
# =============================================================================

class OrderCreate(BaseModel):
    reservation_id: Optional[str] = None
    is_active: bool = True
    amount_ttc: Optional[float] = None
    amount_ordered: Optional[float] = None
    amount_refunded: Optional[float] = None
    amount_canceled: Optional[float] = None
    amount_shipped: Optional[float] = None
    shipping_method: Optional[str] = None
    shipping_amount: Optional[float] = None
    from_mobile: Optional[bool] = None
    weight: Optional[float] = None
    payment_method_id: Optional[str] = None
    customer_id: Optional[str] = None
    agent_id: Optional[str] = None


class OrderItemPatch(BaseModel):
    id: Optional[str] = None
    qte_ordered: Optional[float] = None
    qte_refunded: Optional[float] = None
    qte_shipped: Optional[float] = None
    qte_canceled: Optional[float] = None
    discounted_price: Optional[float] = None
    weight: Optional[float] = None
    sku: Optional[str] = None
    source_id: Optional[str] = None
    partner_id: Optional[str] = None


class OrderItemsPatch(OrderItemPatch):
    """A single item change, or a batch under updates"""
    updates: Optional[List[OrderItemPatch]] = None


class OrderUpdate(BaseModel):
    amount_ttc: Optional[float] = None
    amount_ordered: Optional[float] = None
    amount_refunded: Optional[float] = None
    amount_canceled: Optional[float] = None
    amount_shipped: Optional[float] = None
    shipping_method: Optional[str] = None
    shipping_amount: Optional[float] = None
    weight: Optional[float] = None
    from_mobile: Optional[bool] = None
    is_active: Optional[bool] = None
    comment: Optional[str] = None
    status_id: Optional[str] = None
    state_id: Optional[str] = None
    customer_id: Optional[str] = None
    agent_id: Optional[str] = None
    payment_method_id: Optional[str] = None
    reservation_id: Optional[str] = None
    order_items: Optional[List[OrderItemPatch]] = None


class StatusCreate(BaseModel):
    name: Optional[str] = None
    state_id: Optional[str] = None


# =============================================================================
# Orders
# =============================================================================

@router.post("/orders", status_code=status.HTTP_201_CREATED)
def create_order(body: OrderCreate, db: Session = Depends(get_db)):
    """
    Create an order from a reservation

    State is "new" when is_active, "canceled" otherwise; status "open" is
    created for that state if missing.
    """
    data = body.model_dump(exclude_unset=True)
    data["is_active"] = body.is_active
    order = OrderService(db).create_from_reservation(data)
    return {"message": "Order created successfully", "order": order_detail(order)}


@router.get("/orders/{order_id}")
def get_order(order_id: str, db: Session = Depends(get_db)):
    order = OrderRepository(db).find_by_id(order_id, with_relations=True)
    if not order:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Order not found")
    return {"message": "Order retrieved successfully", "order": order_detail(order)}


@router.patch("/orders/{order_id}")
def update_order(
    order_id: str,
    body: OrderUpdate,
    db: Session = Depends(get_db),
    user: TokenUser = Depends(get_current_user),
):
    """Update an order (bearer token required); the response tells who changed it"""
    order, notification = OrderService(db).update_order(order_id, body.model_dump(exclude_unset=True), user)
    logger.info(notification["message"])
    return {
        "message": "Order updated successfully",
        "order": order_detail(order),
        "notification": notification,
    }


@router.delete("/orders/{order_id}")
def delete_order(order_id: str, db: Session = Depends(get_db)):
    deleted = OrderService(db).delete_order(order_id)
    return {"message": "Order deleted successfully", "order": deleted}


# =============================================================================
# Order items
# =============================================================================

@router.patch("/order-items")
def update_order_items(body: OrderItemsPatch, db: Session = Depends(get_db)):
    """
    Update one order item ({id, ...}) or several ({updates: [...]})

    Shipped quantities leave stock; refunded and canceled quantities go
    back to it. A bulk update is applied atomically.
    """
    service = OrderService(db)

    if "updates" in body.model_fields_set:
        if body.updates is None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="updates must be an array of objects")
        results = service.update_order_items([u.model_dump(exclude_none=True) for u in body.updates])
        return {"success": True, "message": f"{len(results)} order items updated", "results": results}

    if not body.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Order item ID is required")

    result = service.update_order_item(body.id, body.model_dump(exclude_none=True, exclude={"updates"}))
    return {"success": True, "message": "Order item updated successfully", **result}


@router.delete("/order-items/{item_id}")
def delete_order_item(item_id: str, db: Session = Depends(get_db)):
    deleted = OrderService(db).delete_order_item(item_id)
    return {"message": "Order item deleted successfully", "order_item": deleted}


# =============================================================================
# Statuses
# =============================================================================

@router.post("/statuses", status_code=status.HTTP_201_CREATED)
def create_status(body: StatusCreate, db: Session = Depends(get_db)):
    if not body.name or not body.state_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="name and state_id are required")

    repo = OrderStatusRepository(db)
    if repo.find_state_by_id(body.state_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="State not found")
    if repo.find_status(body.name, body.state_id):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Status already exists for this state")

    try:
        created = repo.add_status(Status(name=body.name, state_id=body.state_id))
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Status already exists for this state")

    db.refresh(created)
    return {"message": "Status created successfully", "status": created.to_dict()}
