"""
Purchase Order Service
Creation and full-replacement updates of purchase orders placed with manufacturers

Author: Kamioun
Date: 2025-03-02
"""
import logging
import time
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from kamioun.core.errors import BusinessError, NotFoundError
from kamioun.models import (
    PaymentMethod,
    ProductOrdered,
    PurchaseComment,
    PurchaseFile,
    PurchaseOrder,
    PurchasePayment,
)
from kamioun.repositories import ManufacturerRepository, PurchaseOrderRepository, WarehouseRepository

logger = logging.getLogger(__name__)

PAYMENT_METHODS = {method.value for method in PaymentMethod}


def _to_float(value) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _positive_int(value) -> Optional[int]:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return None
    return parsed if parsed > 0 else None


def is_valid_payment(payment: Dict) -> bool:
    """
    A payment is kept when its amount is positive, its method is one of
    CASH/CHEQUE/TRAITE (any case) and its percentage lies in [0, 100]
    """
    amount = _to_float(payment.get("amount"))
    percentage = _to_float(payment.get("percentage"))
    method = str(payment.get("payment_method") or "").upper()
    return (
        amount is not None
        and amount > 0
        and method in PAYMENT_METHODS
        and percentage is not None
        and 0 <= percentage <= 100
    )


class PurchaseOrderService:
    """
    Service for purchase orders

    Updates replace child collections wholesale: when a collection is
    present in the payload its rows are deleted and recreated. The whole
    update is one session commit, so a failure leaves the order untouched.
    """

    def __init__(self, db: Session):
        self.db = db
        self.purchase_orders = PurchaseOrderRepository(db)
        self.manufacturers = ManufacturerRepository(db)
        self.warehouses = WarehouseRepository(db)

    def create(self, data: Dict) -> PurchaseOrder:
        """
        Create a purchase order with its comments, payments, files and products

        Args:
            data: manufacturer_id, warehouse_id, delivery_date, total_amount,
                status, comments, payments, file_references, products

        Returns:
            Created purchase order

        Raises:
            BusinessError: INVALID_MANUFACTURER / INVALID_WAREHOUSE (400)
            NotFoundError: MANUFACTURER_NOT_FOUND / WAREHOUSE_NOT_FOUND (404)
        """
        manufacturer_id = _positive_int(data.get("manufacturer_id"))
        if manufacturer_id is None:
            raise BusinessError("INVALID_MANUFACTURER", "Invalid manufacturer")

        warehouse_id = _positive_int(data.get("warehouse_id"))
        if warehouse_id is None:
            raise BusinessError("INVALID_WAREHOUSE", "Invalid warehouse")

        if self.manufacturers.find_by_id(manufacturer_id) is None:
            raise NotFoundError("MANUFACTURER_NOT_FOUND", f"Manufacturer {manufacturer_id} not found")
        if self.warehouses.find_by_id(warehouse_id) is None:
            raise NotFoundError("WAREHOUSE_NOT_FOUND", f"Warehouse {warehouse_id} not found")

        purchase_order = PurchaseOrder(
            order_number=f"PO-{int(time.time() * 1000)}",
            manufacturer_id=manufacturer_id,
            warehouse_id=warehouse_id,
            delivery_date=data.get("delivery_date"),
            total_amount=_to_float(data.get("total_amount")) or 0,
        )
        if data.get("status"):
            purchase_order.status = data["status"]

        purchase_order.comments = [
            PurchaseComment(content=comment["content"])
            for comment in data.get("comments") or []
            if comment.get("content")
        ]
        purchase_order.payments = [
            PurchasePayment(
                amount=float(payment["amount"]),
                payment_method=str(payment["payment_method"]).upper(),
                percentage=float(payment.get("percentage") or 0),
                payment_date=payment.get("date"),
                manufacturer_id=manufacturer_id,
            )
            for payment in data.get("payments") or []
            if is_valid_payment(payment)
        ]
        purchase_order.files = [
            PurchaseFile(name=f.get("name"), url=f["url"])
            for f in data.get("file_references") or []
        ]
        purchase_order.products = [
            ProductOrdered(
                name=p["name"],
                sku=p.get("sku"),
                quantity=p.get("quantity") or 0,
                price_excl_tax=p.get("price_excl_tax") or 0,
                total=p.get("total") or 0,
            )
            for p in data.get("products") or []
        ]

        try:
            self.purchase_orders.add(purchase_order)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info(f"Purchase order {purchase_order.order_number} created")
        return self.purchase_orders.find_by_id(purchase_order.id)

    def get(self, purchase_order_id: str) -> PurchaseOrder:
        purchase_order = self.purchase_orders.find_by_id(purchase_order_id)
        if purchase_order is None:
            raise NotFoundError("PURCHASE_ORDER_NOT_FOUND", "Purchase order not found")
        return purchase_order

    def update(self, purchase_order_id: str, data: Dict) -> PurchaseOrder:
        """
        Update a purchase order

        Scalar fields are overwritten when present. comment replaces all
        comments with one; files, products and payment_types are each
        deleted and recreated when present (an empty list clears them).

        Raises:
            BusinessError: EMPTY_UPDATE (400)
            NotFoundError: PURCHASE_ORDER_NOT_FOUND, MANUFACTURER_NOT_FOUND,
                WAREHOUSE_NOT_FOUND (404)
        """
        if not data:
            raise BusinessError("EMPTY_UPDATE", "Missing update data")

        purchase_order = self.get(purchase_order_id)
        order_id = purchase_order.id

        if data.get("supplier_id") and self.manufacturers.find_by_id(data["supplier_id"]) is None:
            raise NotFoundError("MANUFACTURER_NOT_FOUND", f"Manufacturer {data['supplier_id']} not found")
        if data.get("warehouse_id") and self.warehouses.find_by_id(data["warehouse_id"]) is None:
            raise NotFoundError("WAREHOUSE_NOT_FOUND", f"Warehouse {data['warehouse_id']} not found")

        try:
            if "delivery_date" in data:
                purchase_order.delivery_date = data["delivery_date"]
            if "total_amount" in data:
                purchase_order.total_amount = _to_float(data["total_amount"])
            if data.get("status"):
                purchase_order.status = data["status"]
            if data.get("warehouse_id"):
                purchase_order.warehouse_id = data["warehouse_id"]
            if data.get("supplier_id"):
                purchase_order.manufacturer_id = data["supplier_id"]

            if data.get("comment"):
                self.purchase_orders.delete_comments(order_id)
                self.db.add(PurchaseComment(purchase_order_id=order_id, content=data["comment"]))

            if data.get("files") is not None:
                self.purchase_orders.delete_files(order_id)
                self.db.add_all([
                    PurchaseFile(purchase_order_id=order_id, name=f.get("name"), url=f["url"])
                    for f in data["files"]
                ])

            if data.get("products") is not None:
                self.purchase_orders.delete_products(order_id)
                self.db.add_all([
                    ProductOrdered(
                        purchase_order_id=order_id,
                        name=p["name"],
                        sku=p.get("sku"),
                        quantity=p.get("quantity") or 0,
                        price_excl_tax=p.get("price_excl_tax") or 0,
                        total=(p.get("quantity") or 0) * (p.get("price_excl_tax") or 0),
                    )
                    for p in data["products"]
                ])

            if data.get("payment_types") is not None:
                self.purchase_orders.delete_payments(order_id)
                self.db.add_all([
                    PurchasePayment(
                        purchase_order_id=order_id,
                        payment_method=str(payment["type"]).upper(),
                        percentage=payment.get("percentage") or 0,
                        amount=payment["amount"],
                        payment_date=payment.get("payment_date"),
                        manufacturer_id=data.get("supplier_id") or purchase_order.manufacturer_id,
                    )
                    for payment in data["payment_types"]
                ])

            self.db.commit()
        except Exception:
            self.db.rollback()
            logger.error(f"Purchase order {order_id} update failed, rolled back")
            raise

        self.db.expire_all()
        return self.get(order_id)

    def add_files(self, purchase_order_id: str, files: List[Dict]) -> PurchaseOrder:
        """Attach files to a purchase order without touching existing ones"""
        if not files:
            raise BusinessError("FILES_REQUIRED", "No files provided")

        purchase_order = self.get(purchase_order_id)
        try:
            for f in files:
                purchase_order.files.append(PurchaseFile(name=f.get("name"), url=f["url"]))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return self.get(purchase_order_id)
