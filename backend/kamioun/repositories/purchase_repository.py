"""
Purchase Repository - Data Access Layer for purchase orders and manufacturers

Author: Kamioun
Date: 2025-03-02
"""
from typing import List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload, joinedload

from kamioun.models import (
    Manufacturer,
    Product,
    ProductOrdered,
    PurchaseComment,
    PurchaseFile,
    PurchaseOrder,
    PurchasePayment,
    Warehouse,
)


class PurchaseOrderRepository:
    """
    Repository for PurchaseOrder data access
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, purchase_order_id: str) -> Optional[PurchaseOrder]:
        """
        Find purchase order by ID with manufacturer, warehouse and all children

        Returns:
            PurchaseOrder or None if not found
        """
        return (
            self.db.query(PurchaseOrder)
            .options(
                joinedload(PurchaseOrder.manufacturer),
                joinedload(PurchaseOrder.warehouse),
                selectinload(PurchaseOrder.comments),
                selectinload(PurchaseOrder.payments),
                selectinload(PurchaseOrder.files),
                selectinload(PurchaseOrder.products),
            )
            .filter(PurchaseOrder.id == purchase_order_id)
            .first()
        )

    def add(self, purchase_order: PurchaseOrder) -> PurchaseOrder:
        self.db.add(purchase_order)
        self.db.flush()
        return purchase_order

    def delete_comments(self, purchase_order_id: str) -> int:
        return self._delete_children(PurchaseComment, purchase_order_id)

    def delete_files(self, purchase_order_id: str) -> int:
        return self._delete_children(PurchaseFile, purchase_order_id)

    def delete_products(self, purchase_order_id: str) -> int:
        return self._delete_children(ProductOrdered, purchase_order_id)

    def delete_payments(self, purchase_order_id: str) -> int:
        return self._delete_children(PurchasePayment, purchase_order_id)

    def _delete_children(self, model, purchase_order_id: str) -> int:
        return (
            self.db.query(model)
            .filter(model.purchase_order_id == purchase_order_id)
            .delete(synchronize_session=False)
        )


class ManufacturerRepository:
    """
    Repository for Manufacturer (supplier) data access
    """

    SEARCH_FIELDS = ("company_name", "code", "email", "contact_name", "phone_number", "city", "country")

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, manufacturer_id: int) -> Optional[Manufacturer]:
        return self.db.query(Manufacturer).filter(Manufacturer.id == manufacturer_id).first()

    def find_all(self) -> List[Manufacturer]:
        return self.db.query(Manufacturer).order_by(Manufacturer.company_name).all()

    def find_paginated(self, page: int = 1, limit: int = 25,
                       search: Optional[str] = None) -> Tuple[List[Manufacturer], int]:
        """
        Paginated manufacturers with optional case-insensitive search

        Args:
            page: 1-based page number
            limit: Page size
            search: Text matched against the manufacturer's text fields

        Returns:
            Tuple of (manufacturers, total_count)
        """
        query = self.db.query(Manufacturer)

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(*[
                getattr(Manufacturer, field).ilike(pattern) for field in self.SEARCH_FIELDS
            ]))

        total = query.count()
        manufacturers = (
            query.options(selectinload(Manufacturer.products))
            .order_by(Manufacturer.company_name)
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return manufacturers, total

    def count_products(self, manufacturer_id: int) -> int:
        return (
            self.db.query(func.count(Product.id))
            .filter(Product.supplier_id == manufacturer_id)
            .scalar()
        )


class WarehouseRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, warehouse_id: int) -> Optional[Warehouse]:
        return self.db.query(Warehouse).filter(Warehouse.id == warehouse_id).first()
