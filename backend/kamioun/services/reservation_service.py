"""
Reservation Service
Reservation creation against sealable stock, and activation into orders

Author: Kamioun
Date: 2025-03-02
"""
import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from kamioun.core.errors import BusinessError, NotFoundError, check_relations
from kamioun.models import Order, OrderItem, Reservation, ReservationItem
from kamioun.repositories import (
    CustomerRepository,
    OrderRepository,
    OrderStatusRepository,
    PartnerRepository,
    PaymentMethodRepository,
    ProductRepository,
    ReservationItemRepository,
    ReservationRepository,
    SourceRepository,
    StockRepository,
    TaxRepository,
)

logger = logging.getLogger(__name__)

# Reservation fields a plain PATCH may change
UPDATABLE_FIELDS = (
    "amount_ttc",
    "amount_ordered",
    "shipping_amount",
    "shipping_method",
    "weight",
    "from_mobile",
    "comment",
    "is_active",
)


def _round2(value) -> Optional[float]:
    return None if value is None else round(float(value), 2)


class ReservationService:
    """
    Service for reservations

    Handles:
    - Creation (single or batch) with sealable stock checks and decrement
    - Delivery date assignment per partner
    - Activation, which turns a reservation into an order
    """

    def __init__(self, db: Session):
        self.db = db
        self.reservations = ReservationRepository(db)
        self.orders = OrderRepository(db)
        self.statuses = OrderStatusRepository(db)
        self.customers = CustomerRepository(db)
        self.payment_methods = PaymentMethodRepository(db)
        self.stock = StockRepository(db)
        self.items = ReservationItemRepository(db)
        self.products = ProductRepository(db)
        self.partners = PartnerRepository(db)
        self.sources = SourceRepository(db)
        self.taxes = TaxRepository(db)

    def create_reservations(self, payloads: List[Dict]) -> List[Reservation]:
        """
        Create reservations and hold their stock

        Every reservation of the batch is created in one transaction: a
        missing relation, missing stock row or insufficient sealable stock
        rejects the whole batch.

        Args:
            payloads: Reservation dicts, each with a reservation_items list

        Returns:
            Created reservations (with items)

        Raises:
            BusinessError: RESERVATION_ITEMS_REQUIRED, STOCK_INSUFFICIENT (400)
            NotFoundError: RELATION_NOT_FOUND, STOCK_NOT_FOUND (404)
        """
        created = []
        try:
            for payload in payloads:
                created.append(self._create_one(payload))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return [self.reservations.find_by_id(r.id) for r in created]

    def _create_one(self, payload: Dict) -> Reservation:
        items = payload.get("reservation_items")
        if not isinstance(items, list):
            raise BusinessError("RESERVATION_ITEMS_REQUIRED", "Reservation items are required")

        customer_id = payload.get("customer_id")
        payment_method_id = payload.get("payment_method_id")
        missing = []
        if not customer_id or self.customers.find_by_id(customer_id) is None:
            missing.append(f"Customer ({customer_id})")
        if not payment_method_id or self.payment_methods.find_by_id(payment_method_id) is None:
            missing.append(f"Payment method ({payment_method_id})")
        if missing:
            raise NotFoundError("RELATION_NOT_FOUND", f"Relations not found: {' '.join(missing)}")

        # Hold stock item by item; cumulative quantities on the same row are checked too
        for item in items:
            check_relations((("Tax", item.get("tax_id"), self.taxes.find_by_id),))
            stock = self.stock.find_for_offer(item.get("product_id"), item.get("partner_id"), item.get("source_id"))
            if stock is None:
                raise NotFoundError(
                    "STOCK_NOT_FOUND",
                    f"Stock not found for product {item.get('product_id')} and partner {item.get('partner_id')}",
                )
            quantity = float(item.get("qte_reserved") or 0)
            if stock.sealable < quantity:
                raise BusinessError(
                    "STOCK_INSUFFICIENT",
                    f"Insufficient stock for product {item.get('product_id')}. "
                    f"Available: {stock.sealable}, requested: {quantity}",
                )
            stock.sealable = stock.sealable - quantity

        reservation = Reservation(
            customer_id=customer_id,
            payment_method_id=payment_method_id,
            amount_ttc=_round2(payload.get("amount_ttc") or 0),
            amount_ordered=_round2(payload.get("amount_ordered") or 0),
            shipping_amount=_round2(payload.get("shipping_amount") or 0),
            shipping_method=payload.get("shipping_method"),
            weight=_round2(payload.get("weight") or 0),
            from_mobile=bool(payload.get("from_mobile", False)),
            is_active=bool(payload.get("is_active", False)),
            comment=payload.get("comment") or "",
        )
        reservation.items = [
            ReservationItem(
                customer_id=customer_id,
                product_id=item.get("product_id"),
                partner_id=item.get("partner_id"),
                source_id=item.get("source_id"),
                tax_id=item.get("tax_id"),
                qte_reserved=float(item.get("qte_reserved") or 0),
                price=_round2(item.get("price") or 0),
                discounted_price=_round2(item.get("discounted_price")),
                weight=_round2(item.get("weight") or 0),
                sku=item.get("sku"),
                delivery_date=item.get("delivery_date"),
            )
            for item in items
        ]
        return self.reservations.add(reservation)

    def update_reservation(self, reservation_id: str, data: Dict) -> Tuple[Reservation, Optional[Order]]:
        """
        Update a reservation, activating it when is_active flips to true

        Args:
            reservation_id: Reservation UUID
            data: Fields to change; delivery_dates is a list of
                {partner_id, delivery_date} applied to that partner's items

        Returns:
            Tuple of (reservation, created order or None)

        Raises:
            NotFoundError: RESERVATION_NOT_FOUND
            BusinessError: ACTIVE_RESERVATION_MODIFICATION
        """
        reservation = self.reservations.find_by_id(reservation_id)
        if reservation is None:
            raise NotFoundError("RESERVATION_NOT_FOUND", "Reservation not found")

        if data.get("is_active") is False:
            raise BusinessError(
                "ACTIVE_RESERVATION_MODIFICATION",
                "Unable to deactivate an active reservation",
            )

        delivery_dates = {
            entry["partner_id"]: entry["delivery_date"]
            for entry in (data.get("delivery_dates") or [])
            if entry.get("partner_id") and entry.get("delivery_date")
        }
        order = None

        try:
            for item in reservation.items:
                if item.partner_id in delivery_dates:
                    item.delivery_date = delivery_dates[item.partner_id]

            if data.get("is_active") is True and not reservation.is_active:
                order = self._activate(reservation, data.get("comment"))
            else:
                for field in UPDATABLE_FIELDS:
                    if field in data:
                        setattr(reservation, field, data[field])

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(reservation)
        if order is not None:
            order = self.orders.find_by_id(order.id, with_relations=True)
        return reservation, order

    def _activate(self, reservation: Reservation, comment: Optional[str]) -> Order:
        state = self.statuses.get_or_create_state("new")
        order_status = self.statuses.get_or_create_status("open", state.id)

        order = Order(
            amount_ttc=round(reservation.amount_ttc or 0, 3),
            amount_ordered=round(reservation.amount_ordered or 0, 3),
            amount_refunded=0,
            amount_canceled=0,
            amount_shipped=0,
            shipping_method=reservation.shipping_method,
            shipping_amount=round(reservation.shipping_amount or 0, 3),
            from_mobile=reservation.from_mobile,
            weight=reservation.weight,
            is_active=True,
            comment=comment or reservation.comment or None,
            status_id=order_status.id,
            state_id=state.id,
            payment_method_id=reservation.payment_method_id,
            customer_id=reservation.customer_id,
            reservation_id=reservation.id,
        )
        order.items = [
            OrderItem(
                qte_ordered=item.qte_reserved,
                qte_refunded=0,
                qte_shipped=0,
                qte_canceled=0,
                discounted_price=item.discounted_price,
                weight=item.weight,
                sku=item.sku,
                delivery_date=item.delivery_date,
                product_id=item.product_id,
                source_id=item.source_id,
                partner_id=item.partner_id,
            )
            for item in reservation.items
        ]

        reservation.is_active = True
        if comment is not None:
            reservation.comment = comment

        logger.info(f"Reservation {reservation.id} activated into order")
        return self.orders.add(order)

    def delete_reservation(self, reservation_id: str) -> Dict:
        reservation = self.reservations.find_by_id(reservation_id, with_items=False)
        if reservation is None:
            raise NotFoundError("RESERVATION_NOT_FOUND", "Reservation not found")

        snapshot = reservation.to_dict()
        try:
            self.reservations.delete(reservation)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return snapshot

    def add_item(self, data: Dict) -> ReservationItem:
        """
        Add a standalone reservation item (no stock is held)

        Raises:
            NotFoundError: RELATION_NOT_FOUND naming every unknown reference
        """
        check_relations((
            ("Customer", data.get("customer_id"), self.customers.find_by_id),
            ("Product", data.get("product_id"), self.products.find_by_id),
            ("Partner", data.get("partner_id"), self.partners.find_by_id),
            ("Source", data.get("source_id"), self.sources.find_by_id),
            ("Tax", data.get("tax_id"), self.taxes.find_by_id),
            ("Reservation", data.get("reservation_id"), self.reservations.find_by_id),
        ))

        try:
            item = self.items.add(ReservationItem(**data))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(item)
        return item
