"""
Order Service
Order creation from reservations, order updates and order item stock movements

Author: Kamioun
Date: 2025-03-02
"""
import logging
import time
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from kamioun.core.auth import TokenUser
from kamioun.core.errors import BusinessError, NotFoundError, check_relations
from kamioun.core.metrics import (
    order_processing_duration,
    product_stock_gauge,
    stock_operation_total,
    stock_update_duration,
)
from kamioun.models import Order, OrderItem
from kamioun.repositories import (
    CustomerRepository,
    OrderItemRepository,
    OrderRepository,
    OrderStatusRepository,
    PartnerRepository,
    PaymentMethodRepository,
    ReservationRepository,
    SkuPartnerRepository,
    SourceRepository,
    StockRepository,
)

logger = logging.getLogger(__name__)

ORDER_CREATE_ROUTE = "/api/marketplace/orders"
ORDER_ITEMS_ROUTE = "/api/marketplace/order-items"
ORDER_ITEMS_BULK_ROUTE = "/api/marketplace/order-items/bulk"

# Plain order columns a PATCH may change
ORDER_FIELDS = (
    "amount_ttc",
    "amount_ordered",
    "amount_refunded",
    "amount_canceled",
    "amount_shipped",
    "shipping_method",
    "shipping_amount",
    "weight",
    "from_mobile",
    "is_active",
    "comment",
    "status_id",
    "state_id",
    "customer_id",
    "agent_id",
    "payment_method_id",
    "reservation_id",
)

ORDER_ITEM_FIELDS = (
    "qte_ordered",
    "qte_refunded",
    "qte_shipped",
    "qte_canceled",
    "discounted_price",
    "weight",
    "sku",
    "source_id",
    "partner_id",
)


def _round2(value) -> float:
    return round(float(value), 2)


class OrderService:
    """
    Service for marketplace orders

    Handles:
    - Order creation from a reservation, with physical stock decrement
    - Order updates (relations, plain fields, nested items)
    - Order item quantity changes and the stock movements they imply
    """

    def __init__(self, db: Session):
        self.db = db
        self.orders = OrderRepository(db)
        self.order_items = OrderItemRepository(db)
        self.reservations = ReservationRepository(db)
        self.statuses = OrderStatusRepository(db)
        self.sku_partners = SkuPartnerRepository(db)
        self.stock = StockRepository(db)
        self.customers = CustomerRepository(db)
        self.payment_methods = PaymentMethodRepository(db)
        self.partners = PartnerRepository(db)
        self.sources = SourceRepository(db)

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    def create_from_reservation(self, data: Dict) -> Order:
        """
        Create an order from a reservation

        Stock is taken from stock_quantity for every reservation item that
        has a source. Any stock problem rolls the whole order back.

        Args:
            data: reservation_id, is_active and optional amount/relation
                overrides (defaults come from the reservation)

        Returns:
            Created order with items

        Raises:
            NotFoundError: RESERVATION_NOT_FOUND
            BusinessError: STATE_NOT_FOUND, STOCK_NOT_FOUND, STOCK_INSUFFICIENT
        """
        with order_processing_duration.labels(route=ORDER_CREATE_ROUTE).time():
            reservation_id = data.get("reservation_id")
            reservation = self.reservations.find_by_id(reservation_id) if reservation_id else None
            if reservation is None:
                raise NotFoundError(
                    "RESERVATION_NOT_FOUND",
                    f"Reservation #{reservation_id} not found.",
                )

            is_active = bool(data.get("is_active"))
            state_name = "new" if is_active else "canceled"
            state = self.statuses.find_state_by_name(state_name)
            if state is None:
                raise BusinessError("STATE_NOT_FOUND", f"State '{state_name}' does not exist.")

            try:
                order_status = self.statuses.get_or_create_status("open", state.id)
                items = [self._order_item_from_reservation(item) for item in reservation.items]

                order = Order(
                    amount_ttc=data.get("amount_ttc", reservation.amount_ttc),
                    amount_ordered=data.get("amount_ordered", reservation.amount_ordered),
                    amount_refunded=data.get("amount_refunded") or 0,
                    amount_canceled=data.get("amount_canceled") or 0,
                    amount_shipped=data.get("amount_shipped") or 0,
                    shipping_method=data.get("shipping_method", reservation.shipping_method),
                    shipping_amount=data.get("shipping_amount", reservation.shipping_amount),
                    from_mobile=data.get("from_mobile", reservation.from_mobile),
                    weight=data.get("weight", reservation.weight),
                    is_active=is_active,
                    status_id=order_status.id,
                    state_id=state.id,
                    payment_method_id=data.get("payment_method_id") or reservation.payment_method_id,
                    customer_id=data.get("customer_id") or reservation.customer_id,
                    agent_id=data.get("agent_id"),
                    reservation_id=reservation.id,
                )
                order.items = items
                self.orders.add(order)
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

            logger.info(f"Order {order.id} created from reservation {reservation.id}")
            return self.orders.find_by_id(order.id, with_relations=True)

    def _order_item_from_reservation(self, item) -> OrderItem:
        if item.source_id:
            product_name = item.product.name if item.product else item.product_id
            source_name = item.source.name if item.source else "unknown source"

            stock = self.stock.find_for_sku(item.sku, item.product_id, item.source_id)
            if stock is None:
                raise BusinessError(
                    "STOCK_NOT_FOUND",
                    f"No stock for product '{product_name}' (SKU: {item.sku}) in '{source_name}'.",
                )
            if stock.stock_quantity < item.qte_reserved:
                raise BusinessError(
                    "STOCK_INSUFFICIENT",
                    f"Insufficient stock for '{product_name}' ({item.sku}) in '{source_name}'. "
                    f"Available: {stock.stock_quantity}, required: {item.qte_reserved}.",
                )
            stock.stock_quantity = stock.stock_quantity - item.qte_reserved

        return OrderItem(
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

    # ------------------------------------------------------------------
    # Updates
    # ------------------------------------------------------------------

    def update_order(self, order_id: str, data: Dict, user: TokenUser) -> Tuple[Order, Dict]:
        """
        Update an order and describe who changed it

        Args:
            order_id: Order UUID
            data: Plain fields, relation ids and an optional order_items list
                of {id, ...} entries
            user: Authenticated user making the change

        Returns:
            Tuple of (order, notification)

        Raises:
            NotFoundError: ORDER_NOT_FOUND, RELATION_NOT_FOUND naming every
                unknown status, state, customer, payment method, reservation,
                partner or source
        """
        order = self.orders.find_by_id(order_id)
        if order is None:
            raise NotFoundError("ORDER_NOT_FOUND", "Order not found")

        lookups = [
            ("Status", data.get("status_id"), self.statuses.find_status_by_id),
            ("State", data.get("state_id"), self.statuses.find_state_by_id),
            ("Customer", data.get("customer_id"), self.customers.find_by_id),
            ("Payment method", data.get("payment_method_id"), self.payment_methods.find_by_id),
            ("Reservation", data.get("reservation_id"), self.reservations.find_by_id),
        ]
        for item_data in data.get("order_items") or []:
            lookups.append(("Partner", item_data.get("partner_id"), self.partners.find_by_id))
            lookups.append(("Source", item_data.get("source_id"), self.sources.find_by_id))
        check_relations(lookups)

        try:
            for field in ORDER_FIELDS:
                if field in data:
                    setattr(order, field, data[field])

            for item_data in data.get("order_items") or []:
                item = self.order_items.find_for_order(order.id, item_data.get("id"))
                if item is None:
                    continue
                for field in ORDER_ITEM_FIELDS:
                    if item_data.get(field) is not None:
                        setattr(item, field, item_data[field])

            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        author = user.name or user.phone
        now = datetime.now(timezone.utc)
        notification = {
            "id": f"{order_id}-{int(now.timestamp() * 1000)}",
            "name": author,
            "message": f"Order #{order_id} was updated by {author}",
            "time": now.isoformat(),
        }
        return self.orders.find_by_id(order_id, with_relations=True), notification

    def delete_order(self, order_id: str) -> Dict:
        order = self.orders.find_by_id(order_id)
        if order is None:
            raise NotFoundError("ORDER_NOT_FOUND", "Order not found")

        snapshot = order.to_dict()
        try:
            self.orders.delete(order)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return snapshot

    # ------------------------------------------------------------------
    # Order items
    # ------------------------------------------------------------------

    def update_order_item(self, item_id: str, data: Dict) -> Dict:
        """Apply one order item change in its own transaction"""
        try:
            result = self._apply_item_update(item_id, data, ORDER_ITEMS_ROUTE)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return result

    def update_order_items(self, updates: List[Dict]) -> List[Dict]:
        """
        Apply several order item changes atomically

        A missing id or unknown item aborts the whole batch.
        """
        results = []
        try:
            for update in updates:
                item_id = update.get("id")
                if not item_id:
                    raise BusinessError("ORDER_ITEM_ID_REQUIRED", "Missing ID in one of the update items")
                results.append(self._apply_item_update(item_id, update, ORDER_ITEMS_BULK_ROUTE))
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return results

    def _apply_item_update(self, item_id: str, data: Dict, route: str) -> Dict:
        item = self.order_items.find_by_id(item_id)
        if item is None:
            raise NotFoundError("ORDER_ITEM_NOT_FOUND", f"Order item {item_id} not found")

        changes = {}
        for field in ("qte_refunded", "qte_canceled", "qte_shipped", "discounted_price"):
            if data.get(field) is not None:
                changes[field] = _round2(data[field])

        current_shipped = item.qte_shipped or 0
        current_refunded = item.qte_refunded or 0
        current_canceled = item.qte_canceled or 0

        new_shipped = changes.get("qte_shipped", current_shipped)
        new_refunded = changes.get("qte_refunded", current_refunded)
        new_canceled = changes.get("qte_canceled", current_canceled)

        price = changes.get("discounted_price", item.discounted_price)

        def amount(quantity):
            return _round2(quantity * (price or 0))

        if item.source_id and item.partner_id:
            delta = -(new_shipped - current_shipped) + (new_refunded - current_refunded) + (new_canceled - current_canceled)
            self._move_stock(item, delta, route)

        for field, value in changes.items():
            setattr(item, field, value)

        order = item.order
        order.amount_refunded = amount(new_refunded)
        order.amount_canceled = amount(new_canceled)
        order.amount_shipped = amount(new_shipped)
        self.db.flush()

        return {
            "order_item": item.to_dict(),
            "amounts": {
                "refunded": amount(new_refunded),
                "canceled": amount(new_canceled),
                "shipped": amount(new_shipped),
            },
            "stock_change": {
                "shipped": -(new_shipped - current_shipped),
                "refunded": new_refunded - current_refunded,
                "canceled": new_canceled - current_canceled,
            },
            "price_used": price,
            "details": {
                "shipped": {"old": current_shipped, "new": new_shipped},
                "refunded": {"old": current_refunded, "new": new_refunded},
                "canceled": {"old": current_canceled, "new": new_canceled},
            },
        }

    def _move_stock(self, item: OrderItem, delta: float, route: str) -> Optional[float]:
        """
        Apply a stock delta for an order item's offer, recording stock metrics

        Returns:
            New stock quantity, or None when the offer has no stock row
        """
        sku_partner = self.sku_partners.find_by_product_and_partner(item.product_id, item.partner_id)
        if sku_partner is None:
            return None
        stock = self.stock.find_by_sku_partner_and_source(sku_partner.id, item.source_id)
        if stock is None:
            return None

        labels = {"route": route, "product_id": str(item.product_id), "source_id": str(item.source_id)}
        start = time.perf_counter()
        try:
            stock.stock_quantity = stock.stock_quantity + delta
            self.db.flush()
        except Exception:
            stock_operation_total.labels(operation="update", result="fail", **labels).inc()
            stock_update_duration.labels(result="fail", **labels).observe(time.perf_counter() - start)
            raise

        product_stock_gauge.labels(product_id=labels["product_id"], source_id=labels["source_id"]).set(
            stock.stock_quantity
        )
        stock_operation_total.labels(operation="update", result="success", **labels).inc()
        stock_update_duration.labels(result="success", **labels).observe(time.perf_counter() - start)
        return stock.stock_quantity

    def delete_order_item(self, item_id: str) -> Dict:
        item = self.order_items.find_by_id(item_id)
        if item is None:
            raise NotFoundError("ORDER_ITEM_NOT_FOUND", "Order item not found")

        snapshot = item.to_dict()
        try:
            self.order_items.delete(item)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        return snapshot
