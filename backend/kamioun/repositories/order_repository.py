"""
Order Repository - Data Access Layer for reservations, orders and their lookups

Handles reservations, orders, order items, order states/statuses and
payment methods.

Author: Kamioun
Date: 2025-03-02
"""
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload, joinedload

from kamioun.models import (
    Order,
    OrderItem,
    OrderPayment,
    Reservation,
    ReservationItem,
    State,
    Status,
)


class ReservationRepository:
    """
    Repository for Reservation data access
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, reservation_id: str, with_items: bool = True) -> Optional[Reservation]:
        """
        Find reservation by ID

        Args:
            reservation_id: Reservation UUID
            with_items: Eager-load items (with product, source, partner),
                customer and payment method

        Returns:
            Reservation or None if not found
        """
        query = self.db.query(Reservation)
        if with_items:
            query = query.options(
                selectinload(Reservation.items).joinedload(ReservationItem.product),
                selectinload(Reservation.items).joinedload(ReservationItem.source),
                selectinload(Reservation.items).joinedload(ReservationItem.partner),
                joinedload(Reservation.customer),
                joinedload(Reservation.payment_method),
            )
        return query.filter(Reservation.id == reservation_id).first()

    def add(self, reservation: Reservation) -> Reservation:
        self.db.add(reservation)
        self.db.flush()
        return reservation

    def delete(self, reservation: Reservation) -> None:
        """Delete a reservation; its items go with it (cascade)"""
        self.db.delete(reservation)
        self.db.flush()


class ReservationItemRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_customer(self, customer_id: str) -> List[ReservationItem]:
        return (
            self.db.query(ReservationItem)
            .options(
                joinedload(ReservationItem.product),
                joinedload(ReservationItem.partner),
                joinedload(ReservationItem.source),
            )
            .filter(ReservationItem.customer_id == customer_id)
            .order_by(ReservationItem.created_at.desc())
            .all()
        )

    def add(self, item: ReservationItem) -> ReservationItem:
        self.db.add(item)
        self.db.flush()
        return item


class OrderRepository:
    """
    Repository for Order data access
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, order_id: str, with_relations: bool = False) -> Optional[Order]:
        query = self.db.query(Order)
        if with_relations:
            query = query.options(
                joinedload(Order.status),
                joinedload(Order.state),
                joinedload(Order.customer),
                joinedload(Order.reservation),
                joinedload(Order.payment_method),
                selectinload(Order.items).joinedload(OrderItem.product),
                selectinload(Order.items).joinedload(OrderItem.source),
                selectinload(Order.items).joinedload(OrderItem.partner),
            )
        return query.filter(Order.id == order_id).first()

    def add(self, order: Order) -> Order:
        self.db.add(order)
        self.db.flush()
        return order

    def delete(self, order: Order) -> None:
        """Delete an order; its items go with it (cascade)"""
        self.db.delete(order)
        self.db.flush()


class OrderItemRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, item_id: str) -> Optional[OrderItem]:
        return (
            self.db.query(OrderItem)
            .options(joinedload(OrderItem.order), joinedload(OrderItem.product))
            .filter(OrderItem.id == item_id)
            .first()
        )

    def find_for_order(self, order_id: str, item_id: str) -> Optional[OrderItem]:
        return (
            self.db.query(OrderItem)
            .filter(OrderItem.id == item_id, OrderItem.order_id == order_id)
            .first()
        )

    def delete(self, item: OrderItem) -> None:
        self.db.delete(item)
        self.db.flush()


class OrderStatusRepository:
    """
    Repository for order states and statuses
    """

    def __init__(self, db: Session):
        self.db = db

    def find_state_by_name(self, name: str) -> Optional[State]:
        return self.db.query(State).filter(State.name == name).first()

    def find_state_by_id(self, state_id: str) -> Optional[State]:
        return self.db.query(State).filter(State.id == state_id).first()

    def find_status_by_id(self, status_id: str) -> Optional[Status]:
        return self.db.query(Status).filter(Status.id == status_id).first()

    def get_or_create_state(self, name: str) -> State:
        state = self.find_state_by_name(name)
        if state is None:
            state = State(name=name)
            self.db.add(state)
            self.db.flush()
        return state

    def find_status(self, name: str, state_id: str) -> Optional[Status]:
        return (
            self.db.query(Status)
            .filter(Status.name == name, Status.state_id == state_id)
            .first()
        )

    def get_or_create_status(self, name: str, state_id: str) -> Status:
        status = self.find_status(name, state_id)
        if status is None:
            status = Status(name=name, state_id=state_id)
            self.db.add(status)
            self.db.flush()
        return status

    def add_status(self, status: Status) -> Status:
        self.db.add(status)
        self.db.flush()
        return status


class PaymentMethodRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_all(self) -> List[OrderPayment]:
        return self.db.query(OrderPayment).order_by(OrderPayment.name).all()

    def find_by_id(self, payment_method_id: str) -> Optional[OrderPayment]:
        return self.db.query(OrderPayment).filter(OrderPayment.id == payment_method_id).first()
