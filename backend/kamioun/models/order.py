"""
Reservation, order and cart models
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from kamioun.core.database import Base
from kamioun.models.base import SerializerMixin, new_id


class OrderPayment(SerializerMixin, Base):
    """
    Payment methods offered on marketplace orders
    """
    __tablename__ = "order_payments"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)


class State(SerializerMixin, Base):
    """
    Order lifecycle stage (new, processing, complete, canceled...)
    """
    __tablename__ = "states"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False, unique=True)

    statuses = relationship("Status", back_populates="state")


class Status(SerializerMixin, Base):
    """
    Fine-grained status within a state
    """
    __tablename__ = "statuses"
    __table_args__ = (UniqueConstraint("name", "state_id", name="uq_status_name_state"),)

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)
    state_id = Column(String(36), ForeignKey("states.id"), nullable=False, index=True)

    state = relationship("State", back_populates="statuses")


class Reservation(SerializerMixin, Base):
    """
    Pre-order basket; becomes an order once activated
    """
    __tablename__ = "reservations"

    id = Column(String(36), primary_key=True, default=new_id)
    customer_id = Column(String(36), ForeignKey("customers.id"), index=True)
    payment_method_id = Column(String(36), ForeignKey("order_payments.id"))

    # Amounts
    amount_ttc = Column(Float, default=0)
    amount_ordered = Column(Float, default=0)
    shipping_amount = Column(Float, default=0)
    shipping_method = Column(String(100))
    weight = Column(Float, default=0)

    from_mobile = Column(Boolean, default=False)
    comment = Column(Text, default="")
    is_active = Column(Boolean, default=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    customer = relationship("Customer", back_populates="reservations")
    payment_method = relationship("OrderPayment")
    items = relationship("ReservationItem", back_populates="reservation", cascade="all, delete-orphan")
    orders = relationship("Order", back_populates="reservation")


class ReservationItem(SerializerMixin, Base):
    __tablename__ = "reservation_items"

    id = Column(String(36), primary_key=True, default=new_id)
    reservation_id = Column(String(36), ForeignKey("reservations.id", ondelete="CASCADE"), index=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), index=True)
    product_id = Column(String(36), ForeignKey("products.id"), index=True, nullable=False)
    partner_id = Column(String(36), ForeignKey("partners.id"), index=True)
    source_id = Column(String(36), ForeignKey("sources.id"))
    tax_id = Column(String(36), ForeignKey("taxes.id"))

    qte_reserved = Column(Float, nullable=False)
    price = Column(Float, default=0)
    discounted_price = Column(Float)
    weight = Column(Float, default=0)
    sku = Column(String(100))
    delivery_date = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    reservation = relationship("Reservation", back_populates="items")
    product = relationship("Product")
    partner = relationship("Partner")
    source = relationship("Source")
    tax = relationship("Tax")


class Order(SerializerMixin, Base):
    """
    Confirmed orders, created from a reservation
    """
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=new_id)

    # Relations
    customer_id = Column(String(36), ForeignKey("customers.id"), index=True)
    agent_id = Column(String(36))
    reservation_id = Column(String(36), ForeignKey("reservations.id"), index=True)
    payment_method_id = Column(String(36), ForeignKey("order_payments.id"))
    status_id = Column(String(36), ForeignKey("statuses.id"), index=True)
    state_id = Column(String(36), ForeignKey("states.id"), index=True)

    # Amounts
    amount_ttc = Column(Float, default=0)
    amount_ordered = Column(Float, default=0)
    amount_refunded = Column(Float, default=0)
    amount_canceled = Column(Float, default=0)
    amount_shipped = Column(Float, default=0)
    shipping_method = Column(String(100))
    shipping_amount = Column(Float, default=0)
    weight = Column(Float, default=0)

    from_mobile = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)
    comment = Column(Text)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    customer = relationship("Customer", back_populates="orders")
    reservation = relationship("Reservation", back_populates="orders")
    payment_method = relationship("OrderPayment")
    status = relationship("Status")
    state = relationship("State")
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")


class OrderItem(SerializerMixin, Base):
    """
    Order lines; shipped/refunded/canceled quantities drive stock movements
    """
    __tablename__ = "order_items"

    id = Column(String(36), primary_key=True, default=new_id)
    order_id = Column(String(36), ForeignKey("orders.id", ondelete="CASCADE"), index=True, nullable=False)
    product_id = Column(String(36), ForeignKey("products.id"), index=True)
    partner_id = Column(String(36), ForeignKey("partners.id"))
    source_id = Column(String(36), ForeignKey("sources.id"))

    qte_ordered = Column(Float, default=0)
    qte_refunded = Column(Float, default=0)
    qte_shipped = Column(Float, default=0)
    qte_canceled = Column(Float, default=0)
    discounted_price = Column(Float)
    weight = Column(Float, default=0)
    sku = Column(String(100))
    delivery_date = Column(DateTime(timezone=True))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    order = relationship("Order", back_populates="items")
    product = relationship("Product")
    partner = relationship("Partner")
    source = relationship("Source")


class Cart(SerializerMixin, Base):
    __tablename__ = "carts"

    id = Column(String(36), primary_key=True, default=new_id)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    customer = relationship("Customer", back_populates="cart")
    items = relationship("CartItem", back_populates="cart", cascade="all, delete-orphan")


class CartItem(SerializerMixin, Base):
    """
    Snapshot of a product offer as the customer put it in the cart
    """
    __tablename__ = "cart_items"

    id = Column(String(36), primary_key=True, default=new_id)
    cart_id = Column(String(36), ForeignKey("carts.id", ondelete="CASCADE"), nullable=False, index=True)

    product_id = Column(String(36), nullable=False)
    product_name = Column(String(255))
    product_type = Column(String(50))
    sku = Column(String(100))
    image = Column(Text)
    partner_id = Column(String(36))
    partner_name = Column(String(255))
    partner_minimum_amount = Column(Float)
    source_id = Column(String(36))
    source_name = Column(String(255))

    quantity = Column(Integer, nullable=False, default=1)
    price = Column(Float, default=0)
    weight = Column(Float, default=0)
    stock = Column(Float)
    tax_rate = Column(Float)
    min_qty = Column(Integer)
    max_qty = Column(Integer)

    cart = relationship("Cart", back_populates="items")
