"""
Purchase orders placed with upstream manufacturers
"""
import enum

from sqlalchemy import Column, Integer, String, DateTime, Text, Float, Enum, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from kamioun.core.database import Base
from kamioun.models.base import SerializerMixin, new_id


class PurchaseOrderState(str, enum.Enum):
    IN_PROGRESS = "IN_PROGRESS"
    READY = "READY"
    DELIVERED = "DELIVERED"
    COMPLETED = "COMPLETED"


class PaymentMethod(str, enum.Enum):
    CASH = "CASH"
    CHEQUE = "CHEQUE"
    TRAITE = "TRAITE"


class Manufacturer(SerializerMixin, Base):
    """
    Upstream supplier, distinct from marketplace partners
    """
    __tablename__ = "manufacturers"

    id = Column(Integer, primary_key=True, index=True)
    company_name = Column(String(255), nullable=False)
    code = Column(String(100))
    email = Column(String(255))
    address = Column(Text)
    contact_name = Column(String(255))
    phone_number = Column(String(50))
    postal_code = Column(String(20))
    city = Column(String(100))
    country = Column(String(100))
    capital = Column(Float)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    products = relationship("Product", back_populates="supplier")
    purchase_orders = relationship("PurchaseOrder", back_populates="manufacturer")


class Warehouse(SerializerMixin, Base):
    __tablename__ = "warehouses"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)


class PurchaseOrder(SerializerMixin, Base):
    __tablename__ = "purchase_orders"

    id = Column(String(36), primary_key=True, default=new_id)
    order_number = Column(String(50), nullable=False, unique=True, index=True)
    manufacturer_id = Column(Integer, ForeignKey("manufacturers.id"), nullable=False, index=True)
    warehouse_id = Column(Integer, ForeignKey("warehouses.id"), nullable=False)
    delivery_date = Column(DateTime(timezone=True))
    total_amount = Column(Float, default=0)
    status = Column(Enum(PurchaseOrderState), default=PurchaseOrderState.IN_PROGRESS, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    manufacturer = relationship("Manufacturer", back_populates="purchase_orders")
    warehouse = relationship("Warehouse")
    comments = relationship("PurchaseComment", back_populates="purchase_order", cascade="all, delete-orphan")
    payments = relationship("PurchasePayment", back_populates="purchase_order", cascade="all, delete-orphan")
    files = relationship("PurchaseFile", back_populates="purchase_order", cascade="all, delete-orphan")
    products = relationship("ProductOrdered", back_populates="purchase_order", cascade="all, delete-orphan")


class PurchaseComment(SerializerMixin, Base):
    __tablename__ = "purchase_comments"

    id = Column(String(36), primary_key=True, default=new_id)
    purchase_order_id = Column(String(36), ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    purchase_order = relationship("PurchaseOrder", back_populates="comments")


class PurchasePayment(SerializerMixin, Base):
    __tablename__ = "purchase_payments"

    id = Column(String(36), primary_key=True, default=new_id)
    purchase_order_id = Column(String(36), ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    manufacturer_id = Column(Integer, ForeignKey("manufacturers.id"))
    amount = Column(Float, nullable=False)
    payment_method = Column(Enum(PaymentMethod), nullable=False)
    percentage = Column(Float, default=0)
    payment_date = Column(DateTime(timezone=True))

    purchase_order = relationship("PurchaseOrder", back_populates="payments")


class PurchaseFile(SerializerMixin, Base):
    __tablename__ = "purchase_files"

    id = Column(String(36), primary_key=True, default=new_id)
    purchase_order_id = Column(String(36), ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255))
    url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    purchase_order = relationship("PurchaseOrder", back_populates="files")


class ProductOrdered(SerializerMixin, Base):
    """
    Line of a purchase order
    """
    __tablename__ = "products_ordered"

    id = Column(String(36), primary_key=True, default=new_id)
    purchase_order_id = Column(String(36), ForeignKey("purchase_orders.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    sku = Column(String(100))
    quantity = Column(Float, nullable=False, default=0)
    price_excl_tax = Column(Float, nullable=False, default=0)
    total = Column(Float, default=0)

    purchase_order = relationship("PurchaseOrder", back_populates="products")
