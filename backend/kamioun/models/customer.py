"""
Customer related models
"""
import enum

from sqlalchemy import Column, String, Boolean, DateTime, Text, Enum, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from kamioun.core.database import Base
from kamioun.models.base import SerializerMixin, new_id


class TypePatente(str, enum.Enum):
    FORFAITAIRE = "FORFAITAIRE"
    REELLE = "REELLE"


class Customer(SerializerMixin, Base):
    """
    Marketplace customers (shops buying from partners)
    """
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=new_id)

    # Identity
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    telephone = Column(String(20), nullable=False, unique=True, index=True)  # E.164
    password = Column(String(255))

    # Business
    address = Column(Text)
    governorate = Column(String(100))
    social_name = Column(String(255))
    business_type = Column(String(100))
    fiscal_id = Column(String(100))
    activity1 = Column(String(255))
    activity2 = Column(String(255))
    type_patente = Column(Enum(TypePatente))

    # Documents (storage URLs)
    cin_photo = Column(Text)
    patent_photo = Column(Text)

    is_active = Column(Boolean, default=True)
    m_role_id = Column(String(36))

    # Metadata
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    orders = relationship("Order", back_populates="customer")
    reservations = relationship("Reservation", back_populates="customer")
    favorite_products = relationship("FavoriteProduct", back_populates="customer", cascade="all, delete-orphan")
    favorite_partners = relationship("FavoritePartner", back_populates="customer", cascade="all, delete-orphan")
    notifications = relationship("Notification", back_populates="customer", cascade="all, delete-orphan")
    reset_tokens = relationship("PasswordResetToken", back_populates="customer", cascade="all, delete-orphan")
    cart = relationship("Cart", back_populates="customer", uselist=False, cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_public_dict(self) -> dict:
        """Profile without the password hash"""
        return self.to_dict(exclude=("password",))


class PasswordResetToken(SerializerMixin, Base):
    """
    One-hour tokens issued by the forgot-password flow
    """
    __tablename__ = "password_reset_tokens"

    id = Column(String(36), primary_key=True, default=new_id)
    token = Column(String(64), nullable=False, unique=True)
    public_id = Column(String(32), nullable=False, unique=True, index=True)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    customer = relationship("Customer", back_populates="reset_tokens")


class Notification(SerializerMixin, Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=new_id)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="CASCADE"), index=True)
    title = Column(String(255))
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    customer = relationship("Customer", back_populates="notifications")
