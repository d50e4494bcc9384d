"""
Partner (seller) models: partners, their sources, SKU offers and stock
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from kamioun.core.database import Base
from kamioun.models.base import SerializerMixin, new_id


class TypePartner(SerializerMixin, Base):
    __tablename__ = "type_partners"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(100), nullable=False)


class Partner(SerializerMixin, Base):
    """
    Selling partners of the marketplace
    """
    __tablename__ = "partners"

    id = Column(String(36), primary_key=True, default=new_id)
    username = Column(String(100), nullable=False, unique=True)
    first_name = Column(String(100))
    last_name = Column(String(100))
    email = Column(String(255), unique=True)
    telephone = Column(String(20))
    address = Column(Text)
    responsible_name = Column(String(255))
    position = Column(String(100))
    coverage_area = Column(String(255))
    minimum_amount = Column(Float, default=0)
    logo = Column(Text)
    patent = Column(Text)
    password = Column(String(255))
    is_active = Column(Boolean, default=True)

    type_partner_id = Column(String(36), ForeignKey("type_partners.id"))
    m_role_id = Column(String(36))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    type_partner = relationship("TypePartner")
    sources = relationship("Source", back_populates="partner", cascade="all, delete-orphan")
    sku_partners = relationship("SkuPartner", back_populates="partner", cascade="all, delete-orphan")
    favorite_partners = relationship("FavoritePartner", back_populates="partner", cascade="all, delete-orphan")
    settings = relationship("PartnerSettings", back_populates="partner", cascade="all, delete-orphan")

    def to_public_dict(self) -> dict:
        return self.to_dict(exclude=("password",))


class Source(SerializerMixin, Base):
    """
    A partner warehouse stock is held in
    """
    __tablename__ = "sources"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    partner_id = Column(String(36), ForeignKey("partners.id", ondelete="CASCADE"), index=True)

    partner = relationship("Partner", back_populates="sources")
    stock = relationship("Stock", back_populates="source")


class SkuPartner(SerializerMixin, Base):
    """
    Association between a product and a selling partner
    """
    __tablename__ = "sku_partners"

    id = Column(String(36), primary_key=True, default=new_id)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    partner_id = Column(String(36), ForeignKey("partners.id", ondelete="CASCADE"), index=True, nullable=False)
    sku_product = Column(String(100), index=True)
    price = Column(Float)

    product = relationship("Product", back_populates="sku_partners")
    partner = relationship("Partner", back_populates="sku_partners")
    stock = relationship("Stock", back_populates="sku_partner", cascade="all, delete-orphan")


class Stock(SerializerMixin, Base):
    """
    Stock of a partner SKU in one source.

    stock_quantity is physical stock (moved by orders and shipments);
    sealable is what can still be reserved.
    """
    __tablename__ = "stock"
    __table_args__ = (UniqueConstraint("sku_partner_id", "source_id", name="uq_stock_sku_partner_source"),)

    id = Column(String(36), primary_key=True, default=new_id)
    sku_partner_id = Column(String(36), ForeignKey("sku_partners.id", ondelete="CASCADE"), nullable=False, index=True)
    source_id = Column(String(36), ForeignKey("sources.id"), nullable=False, index=True)

    stock_quantity = Column(Float, nullable=False, default=0)
    sealable = Column(Float, nullable=False, default=0)
    price = Column(Float)
    special_price = Column(Float)
    min_qty = Column(Integer)
    max_qty = Column(Integer)

    sku_partner = relationship("SkuPartner", back_populates="stock")
    source = relationship("Source", back_populates="stock")


class PartnerSettings(SerializerMixin, Base):
    __tablename__ = "partner_settings"

    id = Column(String(36), primary_key=True, default=new_id)
    partner_id = Column(String(36), ForeignKey("partners.id", ondelete="CASCADE"), index=True, nullable=False)
    delivery_type = Column(String(50))
    delivery_fee = Column(Float)

    partner = relationship("Partner", back_populates="settings")
    schedules = relationship("Schedule", back_populates="settings", cascade="all, delete-orphan")


class Schedule(SerializerMixin, Base):
    __tablename__ = "schedules"

    id = Column(String(36), primary_key=True, default=new_id)
    settings_id = Column(String(36), ForeignKey("partner_settings.id", ondelete="CASCADE"), index=True, nullable=False)
    day = Column(String(20), nullable=False)
    start_time = Column(String(5))
    end_time = Column(String(5))

    settings = relationship("PartnerSettings", back_populates="schedules")
