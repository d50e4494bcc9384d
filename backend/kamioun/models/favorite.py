"""
Customer favorites
"""
from sqlalchemy import Column, String, DateTime, Text, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from kamioun.core.database import Base
from kamioun.models.base import SerializerMixin, new_id


class FavoriteProduct(SerializerMixin, Base):
    """
    A product bookmarked by a customer, with a snapshot of its first image
    and the usernames of the partners selling it
    """
    __tablename__ = "favorite_products"
    __table_args__ = (UniqueConstraint("customer_id", "product_id", name="uq_favorite_product"),)

    id = Column(String(36), primary_key=True, default=new_id)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True)
    product_image = Column(Text)
    partner_names = Column(JSON, default=list)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    customer = relationship("Customer", back_populates="favorite_products")
    product = relationship("Product", back_populates="favorite_products")


class FavoritePartner(SerializerMixin, Base):
    __tablename__ = "favorite_partners"
    __table_args__ = (UniqueConstraint("customer_id", "partner_id", name="uq_favorite_partner"),)

    id = Column(String(36), primary_key=True, default=new_id)
    customer_id = Column(String(36), ForeignKey("customers.id", ondelete="CASCADE"), nullable=False, index=True)
    partner_id = Column(String(36), ForeignKey("partners.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    customer = relationship("Customer", back_populates="favorite_partners")
    partner = relationship("Partner", back_populates="favorite_partners")
