"""
Catalog models: brands, products, categories
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Float, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from kamioun.core.database import Base
from kamioun.models.base import SerializerMixin, new_id


class Brand(SerializerMixin, Base):
    __tablename__ = "brands"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    img = Column(Text)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    products = relationship("Product", back_populates="brand")


class Tax(SerializerMixin, Base):
    __tablename__ = "taxes"

    id = Column(String(36), primary_key=True, default=new_id)
    value = Column(Float, nullable=False)


class Product(SerializerMixin, Base):
    """
    Catalog products; partner-specific price and stock live on SkuPartner
    """
    __tablename__ = "products"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False, index=True)
    sku = Column(String(100), index=True)
    description = Column(Text)
    weight = Column(Float, default=0)
    image = Column(Text)
    product_type = Column(String(50))
    accepted = Column(Boolean, default=True, index=True)

    brand_id = Column(String(36), ForeignKey("brands.id"), index=True)
    supplier_id = Column(Integer, ForeignKey("manufacturers.id"), index=True)
    tax_id = Column(String(36), ForeignKey("taxes.id"))

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # Relationships
    brand = relationship("Brand", back_populates="products")
    supplier = relationship("Manufacturer", back_populates="products")
    tax = relationship("Tax")
    images = relationship("ProductImage", back_populates="product", cascade="all, delete-orphan")
    sku_partners = relationship("SkuPartner", back_populates="product", cascade="all, delete-orphan")
    product_subcategories = relationship("ProductSubCategory", back_populates="product", cascade="all, delete-orphan")
    related_products = relationship(
        "RelatedProduct",
        foreign_keys="RelatedProduct.product_id",
        back_populates="product",
        cascade="all, delete-orphan",
    )
    favorite_products = relationship("FavoriteProduct", back_populates="product", cascade="all, delete-orphan")


class ProductImage(SerializerMixin, Base):
    __tablename__ = "product_images"

    id = Column(String(36), primary_key=True, default=new_id)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    url = Column(Text, nullable=False)

    product = relationship("Product", back_populates="images")


class Category(SerializerMixin, Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=new_id)
    name_category = Column(String(255), nullable=False)

    subcategories = relationship("Subcategory", back_populates="category")


class Subcategory(SerializerMixin, Base):
    __tablename__ = "subcategories"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(255), nullable=False)
    category_id = Column(String(36), ForeignKey("categories.id"), index=True)

    category = relationship("Category", back_populates="subcategories")


class ProductSubCategory(SerializerMixin, Base):
    __tablename__ = "product_subcategories"

    id = Column(String(36), primary_key=True, default=new_id)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    subcategory_id = Column(String(36), ForeignKey("subcategories.id"), index=True, nullable=False)

    product = relationship("Product", back_populates="product_subcategories")
    subcategory = relationship("Subcategory")


class RelatedProduct(SerializerMixin, Base):
    __tablename__ = "related_products"

    id = Column(String(36), primary_key=True, default=new_id)
    product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), index=True, nullable=False)
    related_product_id = Column(String(36), ForeignKey("products.id", ondelete="CASCADE"), nullable=False)

    product = relationship("Product", foreign_keys=[product_id], back_populates="related_products")
    related_product = relationship("Product", foreign_keys=[related_product_id])
