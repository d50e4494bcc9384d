"""
Catalog Repository - Data Access Layer for products, brands and categories

All catalog queries are centralized here. Product listings eager-load the
relations the marketplace app renders (images, partner offers with stock
and source, subcategories, related products) to avoid N+1 queries.

Author: Kamioun
Date: 2025-03-02
"""
from typing import List, Optional

from sqlalchemy.orm import Session, selectinload, joinedload

from kamioun.models import (
    Brand,
    Product,
    ProductSubCategory,
    RelatedProduct,
    SkuPartner,
    Stock,
    Subcategory,
    Tax,
)


def _product_detail_options():
    return (
        selectinload(Product.images),
        selectinload(Product.sku_partners).selectinload(SkuPartner.stock).joinedload(Stock.source),
        selectinload(Product.sku_partners).joinedload(SkuPartner.partner),
        selectinload(Product.product_subcategories).joinedload(ProductSubCategory.subcategory),
        selectinload(Product.related_products).joinedload(RelatedProduct.related_product),
    )


class ProductRepository:
    """
    Repository for Product data access
    """

    def __init__(self, db: Session):
        self.db = db

    def find_all_accepted(self, partner_id: Optional[str] = None, search: Optional[str] = None) -> List[Product]:
        """
        Get accepted products with their offers

        Args:
            partner_id: Only products sold by this partner
            search: Case-insensitive name filter

        Returns:
            List of Product models
        """
        query = self.db.query(Product).options(*_product_detail_options()).filter(Product.accepted.is_(True))

        if partner_id:
            query = query.filter(Product.sku_partners.any(SkuPartner.partner_id == partner_id))

        if search:
            query = query.filter(Product.name.ilike(f"%{search}%"))

        return query.order_by(Product.name).all()

    def find_by_id(self, product_id: str, with_details: bool = False) -> Optional[Product]:
        query = self.db.query(Product)
        if with_details:
            query = query.options(joinedload(Product.brand), *_product_detail_options())
        return query.filter(Product.id == product_id).first()

    def find_by_supplier(self, supplier_id: int) -> List[Product]:
        """Products of a manufacturer ordered by name, with the partners selling them"""
        return (
            self.db.query(Product)
            .options(selectinload(Product.sku_partners).joinedload(SkuPartner.partner))
            .filter(Product.supplier_id == supplier_id)
            .order_by(Product.name)
            .all()
        )

    def find_by_brand(self, brand_id: str, limit: Optional[int] = None) -> List[Product]:
        """Products of a brand, newest first"""
        query = (
            self.db.query(Product)
            .options(selectinload(Product.images))
            .filter(Product.brand_id == brand_id)
            .order_by(Product.created_at.desc())
        )
        if limit:
            query = query.limit(limit)
        return query.all()


class RelatedProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_product(self, product_id: str) -> List[RelatedProduct]:
        """Related products of a product, with the related product's images and partners"""
        return (
            self.db.query(RelatedProduct)
            .options(
                joinedload(RelatedProduct.related_product).selectinload(Product.images),
                joinedload(RelatedProduct.related_product)
                .selectinload(Product.sku_partners)
                .joinedload(SkuPartner.partner),
            )
            .filter(RelatedProduct.product_id == product_id)
            .all()
        )

    def find_by_id(self, related_id: str) -> Optional[RelatedProduct]:
        return self.db.query(RelatedProduct).filter(RelatedProduct.id == related_id).first()

    def delete(self, related: RelatedProduct) -> None:
        self.db.delete(related)
        self.db.flush()


class ProductSubCategoryRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_all(self) -> List[ProductSubCategory]:
        return (
            self.db.query(ProductSubCategory)
            .options(
                joinedload(ProductSubCategory.product),
                joinedload(ProductSubCategory.subcategory).joinedload(Subcategory.category),
            )
            .all()
        )


class BrandRepository:
    """
    Repository for Brand data access
    """

    def __init__(self, db: Session):
        self.db = db

    def find_all(self) -> List[Brand]:
        return self.db.query(Brand).options(selectinload(Brand.products)).order_by(Brand.name).all()

    def find_by_id(self, brand_id: str) -> Optional[Brand]:
        return self.db.query(Brand).filter(Brand.id == brand_id).first()

    def count_products(self, brand_id: str) -> int:
        return self.db.query(Product).filter(Product.brand_id == brand_id).count()

    def delete(self, brand: Brand) -> None:
        self.db.delete(brand)
        self.db.flush()


class TaxRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, tax_id: str) -> Optional[Tax]:
        return self.db.query(Tax).filter(Tax.id == tax_id).first()
