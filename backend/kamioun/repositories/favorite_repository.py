"""
Favorite Repository - customer bookmarks of products and partners
"""
from typing import List, Optional

from sqlalchemy.orm import Session, joinedload

from kamioun.models import FavoritePartner, FavoriteProduct, Product


class FavoriteProductRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_customer(self, customer_id: str) -> List[FavoriteProduct]:
        return (
            self.db.query(FavoriteProduct)
            .options(joinedload(FavoriteProduct.product).selectinload(Product.images))
            .filter(FavoriteProduct.customer_id == customer_id)
            .order_by(FavoriteProduct.created_at.desc())
            .all()
        )

    def find_by_id(self, favorite_id: str) -> Optional[FavoriteProduct]:
        return (
            self.db.query(FavoriteProduct)
            .options(joinedload(FavoriteProduct.product))
            .filter(FavoriteProduct.id == favorite_id)
            .first()
        )

    def find_pair(self, customer_id: str, product_id: str) -> Optional[FavoriteProduct]:
        return (
            self.db.query(FavoriteProduct)
            .filter(FavoriteProduct.customer_id == customer_id, FavoriteProduct.product_id == product_id)
            .first()
        )

    def add(self, favorite: FavoriteProduct) -> FavoriteProduct:
        self.db.add(favorite)
        self.db.flush()
        return favorite

    def delete(self, favorite: FavoriteProduct) -> None:
        self.db.delete(favorite)
        self.db.flush()


class FavoritePartnerRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_customer(self, customer_id: str) -> List[FavoritePartner]:
        return (
            self.db.query(FavoritePartner)
            .options(joinedload(FavoritePartner.partner))
            .filter(FavoritePartner.customer_id == customer_id)
            .order_by(FavoritePartner.created_at.desc())
            .all()
        )

    def find_by_id(self, favorite_id: str) -> Optional[FavoritePartner]:
        return (
            self.db.query(FavoritePartner)
            .options(joinedload(FavoritePartner.partner))
            .filter(FavoritePartner.id == favorite_id)
            .first()
        )

    def find_pair(self, customer_id: str, partner_id: str) -> Optional[FavoritePartner]:
        return (
            self.db.query(FavoritePartner)
            .filter(FavoritePartner.customer_id == customer_id, FavoritePartner.partner_id == partner_id)
            .first()
        )

    def add(self, favorite: FavoritePartner) -> FavoritePartner:
        self.db.add(favorite)
        self.db.flush()
        return favorite

    def delete(self, favorite: FavoritePartner) -> None:
        self.db.delete(favorite)
        self.db.flush()
