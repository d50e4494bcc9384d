"""
Favorite Service
Customer bookmarks of products and partners
"""
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from kamioun.core.errors import ConflictError, NotFoundError
from kamioun.models import FavoritePartner, FavoriteProduct
from kamioun.repositories import (
    CustomerRepository,
    FavoritePartnerRepository,
    FavoriteProductRepository,
    PartnerRepository,
    ProductRepository,
)


class FavoriteService:
    def __init__(self, db: Session):
        self.db = db
        self.customers = CustomerRepository(db)
        self.products = ProductRepository(db)
        self.partners = PartnerRepository(db)
        self.favorite_products = FavoriteProductRepository(db)
        self.favorite_partners = FavoritePartnerRepository(db)

    def _save(self, repo, favorite, message: str):
        try:
            repo.add(favorite)
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("FAVORITE_EXISTS", message)
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(favorite)
        return favorite

    def add_product(self, customer_id: str, product_id: str) -> FavoriteProduct:
        """
        Bookmark a product

        Stores the product's first image and the usernames of the partners
        selling it at the time of the bookmark.

        Raises:
            NotFoundError: unknown product or customer
            ConflictError: already bookmarked
        """
        product = self.products.find_by_id(product_id, with_details=True)
        if product is None:
            raise NotFoundError("PRODUCT_NOT_FOUND", "Product not found")
        if self.customers.find_by_id(customer_id) is None:
            raise NotFoundError("CUSTOMER_NOT_FOUND", "Customer not found")
        if self.favorite_products.find_pair(customer_id, product_id):
            raise ConflictError("FAVORITE_EXISTS", "Product already in favorites")

        favorite = FavoriteProduct(
            customer_id=customer_id,
            product_id=product_id,
            product_image=product.images[0].url if product.images else None,
            partner_names=[sp.partner.username for sp in product.sku_partners if sp.partner],
        )
        return self._save(self.favorite_products, favorite, "Product already in favorites")

    def add_partner(self, customer_id: str, partner_id: str) -> FavoritePartner:
        if self.partners.find_by_id(partner_id) is None:
            raise NotFoundError("PARTNER_NOT_FOUND", "Partner not found")
        if self.customers.find_by_id(customer_id) is None:
            raise NotFoundError("CUSTOMER_NOT_FOUND", "Customer not found")
        if self.favorite_partners.find_pair(customer_id, partner_id):
            raise ConflictError("FAVORITE_EXISTS", "Partner already in favorites")

        favorite = FavoritePartner(customer_id=customer_id, partner_id=partner_id)
        return self._save(self.favorite_partners, favorite, "Partner already in favorites")

    def remove_product(self, favorite_id: str) -> None:
        favorite = self.favorite_products.find_by_id(favorite_id)
        if favorite is None:
            raise NotFoundError("FAVORITE_NOT_FOUND", "Favorite product not found")
        self.favorite_products.delete(favorite)
        self.db.commit()

    def remove_partner(self, favorite_id: str, customer_id: str) -> None:
        """Delete a partner bookmark only when it belongs to customer_id"""
        favorite = self.favorite_partners.find_by_id(favorite_id)
        if favorite is None or favorite.customer_id != customer_id:
            raise NotFoundError("FAVORITE_NOT_FOUND", "Favorite partner not found for this customer")
        self.favorite_partners.delete(favorite)
        self.db.commit()

    def change_partner(self, favorite_id: str, partner_id: str) -> FavoritePartner:
        """
        Point a partner bookmark at another partner

        Raises:
            NotFoundError: unknown bookmark or partner
            ConflictError: the customer already bookmarks that partner
        """
        favorite = self.favorite_partners.find_by_id(favorite_id)
        if favorite is None:
            raise NotFoundError("FAVORITE_NOT_FOUND", "Favorite partner not found")
        if favorite.partner_id == partner_id:
            return favorite
        if self.partners.find_by_id(partner_id) is None:
            raise NotFoundError("PARTNER_NOT_FOUND", "Partner not found")
        if self.favorite_partners.find_pair(favorite.customer_id, partner_id):
            raise ConflictError("FAVORITE_EXISTS", "Partner already in favorites")

        favorite.partner_id = partner_id
        return self._save(self.favorite_partners, favorite, "Partner already in favorites")
