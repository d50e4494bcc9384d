"""
Cart Service
Persisted customer carts: full replacement, merge and removal
"""
from typing import Dict, List

from sqlalchemy.orm import Session

from kamioun.core.errors import NotFoundError
from kamioun.models import Cart, CartItem
from kamioun.repositories import CartRepository, CustomerRepository

SNAPSHOT_FIELDS = (
    "product_id",
    "product_type",
    "sku",
    "image",
    "partner_id",
    "partner_name",
    "partner_minimum_amount",
    "source_id",
    "source_name",
    "quantity",
    "price",
    "weight",
    "stock",
    "min_qty",
    "max_qty",
)


def _offer_key(item) -> tuple:
    if isinstance(item, dict):
        return item.get("product_id"), item.get("partner_id"), item.get("source_id")
    return item.product_id, item.partner_id, item.source_id


def build_cart_item(data: Dict) -> CartItem:
    """CartItem from a client payload; accepts name and tax.value aliases"""
    fields = {field: data.get(field) for field in SNAPSHOT_FIELDS}
    fields["product_name"] = data.get("product_name") or data.get("name")
    tax = data.get("tax") or {}
    fields["tax_rate"] = data.get("tax_rate") if data.get("tax_rate") is not None else tax.get("value")
    if fields["quantity"] is None:
        fields["quantity"] = 1
    return CartItem(**fields)


class CartService:
    def __init__(self, db: Session):
        self.db = db
        self.carts = CartRepository(db)
        self.customers = CustomerRepository(db)

    def get_cart(self, customer_id: str):
        return self.carts.find_by_customer(customer_id)

    def replace_items(self, customer_id: str, items: List[Dict]) -> Cart:
        """Create the cart if needed and replace all of its items"""
        if self.customers.find_by_id(customer_id) is None:
            raise NotFoundError("CUSTOMER_NOT_FOUND", "Customer not found")

        try:
            cart = self.carts.find_by_customer(customer_id)
            if cart is None:
                cart = self.carts.add(Cart(customer_id=customer_id))
            cart.items = [build_cart_item(item) for item in items]
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(cart)
        return cart

    def merge_items(self, customer_id: str, items: List[Dict]) -> Cart:
        """
        Merge items into an existing cart

        Items matching an existing line on (product_id, partner_id, source_id)
        update its quantity, price and weight; the others are appended.
        """
        cart = self.carts.find_by_customer(customer_id)
        if cart is None:
            raise NotFoundError("CART_NOT_FOUND", "Cart not found")

        existing = {_offer_key(line): line for line in cart.items}
        try:
            for item in items:
                line = existing.get(_offer_key(item))
                if line is None:
                    cart.items.append(build_cart_item(item))
                    continue
                for field in ("quantity", "price", "weight"):
                    if item.get(field) is not None:
                        setattr(line, field, item[field])
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(cart)
        return cart

    def delete_cart(self, customer_id: str) -> None:
        cart = self.carts.find_by_customer(customer_id)
        if cart is None:
            raise NotFoundError("CART_NOT_FOUND", "Cart not found")

        try:
            self.carts.delete(cart)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
