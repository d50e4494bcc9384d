"""
Cart Repository - one persisted cart per customer
"""
from typing import Optional

from sqlalchemy.orm import Session, selectinload

from kamioun.models import Cart


class CartRepository:
    def __init__(self, db: Session):
        self.db = db

    def find_by_customer(self, customer_id: str) -> Optional[Cart]:
        return (
            self.db.query(Cart)
            .options(selectinload(Cart.items))
            .filter(Cart.customer_id == customer_id)
            .first()
        )

    def add(self, cart: Cart) -> Cart:
        self.db.add(cart)
        self.db.flush()
        return cart

    def delete(self, cart: Cart) -> None:
        self.db.delete(cart)
        self.db.flush()
