"""
Customer Repository - Data Access Layer for customers and password reset tokens

Author: Kamioun
Date: 2025-03-02
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from kamioun.models import Customer, PasswordResetToken


class CustomerRepository:
    """
    Repository for Customer data access
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_id(self, customer_id: str, with_relations: bool = False) -> Optional[Customer]:
        """
        Find customer by ID

        Args:
            customer_id: Customer UUID
            with_relations: Eager-load orders and reservations

        Returns:
            Customer or None if not found
        """
        query = self.db.query(Customer)
        if with_relations:
            query = query.options(
                selectinload(Customer.orders),
                selectinload(Customer.reservations),
            )
        return query.filter(Customer.id == customer_id).first()

    def find_by_telephone(self, telephone: str) -> Optional[Customer]:
        """Find customer by E.164 phone number"""
        return self.db.query(Customer).filter(Customer.telephone == telephone).first()

    def find_by_email(self, email: str) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.email == email).first()

    def find_conflict(self, email: Optional[str] = None, telephone: Optional[str] = None,
                      exclude_id: Optional[str] = None) -> Optional[Customer]:
        """
        Find another customer already using this email or phone

        Args:
            email: Email to check
            telephone: E.164 phone to check
            exclude_id: Customer being updated (ignored in the check)

        Returns:
            The conflicting customer, or None
        """
        conditions = []
        if email:
            conditions.append(Customer.email == email)
        if telephone:
            conditions.append(Customer.telephone == telephone)
        if not conditions:
            return None

        query = self.db.query(Customer).filter(or_(*conditions))
        if exclude_id:
            query = query.filter(Customer.id != exclude_id)
        return query.first()

    def find_all(self) -> List[Customer]:
        """All customers with favorites, orders, reservations and notifications"""
        return (
            self.db.query(Customer)
            .options(
                selectinload(Customer.favorite_products),
                selectinload(Customer.favorite_partners),
                selectinload(Customer.orders),
                selectinload(Customer.reservations),
                selectinload(Customer.notifications),
            )
            .order_by(Customer.created_at.desc())
            .all()
        )

    def add(self, customer: Customer) -> Customer:
        self.db.add(customer)
        self.db.flush()
        return customer

    def delete(self, customer: Customer) -> None:
        self.db.delete(customer)
        self.db.flush()


class PasswordResetTokenRepository:
    """
    Repository for one-time password reset tokens
    """

    def __init__(self, db: Session):
        self.db = db

    def find_by_public_id(self, public_id: str) -> Optional[PasswordResetToken]:
        return (
            self.db.query(PasswordResetToken)
            .options(selectinload(PasswordResetToken.customer))
            .filter(PasswordResetToken.public_id == public_id)
            .first()
        )

    def create(self, customer_id: str, token: str, public_id: str, expires_at: datetime) -> PasswordResetToken:
        reset_token = PasswordResetToken(
            customer_id=customer_id,
            token=token,
            public_id=public_id,
            expires_at=expires_at,
        )
        self.db.add(reset_token)
        self.db.flush()
        return reset_token

    def delete(self, reset_token: PasswordResetToken) -> None:
        self.db.delete(reset_token)
        self.db.flush()

    def delete_for_customer(self, customer_id: str) -> int:
        """
        Delete every token issued to a customer

        Returns:
            Number of deleted tokens
        """
        deleted = (
            self.db.query(PasswordResetToken)
            .filter(PasswordResetToken.customer_id == customer_id)
            .delete(synchronize_session=False)
        )
        self.db.flush()
        return deleted
