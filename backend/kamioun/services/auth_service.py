"""
Auth Service
Customer login and the forgot/reset password flow

Author: Kamioun
Date: 2025-03-02
"""
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional, Tuple

from fastapi import status
from sqlalchemy.orm import Session

from kamioun.core.auth import create_access_token, hash_password, verify_password
from kamioun.core.config import settings
from kamioun.core.errors import BusinessError
from kamioun.core.metrics import user_logins_total
from kamioun.core.phone import normalize_phone
from kamioun.models import Customer
from kamioun.repositories import CustomerRepository, PasswordResetTokenRepository

logger = logging.getLogger(__name__)

RESET_REQUEST_MESSAGE = "If this account exists, a reset link will be sent to your email"


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class AuthService:
    """
    Service for customer authentication

    Handles:
    - Phone/password login with JWT issuance
    - Password reset token issuance
    - Password reset
    """

    def __init__(self, db: Session):
        self.db = db
        self.customers = CustomerRepository(db)
        self.reset_tokens = PasswordResetTokenRepository(db)

    def login(self, phone: str, password: str) -> Tuple[str, Customer]:
        """
        Authenticate a customer by phone number and password

        Args:
            phone: Phone number as typed (local or international format)
            password: Plain password

        Returns:
            Tuple of (access_token, customer)

        Raises:
            BusinessError: INVALID_PHONE (400) or INVALID_CREDENTIALS (401)
        """
        normalized = normalize_phone(phone)
        if normalized is None:
            raise BusinessError("INVALID_PHONE", "Invalid Tunisian phone number")

        customer = self.customers.find_by_telephone(normalized)
        if customer is None or not verify_password(password, customer.password):
            user_logins_total.labels(result="fail").inc()
            logger.info(f"Failed login for {normalized}")
            raise BusinessError(
                "INVALID_CREDENTIALS",
                "Invalid phone number or password",
                status_code=status.HTTP_401_UNAUTHORIZED,
            )

        user_logins_total.labels(result="success").inc()
        token = create_access_token(customer.id, customer.telephone, customer.full_name)
        return token, customer

    def request_password_reset(self, email: str) -> Optional[dict]:
        """
        Issue a reset token for the customer owning email

        Previous tokens of the customer are discarded. Unknown emails return
        None so the caller can answer with the same generic message.

        Returns:
            {"public_id", "email"} or None
        """
        customer = self.customers.find_by_email(email)
        if customer is None:
            return None

        try:
            self.reset_tokens.delete_for_customer(customer.id)
            reset_token = self.reset_tokens.create(
                customer_id=customer.id,
                token=secrets.token_hex(32),
                public_id=secrets.token_hex(16),
                expires_at=datetime.now(timezone.utc) + timedelta(minutes=settings.PASSWORD_RESET_TTL_MINUTES),
            )
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        return {"public_id": reset_token.public_id, "email": customer.email}

    def reset_password(self, public_id: str, password: str) -> Customer:
        """
        Set a new password using a reset token

        Raises:
            BusinessError: INVALID_RESET_LINK or RESET_LINK_EXPIRED (400)
        """
        reset_token = self.reset_tokens.find_by_public_id(public_id)
        if reset_token is None:
            raise BusinessError("INVALID_RESET_LINK", "Invalid or expired link")

        if datetime.now(timezone.utc) > _as_utc(reset_token.expires_at):
            self.reset_tokens.delete(reset_token)
            self.db.commit()
            raise BusinessError("RESET_LINK_EXPIRED", "The link has expired")

        customer = reset_token.customer
        try:
            customer.password = hash_password(password)
            self.reset_tokens.delete_for_customer(customer.id)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(customer)
        return customer
