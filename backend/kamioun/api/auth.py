"""
Authentication API endpoints
- Customer login (phone + password, rate limited)
- Forgot / reset password
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr
from sqlalchemy.orm import Session

from kamioun.core.database import get_db
from kamioun.core.errors import BusinessError
from kamioun.core.metrics import user_logins_total
from kamioun.core.rate_limit import login_rate_limit
from kamioun.services.auth_service import AuthService, RESET_REQUEST_MESSAGE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Authentication"])


# =============================================================================
# Pydantic Models
# =============================================================================

class LoginRequest(BaseModel):
    phone: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    email: Optional[EmailStr] = None


class ResetPasswordRequest(BaseModel):
    public_id: Optional[str] = None
    password: Optional[str] = None


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/login", dependencies=[Depends(login_rate_limit)])
def login(body: LoginRequest, db: Session = Depends(get_db)):
    """
    Log a customer in with phone number and password

    Returns a 7-day JWT and the customer profile.
    """
    if not body.phone or not body.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Phone and password are required",
        )

    try:
        token, customer = AuthService(db).login(body.phone, body.password)
    except BusinessError:
        raise
    except Exception:
        user_logins_total.labels(result="fail").inc()
        raise

    return {
        "success": True,
        "message": "Login successful",
        "token": token,
        "user": customer.to_public_dict(),
    }


@router.post("/forget-password")
def forget_password(body: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """
    Issue a password reset link

    Answers the same message whether or not the email is registered.
    """
    if not body.email:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email is required")

    reset_data = AuthService(db).request_password_reset(body.email)
    response = {"message": RESET_REQUEST_MESSAGE}
    if reset_data:
        response["reset_data"] = reset_data
    return response


@router.post("/reset-password")
def reset_password(body: ResetPasswordRequest, db: Session = Depends(get_db)):
    if not body.public_id or not body.password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Public ID and password are required",
        )

    customer = AuthService(db).reset_password(body.public_id, body.password)
    return {
        "message": "Password updated successfully",
        "user": customer.to_public_dict(),
    }
