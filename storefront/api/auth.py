"""
Authentication API endpoints for TechTots
- Customer registration
- Email/password login issuing bearer tokens
- Current user profile
- Password reset by emailed link
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from storefront.core.auth import (
    TokenUser,
    create_access_token,
    get_current_user,
    hash_password,
    verify_password,
)
from storefront.core.database import get_db
from storefront.core.exceptions import ConflictError, StorefrontError
from storefront.core.rate_limit import rate_limit
from storefront.domain.auth import ForgotPasswordRequest, LoginRequest, RegisterRequest, ResetPasswordRequest
from storefront.domain.enums import Role
from storefront.repositories.customer_repository import CustomerRepository
from storefront.services.password_reset_service import PasswordResetService

logger = logging.getLogger(__name__)

router = APIRouter()


def _user_dict(user) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "is_active": user.is_active,
        "email_verified": user.email_verified,
        "image": user.image,
        "created_at": user.created_at.isoformat() if user.created_at else None,
    }


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """Create an active CUSTOMER account"""
    try:
        repo = CustomerRepository(db)
        if repo.find_by_email(data.email):
            raise ConflictError("Email already registered")

        user = repo.create(
            name=data.name.strip(),
            email=data.email,
            password_hash=hash_password(data.password),
            role=Role.CUSTOMER.value,
        )
        logger.info(f"New customer registered: {user.email}")

        return {
            "status": "success",
            "data": _user_dict(user)
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Registration failed")
        raise HTTPException(status_code=500, detail=f"Error registering user: {str(e)}")


@router.post("/login")
async def login(data: LoginRequest, db: Session = Depends(get_db)):
    """
    Exchange email + password for a bearer token

    Returns:
        {access_token, token_type, user}
    """
    user = CustomerRepository(db).find_by_email(data.email)
    if user is None or not verify_password(data.password, user.password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"}
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is deactivated"
        )

    token = create_access_token(user.id, user.email, user.name, user.role)
    return {
        "access_token": token,
        "token_type": "bearer",
        "user": _user_dict(user)
    }


@router.get("/me")
async def get_me(user: TokenUser = Depends(get_current_user), db: Session = Depends(get_db)):
    """Get current user profile"""
    row = CustomerRepository(db).get_row(user.id)
    if row is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return {
        "status": "success",
        "data": _user_dict(row)
    }


@router.post("/forgot-password", dependencies=[Depends(rate_limit(5, 900, scope="auth:forgot-password"))])
async def forgot_password(data: ForgotPasswordRequest, db: Session = Depends(get_db)):
    """
    Email a password reset link

    Answers the same way whether or not the email is registered.
    """
    try:
        await PasswordResetService(db).request_reset(data.email)

        return {
            "status": "success",
            "message": "Password reset instructions sent"
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Password reset request failed")
        raise HTTPException(status_code=500, detail=f"Error requesting password reset: {str(e)}")


@router.post("/reset-password", dependencies=[Depends(rate_limit(10, 900, scope="auth:reset-password"))])
async def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db)):
    try:
        PasswordResetService(db).reset_password(data.token, data.password)

        return {
            "status": "success",
            "message": "Password has been reset"
        }

    except (HTTPException, StorefrontError):
        raise
    except Exception as e:
        logger.exception("Password reset failed")
        raise HTTPException(status_code=500, detail=f"Error resetting password: {str(e)}")
