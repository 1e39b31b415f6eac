# backend/app/api/dependencies.py
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app.core.config import settings
from app.core.constants import UserRole
from app.core.exceptions import QuotaExceeded
from app.core.security import decode_token
from app.db.database import get_db
from app.db.models.user import User
from app.db.repositories.offer_repository import OfferRepository
from app.db.repositories.user_repository import UserRepository
from app.services.booking_service import BookingService
from app.services.invoice_service import InvoiceService
from app.services.notification_service import NotificationService
from app.services.payment_service import PaymentService
from app.services.subscription_service import SubscriptionService

security = HTTPBearer(auto_error=False)


async def get_current_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user from the session cookie or a bearer token"""
    token = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not token and credentials:
        token = credentials.credentials

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required"
        )

    try:
        payload = decode_token(token)
        user_id = int(payload.get("sub"))
    except (JWTError, TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials"
        )

    user = await UserRepository(db).get(user_id)
    if not user or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found or inactive"
        )

    request.state.user = user
    return user


def require_role(required_role: UserRole):
    """Dependency to check user role"""
    async def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role != required_role.value:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Requires {required_role.value} role"
            )
        return current_user

    return role_checker


get_current_merchant = require_role(UserRole.BUSINESS)
get_current_admin = require_role(UserRole.ADMIN)


async def check_offer_quota(
    current_user: User = Depends(get_current_merchant),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Enforce the plan's offer limit as a hard cap"""
    merchant = await UserRepository(db).get_for_update(current_user.id)
    active_offers = await OfferRepository(db).count_active(merchant.id)

    if active_offers >= merchant.offer_limit:
        raise QuotaExceeded(
            f"لقد وصلت إلى الحد الأقصى للعروض ({active_offers}/{merchant.offer_limit})",
            f"Offer limit reached ({active_offers}/{merchant.offer_limit})",
            extra={
                "current_plan": merchant.subscription_plan,
                "offer_limit": merchant.offer_limit,
                "active_offers": active_offers,
                "upgrade_url": "/merchant/subscription",
            },
        )

    return merchant


def get_notification_service(
    request: Request,
    db: AsyncSession = Depends(get_db)
) -> NotificationService:
    return NotificationService(db, request.app.state.email_service)


def get_booking_service(
    request: Request,
    db: AsyncSession = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service)
) -> BookingService:
    return BookingService(db, notifications, request.app.state.media_storage)


def get_invoice_service(db: AsyncSession = Depends(get_db)) -> InvoiceService:
    return InvoiceService(db)


def get_subscription_service(
    request: Request,
    db: AsyncSession = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service)
) -> SubscriptionService:
    return SubscriptionService(db, request.app.state.payment_gateway, notifications)


def get_payment_service(
    request: Request,
    db: AsyncSession = Depends(get_db),
    notifications: NotificationService = Depends(get_notification_service),
    subscriptions: SubscriptionService = Depends(get_subscription_service)
) -> PaymentService:
    return PaymentService(db, request.app.state.payment_gateway, notifications, subscriptions)
