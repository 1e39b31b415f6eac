# backend/app/api/v1/subscriptions.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.api.dependencies import get_current_merchant, get_subscription_service
from app.db.database import get_db
from app.db.models.user import User
from app.db.repositories.subscription_repository import SubscriptionPlanRepository
from app.schemas.invoice import Invoice
from app.schemas.subscription import (
    CancelSubscriptionRequest,
    Plan,
    SubscribeRequest,
    SubscribeResult,
    Subscription,
    SubscriptionOverview,
)
from app.services.subscription_service import SubscriptionService

router = APIRouter()


@router.get("/subscription-plans", response_model=List[Plan])
async def list_plans(db: AsyncSession = Depends(get_db)):
    """Active subscription plans"""
    return await SubscriptionPlanRepository(db).get_active()


@router.get("/merchant/subscription", response_model=SubscriptionOverview)
async def get_my_subscription(
    current_user: User = Depends(get_current_merchant),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Current plan, quota and active subscription"""
    overview = await service.overview(current_user)
    return SubscriptionOverview(
        subscription_plan=overview["subscription_plan"],
        subscription_expiry=overview["subscription_expiry"],
        offer_limit=overview["offer_limit"],
        subscription=Subscription.model_validate(overview["subscription"]) if overview["subscription"] else None,
        plan=Plan.model_validate(overview["plan"]) if overview["plan"] else None,
    )


@router.post("/merchant/subscribe", response_model=SubscribeResult)
async def subscribe(
    subscribe_in: SubscribeRequest,
    current_user: User = Depends(get_current_merchant),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Activate a free plan, or start the payment for a paid one"""
    source = subscribe_in.source.model_dump(exclude_none=True) if subscribe_in.source else None
    result = await service.start_subscription(current_user, subscribe_in.plan_id, source)

    subscription = result.get("subscription")
    invoice = result.get("invoice")
    return SubscribeResult(
        status=result["status"],
        subscription=Subscription.model_validate(subscription) if subscription else None,
        invoice=Invoice.model_validate(invoice) if invoice else None,
        payment_id=result.get("payment_id"),
        payment_url=result.get("payment_url"),
    )


@router.post("/merchant/subscription/cancel", response_model=Subscription)
async def cancel_subscription(
    cancel_in: Optional[CancelSubscriptionRequest] = None,
    current_user: User = Depends(get_current_merchant),
    service: SubscriptionService = Depends(get_subscription_service)
):
    """Cancel the active plan and return to the free quota"""
    return await service.cancel_subscription(current_user, cancel_in.reason if cancel_in else None)
