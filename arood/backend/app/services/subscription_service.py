# backend/app/services/subscription_service.py
from datetime import date, datetime, time
from decimal import Decimal
from typing import Any, Dict, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import (
    InvoiceStatus,
    NotificationType,
    SubscriptionStatus,
    FREE_PLAN_NAME,
    FREE_PLAN_OFFER_LIMIT,
)
from app.core.exceptions import NotFound, UpstreamError, ValidationFailed
from app.core.logging import logger
from app.db.models.subscription import MerchantSubscription, SubscriptionPlan
from app.db.models.user import User
from app.db.repositories.subscription_repository import (
    SubscriptionPlanRepository,
    MerchantSubscriptionRepository,
)
from app.db.repositories.user_repository import UserRepository
from app.services.invoice_service import InvoiceService
from app.services.notification_service import NotificationService


def subscription_period(start: date) -> date:
    """End date one calendar month after start (Jan 31 -> Feb 28/29)"""
    return start + relativedelta(months=1)


class SubscriptionService:
    """Activates, cancels and sells merchant subscription plans"""

    def __init__(self, db: AsyncSession, gateway, notifications: NotificationService):
        self.db = db
        self.gateway = gateway
        self.notifications = notifications
        self.plans = SubscriptionPlanRepository(db)
        self.subscriptions = MerchantSubscriptionRepository(db)
        self.users = UserRepository(db)
        self.invoices = InvoiceService(db)

    async def get_active_plan(self, plan_id: int) -> SubscriptionPlan:
        plan = await self.plans.get(plan_id)
        if not plan or not plan.is_active:
            raise NotFound("الباقة غير موجودة", f"Subscription plan {plan_id} not found")
        return plan

    async def activate_subscription(
        self,
        merchant_id: int,
        plan_id: int,
        invoice_id: Optional[int] = None,
        payment_method: Optional[str] = None,
        commit: bool = True,
    ) -> MerchantSubscription:
        """
        Switch a merchant to a plan as one unit of work.

        Cancels the current active subscription, inserts the new active one
        for one calendar month, and updates the merchant's plan snapshot and
        offer limit. With commit=False the caller owns the transaction.
        """
        try:
            merchant = await self.users.get_for_update(merchant_id)
            if not merchant:
                raise NotFound("التاجر غير موجود", f"Merchant {merchant_id} not found")
            plan = await self.plans.get(plan_id)
            if not plan:
                raise NotFound("الباقة غير موجودة", f"Subscription plan {plan_id} not found")

            now = datetime.utcnow()
            current = await self.subscriptions.get_active(merchant_id, lock=True)
            if current:
                current.status = SubscriptionStatus.CANCELLED.value
                current.cancelled_at = now
                current.cancel_reason = f"Replaced by plan {plan.name}"
                # Release the active slot before inserting the new row
                await self.db.flush()

            start = now.date()
            end = subscription_period(start)
            subscription = MerchantSubscription(
                merchant_id=merchant_id,
                plan_id=plan.id,
                invoice_id=invoice_id,
                start_date=start,
                end_date=end,
                status=SubscriptionStatus.ACTIVE.value,
                auto_renew=True,
                payment_method=payment_method,
            )
            self.db.add(subscription)

            merchant.subscription_plan = plan.name
            merchant.subscription_expiry = datetime.combine(end, time.min)
            merchant.offer_limit = plan.offer_limit
            await self.db.flush()

            notification = await self.notifications.create(
                merchant_id=merchant_id,
                type=NotificationType.SUBSCRIPTION_ACTIVATED.value,
                title="Subscription activated",
                title_ar="تم تفعيل الاشتراك",
                message=f"Your {plan.name} plan is active until {end:%Y-%m-%d}.",
                message_ar=f"تم تفعيل باقة {plan.name_ar} حتى {end:%Y-%m-%d}.",
            )

            if commit:
                await self.db.commit()
        except Exception:
            if commit:
                await self.db.rollback()
            raise

        logger.info(
            f"Subscription {subscription.id} activated on plan {plan.name}",
            extra={"merchant_id": merchant_id},
        )
        if commit:
            await self.notifications.deliver(merchant, [notification])
        return subscription

    async def cancel_subscription(self, merchant: User, reason: Optional[str] = None) -> MerchantSubscription:
        """Cancel the active subscription and revert the merchant to the free quota"""
        try:
            current = await self.subscriptions.get_active(merchant.id, lock=True)
            if not current:
                raise NotFound("لا يوجد اشتراك فعال", "No active subscription")

            current.status = SubscriptionStatus.CANCELLED.value
            current.cancelled_at = datetime.utcnow()
            current.cancel_reason = reason
            current.auto_renew = False

            user = await self.users.get_for_update(merchant.id)
            user.subscription_plan = FREE_PLAN_NAME
            user.subscription_expiry = None
            user.offer_limit = FREE_PLAN_OFFER_LIMIT

            notification = await self.notifications.create(
                merchant_id=merchant.id,
                type=NotificationType.SUBSCRIPTION_CANCELLED.value,
                title="Subscription cancelled",
                title_ar="تم إلغاء الاشتراك",
                message="Your subscription was cancelled. You are back on the free plan.",
                message_ar="تم إلغاء اشتراكك والعودة إلى الباقة المجانية.",
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Subscription {current.id} cancelled", extra={"merchant_id": merchant.id})
        await self.notifications.deliver(user, [notification])
        return current

    async def start_subscription(
        self,
        merchant: User,
        plan_id: int,
        source: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Subscribe a merchant to a plan.

        Free plans activate immediately. Paid plans get an unpaid
        subscription invoice and a Moyasar payment; activation happens when
        the payment callback reports it paid.
        """
        plan = await self.get_active_plan(plan_id)

        if Decimal(plan.price) == 0:
            subscription = await self.activate_subscription(merchant.id, plan.id, payment_method="free")
            return {"status": "active", "subscription": subscription}

        if not source:
            raise ValidationFailed("يجب تحديد وسيلة الدفع", "A payment source is required", field="source")

        invoice = await self.invoices.generate_for_subscription(merchant, plan)
        await self.db.commit()

        try:
            payment = await self.gateway.create_payment(
                amount=invoice.total_amount,
                currency=invoice.currency,
                description=f"{plan.name_ar} - {merchant.business_name or merchant.username}",
                source=source,
                metadata={
                    "invoice_id": invoice.id,
                    "merchant_id": merchant.id,
                    "plan_id": plan.id,
                    "invoice_number": invoice.invoice_number,
                },
            )
        except UpstreamError as e:
            self.invoices.set_status(invoice, InvoiceStatus.CANCELLED)
            invoice.failure_reason = e.message_en
            await self.db.commit()
            raise

        invoice.moyasar_payment_id = payment["id"]
        invoice.moyasar_status = payment.get("status")
        invoice.moyasar_metadata = payment
        await self.db.commit()

        logger.info(
            f"Subscription payment {payment['id']} started for plan {plan.name}",
            extra={"merchant_id": merchant.id, "invoice_id": invoice.id},
        )
        return {
            "status": "payment_required",
            "invoice": invoice,
            "payment_id": payment["id"],
            "payment_url": (payment.get("source") or {}).get("transaction_url"),
        }

    async def overview(self, merchant: User) -> Dict[str, Any]:
        current = await self.subscriptions.get_active(merchant.id)
        return {
            "subscription_plan": merchant.subscription_plan,
            "subscription_expiry": merchant.subscription_expiry,
            "offer_limit": merchant.offer_limit,
            "subscription": current,
            "plan": current.plan if current else None,
        }
