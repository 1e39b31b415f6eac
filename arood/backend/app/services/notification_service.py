# backend/app/services/notification_service.py
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import NotFound
from app.core.logging import logger
from app.db.models.notification import MerchantNotification
from app.db.models.user import User
from app.db.repositories.notification_repository import NotificationRepository
from app.services.email_service import EmailService


class NotificationService:
    """
    Persists merchant notifications and mirrors them by email.

    `create` only adds the row to the caller's transaction. `deliver` sends
    the emails and must run after that transaction commits, so a rolled-back
    action never emails the merchant.
    """

    def __init__(self, db: AsyncSession, email_service: EmailService):
        self.db = db
        self.email_service = email_service
        self.repo = NotificationRepository(db)

    async def create(
        self,
        merchant_id: int,
        type: str,
        title: str,
        title_ar: str,
        message: str,
        message_ar: str,
        booking_id: Optional[int] = None,
        priority: str = "normal",
    ) -> MerchantNotification:
        notification = MerchantNotification(
            merchant_id=merchant_id,
            booking_id=booking_id,
            type=type,
            title=title,
            title_ar=title_ar,
            message=message,
            message_ar=message_ar,
            priority=priority,
        )
        self.db.add(notification)
        await self.db.flush()
        return notification

    async def deliver(self, merchant: User, notifications: List[MerchantNotification]) -> None:
        """Email committed notifications to the merchant and record which were sent"""
        if not notifications:
            return

        sent_any = False
        for notification in notifications:
            try:
                sent = await self.email_service.send_notification_email(
                    email=merchant.email,
                    name=merchant.business_name or merchant.username,
                    title=notification.title,
                    title_ar=notification.title_ar,
                    message=notification.message,
                    message_ar=notification.message_ar,
                    action_url=f"{settings.FRONTEND_URL}/merchant/notifications",
                )
            except Exception:
                # The triggering action is already committed
                logger.exception(
                    f"Notification {notification.id} email failed",
                    extra={"merchant_id": merchant.id},
                )
                continue

            if sent:
                notification.email_sent = True
                notification.email_sent_at = datetime.utcnow()
                sent_any = True
            else:
                logger.warning(
                    f"Notification {notification.id} not emailed",
                    extra={"merchant_id": merchant.id},
                )

        if sent_any:
            await self.db.commit()

    async def list_for_merchant(
        self, merchant_id: int, unread_only: bool = False, skip: int = 0, limit: int = 100
    ) -> List[MerchantNotification]:
        return await self.repo.get_by_merchant(merchant_id, unread_only, skip, limit)

    async def mark_read(self, notification_id: int, merchant_id: int) -> MerchantNotification:
        notification = await self.repo.get_with_owner_check(notification_id, merchant_id)
        if not notification:
            raise NotFound("الإشعار غير موجود", "Notification not found")

        if not notification.is_read:
            notification.is_read = True
            notification.read_at = datetime.utcnow()
            await self.db.commit()
        return notification
