# backend/app/db/repositories/notification_repository.py
from typing import List, Optional
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.notification import MerchantNotification
from app.db.repositories.base import BaseRepository


class NotificationRepository(BaseRepository[MerchantNotification]):
    """Repository for MerchantNotification operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(MerchantNotification, session)

    async def get_by_merchant(
        self,
        merchant_id: int,
        unread_only: bool = False,
        skip: int = 0,
        limit: int = 100,
    ) -> List[MerchantNotification]:
        query = select(MerchantNotification).where(MerchantNotification.merchant_id == merchant_id)
        if unread_only:
            query = query.where(MerchantNotification.is_read.is_(False))
        result = await self.session.execute(
            query.order_by(MerchantNotification.created_at.desc(), MerchantNotification.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())

    async def get_with_owner_check(self, notification_id: int, merchant_id: int) -> Optional[MerchantNotification]:
        result = await self.session.execute(
            select(MerchantNotification).where(
                and_(
                    MerchantNotification.id == notification_id,
                    MerchantNotification.merchant_id == merchant_id,
                )
            )
        )
        return result.scalar_one_or_none()
