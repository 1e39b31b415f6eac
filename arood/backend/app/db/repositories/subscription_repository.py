# backend/app/db/repositories/subscription_repository.py
from typing import List, Optional
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.core.constants import SubscriptionStatus
from app.db.models.subscription import SubscriptionPlan, MerchantSubscription
from app.db.repositories.base import BaseRepository


class SubscriptionPlanRepository(BaseRepository[SubscriptionPlan]):
    """Repository for SubscriptionPlan operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(SubscriptionPlan, session)

    async def get_active(self) -> List[SubscriptionPlan]:
        result = await self.session.execute(
            select(SubscriptionPlan)
            .where(SubscriptionPlan.is_active.is_(True))
            .order_by(SubscriptionPlan.sort_order, SubscriptionPlan.price)
        )
        return list(result.scalars().all())

    async def get_by_name(self, name: str) -> Optional[SubscriptionPlan]:
        result = await self.session.execute(
            select(SubscriptionPlan).where(SubscriptionPlan.name == name)
        )
        return result.scalar_one_or_none()


class MerchantSubscriptionRepository(BaseRepository[MerchantSubscription]):
    """Repository for MerchantSubscription operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(MerchantSubscription, session)

    async def get_active(self, merchant_id: int, lock: bool = False) -> Optional[MerchantSubscription]:
        """Get the merchant's active subscription with its plan"""
        query = (
            select(MerchantSubscription)
            .where(
                and_(
                    MerchantSubscription.merchant_id == merchant_id,
                    MerchantSubscription.status == SubscriptionStatus.ACTIVE.value,
                )
            )
            .options(selectinload(MerchantSubscription.plan))
        )
        if lock:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_history(self, merchant_id: int) -> List[MerchantSubscription]:
        result = await self.session.execute(
            select(MerchantSubscription)
            .where(MerchantSubscription.merchant_id == merchant_id)
            .options(selectinload(MerchantSubscription.plan))
            .order_by(MerchantSubscription.id.desc())
        )
        return list(result.scalars().all())
