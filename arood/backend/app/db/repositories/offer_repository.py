# backend/app/db/repositories/offer_repository.py
from typing import List, Optional
from sqlalchemy import select, func, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.offer import Offer
from app.db.repositories.base import BaseRepository


class OfferRepository(BaseRepository[Offer]):
    """Repository for Offer operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(Offer, session)

    async def count_active(self, merchant_id: int) -> int:
        result = await self.session.execute(
            select(func.count(Offer.id)).where(
                and_(Offer.merchant_id == merchant_id, Offer.is_active.is_(True))
            )
        )
        return result.scalar_one()

    async def search(
        self,
        merchant_id: Optional[int] = None,
        city: Optional[str] = None,
        active_only: bool = True,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Offer]:
        query = select(Offer)
        if merchant_id is not None:
            query = query.where(Offer.merchant_id == merchant_id)
        if city:
            query = query.where(Offer.city == city)
        if active_only:
            query = query.where(Offer.is_active.is_(True))
        result = await self.session.execute(
            query.order_by(Offer.created_at.desc(), Offer.id.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all())
