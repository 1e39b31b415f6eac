# backend/app/db/repositories/screen_repository.py
from decimal import Decimal
from typing import List, Optional, Tuple
from sqlalchemy import select, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.db.models.screen import ScreenLocation, ScreenPricingOption, LocationReview
from app.db.repositories.base import BaseRepository


class ScreenLocationRepository(BaseRepository[ScreenLocation]):
    """Repository for ScreenLocation operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(ScreenLocation, session)

    async def get_with_options(self, location_id: int) -> Optional[ScreenLocation]:
        """Get location with its pricing options loaded"""
        result = await self.session.execute(
            select(ScreenLocation)
            .where(ScreenLocation.id == location_id)
            .options(selectinload(ScreenLocation.pricing_options))
        )
        return result.scalar_one_or_none()

    async def search(
        self,
        city: Optional[str] = None,
        screen_type: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        min_rating: Optional[float] = None,
        include_inactive: bool = False,
    ) -> List[Tuple[ScreenLocation, float, int]]:
        """
        List locations with their average rating and review count.

        City and screen type match either the English or the Arabic label.
        Locations without reviews have an average rating of 0.
        """
        ratings = (
            select(
                LocationReview.location_id.label("location_id"),
                func.avg(LocationReview.overall_rating).label("avg_rating"),
                func.count(LocationReview.id).label("review_count"),
            )
            .group_by(LocationReview.location_id)
            .subquery()
        )
        avg_rating = func.coalesce(ratings.c.avg_rating, 0)
        review_count = func.coalesce(ratings.c.review_count, 0)

        query = (
            select(ScreenLocation, avg_rating, review_count)
            .outerjoin(ratings, ratings.c.location_id == ScreenLocation.id)
            .options(selectinload(ScreenLocation.pricing_options))
        )

        if not include_inactive:
            query = query.where(ScreenLocation.is_active.is_(True))
        if city:
            query = query.where(or_(ScreenLocation.city == city, ScreenLocation.city_ar == city))
        if screen_type:
            query = query.where(
                or_(ScreenLocation.screen_type == screen_type, ScreenLocation.screen_type_ar == screen_type)
            )
        if min_price is not None:
            query = query.where(ScreenLocation.daily_price >= min_price)
        if max_price is not None:
            query = query.where(ScreenLocation.daily_price <= max_price)
        if min_rating is not None:
            query = query.where(avg_rating >= min_rating)

        result = await self.session.execute(query.order_by(ScreenLocation.id))
        return [(location, float(avg or 0), int(count or 0)) for location, avg, count in result.all()]

    async def rating_summary(self, location_id: int) -> Tuple[float, int]:
        result = await self.session.execute(
            select(
                func.coalesce(func.avg(LocationReview.overall_rating), 0),
                func.count(LocationReview.id),
            ).where(LocationReview.location_id == location_id)
        )
        avg, count = result.one()
        return float(avg or 0), int(count or 0)


class ScreenPricingOptionRepository(BaseRepository[ScreenPricingOption]):
    """Repository for ScreenPricingOption operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(ScreenPricingOption, session)

    async def list_options(
        self,
        location_id: Optional[int] = None,
        active_only: bool = True,
    ) -> List[ScreenPricingOption]:
        query = select(ScreenPricingOption)
        if location_id is not None:
            query = query.where(ScreenPricingOption.location_id == location_id)
        if active_only:
            query = query.where(ScreenPricingOption.is_active.is_(True))
        result = await self.session.execute(query.order_by(ScreenPricingOption.id))
        return list(result.scalars().all())


class LocationReviewRepository(BaseRepository[LocationReview]):
    """Repository for LocationReview operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(LocationReview, session)

    async def get_by_location(self, location_id: int) -> List[LocationReview]:
        result = await self.session.execute(
            select(LocationReview)
            .where(LocationReview.location_id == location_id)
            .order_by(LocationReview.created_at.desc())
        )
        return list(result.scalars().all())

