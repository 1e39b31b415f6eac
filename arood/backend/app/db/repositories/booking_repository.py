# backend/app/db/repositories/booking_repository.py
from datetime import datetime
from typing import List, Optional
from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import BookingStatus
from app.db.models.booking import ScreenBooking
from app.db.models.booking_log import BookingLog
from app.db.repositories.base import BaseRepository


class BookingRepository(BaseRepository[ScreenBooking]):
    """Repository for ScreenBooking operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(ScreenBooking, session)

    async def find_conflicts(
        self,
        location_id: int,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[int] = None,
    ) -> List[ScreenBooking]:
        """
        Approved bookings of a location whose interval intersects [start, end].

        Closed intervals: touching endpoints count as an overlap.
        """
        conditions = [
            ScreenBooking.location_id == location_id,
            ScreenBooking.status == BookingStatus.APPROVED.value,
            ScreenBooking.start_date_time <= end,
            ScreenBooking.end_date_time >= start,
        ]
        if exclude_booking_id is not None:
            conditions.append(ScreenBooking.id != exclude_booking_id)

        result = await self.session.execute(
            select(ScreenBooking).where(and_(*conditions)).order_by(ScreenBooking.start_date_time)
        )
        return list(result.scalars().all())

    async def get_with_owner_check(self, booking_id: int, merchant_id: int) -> Optional[ScreenBooking]:
        """Get booking with merchant verification"""
        result = await self.session.execute(
            select(ScreenBooking).where(
                and_(
                    ScreenBooking.id == booking_id,
                    ScreenBooking.merchant_id == merchant_id,
                )
            )
        )
        return result.scalar_one_or_none()

    async def search(
        self,
        merchant_id: Optional[int] = None,
        status: Optional[str] = None,
        location_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[ScreenBooking]:
        query = select(ScreenBooking)
        if merchant_id is not None:
            query = query.where(ScreenBooking.merchant_id == merchant_id)
        if status:
            query = query.where(ScreenBooking.status == status)
        if location_id is not None:
            query = query.where(ScreenBooking.location_id == location_id)

        result = await self.session.execute(
            query.order_by(ScreenBooking.created_at.desc(), ScreenBooking.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(result.scalars().all())


class BookingLogRepository:
    """Append-only access to booking logs. There is no update or delete path."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def append(
        self,
        booking_id: int,
        action: str,
        action_ar: str,
        actor_id: Optional[int] = None,
        previous_value: Optional[str] = None,
        new_value: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> BookingLog:
        entry = BookingLog(
            booking_id=booking_id,
            actor_id=actor_id,
            action=action,
            action_ar=action_ar,
            previous_value=previous_value,
            new_value=new_value,
            notes=notes,
            timestamp=datetime.utcnow(),
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def get_by_booking(self, booking_id: int) -> List[BookingLog]:
        result = await self.session.execute(
            select(BookingLog)
            .where(BookingLog.booking_id == booking_id)
            .order_by(BookingLog.timestamp, BookingLog.id)
        )
        return list(result.scalars().all())
