# backend/app/services/availability.py
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import NotFound
from app.db.models.booking import ScreenBooking
from app.db.repositories.booking_repository import BookingRepository
from app.db.repositories.screen_repository import ScreenLocationRepository
from app.services.pricing import validate_range


@dataclass
class AvailabilityResult:
    is_available: bool
    conflicting_bookings: List[ScreenBooking] = field(default_factory=list)


class AvailabilityChecker:
    """
    Decides whether a location is free for a requested range.

    Only approved bookings block. Pending, rejected and cancelled bookings
    never do, so two pending requests may overlap until one is approved.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.bookings = BookingRepository(db)
        self.locations = ScreenLocationRepository(db)

    async def check(
        self,
        location_id: int,
        start: datetime,
        end: datetime,
        exclude_booking_id: Optional[int] = None,
        lock: bool = False,
    ) -> AvailabilityResult:
        """
        Args:
            lock: take a row lock on the location first, serialising
                concurrent approvals for it until the transaction ends
        """
        validate_range(start, end)

        if lock:
            location = await self.locations.get_for_update(location_id)
        else:
            location = await self.locations.get(location_id)
        if not location:
            raise NotFound("موقع الشاشة غير موجود", f"Screen location {location_id} not found")

        conflicts = await self.bookings.find_conflicts(location_id, start, end, exclude_booking_id)
        return AvailabilityResult(is_available=not conflicts, conflicting_bookings=conflicts)
