# backend/app/schemas/booking.py
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import List, Optional
from decimal import Decimal
from datetime import datetime, timezone

from app.schemas.invoice import Invoice


def to_naive_utc(value: datetime) -> datetime:
    """Timestamps are stored as naive UTC"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class BookingCreate(BaseModel):
    """
    Booking request. total_price is optional and only cross-checked against
    the server computed total.
    """
    location_id: int
    start_date_time: datetime
    end_date_time: datetime
    pricing_option_id: Optional[int] = None
    number_of_screens: Optional[int] = Field(None, ge=1)
    total_price: Optional[Decimal] = Field(None, ge=0)
    request_notes: Optional[str] = Field(None, max_length=2000)

    class Config:
        extra = "forbid"

    @field_validator("start_date_time", "end_date_time")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

    @model_validator(mode="after")
    def check_range(self):
        if self.start_date_time > self.end_date_time:
            raise ValueError("start_date_time must not be after end_date_time")
        return self


class BookingApprove(BaseModel):
    admin_notes: Optional[str] = Field(None, max_length=2000)

    class Config:
        extra = "forbid"


class BookingReject(BaseModel):
    rejection_reason: str = Field(..., min_length=1, max_length=2000)
    admin_notes: Optional[str] = Field(None, max_length=2000)

    class Config:
        extra = "forbid"


class AdminNotesUpdate(BaseModel):
    admin_notes: str = Field(..., max_length=2000)

    class Config:
        extra = "forbid"


class Booking(BaseModel):
    id: int
    merchant_id: int
    location_id: int
    pricing_option_id: Optional[int] = None
    start_date_time: datetime
    end_date_time: datetime
    duration: int
    number_of_screens: int
    total_price: Decimal
    status: str
    status_ar: str
    media_url: Optional[str] = None
    media_type: Optional[str] = None
    request_notes: Optional[str] = None
    admin_notes: Optional[str] = None
    rejection_reason: Optional[str] = None
    invoice_generated: bool
    invoice_number: Optional[str] = None
    approved_at: Optional[datetime] = None
    rejected_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    created_at: datetime

    class Config:
        from_attributes = True


class ApprovalResult(BaseModel):
    booking: Booking
    invoice: Invoice


class BookingLog(BaseModel):
    id: int
    booking_id: int
    actor_id: Optional[int] = None
    action: str
    action_ar: str
    previous_value: Optional[str] = None
    new_value: Optional[str] = None
    notes: Optional[str] = None
    timestamp: datetime

    class Config:
        from_attributes = True


class AvailabilityRequest(BaseModel):
    location_id: int
    start_date: datetime
    end_date: datetime
    exclude_booking_id: Optional[int] = None

    class Config:
        extra = "forbid"

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_timezone(cls, v: datetime) -> datetime:
        return to_naive_utc(v)


class AvailabilityResponse(BaseModel):
    is_available: bool
    conflicting_bookings: List[Booking]
