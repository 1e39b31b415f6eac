# backend/app/schemas/screen.py
from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from app.core.constants import DurationType


class ScreenLocationBase(BaseModel):
    name: str = Field(..., max_length=255)
    name_ar: str = Field(..., max_length=255)
    address: str
    address_ar: str
    city: str = Field(..., max_length=100)
    city_ar: str = Field(..., max_length=100)
    neighborhood: Optional[str] = None
    neighborhood_ar: Optional[str] = None
    latitude: Decimal
    longitude: Decimal
    google_maps_link: Optional[str] = None
    working_hours: Optional[str] = None
    working_hours_ar: Optional[str] = None
    number_of_screens: int = Field(1, ge=1)
    screen_type: str = "LED"
    screen_type_ar: str = "شاشة LED"
    daily_price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    special_notes: Optional[str] = None
    special_notes_ar: Optional[str] = None
    location_photo: Optional[str] = None


class ScreenLocationCreate(ScreenLocationBase):
    is_active: bool = True

    class Config:
        extra = "forbid"


class ScreenLocationUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    name_ar: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = None
    address_ar: Optional[str] = None
    city: Optional[str] = Field(None, max_length=100)
    city_ar: Optional[str] = Field(None, max_length=100)
    neighborhood: Optional[str] = None
    neighborhood_ar: Optional[str] = None
    latitude: Optional[Decimal] = None
    longitude: Optional[Decimal] = None
    google_maps_link: Optional[str] = None
    working_hours: Optional[str] = None
    working_hours_ar: Optional[str] = None
    number_of_screens: Optional[int] = Field(None, ge=1)
    screen_type: Optional[str] = None
    screen_type_ar: Optional[str] = None
    daily_price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    special_notes: Optional[str] = None
    special_notes_ar: Optional[str] = None
    location_photo: Optional[str] = None
    is_active: Optional[bool] = None

    class Config:
        extra = "forbid"


class ScreenLocation(ScreenLocationBase):
    id: int
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class PricingOptionCreate(BaseModel):
    location_id: int
    duration_type: DurationType
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    minimum_duration: int = Field(1, ge=1)
    maximum_duration: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = None
    notes_ar: Optional[str] = None
    is_active: bool = True

    class Config:
        extra = "forbid"


class PricingOptionUpdate(BaseModel):
    duration_type: Optional[DurationType] = None
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    minimum_duration: Optional[int] = Field(None, ge=1)
    maximum_duration: Optional[int] = Field(None, ge=1)
    notes: Optional[str] = None
    notes_ar: Optional[str] = None
    is_active: Optional[bool] = None

    class Config:
        extra = "forbid"


class PricingOption(BaseModel):
    id: int
    location_id: int
    duration_type: str
    duration_type_ar: str
    price: Decimal
    minimum_duration: int
    maximum_duration: Optional[int] = None
    notes: Optional[str] = None
    notes_ar: Optional[str] = None
    is_active: bool

    class Config:
        from_attributes = True


class ScreenLocationDetail(ScreenLocation):
    pricing_options: List[PricingOption] = []
    avg_rating: float = 0
    review_count: int = 0


class ScreenLocationList(BaseModel):
    locations: List[ScreenLocationDetail]
    total: int


class ReviewCreate(BaseModel):
    overall_rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)

    class Config:
        extra = "forbid"


class Review(BaseModel):
    id: int
    location_id: int
    merchant_id: int
    overall_rating: int
    comment: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True
