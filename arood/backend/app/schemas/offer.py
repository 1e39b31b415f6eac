# backend/app/schemas/offer.py
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class OfferCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    title_ar: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = None
    description_ar: Optional[str] = None
    discount_percentage: Optional[int] = Field(None, ge=1, le=100)
    city: Optional[str] = Field(None, max_length=100)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    class Config:
        extra = "forbid"


class Offer(BaseModel):
    id: int
    merchant_id: int
    title: str
    title_ar: str
    description: Optional[str] = None
    description_ar: Optional[str] = None
    discount_percentage: Optional[int] = None
    city: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
