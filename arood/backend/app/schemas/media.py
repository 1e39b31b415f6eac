# backend/app/schemas/media.py
from pydantic import BaseModel, Field
from typing import Literal, Optional
from datetime import datetime


class CampaignMedia(BaseModel):
    id: int
    booking_id: int
    merchant_id: int
    file_name: str
    original_file_name: str
    file_type: str
    file_size: int
    mime_type: str
    upload_status: str
    upload_status_ar: str
    admin_notes: Optional[str] = None
    uploaded_at: datetime
    reviewed_at: Optional[datetime] = None
    reviewed_by: Optional[int] = None

    class Config:
        from_attributes = True


class MediaReview(BaseModel):
    upload_status: Literal["approved", "rejected"]
    admin_notes: Optional[str] = Field(None, max_length=2000)

    class Config:
        extra = "forbid"
