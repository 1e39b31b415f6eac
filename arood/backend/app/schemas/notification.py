# backend/app/schemas/notification.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class Notification(BaseModel):
    id: int
    merchant_id: int
    booking_id: Optional[int] = None
    type: str
    title: str
    title_ar: str
    message: str
    message_ar: str
    priority: str
    is_read: bool
    read_at: Optional[datetime] = None
    email_sent: bool
    created_at: datetime

    class Config:
        from_attributes = True
