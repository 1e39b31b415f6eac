# backend/app/schemas/user.py
from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class UserBase(BaseModel):
    username: str
    email: str
    business_name: Optional[str] = None
    business_city: Optional[str] = None
    business_phone: Optional[str] = None


class UserInDB(UserBase):
    id: int
    role: str
    subscription_plan: str
    subscription_expiry: Optional[datetime] = None
    offer_limit: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class User(UserInDB):
    pass
