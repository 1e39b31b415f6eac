# backend/app/schemas/subscription.py
from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import date, datetime

from app.schemas.invoice import Invoice, PaymentSource


class PlanBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    name_ar: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    description_ar: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    currency: str = "SAR"
    billing_period: str = "monthly"
    offer_limit: int = Field(3, ge=0)
    screen_limit: int = Field(0, ge=0)
    features: List[str] = []
    is_active: bool = True
    sort_order: int = 0


class PlanCreate(PlanBase):
    class Config:
        extra = "forbid"


class PlanUpdate(BaseModel):
    name_ar: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = None
    description_ar: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    offer_limit: Optional[int] = Field(None, ge=0)
    screen_limit: Optional[int] = Field(None, ge=0)
    features: Optional[List[str]] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None

    class Config:
        extra = "forbid"


class Plan(PlanBase):
    id: int

    class Config:
        from_attributes = True


class Subscription(BaseModel):
    id: int
    merchant_id: int
    plan_id: int
    invoice_id: Optional[int] = None
    start_date: date
    end_date: date
    status: str
    auto_renew: bool
    payment_method: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancel_reason: Optional[str] = None

    class Config:
        from_attributes = True


class SubscriptionOverview(BaseModel):
    subscription_plan: str
    subscription_expiry: Optional[datetime] = None
    offer_limit: int
    subscription: Optional[Subscription] = None
    plan: Optional[Plan] = None


class SubscribeRequest(BaseModel):
    plan_id: int
    source: Optional[PaymentSource] = None

    class Config:
        extra = "forbid"


class SubscribeResult(BaseModel):
    status: str  # active, payment_required
    subscription: Optional[Subscription] = None
    invoice: Optional[Invoice] = None
    payment_id: Optional[str] = None
    payment_url: Optional[str] = None


class CancelSubscriptionRequest(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)

    class Config:
        extra = "forbid"
