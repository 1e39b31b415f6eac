# backend/app/schemas/invoice.py
from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime


class Invoice(BaseModel):
    id: int
    invoice_number: str
    booking_id: Optional[int] = None
    plan_id: Optional[int] = None
    merchant_id: int
    invoice_type: str
    issue_date: datetime
    due_date: datetime
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    currency: str
    status: str
    status_ar: str
    paid_at: Optional[datetime] = None
    payment_method: Optional[str] = None
    moyasar_payment_id: Optional[str] = None
    moyasar_status: Optional[str] = None
    failure_reason: Optional[str] = None

    class Config:
        from_attributes = True


class PaymentSource(BaseModel):
    """Moyasar payment source, passed through to the gateway"""
    type: str = Field(..., min_length=1)  # creditcard, mada, applepay, stcpay, token
    name: Optional[str] = None
    number: Optional[str] = None
    cvc: Optional[str] = None
    month: Optional[str] = None
    year: Optional[str] = None
    token: Optional[str] = None
    mobile: Optional[str] = None

    class Config:
        extra = "forbid"


class PayInvoiceRequest(BaseModel):
    source: PaymentSource

    class Config:
        extra = "forbid"


class PaymentStart(BaseModel):
    invoice: Invoice
    payment_id: str
    payment_status: str
    payment_url: Optional[str] = None


class PaymentCallback(BaseModel):
    """Moyasar posts the whole payment object; only its id is used"""
    id: str = Field(..., min_length=1)

    class Config:
        extra = "ignore"


class PaymentCallbackResult(BaseModel):
    success: bool
    message: str
    invoice: Invoice
