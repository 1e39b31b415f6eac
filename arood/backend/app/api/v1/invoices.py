# backend/app/api/v1/invoices.py
from fastapi import APIRouter, Depends
from datetime import datetime
from typing import List, Optional

from app.api.dependencies import (
    get_current_user,
    get_current_merchant,
    get_invoice_service,
    get_payment_service,
)
from app.core.constants import InvoiceStatus
from app.db.models.user import User
from app.schemas.booking import to_naive_utc
from app.schemas.invoice import Invoice, PayInvoiceRequest, PaymentStart
from app.services.invoice_service import InvoiceService
from app.services.payment_service import PaymentService

router = APIRouter()


@router.get("/invoices", response_model=List[Invoice])
async def list_invoices(
    status: Optional[InvoiceStatus] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    merchant_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service)
):
    """Merchants see their own invoices; admins see all, optionally per merchant"""
    return await service.list_for_user(
        current_user,
        status=status.value if status else None,
        start_date=to_naive_utc(start_date) if start_date else None,
        end_date=to_naive_utc(end_date) if end_date else None,
        merchant_id=merchant_id,
        skip=skip,
        limit=limit,
    )


@router.get("/invoices/{invoice_id}", response_model=Invoice)
async def get_invoice(
    invoice_id: int,
    current_user: User = Depends(get_current_user),
    service: InvoiceService = Depends(get_invoice_service)
):
    """Get invoice details"""
    return await service.get_for_user(invoice_id, current_user)


@router.post("/invoices/{invoice_id}/pay", response_model=PaymentStart)
async def pay_invoice(
    invoice_id: int,
    pay_in: PayInvoiceRequest,
    current_user: User = Depends(get_current_merchant),
    service: PaymentService = Depends(get_payment_service)
):
    """Start a Moyasar payment for a booking invoice"""
    result = await service.pay_invoice(invoice_id, current_user, pay_in.source.model_dump(exclude_none=True))
    return PaymentStart(
        invoice=Invoice.model_validate(result["invoice"]),
        payment_id=result["payment_id"],
        payment_status=result["payment_status"] or "initiated",
        payment_url=result["payment_url"],
    )
