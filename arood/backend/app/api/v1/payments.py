# backend/app/api/v1/payments.py
from fastapi import APIRouter, Depends

from app.api.dependencies import get_current_user, get_payment_service
from app.core.constants import InvoiceStatus
from app.db.models.user import User
from app.schemas.invoice import Invoice, PaymentCallback, PaymentCallbackResult
from app.services.payment_service import PaymentService

router = APIRouter()


def callback_result(invoice) -> PaymentCallbackResult:
    paid = invoice.status == InvoiceStatus.PAID.value
    return PaymentCallbackResult(
        success=paid,
        message="Payment processed successfully" if paid else f"Payment status: {invoice.moyasar_status}",
        invoice=Invoice.model_validate(invoice),
    )


@router.post("/payments/moyasar/callback", response_model=PaymentCallbackResult)
async def moyasar_callback(
    callback_in: PaymentCallback,
    service: PaymentService = Depends(get_payment_service)
):
    """Moyasar payment notification. The payment is re-fetched from Moyasar."""
    invoice = await service.handle_payment_callback(callback_in.id)
    return callback_result(invoice)


@router.get("/payments/status/{payment_id}", response_model=PaymentCallbackResult)
async def payment_status(
    payment_id: str,
    current_user: User = Depends(get_current_user),
    service: PaymentService = Depends(get_payment_service)
):
    """Re-sync a payment and return its invoice"""
    invoice = await service.sync_payment(payment_id, current_user)
    return callback_result(invoice)
