# backend/app/services/invoice_service.py
import secrets
import string
import time
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import (
    BookingStatus,
    InvoiceStatus,
    InvoiceType,
    INVOICE_STATUS_AR,
    CURRENCY,
    BOOKING_INVOICE_DUE_DAYS,
    SUBSCRIPTION_INVOICE_DUE_DAYS,
)
from app.core.exceptions import Conflict, NotFound
from app.core.logging import logger
from app.db.models.booking import ScreenBooking
from app.db.models.invoice import Invoice
from app.db.models.subscription import SubscriptionPlan
from app.db.models.user import User
from app.db.repositories.invoice_repository import InvoiceRepository
from app.services.pricing import calculate_vat, quantize_money

MAX_NUMBER_ATTEMPTS = 5
SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def epoch_ms() -> int:
    return int(time.time() * 1000)


class InvoiceService:
    """Issues invoices for approved bookings and subscription purchases"""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.repo = InvoiceRepository(db)

    async def _insert_with_unique_number(self, make_number, **fields) -> Invoice:
        """
        Insert an invoice inside a savepoint, retrying with a new number when
        the unique constraint on invoice_number rejects it.
        """
        stamp = epoch_ms()
        for attempt in range(MAX_NUMBER_ATTEMPTS):
            invoice = Invoice(invoice_number=make_number(stamp), **fields)
            try:
                async with self.db.begin_nested():
                    self.db.add(invoice)
            except IntegrityError:
                logger.warning(f"Invoice number {invoice.invoice_number} taken, retrying")
                stamp += 1 + attempt
                continue
            return invoice

        raise Conflict("تعذر إصدار رقم فاتورة فريد", "Could not allocate a unique invoice number")

    async def generate_for_booking(self, booking: Optional[ScreenBooking]) -> Invoice:
        """
        Issue the invoice for an approved booking within the caller's transaction.

        subtotal = booking total, tax = 15% VAT, due in 30 days. The booking
        is marked invoice_generated and keeps the invoice number.
        """
        if booking is None:
            raise NotFound("الحجز غير موجود", "Booking not found")
        if booking.status != BookingStatus.APPROVED.value:
            raise Conflict(
                "لا يمكن إصدار فاتورة لحجز غير مقبول",
                f"Cannot invoice booking {booking.id} in status {booking.status}",
            )

        issue_date = datetime.utcnow()
        subtotal = quantize_money(booking.total_price)
        tax_amount = calculate_vat(subtotal)

        invoice = await self._insert_with_unique_number(
            lambda stamp: f"INV-{stamp}-{booking.id}",
            booking_id=booking.id,
            merchant_id=booking.merchant_id,
            invoice_type=InvoiceType.BOOKING.value,
            issue_date=issue_date,
            due_date=issue_date + timedelta(days=BOOKING_INVOICE_DUE_DAYS),
            subtotal=subtotal,
            tax_amount=tax_amount,
            total_amount=subtotal + tax_amount,
            currency=CURRENCY,
            status=InvoiceStatus.UNPAID.value,
            status_ar=INVOICE_STATUS_AR[InvoiceStatus.UNPAID],
        )

        booking.invoice_generated = True
        booking.invoice_number = invoice.invoice_number
        await self.db.flush()

        logger.info(
            f"Generated invoice {invoice.invoice_number}",
            extra={"booking_id": booking.id, "invoice_id": invoice.id},
        )
        return invoice

    async def generate_for_subscription(self, merchant: User, plan: SubscriptionPlan) -> Invoice:
        """Issue an unpaid subscription invoice: no VAT line, due in 7 days"""
        issue_date = datetime.utcnow()
        price = quantize_money(plan.price)

        invoice = await self._insert_with_unique_number(
            lambda stamp: f"SUB-{stamp}-{''.join(secrets.choice(SUFFIX_ALPHABET) for _ in range(6))}",
            plan_id=plan.id,
            merchant_id=merchant.id,
            invoice_type=InvoiceType.SUBSCRIPTION.value,
            issue_date=issue_date,
            due_date=issue_date + timedelta(days=SUBSCRIPTION_INVOICE_DUE_DAYS),
            subtotal=price,
            tax_amount=Decimal("0.00"),
            total_amount=price,
            currency=plan.currency or CURRENCY,
            status=InvoiceStatus.UNPAID.value,
            status_ar=INVOICE_STATUS_AR[InvoiceStatus.UNPAID],
        )
        logger.info(
            f"Generated subscription invoice {invoice.invoice_number}",
            extra={"merchant_id": merchant.id, "invoice_id": invoice.id},
        )
        return invoice

    async def get_for_user(self, invoice_id: int, user: User) -> Invoice:
        """Admins see every invoice; merchants only their own"""
        invoice = await self.repo.get(invoice_id)
        if not invoice or (not user.is_admin and invoice.merchant_id != user.id):
            raise NotFound("الفاتورة غير موجودة", "Invoice not found")
        return invoice

    async def list_for_user(
        self,
        user: User,
        status: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        merchant_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Invoice]:
        owner = merchant_id if user.is_admin else user.id
        return await self.repo.search(owner, status, start_date, end_date, skip, limit)

    def set_status(self, invoice: Invoice, status: InvoiceStatus) -> None:
        invoice.status = status.value
        invoice.status_ar = INVOICE_STATUS_AR[status]
