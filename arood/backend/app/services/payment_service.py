# backend/app/services/payment_service.py
from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import InvoiceStatus, InvoiceType, NotificationType, PaymentStatus
from app.core.exceptions import Conflict, NotFound
from app.core.logging import logger
from app.db.models.invoice import Invoice
from app.db.models.notification import MerchantNotification
from app.db.models.user import User
from app.db.repositories.invoice_repository import InvoiceRepository
from app.db.repositories.user_repository import UserRepository
from app.services.invoice_service import InvoiceService
from app.services.moyasar_service import to_halalas
from app.services.notification_service import NotificationService
from app.services.subscription_service import SubscriptionService


class PaymentService:
    """
    Applies Moyasar payment results to invoices.

    The gateway is always asked for the payment state; callback bodies are
    trusted for the payment id only.
    """

    def __init__(
        self,
        db: AsyncSession,
        gateway,
        notifications: NotificationService,
        subscriptions: SubscriptionService,
    ):
        self.db = db
        self.gateway = gateway
        self.notifications = notifications
        self.subscriptions = subscriptions
        self.repo = InvoiceRepository(db)
        self.users = UserRepository(db)
        self.invoices = InvoiceService(db)

    async def handle_payment_callback(self, payment_id: str) -> Invoice:
        """
        Sync an invoice with its Moyasar payment.

        paid: invoice paid, subscription invoices activate the plan in the
        same transaction. failed: invoice cancelled. Any other status is only
        recorded. An invoice already paid is returned unchanged.
        """
        payment = await self.gateway.get_payment(payment_id)
        status = payment.get("status")
        source = payment.get("source") or {}

        notifications: List[MerchantNotification] = []
        try:
            invoice = await self.repo.get_by_payment_id(payment_id, lock=True)
            if not invoice:
                raise NotFound("الفاتورة غير موجودة", f"No invoice for payment {payment_id}")

            if invoice.status == InvoiceStatus.PAID.value:
                logger.info(f"Payment {payment_id} already applied", extra={"invoice_id": invoice.id})
                await self.db.commit()
                return invoice

            invoice.moyasar_status = status
            invoice.moyasar_metadata = payment

            if status == PaymentStatus.PAID.value and payment.get("amount") != to_halalas(invoice.total_amount):
                logger.error(
                    f"Payment {payment_id} amount {payment.get('amount')} does not match invoice total",
                    extra={"invoice_id": invoice.id},
                )
                invoice.failure_reason = "Paid amount does not match invoice total"
            elif status == PaymentStatus.PAID.value:
                self.invoices.set_status(invoice, InvoiceStatus.PAID)
                invoice.paid_at = datetime.utcnow()
                invoice.payment_method = source.get("type")
                invoice.moyasar_transaction_id = source.get("reference_number")
                invoice.failure_reason = None

                if invoice.invoice_type == InvoiceType.SUBSCRIPTION.value:
                    await self.subscriptions.activate_subscription(
                        invoice.merchant_id,
                        invoice.plan_id,
                        invoice_id=invoice.id,
                        payment_method=source.get("type"),
                        commit=False,
                    )

                notifications.append(
                    await self.notifications.create(
                        merchant_id=invoice.merchant_id,
                        booking_id=invoice.booking_id,
                        type=NotificationType.INVOICE_PAID.value,
                        title="Payment received",
                        title_ar="تم استلام الدفعة",
                        message=f"Invoice {invoice.invoice_number} has been paid.",
                        message_ar=f"تم سداد الفاتورة {invoice.invoice_number}.",
                    )
                )
            elif status == PaymentStatus.FAILED.value:
                self.invoices.set_status(invoice, InvoiceStatus.CANCELLED)
                invoice.failure_reason = source.get("message") or source.get("gateway_id") or "Payment failed"

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Payment {payment_id} status {status} applied to invoice {invoice.invoice_number}",
            extra={"invoice_id": invoice.id, "merchant_id": invoice.merchant_id},
        )
        if notifications:
            merchant = await self.users.get(invoice.merchant_id)
            await self.notifications.deliver(merchant, notifications)
        return invoice

    async def sync_payment(self, payment_id: str, user: User) -> Invoice:
        """Re-check a payment the user can see"""
        invoice = await self.repo.get_by_payment_id(payment_id)
        if not invoice or (not user.is_admin and invoice.merchant_id != user.id):
            raise NotFound("عملية الدفع غير موجودة", f"Payment {payment_id} not found")
        return await self.handle_payment_callback(payment_id)

    async def pay_invoice(self, invoice_id: int, merchant: User, source: Dict[str, Any]) -> Dict[str, Any]:
        """Start a Moyasar payment for the merchant's unpaid booking invoice"""
        invoice = await self.repo.get_for_update(invoice_id)
        if not invoice or invoice.merchant_id != merchant.id:
            raise NotFound("الفاتورة غير موجودة", "Invoice not found")
        if invoice.invoice_type != InvoiceType.BOOKING.value:
            raise Conflict("هذه الفاتورة تُدفع عبر الاشتراك", "Subscription invoices are paid when subscribing")
        if invoice.status not in (InvoiceStatus.UNPAID.value, InvoiceStatus.OVERDUE.value):
            raise Conflict("الفاتورة غير قابلة للدفع", f"Invoice is {invoice.status}")

        payment = await self.gateway.create_payment(
            amount=invoice.total_amount,
            currency=invoice.currency,
            description=f"فاتورة {invoice.invoice_number}",
            source=source,
            metadata={
                "invoice_id": invoice.id,
                "merchant_id": merchant.id,
                "booking_id": invoice.booking_id,
                "invoice_number": invoice.invoice_number,
            },
        )

        invoice.moyasar_payment_id = payment["id"]
        invoice.moyasar_status = payment.get("status")
        invoice.moyasar_metadata = payment
        await self.db.commit()

        logger.info(
            f"Payment {payment['id']} started for invoice {invoice.invoice_number}",
            extra={"invoice_id": invoice.id, "merchant_id": merchant.id},
        )
        return {
            "invoice": invoice,
            "payment_id": payment["id"],
            "payment_status": payment.get("status"),
            "payment_url": (payment.get("source") or {}).get("transaction_url"),
        }
