# backend/app/services/booking_service.py
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.constants import (
    BookingStatus,
    MediaReviewStatus,
    NotificationType,
    BOOKING_STATUS_AR,
    BOOKING_LOG_ACTIONS,
    MEDIA_STATUS_AR,
)
from app.core.exceptions import Conflict, NotFound, ValidationFailed
from app.core.logging import logger
from app.db.models.booking import ScreenBooking
from app.db.models.booking_log import BookingLog
from app.db.models.campaign_media import CampaignMedia
from app.db.models.invoice import Invoice
from app.db.models.user import User
from app.db.repositories.booking_repository import BookingRepository, BookingLogRepository
from app.db.repositories.media_repository import CampaignMediaRepository
from app.db.repositories.screen_repository import ScreenLocationRepository, ScreenPricingOptionRepository
from app.db.repositories.user_repository import UserRepository
from app.schemas.booking import BookingCreate
from app.services.availability import AvailabilityChecker
from app.services.invoice_service import InvoiceService
from app.services.media_storage import MediaStorage, StoredMedia
from app.services.notification_service import NotificationService
from app.services.pricing import quote_booking, totals_match


class BookingService:
    """
    Screen booking lifecycle: pending -> approved | rejected | cancelled.

    Every transition appends a booking log entry in the same transaction.
    Emails go out only after the transaction commits.
    """

    def __init__(
        self,
        db: AsyncSession,
        notifications: NotificationService,
        media_storage: MediaStorage,
    ):
        self.db = db
        self.notifications = notifications
        self.media_storage = media_storage
        self.bookings = BookingRepository(db)
        self.logs = BookingLogRepository(db)
        self.media = CampaignMediaRepository(db)
        self.locations = ScreenLocationRepository(db)
        self.pricing_options = ScreenPricingOptionRepository(db)
        self.users = UserRepository(db)
        self.availability = AvailabilityChecker(db)
        self.invoices = InvoiceService(db)

    async def _log(
        self,
        booking: ScreenBooking,
        action: str,
        actor: Optional[User],
        previous_value: Optional[str] = None,
        new_value: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> BookingLog:
        return await self.logs.append(
            booking_id=booking.id,
            action=action,
            action_ar=BOOKING_LOG_ACTIONS[action],
            actor_id=actor.id if actor else None,
            previous_value=previous_value,
            new_value=new_value,
            notes=notes,
        )

    def _set_status(self, booking: ScreenBooking, status: BookingStatus) -> str:
        previous = booking.status
        booking.status = status.value
        booking.status_ar = BOOKING_STATUS_AR[status]
        return previous

    async def _record_media(self, booking: ScreenBooking, merchant: User, stored: StoredMedia) -> CampaignMedia:
        booking.media_url = stored.url
        booking.media_type = stored.media_type
        media = CampaignMedia(
            booking_id=booking.id,
            merchant_id=merchant.id,
            file_name=stored.file_name,
            original_file_name=stored.original_file_name,
            file_type=stored.media_type,
            file_size=stored.file_size,
            file_path=stored.file_path,
            mime_type=stored.mime_type,
            upload_status=MediaReviewStatus.PENDING.value,
            upload_status_ar=MEDIA_STATUS_AR[MediaReviewStatus.PENDING],
            uploaded_at=datetime.utcnow(),
        )
        self.db.add(media)
        await self.db.flush()
        await self._log(booking, "media_uploaded", merchant, new_value=stored.url, notes=stored.original_file_name)
        return media

    async def get_for_user(self, booking_id: int, user: User) -> ScreenBooking:
        """Admins see every booking; merchants only their own"""
        if user.is_admin:
            booking = await self.bookings.get(booking_id)
        else:
            booking = await self.bookings.get_with_owner_check(booking_id, user.id)
        if not booking:
            raise NotFound("الحجز غير موجود", f"Booking {booking_id} not found")
        return booking

    async def list_for_user(
        self,
        user: User,
        status: Optional[str] = None,
        location_id: Optional[int] = None,
        merchant_id: Optional[int] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[ScreenBooking]:
        owner = merchant_id if user.is_admin else user.id
        return await self.bookings.search(owner, status, location_id, skip, limit)

    async def create_booking(
        self,
        merchant: User,
        data: BookingCreate,
        upload=None,
    ) -> ScreenBooking:
        """
        Create a pending booking with a server computed price.

        A client supplied total_price more than 0.01 away from the computed
        total is rejected, as is a range an approved booking already covers.
        """
        location = await self.locations.get(data.location_id)
        if not location:
            raise NotFound("موقع الشاشة غير موجود", f"Screen location {data.location_id} not found")
        if not location.is_active:
            raise ValidationFailed("موقع الشاشة غير متاح للحجز", "Screen location is not active", field="location_id")

        pricing_option = None
        if data.pricing_option_id is not None:
            pricing_option = await self.pricing_options.get(data.pricing_option_id)
            if (
                not pricing_option
                or pricing_option.location_id != location.id
                or not pricing_option.is_active
            ):
                raise ValidationFailed(
                    "خيار التسعير غير صالح لهذا الموقع",
                    "Pricing option does not belong to this location or is inactive",
                    field="pricing_option_id",
                )

        quote = quote_booking(
            location,
            data.start_date_time,
            data.end_date_time,
            number_of_screens=data.number_of_screens,
            pricing_option=pricing_option,
        )

        if data.total_price is not None and not totals_match(data.total_price, quote.total):
            raise ValidationFailed(
                "السعر المرسل لا يطابق السعر المحسوب",
                f"total_price {data.total_price} does not match computed total {quote.total}",
                field="total_price",
            )

        availability = await self.availability.check(location.id, data.start_date_time, data.end_date_time)
        if not availability.is_available:
            raise Conflict(
                "الموقع محجوز في الفترة المطلوبة",
                "Screen location is already booked for the requested period",
                extra={"conflicting_bookings": [b.id for b in availability.conflicting_bookings]},
            )

        stored = await self.media_storage.save(upload) if upload is not None else None

        try:
            booking = ScreenBooking(
                merchant_id=merchant.id,
                location_id=location.id,
                pricing_option_id=pricing_option.id if pricing_option else None,
                start_date_time=data.start_date_time,
                end_date_time=data.end_date_time,
                duration=quote.units,
                number_of_screens=quote.number_of_screens,
                total_price=quote.total,
                status=BookingStatus.PENDING.value,
                status_ar=BOOKING_STATUS_AR[BookingStatus.PENDING],
                request_notes=data.request_notes,
            )
            self.db.add(booking)
            await self.db.flush()

            await self._log(booking, "created", merchant, new_value=BookingStatus.PENDING.value)
            if stored:
                await self._record_media(booking, merchant, stored)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            if stored:
                await self.media_storage.discard(stored)
            raise

        logger.info(
            f"Booking {booking.id} created for location {location.id}, total {quote.total}",
            extra={"booking_id": booking.id, "merchant_id": merchant.id},
        )
        return booking

    async def upload_media(self, booking_id: int, merchant: User, upload) -> CampaignMedia:
        """Attach creative media to the merchant's pending booking"""
        booking = await self.bookings.get_with_owner_check(booking_id, merchant.id)
        if not booking:
            raise NotFound("الحجز غير موجود", f"Booking {booking_id} not found")
        if booking.status != BookingStatus.PENDING.value:
            raise Conflict("لا يمكن تعديل حجز غير معلق", "Media can only be changed on pending bookings")

        stored = await self.media_storage.save(upload)
        try:
            media = await self._record_media(booking, merchant, stored)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            await self.media_storage.discard(stored)
            raise
        return media

    async def approve(
        self,
        booking_id: int,
        admin: User,
        admin_notes: Optional[str] = None,
    ) -> Tuple[ScreenBooking, Invoice]:
        """
        Approve a pending booking and issue its invoice in one transaction.

        The booking row and then its location row are locked, and
        availability is re-checked against approved bookings. A conflict or
        an invoice failure rolls the whole approval back.
        """
        try:
            booking = await self.bookings.get_for_update(booking_id)
            if not booking:
                raise NotFound("الحجز غير موجود", f"Booking {booking_id} not found")
            if booking.status != BookingStatus.PENDING.value:
                raise Conflict(
                    "لا يمكن قبول حجز غير معلق",
                    f"Booking {booking_id} is {booking.status}, only pending bookings can be approved",
                )

            availability = await self.availability.check(
                booking.location_id,
                booking.start_date_time,
                booking.end_date_time,
                exclude_booking_id=booking.id,
                lock=True,
            )
            if not availability.is_available:
                conflicting_ids = [b.id for b in availability.conflicting_bookings]
                raise Conflict(
                    "الموقع محجوز في الفترة المطلوبة",
                    "Screen location is already booked for the requested period",
                    extra={"conflicting_bookings": conflicting_ids},
                )

            previous = self._set_status(booking, BookingStatus.APPROVED)
            booking.approved_at = datetime.utcnow()
            if admin_notes is not None:
                booking.admin_notes = admin_notes
            await self.db.flush()

            invoice = await self.invoices.generate_for_booking(booking)

            await self._log(booking, "status_change", admin, previous, booking.status, notes=admin_notes)
            await self._log(booking, "invoice_generated", admin, new_value=invoice.invoice_number)

            merchant = await self.users.get(booking.merchant_id)
            notifications = [
                await self.notifications.create(
                    merchant_id=booking.merchant_id,
                    booking_id=booking.id,
                    type=NotificationType.BOOKING_APPROVED.value,
                    title="Booking approved",
                    title_ar="تم قبول طلب الحجز",
                    message=f"Your screen booking #{booking.id} has been approved.",
                    message_ar=f"تم قبول طلب حجز الشاشة رقم {booking.id}.",
                    priority="high",
                ),
                await self.notifications.create(
                    merchant_id=booking.merchant_id,
                    booking_id=booking.id,
                    type=NotificationType.INVOICE_ISSUED.value,
                    title="New invoice",
                    title_ar="فاتورة جديدة",
                    message=(
                        f"Invoice {invoice.invoice_number} for {invoice.total_amount} {invoice.currency} "
                        f"is due on {invoice.due_date:%Y-%m-%d}."
                    ),
                    message_ar=(
                        f"تم إصدار الفاتورة {invoice.invoice_number} بمبلغ {invoice.total_amount} ريال "
                        f"وتستحق في {invoice.due_date:%Y-%m-%d}."
                    ),
                ),
            ]

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            f"Booking {booking.id} approved, invoice {invoice.invoice_number}",
            extra={"booking_id": booking.id, "invoice_id": invoice.id, "user_id": admin.id},
        )
        await self.notifications.deliver(merchant, notifications)
        return booking, invoice

    async def reject(
        self,
        booking_id: int,
        admin: User,
        reason: str,
        admin_notes: Optional[str] = None,
    ) -> ScreenBooking:
        try:
            booking = await self.bookings.get_for_update(booking_id)
            if not booking:
                raise NotFound("الحجز غير موجود", f"Booking {booking_id} not found")
            if booking.status != BookingStatus.PENDING.value:
                raise Conflict(
                    "لا يمكن رفض حجز غير معلق",
                    f"Booking {booking_id} is {booking.status}, only pending bookings can be rejected",
                )

            previous = self._set_status(booking, BookingStatus.REJECTED)
            booking.rejected_at = datetime.utcnow()
            booking.rejection_reason = reason
            if admin_notes is not None:
                booking.admin_notes = admin_notes

            await self._log(booking, "status_change", admin, previous, booking.status, notes=reason)

            merchant = await self.users.get(booking.merchant_id)
            notification = await self.notifications.create(
                merchant_id=booking.merchant_id,
                booking_id=booking.id,
                type=NotificationType.BOOKING_REJECTED.value,
                title="Booking rejected",
                title_ar="تم رفض طلب الحجز",
                message=f"Your screen booking #{booking.id} was rejected: {reason}",
                message_ar=f"تم رفض طلب حجز الشاشة رقم {booking.id}. السبب: {reason}",
                priority="high",
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Booking {booking.id} rejected", extra={"booking_id": booking.id, "user_id": admin.id})
        await self.notifications.deliver(merchant, [notification])
        return booking

    async def cancel(self, booking_id: int, user: User) -> ScreenBooking:
        """Owner or admin may cancel while the booking is still pending"""
        try:
            booking = await self.bookings.get_for_update(booking_id)
            if not booking or (not user.is_admin and booking.merchant_id != user.id):
                raise NotFound("الحجز غير موجود", f"Booking {booking_id} not found")
            if booking.status != BookingStatus.PENDING.value:
                raise Conflict(
                    "لا يمكن إلغاء حجز غير معلق",
                    f"Booking {booking_id} is {booking.status}, only pending bookings can be cancelled",
                )

            previous = self._set_status(booking, BookingStatus.CANCELLED)
            booking.cancelled_at = datetime.utcnow()
            await self._log(booking, "status_change", user, previous, booking.status)

            merchant = None
            notifications = []
            if user.is_admin and booking.merchant_id != user.id:
                merchant = await self.users.get(booking.merchant_id)
                notifications.append(await self.notifications.create(
                    merchant_id=booking.merchant_id,
                    booking_id=booking.id,
                    type=NotificationType.BOOKING_CANCELLED.value,
                    title="Booking cancelled",
                    title_ar="تم إلغاء طلب الحجز",
                    message=f"Your screen booking #{booking.id} was cancelled by the administration.",
                    message_ar=f"تم إلغاء طلب حجز الشاشة رقم {booking.id} من قبل الإدارة.",
                ))
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(f"Booking {booking.id} cancelled", extra={"booking_id": booking.id, "user_id": user.id})
        if merchant:
            await self.notifications.deliver(merchant, notifications)
        return booking

    async def update_admin_notes(self, booking_id: int, admin: User, notes: str) -> ScreenBooking:
        """The only change allowed on a booking in any status"""
        booking = await self.bookings.get_for_update(booking_id)
        if not booking:
            raise NotFound("الحجز غير موجود", f"Booking {booking_id} not found")

        previous = booking.admin_notes
        booking.admin_notes = notes
        await self._log(booking, "note_added", admin, previous, notes)
        await self.db.commit()
        return booking

    async def get_logs(self, booking_id: int) -> List[BookingLog]:
        booking = await self.bookings.get(booking_id)
        if not booking:
            raise NotFound("الحجز غير موجود", f"Booking {booking_id} not found")
        return await self.logs.get_by_booking(booking_id)

    async def list_media(self, user: User, booking_id: Optional[int] = None, upload_status: Optional[str] = None):
        owner = None if user.is_admin else user.id
        return await self.media.search(owner, booking_id, upload_status)

    async def review_media(
        self,
        media_id: int,
        admin: User,
        upload_status: str,
        admin_notes: Optional[str] = None,
    ) -> CampaignMedia:
        media = await self.media.get(media_id)
        if not media:
            raise NotFound("الملف غير موجود", f"Campaign media {media_id} not found")

        status = MediaReviewStatus(upload_status)
        previous = media.upload_status
        media.upload_status = status.value
        media.upload_status_ar = MEDIA_STATUS_AR[status]
        media.admin_notes = admin_notes
        media.reviewed_at = datetime.utcnow()
        media.reviewed_by = admin.id

        booking = await self.bookings.get(media.booking_id)
        await self._log(booking, "media_reviewed", admin, previous, status.value, notes=admin_notes)
        await self.db.commit()
        return media
