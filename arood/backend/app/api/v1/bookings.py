# backend/app/api/v1/bookings.py
from fastapi import APIRouter, Depends, File, Request, UploadFile, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile as StarletteUploadFile
from typing import List, Optional

from app.api.dependencies import (
    get_current_user,
    get_current_merchant,
    get_current_admin,
    get_booking_service,
)
from app.core.constants import BookingStatus, MediaReviewStatus
from app.core.exceptions import ValidationFailed
from app.db.database import get_db
from app.db.models.user import User
from app.schemas.booking import (
    AdminNotesUpdate,
    ApprovalResult,
    AvailabilityRequest,
    AvailabilityResponse,
    Booking,
    BookingApprove,
    BookingCreate,
    BookingLog,
    BookingReject,
)
from app.schemas.invoice import Invoice
from app.schemas.media import CampaignMedia, MediaReview
from app.services.availability import AvailabilityChecker
from app.services.booking_service import BookingService

router = APIRouter()


async def parse_booking_request(request: Request):
    """
    Read a booking request sent as JSON or as multipart form data with an
    optional `media_file` part.
    """
    upload = None
    content_type = request.headers.get("content-type", "")

    if content_type.startswith("multipart/form-data"):
        form = await request.form()
        fields = {}
        for key, value in form.items():
            if key == "media_file":
                upload = value
            elif value != "":
                fields[key] = value
        if upload is not None and not isinstance(upload, StarletteUploadFile):
            raise ValidationFailed("يجب إرفاق ملف صالح", "media_file must be a file", field="media_file")
    else:
        try:
            fields = await request.json()
        except ValueError:
            raise ValidationFailed("صيغة الطلب غير صالحة", "Request body must be valid JSON")

    try:
        booking_in = BookingCreate.model_validate(fields)
    except ValidationError as e:
        raise RequestValidationError(e.errors())

    return booking_in, upload


@router.post("/check-availability", response_model=AvailabilityResponse)
async def check_availability(
    availability_in: AvailabilityRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Check whether a location is free for a date range"""
    result = await AvailabilityChecker(db).check(
        availability_in.location_id,
        availability_in.start_date,
        availability_in.end_date,
        exclude_booking_id=availability_in.exclude_booking_id,
    )
    return AvailabilityResponse(
        is_available=result.is_available,
        conflicting_bookings=[Booking.model_validate(b) for b in result.conflicting_bookings],
    )


@router.post("/screen-bookings", response_model=Booking, status_code=status.HTTP_201_CREATED)
async def create_booking(
    request: Request,
    current_user: User = Depends(get_current_merchant),
    service: BookingService = Depends(get_booking_service)
):
    """Create a pending screen booking (JSON, or multipart with media_file)"""
    booking_in, upload = await parse_booking_request(request)
    return await service.create_booking(current_user, booking_in, upload)


@router.get("/screen-bookings", response_model=List[Booking])
async def list_bookings(
    status: Optional[BookingStatus] = None,
    location_id: Optional[int] = None,
    merchant_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    """Merchants see their own bookings; admins see all"""
    return await service.list_for_user(
        current_user,
        status=status.value if status else None,
        location_id=location_id,
        merchant_id=merchant_id,
        skip=skip,
        limit=limit,
    )


@router.get("/screen-bookings/{booking_id}", response_model=Booking)
async def get_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    """Get booking details"""
    return await service.get_for_user(booking_id, current_user)


@router.post("/screen-bookings/{booking_id}/approve", response_model=ApprovalResult)
async def approve_booking(
    booking_id: int,
    approve_in: Optional[BookingApprove] = None,
    admin: User = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service)
):
    """Approve a pending booking and issue its invoice"""
    booking, invoice = await service.approve(
        booking_id, admin, admin_notes=approve_in.admin_notes if approve_in else None
    )
    return ApprovalResult(booking=Booking.model_validate(booking), invoice=Invoice.model_validate(invoice))


@router.post("/screen-bookings/{booking_id}/reject", response_model=Booking)
async def reject_booking(
    booking_id: int,
    reject_in: BookingReject,
    admin: User = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service)
):
    """Reject a pending booking"""
    return await service.reject(booking_id, admin, reject_in.rejection_reason, reject_in.admin_notes)


@router.post("/screen-bookings/{booking_id}/cancel", response_model=Booking)
async def cancel_booking(
    booking_id: int,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    """Cancel a pending booking"""
    return await service.cancel(booking_id, current_user)


@router.patch("/screen-bookings/{booking_id}/admin-notes", response_model=Booking)
async def update_admin_notes(
    booking_id: int,
    notes_in: AdminNotesUpdate,
    admin: User = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service)
):
    """Update admin notes on a booking in any status"""
    return await service.update_admin_notes(booking_id, admin, notes_in.admin_notes)


@router.get("/screen-bookings/{booking_id}/logs", response_model=List[BookingLog])
async def get_booking_logs(
    booking_id: int,
    admin: User = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service)
):
    """Audit trail of a booking"""
    return await service.get_logs(booking_id)


@router.post(
    "/screen-bookings/{booking_id}/media",
    response_model=CampaignMedia,
    status_code=status.HTTP_201_CREATED,
)
async def upload_booking_media(
    booking_id: int,
    media_file: UploadFile = File(...),
    current_user: User = Depends(get_current_merchant),
    service: BookingService = Depends(get_booking_service)
):
    """Upload creative media for a pending booking"""
    return await service.upload_media(booking_id, current_user, media_file)


@router.get("/campaign-media", response_model=List[CampaignMedia])
async def list_campaign_media(
    booking_id: Optional[int] = None,
    upload_status: Optional[MediaReviewStatus] = None,
    current_user: User = Depends(get_current_user),
    service: BookingService = Depends(get_booking_service)
):
    """Merchants see their own media; admins see all"""
    return await service.list_media(
        current_user,
        booking_id=booking_id,
        upload_status=upload_status.value if upload_status else None,
    )


@router.post("/campaign-media/{media_id}/review", response_model=CampaignMedia)
async def review_campaign_media(
    media_id: int,
    review_in: MediaReview,
    admin: User = Depends(get_current_admin),
    service: BookingService = Depends(get_booking_service)
):
    """Approve or reject uploaded media"""
    return await service.review_media(media_id, admin, review_in.upload_status, review_in.admin_notes)
