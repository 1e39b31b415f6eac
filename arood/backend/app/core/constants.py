# backend/app/core/constants.py
from decimal import Decimal
from enum import Enum
from typing import Dict


class UserRole(str, Enum):
    BUSINESS = "business"
    ADMIN = "admin"


class BookingStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


class InvoiceStatus(str, Enum):
    UNPAID = "unpaid"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


class InvoiceType(str, Enum):
    BOOKING = "booking"
    SUBSCRIPTION = "subscription"


class SubscriptionStatus(str, Enum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class DurationType(str, Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"


class MediaType(str, Enum):
    IMAGE = "image"
    VIDEO = "video"


class MediaReviewStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class NotificationType(str, Enum):
    BOOKING_APPROVED = "booking_approved"
    BOOKING_REJECTED = "booking_rejected"
    BOOKING_CANCELLED = "booking_cancelled"
    INVOICE_ISSUED = "invoice_issued"
    INVOICE_PAID = "invoice_paid"
    SUBSCRIPTION_ACTIVATED = "subscription_activated"
    SUBSCRIPTION_CANCELLED = "subscription_cancelled"


class PaymentStatus(str, Enum):
    """Moyasar payment states"""
    INITIATED = "initiated"
    PAID = "paid"
    FAILED = "failed"
    AUTHORIZED = "authorized"
    CAPTURED = "captured"


# Saudi VAT
VAT_RATE = Decimal("0.15")
MONEY_QUANT = Decimal("0.01")
# Allowed drift between a client-computed total and the server total
PRICE_TOLERANCE = Decimal("0.01")

CURRENCY = "SAR"
BOOKING_INVOICE_DUE_DAYS = 30
SUBSCRIPTION_INVOICE_DUE_DAYS = 7

FREE_PLAN_NAME = "free"
FREE_PLAN_OFFER_LIMIT = 3

# Arabic labels stored alongside status columns
BOOKING_STATUS_AR: Dict[str, str] = {
    BookingStatus.PENDING: "معلق",
    BookingStatus.APPROVED: "مقبول",
    BookingStatus.REJECTED: "مرفوض",
    BookingStatus.CANCELLED: "ملغي",
}

INVOICE_STATUS_AR: Dict[str, str] = {
    InvoiceStatus.UNPAID: "غير مدفوع",
    InvoiceStatus.PAID: "مدفوع",
    InvoiceStatus.OVERDUE: "متأخر",
    InvoiceStatus.CANCELLED: "ملغي",
}

MEDIA_STATUS_AR: Dict[str, str] = {
    MediaReviewStatus.PENDING: "قيد المراجعة",
    MediaReviewStatus.APPROVED: "موافق عليه",
    MediaReviewStatus.REJECTED: "مرفوض",
}

DURATION_TYPE_AR: Dict[str, str] = {
    DurationType.HOUR: "ساعة",
    DurationType.DAY: "يوم",
    DurationType.WEEK: "أسبوع",
}

# Booking log actions (action, action_ar)
BOOKING_LOG_ACTIONS: Dict[str, str] = {
    "created": "إنشاء الحجز",
    "status_change": "تغيير الحالة",
    "note_added": "إضافة ملاحظة",
    "media_uploaded": "رفع ملف إعلاني",
    "media_reviewed": "مراجعة ملف إعلاني",
    "invoice_generated": "إصدار فاتورة",
}

# Upload allowlist: mime type -> media type
ALLOWED_MEDIA_TYPES: Dict[str, MediaType] = {
    "image/jpeg": MediaType.IMAGE,
    "image/jpg": MediaType.IMAGE,
    "image/png": MediaType.IMAGE,
    "video/mp4": MediaType.VIDEO,
}
