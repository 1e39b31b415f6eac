from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, ForeignKey
from app.db.base import BaseModel


class MerchantNotification(BaseModel):
    """In-app notification, optionally mirrored by email"""
    __tablename__ = "merchant_notifications"

    merchant_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("screen_bookings.id", ondelete="SET NULL"), nullable=True)

    type = Column(String(50), nullable=False)  # booking_approved, booking_rejected, invoice_issued, ...
    title = Column(String(255), nullable=False)
    title_ar = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    message_ar = Column(Text, nullable=False)
    priority = Column(String(10), default="normal", nullable=False)  # low, normal, high, urgent

    is_read = Column(Boolean, default=False, nullable=False)
    read_at = Column(DateTime, nullable=True)
    email_sent = Column(Boolean, default=False, nullable=False)
    email_sent_at = Column(DateTime, nullable=True)
