from sqlalchemy import Column, String, Integer, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.base import BaseModel


class CampaignMedia(BaseModel):
    """Creative file uploaded for a booking"""
    __tablename__ = "campaign_media"

    booking_id = Column(Integer, ForeignKey("screen_bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    merchant_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    file_name = Column(String(255), nullable=False)
    original_file_name = Column(String(255), nullable=False)
    file_type = Column(String(10), nullable=False)  # image, video
    file_size = Column(Integer, nullable=False)  # bytes
    file_path = Column(Text, nullable=False)
    mime_type = Column(String(50), nullable=False)

    upload_status = Column(String(20), default="pending", nullable=False)
    upload_status_ar = Column(String(50), default="قيد المراجعة", nullable=False)
    admin_notes = Column(Text, nullable=True)

    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    reviewed_at = Column(DateTime, nullable=True)
    reviewed_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    booking = relationship("ScreenBooking", back_populates="media")
