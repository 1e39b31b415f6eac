from sqlalchemy import Column, String, Integer, Boolean, Numeric, Text, DateTime, ForeignKey, CheckConstraint, Index
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class ScreenBooking(BaseModel):
    """
    A merchant's request to show media at a screen location.

    Status must be one of: pending, approved, rejected, cancelled.
    Two approved bookings of the same location never overlap; this is
    re-checked under a row lock when a booking is approved.
    """
    __tablename__ = "screen_bookings"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'rejected', 'cancelled')",
            name="screen_bookings_status_check",
        ),
        CheckConstraint("end_date_time >= start_date_time", name="screen_bookings_range_check"),
        Index("ix_screen_bookings_location_status", "location_id", "status"),
    )

    merchant_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    location_id = Column(Integer, ForeignKey("screen_locations.id", ondelete="CASCADE"), nullable=False, index=True)
    pricing_option_id = Column(Integer, ForeignKey("screen_pricing_options.id", ondelete="SET NULL"), nullable=True)

    start_date_time = Column(DateTime, nullable=False)
    end_date_time = Column(DateTime, nullable=False)
    duration = Column(Integer, nullable=False)  # units of the pricing option, days otherwise
    number_of_screens = Column(Integer, default=1, nullable=False)
    total_price = Column(Numeric(10, 2), nullable=False)

    status = Column(String(20), default="pending", nullable=False, index=True)
    status_ar = Column(String(20), default="معلق", nullable=False)

    media_url = Column(Text, nullable=True)
    media_type = Column(String(10), nullable=True)  # image, video

    request_notes = Column(Text, nullable=True)
    admin_notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)

    invoice_generated = Column(Boolean, default=False, nullable=False)
    invoice_number = Column(String(64), nullable=True)

    approved_at = Column(DateTime, nullable=True)
    rejected_at = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)

    # Relationships
    merchant = relationship("User", back_populates="bookings", foreign_keys=[merchant_id])
    location = relationship("ScreenLocation", back_populates="bookings")
    pricing_option = relationship("ScreenPricingOption")
    logs = relationship("BookingLog", back_populates="booking", order_by="BookingLog.id")
    media = relationship("CampaignMedia", back_populates="booking")
    invoices = relationship("Invoice", back_populates="booking")
