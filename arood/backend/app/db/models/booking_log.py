from sqlalchemy import Column, String, ForeignKey, Integer, Text, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.base import Base


class BookingLog(Base):
    """Append-only audit trail of booking actions. Rows are never updated."""
    __tablename__ = "booking_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey("screen_bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    actor_id = Column(Integer, ForeignKey("users.id"), nullable=True, index=True)

    # Action details
    action = Column(String(50), nullable=False, index=True)  # created, status_change, note_added, ...
    action_ar = Column(String(100), nullable=False)
    previous_value = Column(Text, nullable=True)
    new_value = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)

    timestamp = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    booking = relationship("ScreenBooking", back_populates="logs")
    actor = relationship("User")
