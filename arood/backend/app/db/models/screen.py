from sqlalchemy import Column, String, Integer, Boolean, Numeric, Text, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class ScreenLocation(BaseModel):
    """A physical venue hosting one or more advertising screens"""
    __tablename__ = "screen_locations"

    name = Column(String(255), nullable=False)
    name_ar = Column(String(255), nullable=False)
    address = Column(Text, nullable=False)
    address_ar = Column(Text, nullable=False)
    city = Column(String(100), nullable=False, index=True)
    city_ar = Column(String(100), nullable=False)
    neighborhood = Column(String(100), nullable=True)
    neighborhood_ar = Column(String(100), nullable=True)

    latitude = Column(Numeric(10, 8), nullable=False)
    longitude = Column(Numeric(11, 8), nullable=False)
    google_maps_link = Column(Text, nullable=True)

    working_hours = Column(String(100), default="9:00 AM - 12:00 AM")
    working_hours_ar = Column(String(100), default="9:00 ص - 12:00 ص")

    number_of_screens = Column(Integer, default=1, nullable=False)
    screen_type = Column(String(50), default="LED", nullable=False)  # TV, LED, Tablet
    screen_type_ar = Column(String(50), default="شاشة LED", nullable=False)
    daily_price = Column(Numeric(10, 2), nullable=False)

    special_notes = Column(Text, nullable=True)
    special_notes_ar = Column(Text, nullable=True)
    location_photo = Column(Text, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False, index=True)

    # Relationships
    pricing_options = relationship("ScreenPricingOption", back_populates="location", cascade="all, delete-orphan")
    bookings = relationship("ScreenBooking", back_populates="location")
    reviews = relationship("LocationReview", back_populates="location", cascade="all, delete-orphan")


class ScreenPricingOption(BaseModel):
    """Alternative price tier for a location (per hour, day or week)"""
    __tablename__ = "screen_pricing_options"
    __table_args__ = (
        CheckConstraint(
            "duration_type IN ('hour', 'day', 'week')",
            name="screen_pricing_options_duration_type_check",
        ),
    )

    location_id = Column(Integer, ForeignKey("screen_locations.id", ondelete="CASCADE"), nullable=False, index=True)
    duration_type = Column(String(10), nullable=False)
    duration_type_ar = Column(String(20), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    minimum_duration = Column(Integer, default=1, nullable=False)
    maximum_duration = Column(Integer, nullable=True)
    notes = Column(Text, nullable=True)
    notes_ar = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    location = relationship("ScreenLocation", back_populates="pricing_options")


class LocationReview(BaseModel):
    """Merchant rating of a screen location"""
    __tablename__ = "location_reviews"
    __table_args__ = (
        CheckConstraint("overall_rating BETWEEN 1 AND 5", name="location_reviews_rating_check"),
    )

    location_id = Column(Integer, ForeignKey("screen_locations.id", ondelete="CASCADE"), nullable=False, index=True)
    merchant_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    overall_rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)

    location = relationship("ScreenLocation", back_populates="reviews")
