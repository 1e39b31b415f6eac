# backend/app/db/models/user.py
from sqlalchemy import Column, String, Boolean, Integer, DateTime
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class User(BaseModel):
    """Merchant (`business`) or administrator account"""
    __tablename__ = "users"

    username = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)

    # Business profile
    business_name = Column(String(255), nullable=True)
    business_city = Column(String(100), nullable=True)
    business_phone = Column(String(50), nullable=True)

    role = Column(String(20), default="business", nullable=False)  # business, admin

    # Subscription snapshot, kept in sync by the subscription manager
    subscription_plan = Column(String(100), default="free", nullable=False)
    subscription_expiry = Column(DateTime, nullable=True)
    offer_limit = Column(Integer, default=3, nullable=False)

    # Status
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime, nullable=True)

    # Relationships
    bookings = relationship("ScreenBooking", back_populates="merchant", foreign_keys="ScreenBooking.merchant_id")
    subscriptions = relationship("MerchantSubscription", back_populates="merchant")
    offers = relationship("Offer", back_populates="merchant")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
