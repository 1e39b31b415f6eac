from sqlalchemy import (
    Column, String, Integer, Boolean, Numeric, Text, Date, DateTime, JSON, ForeignKey, Index, text,
)
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class SubscriptionPlan(BaseModel):
    """Priced tier governing a merchant's offer and screen quotas"""
    __tablename__ = "subscription_plans"

    name = Column(String(100), nullable=False, unique=True)
    name_ar = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    description_ar = Column(Text, nullable=True)

    price = Column(Numeric(10, 2), nullable=False)  # SAR
    currency = Column(String(3), default="SAR", nullable=False)
    billing_period = Column(String(20), default="monthly", nullable=False)

    # Plan limits
    offer_limit = Column(Integer, default=3, nullable=False)
    screen_limit = Column(Integer, default=0, nullable=False)
    features = Column(JSON, default=list)

    is_active = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)


class MerchantSubscription(BaseModel):
    """A subscription period linking a merchant to a plan"""
    __tablename__ = "merchant_subscriptions"
    __table_args__ = (
        # At most one active subscription per merchant
        Index(
            "uq_merchant_subscriptions_active",
            "merchant_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    merchant_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_id = Column(Integer, ForeignKey("subscription_plans.id", ondelete="CASCADE"), nullable=False)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=True)

    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String(20), default="active", nullable=False)  # active, cancelled, expired
    auto_renew = Column(Boolean, default=True, nullable=False)
    payment_method = Column(String(50), nullable=True)

    cancelled_at = Column(DateTime, nullable=True)
    cancel_reason = Column(Text, nullable=True)

    # Relationships
    merchant = relationship("User", back_populates="subscriptions")
    plan = relationship("SubscriptionPlan")
