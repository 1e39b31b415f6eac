from sqlalchemy import Column, String, Integer, Numeric, Text, DateTime, JSON, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from app.db.base import BaseModel


class Invoice(BaseModel):
    """
    Billing document for an approved screen booking or a subscription purchase.

    total_amount = subtotal + tax_amount. Invoices are never deleted; only
    payment processing moves them to paid or cancelled.
    """
    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint(
            "status IN ('unpaid', 'paid', 'overdue', 'cancelled')",
            name="invoices_status_check",
        ),
        CheckConstraint(
            "invoice_type IN ('booking', 'subscription')",
            name="invoices_type_check",
        ),
    )

    invoice_number = Column(String(64), unique=True, nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("screen_bookings.id", ondelete="CASCADE"), nullable=True, index=True)
    plan_id = Column(Integer, ForeignKey("subscription_plans.id"), nullable=True)
    merchant_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    invoice_type = Column(String(20), default="booking", nullable=False)

    issue_date = Column(DateTime, default=datetime.utcnow, nullable=False)
    due_date = Column(DateTime, nullable=False)

    subtotal = Column(Numeric(10, 2), nullable=False)
    tax_amount = Column(Numeric(10, 2), default=0, nullable=False)
    total_amount = Column(Numeric(10, 2), nullable=False)
    currency = Column(String(3), default="SAR", nullable=False)

    status = Column(String(20), default="unpaid", nullable=False, index=True)
    status_ar = Column(String(20), default="غير مدفوع", nullable=False)
    paid_at = Column(DateTime, nullable=True)
    payment_method = Column(String(50), nullable=True)

    # Moyasar fields
    moyasar_payment_id = Column(String(255), unique=True, nullable=True)
    moyasar_transaction_id = Column(String(255), nullable=True)
    moyasar_status = Column(String(50), nullable=True)  # initiated, paid, failed, authorized, captured
    moyasar_metadata = Column(JSON, nullable=True)
    failure_reason = Column(Text, nullable=True)

    notes = Column(Text, nullable=True)

    # Relationships
    booking = relationship("ScreenBooking", back_populates="invoices")
    plan = relationship("SubscriptionPlan")
    merchant = relationship("User")
