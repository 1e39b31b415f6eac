from sqlalchemy import Column, String, Integer, Boolean, Text, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from app.db.base import BaseModel


class Offer(BaseModel):
    """Discount or promotion published by a merchant"""
    __tablename__ = "offers"
    __table_args__ = (
        CheckConstraint(
            "discount_percentage IS NULL OR (discount_percentage BETWEEN 1 AND 100)",
            name="offers_discount_check",
        ),
    )

    merchant_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    title_ar = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    description_ar = Column(Text, nullable=True)
    discount_percentage = Column(Integer, nullable=True)
    city = Column(String(100), nullable=True)

    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    merchant = relationship("User", back_populates="offers")
