# backend/app/db/repositories/invoice_repository.py
from datetime import datetime
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.invoice import Invoice
from app.db.repositories.base import BaseRepository


class InvoiceRepository(BaseRepository[Invoice]):
    """Repository for Invoice operations. Invoices are never deleted."""

    def __init__(self, session: AsyncSession):
        super().__init__(Invoice, session)

    async def get_by_number(self, invoice_number: str) -> Optional[Invoice]:
        result = await self.session.execute(
            select(Invoice).where(Invoice.invoice_number == invoice_number)
        )
        return result.scalar_one_or_none()

    async def get_by_payment_id(self, payment_id: str, lock: bool = False) -> Optional[Invoice]:
        """Get the invoice a Moyasar payment was created for"""
        query = select(Invoice).where(Invoice.moyasar_payment_id == payment_id)
        if lock:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_by_booking(self, booking_id: int) -> List[Invoice]:
        result = await self.session.execute(
            select(Invoice).where(Invoice.booking_id == booking_id).order_by(Invoice.id)
        )
        return list(result.scalars().all())

    async def search(
        self,
        merchant_id: Optional[int] = None,
        status: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Invoice]:
        """List invoices, newest first, filtered by owner, status and issue date range"""
        query = select(Invoice)
        if merchant_id is not None:
            query = query.where(Invoice.merchant_id == merchant_id)
        if status:
            query = query.where(Invoice.status == status)
        if start_date is not None:
            query = query.where(Invoice.issue_date >= start_date)
        if end_date is not None:
            query = query.where(Invoice.issue_date <= end_date)

        result = await self.session.execute(
            query.order_by(Invoice.issue_date.desc(), Invoice.id.desc()).offset(skip).limit(limit)
        )
        return list(result.scalars().all())
