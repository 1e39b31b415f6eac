# backend/app/db/repositories/media_repository.py
from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.campaign_media import CampaignMedia
from app.db.repositories.base import BaseRepository


class CampaignMediaRepository(BaseRepository[CampaignMedia]):
    """Repository for CampaignMedia operations"""

    def __init__(self, session: AsyncSession):
        super().__init__(CampaignMedia, session)

    async def search(
        self,
        merchant_id: Optional[int] = None,
        booking_id: Optional[int] = None,
        upload_status: Optional[str] = None,
    ) -> List[CampaignMedia]:
        query = select(CampaignMedia)
        if merchant_id is not None:
            query = query.where(CampaignMedia.merchant_id == merchant_id)
        if booking_id is not None:
            query = query.where(CampaignMedia.booking_id == booking_id)
        if upload_status:
            query = query.where(CampaignMedia.upload_status == upload_status)
        result = await self.session.execute(
            query.order_by(CampaignMedia.uploaded_at.desc(), CampaignMedia.id.desc())
        )
        return list(result.scalars().all())
