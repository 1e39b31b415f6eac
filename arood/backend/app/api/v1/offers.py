# backend/app/api/v1/offers.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.api.dependencies import check_offer_quota, get_current_merchant
from app.core.logging import logger
from app.db.database import get_db
from app.db.models.user import User
from app.db.repositories.offer_repository import OfferRepository
from app.schemas.booking import to_naive_utc
from app.schemas.offer import Offer, OfferCreate

router = APIRouter()


@router.get("/offers", response_model=List[Offer])
async def list_offers(
    city: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    db: AsyncSession = Depends(get_db)
):
    """Active offers"""
    return await OfferRepository(db).search(city=city, skip=skip, limit=limit)


@router.get("/merchant/offers", response_model=List[Offer])
async def list_my_offers(
    current_user: User = Depends(get_current_merchant),
    db: AsyncSession = Depends(get_db)
):
    """All offers of the current merchant"""
    return await OfferRepository(db).search(merchant_id=current_user.id, active_only=False)


@router.post("/merchant/offers", response_model=Offer, status_code=status.HTTP_201_CREATED)
async def create_offer(
    offer_in: OfferCreate,
    merchant: User = Depends(check_offer_quota),
    db: AsyncSession = Depends(get_db)
):
    """Publish an offer within the plan's offer limit"""
    data = offer_in.model_dump()
    for key in ("start_date", "end_date"):
        if data[key] is not None:
            data[key] = to_naive_utc(data[key])

    offer = await OfferRepository(db).create({**data, "merchant_id": merchant.id, "is_active": True})
    await db.commit()

    logger.info(f"Offer {offer.id} created", extra={"merchant_id": merchant.id})
    return offer
