# backend/app/api/v1/screens.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from decimal import Decimal
from typing import List, Optional

from app.api.dependencies import get_current_merchant
from app.core.exceptions import NotFound
from app.db.database import get_db
from app.db.models.screen import ScreenLocation as ScreenLocationModel
from app.db.models.user import User
from app.db.repositories.screen_repository import (
    ScreenLocationRepository,
    ScreenPricingOptionRepository,
    LocationReviewRepository,
)
from app.schemas.screen import (
    ScreenLocation,
    ScreenLocationDetail,
    ScreenLocationList,
    PricingOption,
    Review,
    ReviewCreate,
)

router = APIRouter()


def location_detail(location: ScreenLocationModel, avg_rating: float, review_count: int) -> ScreenLocationDetail:
    return ScreenLocationDetail(
        **ScreenLocation.model_validate(location).model_dump(),
        pricing_options=[
            PricingOption.model_validate(option) for option in location.pricing_options if option.is_active
        ],
        avg_rating=round(avg_rating, 2),
        review_count=review_count,
    )


@router.get("/screen-locations", response_model=ScreenLocationList)
async def list_screen_locations(
    city: Optional[str] = None,
    screen_type: Optional[str] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    min_rating: Optional[float] = None,
    db: AsyncSession = Depends(get_db)
):
    """List active screen locations"""
    rows = await ScreenLocationRepository(db).search(
        city=city,
        screen_type=screen_type,
        min_price=min_price,
        max_price=max_price,
        min_rating=min_rating,
    )
    locations = [location_detail(location, avg, count) for location, avg, count in rows]
    return ScreenLocationList(locations=locations, total=len(locations))


@router.get("/screen-locations/{location_id}", response_model=ScreenLocationDetail)
async def get_screen_location(
    location_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Get a location with its pricing options and rating"""
    location_repo = ScreenLocationRepository(db)
    location = await location_repo.get_with_options(location_id)
    if not location or not location.is_active:
        raise NotFound("موقع الشاشة غير موجود", f"Screen location {location_id} not found")

    avg_rating, review_count = await location_repo.rating_summary(location_id)
    return location_detail(location, avg_rating, review_count)


@router.get("/screen-locations/{location_id}/reviews", response_model=List[Review])
async def list_location_reviews(
    location_id: int,
    db: AsyncSession = Depends(get_db)
):
    """Reviews of a location, newest first"""
    return await LocationReviewRepository(db).get_by_location(location_id)


@router.post(
    "/screen-locations/{location_id}/reviews",
    response_model=Review,
    status_code=status.HTTP_201_CREATED,
)
async def create_location_review(
    location_id: int,
    review_in: ReviewCreate,
    current_user: User = Depends(get_current_merchant),
    db: AsyncSession = Depends(get_db)
):
    """Rate a screen location"""
    location = await ScreenLocationRepository(db).get(location_id)
    if not location:
        raise NotFound("موقع الشاشة غير موجود", f"Screen location {location_id} not found")

    review = await LocationReviewRepository(db).create({
        "location_id": location_id,
        "merchant_id": current_user.id,
        "overall_rating": review_in.overall_rating,
        "comment": review_in.comment,
    })
    await db.commit()
    return review


@router.get("/screen-pricing-options", response_model=List[PricingOption])
async def list_pricing_options(
    location_id: Optional[int] = None,
    db: AsyncSession = Depends(get_db)
):
    """Active pricing options, optionally for one location"""
    return await ScreenPricingOptionRepository(db).list_options(location_id=location_id)
