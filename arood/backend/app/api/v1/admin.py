# backend/app/api/v1/admin.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.api.dependencies import get_current_admin
from app.core.constants import DURATION_TYPE_AR
from app.core.exceptions import NotFound, ValidationFailed
from app.core.logging import logger
from app.db.database import get_db
from app.db.models.user import User
from app.db.repositories.screen_repository import ScreenLocationRepository, ScreenPricingOptionRepository
from app.db.repositories.subscription_repository import SubscriptionPlanRepository
from app.schemas.screen import (
    ScreenLocation,
    ScreenLocationCreate,
    ScreenLocationUpdate,
    PricingOption,
    PricingOptionCreate,
    PricingOptionUpdate,
)
from app.schemas.subscription import Plan, PlanCreate, PlanUpdate

router = APIRouter()


def check_duration_bounds(minimum, maximum) -> None:
    if minimum is not None and maximum is not None and maximum < minimum:
        raise ValidationFailed(
            "الحد الأقصى للمدة يجب أن يكون أكبر من الحد الأدنى",
            "maximum_duration must not be less than minimum_duration",
            field="maximum_duration",
        )


# Screen locations

@router.get("/screen-locations", response_model=List[ScreenLocation])
async def admin_list_locations(
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """All locations including inactive ones"""
    return await ScreenLocationRepository(db).get_multi(limit=1000)


@router.post("/screen-locations", response_model=ScreenLocation, status_code=status.HTTP_201_CREATED)
async def create_location(
    location_in: ScreenLocationCreate,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create a screen location"""
    location = await ScreenLocationRepository(db).create(location_in.model_dump(exclude_none=True))
    await db.commit()
    logger.info(f"Screen location {location.id} created", extra={"user_id": admin.id})
    return location


@router.put("/screen-locations/{location_id}", response_model=ScreenLocation)
async def update_location(
    location_id: int,
    location_in: ScreenLocationUpdate,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Update a screen location"""
    location_repo = ScreenLocationRepository(db)
    location = await location_repo.get(location_id)
    if not location:
        raise NotFound("موقع الشاشة غير موجود", f"Screen location {location_id} not found")

    location = await location_repo.update(location, location_in.model_dump(exclude_unset=True))
    await db.commit()
    return location


@router.delete("/screen-locations/{location_id}", response_model=ScreenLocation)
async def deactivate_location(
    location_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Deactivate a screen location. Bookings keep referencing it."""
    location_repo = ScreenLocationRepository(db)
    location = await location_repo.get(location_id)
    if not location:
        raise NotFound("موقع الشاشة غير موجود", f"Screen location {location_id} not found")

    location = await location_repo.update(location, {"is_active": False})
    await db.commit()
    logger.info(f"Screen location {location_id} deactivated", extra={"user_id": admin.id})
    return location


# Pricing options

@router.post("/screen-pricing-options", response_model=PricingOption, status_code=status.HTTP_201_CREATED)
async def create_pricing_option(
    option_in: PricingOptionCreate,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Add a pricing option to a location"""
    location = await ScreenLocationRepository(db).get(option_in.location_id)
    if not location:
        raise NotFound("موقع الشاشة غير موجود", f"Screen location {option_in.location_id} not found")
    check_duration_bounds(option_in.minimum_duration, option_in.maximum_duration)

    data = option_in.model_dump()
    data["duration_type"] = option_in.duration_type.value
    data["duration_type_ar"] = DURATION_TYPE_AR[option_in.duration_type]
    option = await ScreenPricingOptionRepository(db).create(data)
    await db.commit()
    return option


@router.put("/screen-pricing-options/{option_id}", response_model=PricingOption)
async def update_pricing_option(
    option_id: int,
    option_in: PricingOptionUpdate,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Update a pricing option"""
    option_repo = ScreenPricingOptionRepository(db)
    option = await option_repo.get(option_id)
    if not option:
        raise NotFound("خيار التسعير غير موجود", f"Pricing option {option_id} not found")

    data = option_in.model_dump(exclude_unset=True)
    if option_in.duration_type is not None:
        data["duration_type"] = option_in.duration_type.value
        data["duration_type_ar"] = DURATION_TYPE_AR[option_in.duration_type]
    check_duration_bounds(
        data.get("minimum_duration", option.minimum_duration),
        data.get("maximum_duration", option.maximum_duration),
    )

    option = await option_repo.update(option, data)
    await db.commit()
    return option


@router.delete("/screen-pricing-options/{option_id}", response_model=PricingOption)
async def deactivate_pricing_option(
    option_id: int,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Deactivate a pricing option"""
    option_repo = ScreenPricingOptionRepository(db)
    option = await option_repo.get(option_id)
    if not option:
        raise NotFound("خيار التسعير غير موجود", f"Pricing option {option_id} not found")

    option = await option_repo.update(option, {"is_active": False})
    await db.commit()
    return option


# Subscription plans

@router.post("/subscription-plans", response_model=Plan, status_code=status.HTTP_201_CREATED)
async def create_plan(
    plan_in: PlanCreate,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Create a subscription plan"""
    plan_repo = SubscriptionPlanRepository(db)
    if await plan_repo.get_by_name(plan_in.name):
        raise ValidationFailed("اسم الباقة مستخدم مسبقاً", "Plan name already exists", field="name")

    plan = await plan_repo.create(plan_in.model_dump())
    await db.commit()
    return plan


@router.put("/subscription-plans/{plan_id}", response_model=Plan)
async def update_plan(
    plan_id: int,
    plan_in: PlanUpdate,
    admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Update a subscription plan. Existing subscribers keep their limits until renewal."""
    plan_repo = SubscriptionPlanRepository(db)
    plan = await plan_repo.get(plan_id)
    if not plan:
        raise NotFound("الباقة غير موجودة", f"Subscription plan {plan_id} not found")

    plan = await plan_repo.update(plan, plan_in.model_dump(exclude_unset=True))
    await db.commit()
    return plan
