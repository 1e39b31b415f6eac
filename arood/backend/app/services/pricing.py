# backend/app/services/pricing.py
"""
Booking price calculation.

All money is Decimal, quantized to halalas with ROUND_HALF_UP. A booking's end
date is inclusive, so a booking from June 1 to June 3 covers three days.
"""
import math
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from app.core.constants import DurationType, MONEY_QUANT, VAT_RATE, PRICE_TOLERANCE
from app.core.exceptions import ValidationFailed
from app.db.models.screen import ScreenLocation, ScreenPricingOption

SECONDS_PER_HOUR = 3600
SECONDS_PER_DAY = 86400


@dataclass
class PriceQuote:
    unit_price: Decimal
    units: int
    duration_days: int
    number_of_screens: int
    total: Decimal
    duration_type: str = DurationType.DAY.value


def quantize_money(value) -> Decimal:
    return Decimal(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def validate_range(start: datetime, end: datetime) -> None:
    if start > end:
        raise ValidationFailed(
            "تاريخ البداية يجب أن يكون قبل تاريخ النهاية",
            "start_date must not be after end_date",
            field="end_date",
        )


def duration_days(start: datetime, end: datetime) -> int:
    """Number of calendar days covered, end inclusive"""
    validate_range(start, end)
    seconds = (end - start).total_seconds()
    return math.ceil(seconds / SECONDS_PER_DAY) + 1


def duration_units(duration_type: str, start: datetime, end: datetime) -> int:
    """Billable units of a pricing option for the range"""
    days = duration_days(start, end)
    if duration_type == DurationType.HOUR.value:
        hours = (end - start).total_seconds() / SECONDS_PER_HOUR
        return max(1, math.ceil(hours))
    if duration_type == DurationType.WEEK.value:
        return math.ceil(days / 7)
    return days


def calculate_total(unit_price, units: int, number_of_screens: int = 1) -> Decimal:
    return quantize_money(Decimal(units) * Decimal(unit_price) * Decimal(number_of_screens))


def calculate_vat(subtotal) -> Decimal:
    """15% VAT, rounded half-up once on the tax amount"""
    return quantize_money(Decimal(subtotal) * VAT_RATE)


def totals_match(client_total, server_total: Decimal) -> bool:
    return abs(Decimal(client_total) - server_total) <= PRICE_TOLERANCE


def quote_booking(
    location: ScreenLocation,
    start: datetime,
    end: datetime,
    number_of_screens: Optional[int] = None,
    pricing_option: Optional[ScreenPricingOption] = None,
) -> PriceQuote:
    """
    Price a booking request.

    Uses the pricing option's price per unit when one is selected, otherwise
    the location's daily price per day. Raises ValidationFailed when the
    screen count or the option's duration bounds are not met.
    """
    screens = 1 if number_of_screens is None else number_of_screens
    if screens < 1 or screens > location.number_of_screens:
        raise ValidationFailed(
            f"عدد الشاشات يجب أن يكون بين 1 و {location.number_of_screens}",
            f"number_of_screens must be between 1 and {location.number_of_screens}",
            field="number_of_screens",
        )

    days = duration_days(start, end)

    if pricing_option is None:
        return PriceQuote(
            unit_price=quantize_money(location.daily_price),
            units=days,
            duration_days=days,
            number_of_screens=screens,
            total=calculate_total(location.daily_price, days, screens),
        )

    units = duration_units(pricing_option.duration_type, start, end)
    minimum = pricing_option.minimum_duration or 1
    maximum = pricing_option.maximum_duration
    if units < minimum or (maximum is not None and units > maximum):
        bounds = f"{minimum}-{maximum}" if maximum is not None else f">= {minimum}"
        raise ValidationFailed(
            f"مدة الحجز خارج الحدود المسموحة ({bounds} {pricing_option.duration_type_ar})",
            f"Duration of {units} {pricing_option.duration_type}(s) is outside the allowed range {bounds}",
            field="pricing_option_id",
        )

    return PriceQuote(
        unit_price=quantize_money(pricing_option.price),
        units=units,
        duration_days=days,
        number_of_screens=screens,
        total=calculate_total(pricing_option.price, units, screens),
        duration_type=pricing_option.duration_type,
    )
