# tests/test_pricing.py
"""
Pricing tests
Tests: duration counting, pricing option units and bounds, VAT rounding
"""

import pytest
from datetime import datetime
from decimal import Decimal

from app.core.exceptions import ValidationFailed
from app.db.models.screen import ScreenPricingOption
from app.services.pricing import (
    calculate_total,
    calculate_vat,
    duration_days,
    duration_units,
    quote_booking,
    totals_match,
)
from conftest import make_location


def option(duration_type: str, price: str, minimum: int = 1, maximum=None) -> ScreenPricingOption:
    return ScreenPricingOption(
        id=7,
        location_id=1,
        duration_type=duration_type,
        duration_type_ar=duration_type,
        price=Decimal(price),
        minimum_duration=minimum,
        maximum_duration=maximum,
        is_active=True,
    )


class TestDuration:
    """End dates are inclusive"""

    def test_three_day_booking(self):
        assert duration_days(datetime(2024, 6, 1), datetime(2024, 6, 3)) == 3

    def test_zero_length_counts_as_one(self):
        assert duration_days(datetime(2024, 6, 1, 9), datetime(2024, 6, 1, 9)) == 1

    def test_partial_day_rounds_up(self):
        assert duration_days(datetime(2024, 6, 1, 9), datetime(2024, 6, 2, 10)) == 3

    def test_start_after_end_rejected(self):
        with pytest.raises(ValidationFailed) as exc:
            duration_days(datetime(2024, 6, 5), datetime(2024, 6, 1))
        assert exc.value.field == "end_date"

    def test_hour_units(self):
        assert duration_units("hour", datetime(2024, 6, 1, 10), datetime(2024, 6, 1, 13, 30)) == 4

    def test_hour_units_at_least_one(self):
        assert duration_units("hour", datetime(2024, 6, 1, 10), datetime(2024, 6, 1, 10)) == 1

    def test_week_units(self):
        assert duration_units("week", datetime(2024, 6, 1), datetime(2024, 6, 7)) == 1
        assert duration_units("week", datetime(2024, 6, 1), datetime(2024, 6, 10)) == 2


class TestQuote:
    """Server side booking price"""

    def test_daily_price_scenario(self):
        """100 SAR a day, one screen, June 1 to June 3"""
        location = make_location(daily_price=Decimal("100.00"), number_of_screens=1)

        quote = quote_booking(location, datetime(2024, 6, 1), datetime(2024, 6, 3))

        assert quote.duration_days == 3
        assert quote.units == 3
        assert quote.total == Decimal("300.00")

    def test_price_is_deterministic(self):
        location = make_location(daily_price=Decimal("87.50"), number_of_screens=3)
        start, end = datetime(2024, 6, 1), datetime(2024, 6, 4)

        totals = {quote_booking(location, start, end, number_of_screens=2).total for _ in range(5)}

        assert totals == {Decimal("4") * Decimal("87.50") * 2}

    def test_screens_above_location_capacity_rejected(self):
        location = make_location(number_of_screens=2)

        with pytest.raises(ValidationFailed) as exc:
            quote_booking(location, datetime(2024, 6, 1), datetime(2024, 6, 3), number_of_screens=3)
        assert exc.value.field == "number_of_screens"

    def test_weekly_option_price(self):
        location = make_location()

        quote = quote_booking(
            location,
            datetime(2024, 6, 1),
            datetime(2024, 6, 10),
            number_of_screens=1,
            pricing_option=option("week", "500.00"),
        )

        assert quote.units == 2
        assert quote.total == Decimal("1000.00")
        assert quote.duration_type == "week"

    def test_option_maximum_enforced(self):
        location = make_location()

        with pytest.raises(ValidationFailed) as exc:
            quote_booking(
                location,
                datetime(2024, 6, 1, 8),
                datetime(2024, 6, 1, 20),
                pricing_option=option("hour", "50.00", minimum=1, maximum=8),
            )
        assert exc.value.field == "pricing_option_id"

    def test_option_minimum_enforced(self):
        location = make_location()

        with pytest.raises(ValidationFailed):
            quote_booking(
                location,
                datetime(2024, 6, 1),
                datetime(2024, 6, 2),
                pricing_option=option("day", "120.00", minimum=3),
            )


class TestMoney:
    """VAT and totals"""

    def test_vat_on_whole_amount(self):
        assert calculate_vat(Decimal("500.00")) == Decimal("75.00")

    def test_vat_rounds_half_up(self):
        assert calculate_vat(Decimal("33.30")) == Decimal("5.00")
        assert calculate_vat(Decimal("0.10")) == Decimal("0.02")

    def test_total_quantized(self):
        assert calculate_total(Decimal("33.333"), 3, 1) == Decimal("100.00")

    def test_client_total_tolerance(self):
        assert totals_match(Decimal("300.01"), Decimal("300.00"))
        assert not totals_match(Decimal("299.98"), Decimal("300.00"))
