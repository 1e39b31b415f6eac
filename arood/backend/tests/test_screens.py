# tests/test_screens.py
"""
Screen location tests
Tests: public catalogue, filters, reviews, admin maintenance
"""

import pytest
from fastapi import status
from decimal import Decimal

from conftest import add, make_location

LOCATION_IN = {
    "name": "Jeddah Corniche",
    "name_ar": "كورنيش جدة",
    "address": "Corniche Rd",
    "address_ar": "طريق الكورنيش",
    "city": "Jeddah",
    "city_ar": "جدة",
    "latitude": "21.54330000",
    "longitude": "39.17280000",
    "number_of_screens": 4,
    "screen_type": "LED",
    "daily_price": "250.00",
}


class TestCatalogue:
    """Public listing of active locations"""

    @pytest.mark.asyncio
    async def test_list_active_locations(self, client, session_factory, location):
        await add(session_factory, make_location(name="Closed Mall", is_active=False))

        response = await client.get("/api/screen-locations")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 1
        assert data["locations"][0]["id"] == location.id
        assert data["locations"][0]["avg_rating"] == 0
        assert data["locations"][0]["review_count"] == 0

    @pytest.mark.asyncio
    async def test_filters(self, client, session_factory, location):
        await add(session_factory, make_location(name="Jeddah Mall", city="Jeddah", daily_price=Decimal("300.00")))

        jeddah = await client.get("/api/screen-locations?city=Jeddah")
        assert [l["name"] for l in jeddah.json()["locations"]] == ["Jeddah Mall"]

        cheap = await client.get("/api/screen-locations?max_price=150")
        assert [l["id"] for l in cheap.json()["locations"]] == [location.id]

        pricey = await client.get("/api/screen-locations?min_price=200")
        assert [l["name"] for l in pricey.json()["locations"]] == ["Jeddah Mall"]

    @pytest.mark.asyncio
    async def test_detail_includes_active_pricing_options(self, client, location, weekly_option):
        response = await client.get(f"/api/screen-locations/{location.id}")

        assert response.status_code == status.HTTP_200_OK
        options = response.json()["pricing_options"]
        assert [o["id"] for o in options] == [weekly_option.id]
        assert options[0]["duration_type"] == "week"

    @pytest.mark.asyncio
    async def test_inactive_location_not_found(self, client, session_factory):
        closed = await add(session_factory, make_location(is_active=False))

        response = await client.get(f"/api/screen-locations/{closed.id}")

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestReviews:

    @pytest.mark.asyncio
    async def test_reviews_feed_rating(self, client, merchant_headers, other_merchant_headers, location):
        first = await client.post(
            f"/api/screen-locations/{location.id}/reviews",
            json={"overall_rating": 5, "comment": "Great foot traffic"},
            headers=merchant_headers,
        )
        assert first.status_code == status.HTTP_201_CREATED
        await client.post(
            f"/api/screen-locations/{location.id}/reviews",
            json={"overall_rating": 4},
            headers=other_merchant_headers,
        )

        detail = (await client.get(f"/api/screen-locations/{location.id}")).json()
        assert detail["avg_rating"] == 4.5
        assert detail["review_count"] == 2

        rated = await client.get("/api/screen-locations?min_rating=4.6")
        assert rated.json()["total"] == 0

        reviews = await client.get(f"/api/screen-locations/{location.id}/reviews")
        assert len(reviews.json()) == 2

    @pytest.mark.asyncio
    async def test_rating_out_of_range(self, client, merchant_headers, location):
        response = await client.post(
            f"/api/screen-locations/{location.id}/reviews",
            json={"overall_rating": 6},
            headers=merchant_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST


class TestAdminLocations:

    @pytest.mark.asyncio
    async def test_create_update_deactivate(self, client, admin_headers):
        created = await client.post("/api/admin/screen-locations", json=LOCATION_IN, headers=admin_headers)
        assert created.status_code == status.HTTP_201_CREATED
        location_id = created.json()["id"]

        updated = await client.put(
            f"/api/admin/screen-locations/{location_id}",
            json={"daily_price": "275.00"},
            headers=admin_headers,
        )
        assert Decimal(updated.json()["daily_price"]) == Decimal("275.00")

        deleted = await client.delete(f"/api/admin/screen-locations/{location_id}", headers=admin_headers)
        assert deleted.json()["is_active"] is False

        public = await client.get("/api/screen-locations")
        assert public.json()["total"] == 0

        admin_view = await client.get("/api/admin/screen-locations", headers=admin_headers)
        assert [l["id"] for l in admin_view.json()] == [location_id]

    @pytest.mark.asyncio
    async def test_merchant_forbidden(self, client, merchant_headers):
        response = await client.post("/api/admin/screen-locations", json=LOCATION_IN, headers=merchant_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN

    @pytest.mark.asyncio
    async def test_pricing_option_crud(self, client, admin_headers, location):
        created = await client.post(
            "/api/admin/screen-pricing-options",
            json={"location_id": location.id, "duration_type": "hour", "price": "40.00", "maximum_duration": 12},
            headers=admin_headers,
        )
        assert created.status_code == status.HTTP_201_CREATED
        option = created.json()
        assert option["duration_type_ar"] == "ساعة"

        bad_bounds = await client.put(
            f"/api/admin/screen-pricing-options/{option['id']}",
            json={"minimum_duration": 20},
            headers=admin_headers,
        )
        assert bad_bounds.status_code == status.HTTP_400_BAD_REQUEST

        deleted = await client.delete(f"/api/admin/screen-pricing-options/{option['id']}", headers=admin_headers)
        assert deleted.json()["is_active"] is False

        listed = await client.get(f"/api/screen-pricing-options?location_id={location.id}")
        assert listed.json() == []

    @pytest.mark.asyncio
    async def test_unknown_duration_type(self, client, admin_headers, location):
        response = await client.post(
            "/api/admin/screen-pricing-options",
            json={"location_id": location.id, "duration_type": "month", "price": "40.00"},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
