# tests/test_offers.py
"""
Offer quota tests
Tests: hard cap at the plan's offer limit, public listing
"""

import pytest
from fastapi import status

from conftest import add, auth_headers, make_user


def offer_payload(n: int, city: str = "Riyadh") -> dict:
    return {
        "title": f"Offer {n}",
        "title_ar": f"عرض {n}",
        "discount_percentage": 10 + n,
        "city": city,
    }


class TestOfferQuota:
    """With n active offers and limit L, creation succeeds iff n < L"""

    @pytest.mark.asyncio
    async def test_create_up_to_limit(self, client, merchant_headers):
        for n in range(3):
            response = await client.post("/api/merchant/offers", json=offer_payload(n), headers=merchant_headers)
            assert response.status_code == status.HTTP_201_CREATED

        response = await client.post("/api/merchant/offers", json=offer_payload(3), headers=merchant_headers)

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        body = response.json()
        assert body["error"] == "quota_exceeded"
        assert body["offer_limit"] == 3
        assert body["active_offers"] == 3
        assert body["current_plan"] == "free"
        assert body["upgrade_url"] == "/merchant/subscription"

    @pytest.mark.asyncio
    async def test_zero_limit_blocks_first_offer(self, client, session_factory):
        merchant = await add(session_factory, make_user("nolimit", offer_limit=0))

        response = await client.post(
            "/api/merchant/offers", json=offer_payload(1), headers=auth_headers(merchant)
        )

        assert response.status_code == status.HTTP_429_TOO_MANY_REQUESTS

    @pytest.mark.asyncio
    async def test_upgrade_raises_limit(self, client, merchant_headers, plans, payment_gateway):
        for n in range(3):
            await client.post("/api/merchant/offers", json=offer_payload(n), headers=merchant_headers)

        started = await client.post(
            "/api/merchant/subscribe",
            json={"plan_id": plans["basic"].id, "source": {"type": "creditcard", "number": "4111111111111111"}},
            headers=merchant_headers,
        )
        payment_gateway.settle(started.json()["payment_id"], "paid")
        await client.post("/api/payments/moyasar/callback", json={"id": started.json()["payment_id"]})

        response = await client.post("/api/merchant/offers", json=offer_payload(3), headers=merchant_headers)

        assert response.status_code == status.HTTP_201_CREATED

    @pytest.mark.asyncio
    async def test_invalid_discount_rejected(self, client, merchant_headers):
        payload = {**offer_payload(1), "discount_percentage": 150}

        response = await client.post("/api/merchant/offers", json=payload, headers=merchant_headers)

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"][0]["field"] == "discount_percentage"

    @pytest.mark.asyncio
    async def test_admin_cannot_create_offer(self, client, admin_headers):
        response = await client.post("/api/merchant/offers", json=offer_payload(1), headers=admin_headers)

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestOfferListing:

    @pytest.mark.asyncio
    async def test_public_listing_with_city_filter(self, client, merchant_headers):
        await client.post("/api/merchant/offers", json=offer_payload(1, "Riyadh"), headers=merchant_headers)
        await client.post("/api/merchant/offers", json=offer_payload(2, "Jeddah"), headers=merchant_headers)

        everything = await client.get("/api/offers")
        assert len(everything.json()) == 2

        jeddah = await client.get("/api/offers?city=Jeddah")
        assert [o["title"] for o in jeddah.json()] == ["Offer 2"]

    @pytest.mark.asyncio
    async def test_merchant_lists_own_offers(self, client, merchant_headers, other_merchant_headers):
        await client.post("/api/merchant/offers", json=offer_payload(1), headers=merchant_headers)

        mine = await client.get("/api/merchant/offers", headers=merchant_headers)
        theirs = await client.get("/api/merchant/offers", headers=other_merchant_headers)

        assert len(mine.json()) == 1
        assert theirs.json() == []
