# tests/test_subscriptions.py
"""
Subscription tests
Tests: plans, free and paid activation, plan switching, cancellation
"""

import pytest
from fastapi import status
from datetime import date, datetime, timedelta
from decimal import Decimal
from sqlalchemy import select

from app.db.models.invoice import Invoice
from app.db.models.subscription import MerchantSubscription
from app.db.models.user import User
from app.services.subscription_service import subscription_period

CARD = {"type": "mada", "name": "Test Merchant", "number": "4201320111111010", "cvc": "123", "month": "12", "year": "2030"}


async def subscribe_and_pay(client, headers, plan_id, payment_gateway) -> dict:
    """Subscribe to a paid plan and complete the payment through the callback"""
    started = await client.post(
        "/api/merchant/subscribe", json={"plan_id": plan_id, "source": CARD}, headers=headers
    )
    assert started.status_code == status.HTTP_200_OK
    payment_id = started.json()["payment_id"]

    payment_gateway.settle(payment_id, "paid")
    callback = await client.post("/api/payments/moyasar/callback", json={"id": payment_id})
    assert callback.status_code == status.HTTP_200_OK
    return callback.json()


class TestSubscriptionPeriod:
    """Periods are one calendar month"""

    def test_regular_month(self):
        assert subscription_period(date(2024, 6, 15)) == date(2024, 7, 15)

    def test_month_end_clamped(self):
        assert subscription_period(date(2024, 1, 31)) == date(2024, 2, 29)
        assert subscription_period(date(2023, 1, 31)) == date(2023, 2, 28)


class TestPlans:

    @pytest.mark.asyncio
    async def test_list_active_plans(self, client, plans):
        response = await client.get("/api/subscription-plans")

        assert response.status_code == status.HTTP_200_OK
        assert [p["name"] for p in response.json()] == ["free", "Basic", "Premium"]

    @pytest.mark.asyncio
    async def test_admin_creates_plan(self, client, admin_headers, plans):
        response = await client.post(
            "/api/admin/subscription-plans",
            json={"name": "Enterprise", "name_ar": "المؤسسات", "price": "499.00", "offer_limit": 200, "sort_order": 3},
            headers=admin_headers,
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.json()["offer_limit"] == 200

        duplicate = await client.post(
            "/api/admin/subscription-plans",
            json={"name": "Enterprise", "name_ar": "المؤسسات", "price": "499.00"},
            headers=admin_headers,
        )
        assert duplicate.status_code == status.HTTP_400_BAD_REQUEST

    @pytest.mark.asyncio
    async def test_deactivated_plan_hidden(self, client, admin_headers, plans):
        await client.put(
            f"/api/admin/subscription-plans/{plans['premium'].id}",
            json={"is_active": False},
            headers=admin_headers,
        )

        response = await client.get("/api/subscription-plans")

        assert "Premium" not in [p["name"] for p in response.json()]


class TestSubscribe:

    @pytest.mark.asyncio
    async def test_free_plan_activates_immediately(self, client, merchant_headers, plans):
        response = await client.post(
            "/api/merchant/subscribe", json={"plan_id": plans["free"].id}, headers=merchant_headers
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "active"
        assert data["subscription"]["status"] == "active"
        assert data["invoice"] is None

    @pytest.mark.asyncio
    async def test_paid_plan_requires_source(self, client, merchant_headers, plans):
        response = await client.post(
            "/api/merchant/subscribe", json={"plan_id": plans["basic"].id}, headers=merchant_headers
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["errors"][0]["field"] == "source"

    @pytest.mark.asyncio
    async def test_paid_plan_issues_subscription_invoice(self, client, merchant_headers, plans, payment_gateway):
        response = await client.post(
            "/api/merchant/subscribe",
            json={"plan_id": plans["basic"].id, "source": CARD},
            headers=merchant_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "payment_required"
        assert data["payment_url"].startswith("https://pay.example.com/")

        invoice = data["invoice"]
        assert invoice["invoice_number"].startswith("SUB-")
        assert len(invoice["invoice_number"].split("-")[-1]) == 6
        assert invoice["invoice_type"] == "subscription"
        assert Decimal(invoice["total_amount"]) == Decimal("99.00")
        assert Decimal(invoice["tax_amount"]) == Decimal("0")
        due = datetime.fromisoformat(invoice["due_date"]) - datetime.fromisoformat(invoice["issue_date"])
        assert due == timedelta(days=7)
        assert payment_gateway.payments[data["payment_id"]]["amount"] == 9900

    @pytest.mark.asyncio
    async def test_paid_plan_not_active_before_payment(self, client, merchant_headers, plans):
        await client.post(
            "/api/merchant/subscribe",
            json={"plan_id": plans["basic"].id, "source": CARD},
            headers=merchant_headers,
        )

        overview = await client.get("/api/merchant/subscription", headers=merchant_headers)

        assert overview.json()["subscription"] is None
        assert overview.json()["offer_limit"] == 3

    @pytest.mark.asyncio
    async def test_payment_activates_plan(self, client, merchant_headers, plans, payment_gateway):
        result = await subscribe_and_pay(client, merchant_headers, plans["basic"].id, payment_gateway)

        assert result["success"] is True
        overview = (await client.get("/api/merchant/subscription", headers=merchant_headers)).json()
        assert overview["subscription_plan"] == "Basic"
        assert overview["offer_limit"] == 10
        assert overview["plan"]["name"] == "Basic"
        assert overview["subscription"]["invoice_id"] == result["invoice"]["id"]
        assert overview["subscription"]["payment_method"] == "mada"

    @pytest.mark.asyncio
    async def test_switching_plans_keeps_single_active(self, client, session_factory, merchant, merchant_headers, plans, payment_gateway):
        """A merchant on Basic who buys Premium ends with exactly one active row"""
        await subscribe_and_pay(client, merchant_headers, plans["basic"].id, payment_gateway)
        await subscribe_and_pay(client, merchant_headers, plans["premium"].id, payment_gateway)

        async with session_factory() as session:
            rows = (await session.execute(
                select(MerchantSubscription)
                .where(MerchantSubscription.merchant_id == merchant.id)
                .order_by(MerchantSubscription.id)
            )).scalars().all()
            user = await session.get(User, merchant.id)

        assert [r.status for r in rows] == ["cancelled", "active"]
        assert rows[0].plan_id == plans["basic"].id
        assert rows[0].cancelled_at is not None
        assert rows[1].plan_id == plans["premium"].id
        assert user.offer_limit == 50
        assert user.subscription_plan == "Premium"

    @pytest.mark.asyncio
    async def test_gateway_failure_cancels_invoice(self, client, session_factory, merchant_headers, plans, payment_gateway):
        payment_gateway.fail_create = True

        response = await client.post(
            "/api/merchant/subscribe",
            json={"plan_id": plans["basic"].id, "source": CARD},
            headers=merchant_headers,
        )

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
        async with session_factory() as session:
            invoices = (await session.execute(select(Invoice))).scalars().all()
        assert [i.status for i in invoices] == ["cancelled"]

    @pytest.mark.asyncio
    async def test_unknown_plan(self, client, merchant_headers, plans):
        response = await client.post("/api/merchant/subscribe", json={"plan_id": 999}, headers=merchant_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND

    @pytest.mark.asyncio
    async def test_admin_cannot_subscribe(self, client, admin_headers, plans):
        response = await client.post(
            "/api/merchant/subscribe", json={"plan_id": plans["free"].id}, headers=admin_headers
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestCancelSubscription:

    @pytest.mark.asyncio
    async def test_cancel_reverts_to_free_quota(self, client, merchant_headers, plans, payment_gateway):
        await subscribe_and_pay(client, merchant_headers, plans["premium"].id, payment_gateway)

        response = await client.post(
            "/api/merchant/subscription/cancel",
            json={"reason": "Seasonal business"},
            headers=merchant_headers,
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "cancelled"
        assert data["cancel_reason"] == "Seasonal business"
        assert data["auto_renew"] is False

        overview = (await client.get("/api/merchant/subscription", headers=merchant_headers)).json()
        assert overview["subscription_plan"] == "free"
        assert overview["offer_limit"] == 3
        assert overview["subscription"] is None

    @pytest.mark.asyncio
    async def test_cancel_without_subscription(self, client, merchant_headers):
        response = await client.post("/api/merchant/subscription/cancel", headers=merchant_headers)

        assert response.status_code == status.HTTP_404_NOT_FOUND
