# tests/test_moyasar_service.py
"""
Moyasar client tests against a mocked transport
"""

import base64
import json

import httpx
import pytest
from decimal import Decimal

from app.core.exceptions import UpstreamError
from app.services.moyasar_service import MoyasarService, to_halalas


def gateway(handler) -> MoyasarService:
    return MoyasarService(
        secret_key="sk_test_123",
        base_url="https://api.moyasar.test/v1/",
        transport=httpx.MockTransport(handler),
    )


class TestHalalas:

    def test_to_halalas(self):
        assert to_halalas(Decimal("345.00")) == 34500
        assert to_halalas(Decimal("0.10")) == 10
        assert to_halalas(Decimal("99")) == 9900


class TestMoyasarService:

    @pytest.mark.asyncio
    async def test_create_payment(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["auth"] = request.headers["authorization"]
            seen["body"] = json.loads(request.content)
            return httpx.Response(201, json={"id": "pay_1", "status": "initiated", "amount": 34500})

        payment = await gateway(handler).create_payment(
            amount=Decimal("345.00"),
            currency="SAR",
            description="Invoice INV-1",
            source={"type": "creditcard"},
            metadata={"invoice_id": 7},
        )

        assert payment["id"] == "pay_1"
        assert seen["url"] == "https://api.moyasar.test/v1/payments"
        expected = base64.b64encode(b"sk_test_123:").decode()
        assert seen["auth"] == f"Basic {expected}"
        assert seen["body"]["amount"] == 34500
        assert seen["body"]["metadata"] == {"invoice_id": "7"}
        assert seen["body"]["callback_url"].endswith("/api/payments/moyasar/callback")

    @pytest.mark.asyncio
    async def test_create_payment_rejected(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(400, json={"type": "invalid_request_error"})

        with pytest.raises(UpstreamError):
            await gateway(handler).create_payment(Decimal("10.00"), "SAR", "x", {"type": "mada"})

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(UpstreamError):
            await gateway(handler).get_payment("pay_1")

    @pytest.mark.asyncio
    async def test_get_payment(self):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/v1/payments/pay_9"
            return httpx.Response(200, json={"id": "pay_9", "status": "paid"})

        payment = await gateway(handler).get_payment("pay_9")

        assert payment["status"] == "paid"

    @pytest.mark.asyncio
    async def test_get_payment_not_found(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json={"message": "Object not found"})

        with pytest.raises(UpstreamError):
            await gateway(handler).get_payment("pay_missing")
