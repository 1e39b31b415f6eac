# backend/app/services/moyasar_service.py
from decimal import Decimal
from typing import Dict, Any, Optional

import httpx

from app.core.config import settings
from app.core.exceptions import UpstreamError
from app.core.logging import logger


def to_halalas(amount: Decimal) -> int:
    """Moyasar takes amounts in the minor unit (1 SAR = 100 halalas)"""
    return int((Decimal(amount) * 100).to_integral_value())


class MoyasarService:
    """Client for the Moyasar payments REST API"""

    def __init__(
        self,
        secret_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.secret_key = secret_key or settings.MOYASAR_SECRET_KEY
        self.base_url = (base_url or settings.MOYASAR_BASE_URL).rstrip("/")
        self.timeout = timeout or settings.MOYASAR_TIMEOUT_SECONDS
        self.callback_url = f"{settings.BACKEND_URL}{settings.API_PREFIX}/payments/moyasar/callback"
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        # Moyasar uses HTTP basic auth with the secret key as username
        return httpx.AsyncClient(
            base_url=self.base_url,
            auth=(self.secret_key, ""),
            timeout=self.timeout,
            transport=self._transport,
        )

    async def create_payment(
        self,
        amount: Decimal,
        currency: str,
        description: str,
        source: Dict[str, Any],
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Create a Moyasar payment

        Args:
            amount: Amount in SAR (converted to halalas)
            currency: Currency code
            description: Shown on the payment page
            source: Payment source (type creditcard, mada, applepay, ...)
            metadata: Echoed back by Moyasar, used to trace the invoice

        Returns:
            Moyasar payment object. `source.transaction_url` is where the
            customer completes 3-D Secure.
        """
        data = {
            "amount": to_halalas(amount),
            "currency": currency,
            "description": description,
            "callback_url": self.callback_url,
            "source": source,
            "metadata": {k: str(v) for k, v in (metadata or {}).items()},
        }

        try:
            async with self._client() as client:
                response = await client.post("/payments", json=data)
        except httpx.HTTPError as e:
            logger.error(f"Moyasar payment creation failed: {str(e)}")
            raise UpstreamError("تعذر الاتصال ببوابة الدفع", "Payment gateway unreachable") from e

        if response.status_code not in (200, 201):
            logger.error(f"Moyasar API error: {response.status_code} {response.text}")
            raise UpstreamError("فشل إنشاء عملية الدفع", f"Moyasar payment creation failed: {response.status_code}")

        payment = response.json()
        logger.info(f"Created Moyasar payment: {payment.get('id')}")
        return payment

    async def get_payment(self, payment_id: str) -> Dict[str, Any]:
        """Fetch the authoritative state of a payment"""
        try:
            async with self._client() as client:
                response = await client.get(f"/payments/{payment_id}")
        except httpx.HTTPError as e:
            logger.error(f"Failed to get payment status: {str(e)}")
            raise UpstreamError("تعذر الاتصال ببوابة الدفع", "Payment gateway unreachable") from e

        if response.status_code != 200:
            logger.error(f"Moyasar API error: {response.status_code} {response.text}")
            raise UpstreamError("فشل جلب حالة الدفع", f"Moyasar payment fetch failed: {response.status_code}")

        return response.json()
