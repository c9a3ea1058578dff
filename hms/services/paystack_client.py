# hms/services/paystack_client.py
"""
Server-side Paystack calls.

The secret key only ever lives here; nothing returned to the client
includes it. Every call carries a timeout and turns transport or gateway
failures into PaymentServiceError.
"""

import hashlib
import hmac
import logging
from typing import Any
from urllib.parse import quote

import httpx

from hms.core.config import Settings
from hms.core.errors import PaymentServiceError

logger = logging.getLogger(__name__)

DEFAULT_CHANNELS = ["card", "bank", "ussd", "bank_transfer"]

FALLBACK_BANKS = [
    {"name": "Access Bank", "code": "044", "type": "nuban"},
    {"name": "First Bank", "code": "011", "type": "nuban"},
    {"name": "GTBank", "code": "058", "type": "nuban"},
    {"name": "UBA", "code": "033", "type": "nuban"},
    {"name": "Zenith Bank", "code": "057", "type": "nuban"},
    {"name": "Fidelity Bank", "code": "070", "type": "nuban"},
    {"name": "Union Bank", "code": "032", "type": "nuban"},
    {"name": "Sterling Bank", "code": "232", "type": "nuban"},
    {"name": "Wema Bank", "code": "035", "type": "nuban"},
    {"name": "Stanbic IBTC", "code": "221", "type": "nuban"},
]


def compute_signature(secret: str, body: bytes) -> str:
    return hmac.new(secret.encode("utf-8"), body, hashlib.sha512).hexdigest()


def verify_signature(secret: str | None, body: bytes, signature: str | None) -> bool:
    """
    Check the x-paystack-signature header against HMAC-SHA512(body).
    A missing secret or header never verifies.
    """
    if not secret or not signature:
        return False
    return hmac.compare_digest(compute_signature(secret, body), signature)


class PaystackClient:
    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None):
        self.secret_key = settings.paystack_secret_key
        self.webhook_secret = settings.paystack_webhook_secret
        self._client = httpx.Client(
            base_url=settings.paystack_base_url,
            timeout=settings.paystack_timeout_seconds,
            transport=transport,
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.secret_key)

    @property
    def signing_secret(self) -> str | None:
        """Webhooks are signed with the dedicated webhook secret, else the API secret key."""
        return self.webhook_secret or self.secret_key

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        if not self.is_configured:
            raise PaymentServiceError(
                "Payment service not configured. Contact administrator.",
                status_code=503,
            )

        headers = {"Authorization": f"Bearer {self.secret_key}"}
        try:
            response = self._client.request(method, path, headers=headers, **kwargs)
        except httpx.HTTPError as exc:
            logger.error("Paystack %s %s failed: %s", method, path, exc)
            raise PaymentServiceError("Payment service unavailable") from exc

        try:
            data = response.json()
        except ValueError:
            data = {}

        if response.is_error:
            logger.error("Paystack %s %s returned %s: %s", method, path, response.status_code, data)
            raise PaymentServiceError(data.get("message") or "Payment request failed")
        return data

    def initialize_transaction(
        self,
        email: str,
        amount: int,
        reference: str,
        metadata: dict[str, Any] | None = None,
        channels: list[str] | None = None,
        currency: str = "NGN",
    ) -> dict[str, Any]:
        """
        Start a checkout. `amount` is in kobo.
        """
        data = self._request(
            "POST",
            "/transaction/initialize",
            json={
                "email": email,
                "amount": amount,
                "reference": reference,
                "currency": currency,
                "channels": channels or DEFAULT_CHANNELS,
                "metadata": metadata,
            },
        )
        result = data.get("data") or {}
        return {
            "authorization_url": result.get("authorization_url"),
            "access_code": result.get("access_code"),
            "reference": result.get("reference"),
        }

    def verify_transaction(self, reference: str) -> dict[str, Any]:
        data = self._request("GET", f"/transaction/verify/{quote(reference, safe='')}")
        result = data.get("data")
        if not result:
            return {"status": data.get("status", False), "message": data.get("message"), "data": None}

        return {
            "status": data.get("status", False),
            "message": data.get("message"),
            "data": {
                "reference": result.get("reference"),
                "amount": result.get("amount"),
                "currency": result.get("currency"),
                "channel": result.get("channel"),
                "status": result.get("status"),
                "paid_at": result.get("paid_at"),
                "customer": {"email": (result.get("customer") or {}).get("email")},
                "metadata": result.get("metadata"),
            },
        }

    def list_banks(self) -> list[dict[str, Any]]:
        if not self.is_configured:
            return FALLBACK_BANKS
        data = self._request("GET", "/bank")
        return data.get("data") or []

    def close(self) -> None:
        self._client.close()
