# hms/schemas/payment.py
from typing import Any

from pydantic import EmailStr, Field

from hms.schemas.common import ApiModel, NonEmptyStr


class InitializePaymentRequest(ApiModel):
    email: EmailStr
    amount: int = Field(gt=0, description="Amount in kobo")
    reference: NonEmptyStr
    metadata: dict[str, Any] | None = None
    channels: list[str] | None = None


class VerifyPaymentRequest(ApiModel):
    reference: NonEmptyStr


class GatewayResponse(ApiModel):
    status: bool
    message: str | None = None
    data: Any = None


class WebhookAck(ApiModel):
    received: bool = True
