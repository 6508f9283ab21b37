"""Strict decoding of payment provider events into a tagged union."""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from .exceptions import MalformedEvent


class _EventModel(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)


class CompletedPaymentData(_EventModel):
    external_ref: str = Field(min_length=1, max_length=255)
    account_id: str = Field(min_length=1, max_length=36)
    amount: Decimal = Field(gt=0, decimal_places=2)
    label: str = "Credit Package"
    payment_status: str = "paid"


class FailedPaymentData(_EventModel):
    external_ref: str = Field(min_length=1, max_length=255)
    account_id: Optional[str] = None
    reason: Optional[str] = None


class PaymentCompleted(_EventModel):
    type: Literal["payment.completed"]
    id: Optional[str] = None
    data: CompletedPaymentData

    @property
    def is_paid(self) -> bool:
        return self.data.payment_status == "paid"


class PaymentFailed(_EventModel):
    type: Literal["payment.failed"]
    id: Optional[str] = None
    data: FailedPaymentData


PaymentEvent = Annotated[Union[PaymentCompleted, PaymentFailed], Field(discriminator="type")]

_adapter: TypeAdapter[PaymentEvent] = TypeAdapter(PaymentEvent)


def decode_event(raw_body: bytes) -> PaymentCompleted | PaymentFailed:
    try:
        return _adapter.validate_json(raw_body)
    except ValidationError as exc:
        raise MalformedEvent(f"Malformed payment event: {exc.error_count()} validation error(s)") from exc
