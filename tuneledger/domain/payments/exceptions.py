"""Payment domain specific exceptions."""

from __future__ import annotations

from tuneledger.core.errors import DomainError, Unauthenticated


class PaymentError(DomainError):
    """Base class for payment domain errors."""


class InvalidSignature(PaymentError, Unauthenticated):
    """The sender could not be authenticated; answered with 400 like other webhook rejections."""

    code = "invalid_signature"
    status_code = 400

    def default_detail(self) -> str:
        return "Webhook signature verification failed"


class MalformedEvent(PaymentError):
    code = "malformed_event"
    status_code = 400

    def default_detail(self) -> str:
        return "Webhook payload is not a recognised payment event"
