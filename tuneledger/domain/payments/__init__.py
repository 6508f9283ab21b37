"""Payment domain exports"""

from .events import PaymentCompleted, PaymentEvent, PaymentFailed, decode_event
from .exceptions import InvalidSignature, MalformedEvent, PaymentError
from .service import PaymentService, WebhookResult
from .signature import build_signature_header, compute_signature, verify_signature

__all__ = [
    "InvalidSignature",
    "MalformedEvent",
    "PaymentCompleted",
    "PaymentError",
    "PaymentEvent",
    "PaymentFailed",
    "PaymentService",
    "WebhookResult",
    "build_signature_header",
    "compute_signature",
    "decode_event",
    "verify_signature",
]
