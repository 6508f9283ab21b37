"""Credit-on-payment: turns verified provider events into ledger credits.

The service keeps no dedup state of its own. Replayed deliveries reach
``LedgerService.credit`` with the same ``external_ref`` and come back as
duplicates, whichever of two racing deliveries commits first.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.core.config import PaymentSettings, get_settings
from tuneledger.core.money import to_cents
from tuneledger.domain.ledger.models import CreditOutcome, EntryKind
from tuneledger.domain.ledger.service import LedgerService
from tuneledger.infrastructure.database.repositories.payment_log_repository import SqlPaymentLogRepository

from .events import PaymentCompleted, decode_event
from .signature import verify_signature

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class WebhookResult:
    event_type: str
    external_ref: str
    outcome: str  # credited, duplicate, ignored, failed
    entry_id: Optional[int] = None
    account_id: Optional[str] = None

    @property
    def duplicate(self) -> bool:
        return self.outcome == "duplicate"


@dataclass(slots=True)
class PaymentService:
    ledger: LedgerService
    audit_log: SqlPaymentLogRepository
    session: AsyncSession
    settings: PaymentSettings

    @classmethod
    def with_session(cls, session: AsyncSession, settings: Optional[PaymentSettings] = None) -> "PaymentService":
        return cls(
            ledger=LedgerService.with_session(session),
            audit_log=SqlPaymentLogRepository(session),
            session=session,
            settings=settings or get_settings().payments,
        )

    async def handle_webhook(
        self,
        raw_body: bytes,
        signature_header: Optional[str],
        *,
        now: Optional[float] = None,
    ) -> WebhookResult:
        """Verify, decode and apply one webhook delivery.

        The signature is checked against the raw bytes before anything is
        parsed.
        """
        verify_signature(
            self.settings.webhook_secret,
            raw_body,
            signature_header,
            tolerance=self.settings.signature_tolerance,
            now=now,
        )
        event = decode_event(raw_body)

        if isinstance(event, PaymentCompleted):
            data = event.data
            if not event.is_paid:
                logger.info("Payment %s not paid (%s); acknowledged", data.external_ref, data.payment_status)
                result = WebhookResult(event.type, data.external_ref, "ignored", account_id=data.account_id)
            else:
                outcome = await self.handle_payment_confirmed(
                    external_ref=data.external_ref,
                    account_id=data.account_id,
                    amount=data.amount,
                    label=data.label,
                )
                result = WebhookResult(
                    event.type,
                    data.external_ref,
                    "duplicate" if outcome.duplicate else "credited",
                    outcome.entry.id,
                    data.account_id,
                )
            await self._audit(result, account_id=data.account_id, amount=data.amount)
            return result

        logger.warning(
            "Payment %s failed for account %s: %s",
            event.data.external_ref, event.data.account_id, event.data.reason,
        )
        result = WebhookResult(event.type, event.data.external_ref, "failed", account_id=event.data.account_id)
        await self._audit(result, account_id=event.data.account_id)
        return result

    async def handle_payment_confirmed(
        self,
        *,
        external_ref: str,
        account_id: str,
        amount: Decimal,
        label: str = "Credit Package",
    ) -> CreditOutcome:
        return await self.ledger.credit(
            account_id=account_id,
            amount=amount,
            external_ref=external_ref,
            kind=EntryKind.PURCHASE_CREDIT,
            description=f"Purchased {label}",
        )

    async def _audit(
        self,
        result: WebhookResult,
        *,
        account_id: Optional[str] = None,
        amount: Optional[Decimal] = None,
    ) -> None:
        try:
            async with self.session.begin_nested():
                await self.audit_log.record(
                    external_ref=result.external_ref,
                    event_type=result.event_type,
                    outcome=result.outcome,
                    account_id=account_id,
                    amount_cents=to_cents(amount) if amount is not None else None,
                )
        except SQLAlchemyError:
            logger.exception("Could not record payment event %s", result.external_ref)
