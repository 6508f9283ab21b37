"""SQLAlchemy implementation for the payment event audit log."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.core.clock import utcnow
from tuneledger.infrastructure.database.models import PaymentEventLog


class SqlPaymentLogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def record(
        self,
        *,
        external_ref: str,
        event_type: str,
        outcome: str,
        account_id: str | None = None,
        amount_cents: int | None = None,
    ) -> PaymentEventLog:
        row = PaymentEventLog(
            external_ref=external_ref,
            event_type=event_type,
            account_id=account_id,
            amount_cents=amount_cents,
            outcome=outcome,
            received_at=utcnow(),
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def list_for_ref(self, external_ref: str) -> Sequence[PaymentEventLog]:
        stmt = (
            select(PaymentEventLog)
            .where(PaymentEventLog.external_ref == external_ref)
            .order_by(desc(PaymentEventLog.id))
        )
        result = await self.session.execute(stmt)
        return result.scalars().all()
