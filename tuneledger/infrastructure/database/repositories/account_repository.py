"""SQLAlchemy implementation of the account repository."""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.infrastructure.database.models import Account


class SqlAccountRepository:
    """Account rows; balances are read here but only the ledger repository writes them."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, account_id: str) -> Account | None:
        stmt = select(Account).where(Account.id == account_id)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_accounts(self, limit: int, offset: int) -> Sequence[Account]:
        stmt = select(Account).order_by(Account.created_at.desc()).offset(offset).limit(limit)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def create_account(
        self,
        *,
        account_id: str,
        email: str | None,
        contact_name: str | None,
        company_name: str | None,
        role: str,
    ) -> Account:
        account = Account(
            id=account_id,
            email=email,
            contact_name=contact_name,
            company_name=company_name,
            role=role,
            is_active=True,
            balance_cents=0,
        )
        try:
            async with self.session.begin_nested():
                self.session.add(account)
                await self.session.flush()
        except IntegrityError:
            # provisioned concurrently by another request
            existing = await self.get_by_id(account_id)
            if existing is None:
                raise
            return existing
        return account

    async def update_role(self, account_id: str, role: str) -> Account | None:
        stmt = (
            update(Account)
            .where(Account.id == account_id)
            .values(role=role)
            .execution_options(synchronize_session="fetch")
            .returning(Account)
        )
        result = await self.session.execute(stmt)
        return result.scalars().first()
