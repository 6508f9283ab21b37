"""Domain services for account management."""

from __future__ import annotations

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.core.money import from_cents
from tuneledger.infrastructure.database.models import Account as AccountModel
from tuneledger.infrastructure.database.repositories.account_repository import SqlAccountRepository

from .exceptions import AccountInactiveError, AccountNotFoundError
from .models import ROLES, Account, AccountProfile
from .repository import AccountRepository

logger = logging.getLogger(__name__)


class AccountService:
    """Encapsulates core account use cases."""

    def __init__(self, repository: AccountRepository) -> None:
        self._repository = repository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "AccountService":
        return cls(SqlAccountRepository(session))

    async def get_by_id(self, account_id: str) -> Account | None:
        model = await self._repository.get_by_id(account_id)
        return self._to_domain(model) if model else None

    async def require(self, account_id: str) -> Account:
        account = await self.get_by_id(account_id)
        if account is None:
            raise AccountNotFoundError(f"Account {account_id} does not exist")
        return account

    async def list_accounts(self, limit: int = 50, offset: int = 0) -> list[Account]:
        rows = await self._repository.list_accounts(limit, offset)
        return [self._to_domain(row) for row in rows]

    async def ensure_account(self, profile: AccountProfile) -> Account:
        """Return the account for a verified identity, creating it on first sight."""
        model = await self._repository.get_by_id(profile.account_id)
        if model is None:
            model = await self._repository.create_account(
                account_id=profile.account_id,
                email=profile.email,
                contact_name=profile.contact_name,
                company_name=profile.company_name,
                role="client",
            )
            logger.info("Provisioned account %s", model.id)
        if not model.is_active:
            raise AccountInactiveError("Account is disabled")
        return self._to_domain(model)

    async def set_role(self, account_id: str, role: str) -> Account:
        if role not in ROLES:
            raise ValueError(f"unknown role: {role}")
        model = await self._repository.update_role(account_id, role)
        if model is None:
            raise AccountNotFoundError(f"Account {account_id} does not exist")
        logger.info("Account %s role set to %s", account_id, role)
        return self._to_domain(model)

    @staticmethod
    def _to_domain(model: AccountModel) -> Account:
        return Account(
            id=model.id,
            role=model.role,
            is_active=model.is_active,
            balance=from_cents(model.balance_cents),
            email=model.email,
            contact_name=model.contact_name,
            company_name=model.company_name,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )
