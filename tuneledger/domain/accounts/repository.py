"""Repository protocol for accounts."""

from __future__ import annotations

from typing import Protocol, Sequence

from tuneledger.infrastructure.database.models import Account as AccountModel


class AccountRepository(Protocol):
    async def get_by_id(self, account_id: str) -> AccountModel | None:
        ...

    async def list_accounts(self, limit: int, offset: int) -> Sequence[AccountModel]:
        ...

    async def create_account(
        self,
        *,
        account_id: str,
        email: str | None,
        contact_name: str | None,
        company_name: str | None,
        role: str,
    ) -> AccountModel:
        ...

    async def update_role(self, account_id: str, role: str) -> AccountModel | None:
        ...
