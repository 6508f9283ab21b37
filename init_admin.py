"""
Promote an identity-provider account to superadmin.
Accounts are normally provisioned on first request; this creates it if needed.

    python init_admin.py <account-id> [email]
"""
import asyncio
import sys

from tuneledger.core.config import get_settings
from tuneledger.core.logging import configure_logging
from tuneledger.domain.accounts import AccountProfile, AccountService
from tuneledger.infrastructure.database.session import dispose_engine, get_session, init_db


async def promote_admin(account_id: str, email: str | None = None) -> None:
    configure_logging(get_settings())
    await init_db()

    async for db in get_session():
        service = AccountService.with_session(db)
        account = await service.ensure_account(AccountProfile(account_id=account_id, email=email))
        if account.role == "superadmin":
            print(f"Account {account_id} is already a superadmin")
        else:
            await service.set_role(account_id, "superadmin")
            print(f"Account {account_id} promoted to superadmin")
    await dispose_engine()


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    asyncio.run(promote_admin(sys.argv[1], sys.argv[2] if len(sys.argv) > 2 else None))
