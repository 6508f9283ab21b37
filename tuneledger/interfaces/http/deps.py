"""Reusable FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.core.errors import Unauthenticated, Unauthorized
from tuneledger.core.security import TokenData, decode_access_token
from tuneledger.domain.accounts import Account, AccountProfile, AccountService
from tuneledger.infrastructure.database.session import get_session
from tuneledger.realtime.hub import NotificationHub, get_hub

security = HTTPBearer(auto_error=False)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    async for session in get_session():
        yield session


def get_notification_hub() -> NotificationHub:
    return get_hub()


def get_token_data(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> TokenData:
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise Unauthenticated()
    return decode_access_token(credentials.credentials)


async def resolve_account(token: TokenData, db: AsyncSession) -> Account:
    service = AccountService.with_session(db)
    return await service.ensure_account(
        AccountProfile(
            account_id=token.account_id,
            email=token.email,
            contact_name=token.name,
            company_name=token.company,
        )
    )


async def get_current_account(
    token: TokenData = Depends(get_token_data),
    db: AsyncSession = Depends(get_db_session),
) -> Account:
    return await resolve_account(token, db)


async def get_current_admin(account: Account = Depends(get_current_account)) -> Account:
    if not account.is_admin():
        raise Unauthorized("Administrator role required")
    return account


__all__ = [
    "get_current_account",
    "get_current_admin",
    "get_db_session",
    "get_notification_hub",
    "get_token_data",
    "resolve_account",
]
