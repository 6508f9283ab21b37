"""Bearer token verification for tokens issued by the identity provider."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from jose import JWTError, jwt

from tuneledger.core.config import SecuritySettings, get_settings
from tuneledger.core.errors import Unauthenticated


@dataclass(slots=True, frozen=True)
class TokenData:
    account_id: str
    email: Optional[str] = None
    name: Optional[str] = None
    company: Optional[str] = None


def create_access_token(
    account_id: str,
    *,
    email: Optional[str] = None,
    name: Optional[str] = None,
    company: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
    settings: Optional[SecuritySettings] = None,
) -> str:
    """Mint a token the way the identity provider does; for local tooling and tests."""
    settings = settings or get_settings().security
    payload = {
        "sub": account_id,
        "email": email,
        "name": name,
        "company": company,
        "exp": datetime.utcnow() + (expires_delta or timedelta(hours=1)),
    }
    if settings.audience:
        payload["aud"] = settings.audience
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str, settings: Optional[SecuritySettings] = None) -> TokenData:
    settings = settings or get_settings().security
    options = {"verify_aud": settings.audience is not None}
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
            audience=settings.audience,
            options=options,
        )
    except JWTError as exc:
        raise Unauthenticated() from exc

    account_id = payload.get("sub")
    if not account_id:
        raise Unauthenticated()
    return TokenData(
        account_id=account_id,
        email=payload.get("email"),
        name=payload.get("name"),
        company=payload.get("company"),
    )
