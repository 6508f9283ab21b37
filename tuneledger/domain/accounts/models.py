"""Domain models for accounts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

ADMIN_ROLES = frozenset({"admin", "superadmin"})
ROLES = frozenset({"client"}) | ADMIN_ROLES


@dataclass(slots=True)
class Account:
    id: str
    role: str
    is_active: bool
    balance: Decimal
    email: Optional[str] = None
    contact_name: Optional[str] = None
    company_name: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


@dataclass(slots=True)
class AccountProfile:
    """Identity claims used to provision an account on first sight."""

    account_id: str
    email: Optional[str] = None
    contact_name: Optional[str] = None
    company_name: Optional[str] = None
