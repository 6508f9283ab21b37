"""Domain models for the service catalog and priced snapshots."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional


@dataclass(slots=True, frozen=True)
class PricedItem:
    """One billed service, copied verbatim into a job at creation time."""

    code: str
    name: str
    price: Decimal


@dataclass(slots=True)
class CatalogItem:
    code: str
    name: str
    price: Decimal
    active: bool
    description: Optional[str] = None
    category: Optional[str] = None
    sort_order: int = 0
