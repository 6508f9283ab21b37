"""Pricing resolver: service codes in, an immutable priced snapshot out."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.core.money import from_cents
from tuneledger.infrastructure.database.models import ServiceCatalogItem as CatalogItemModel
from tuneledger.infrastructure.database.repositories.catalog_repository import SqlCatalogRepository

from .exceptions import UnknownServiceCode
from .models import PricedItem
from .repository import CatalogRepository


def dedupe_codes(codes: Iterable[str]) -> list[str]:
    """Strip and deduplicate codes, keeping first-seen order."""
    unique: list[str] = []
    for code in codes:
        code = code.strip()
        if code and code not in unique:
            unique.append(code)
    return unique


def resolve_prices(codes: Sequence[str], catalog: Mapping[str, CatalogItemModel]) -> list[PricedItem]:
    """Price ``codes`` against a catalog snapshot; all or nothing."""
    if not codes:
        raise UnknownServiceCode([])
    rejected = [code for code in codes if code not in catalog or not catalog[code].active]
    if rejected:
        raise UnknownServiceCode(rejected)
    return [
        PricedItem(code=code, name=catalog[code].name, price=from_cents(catalog[code].price_cents))
        for code in codes
    ]


def total_price(items: Iterable[PricedItem]) -> Decimal:
    return sum((item.price for item in items), Decimal("0.00"))


@dataclass(slots=True)
class PricingResolver:
    repository: CatalogRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "PricingResolver":
        return cls(SqlCatalogRepository(session))

    async def price(self, codes: Iterable[str]) -> list[PricedItem]:
        unique = dedupe_codes(codes)
        rows = await self.repository.get_by_codes(unique)
        return resolve_prices(unique, {row.code: row for row in rows})
