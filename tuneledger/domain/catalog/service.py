"""Catalog reads and the admin price/availability edits."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.core.money import from_cents, to_cents
from tuneledger.infrastructure.database.models import ServiceCatalogItem as CatalogItemModel
from tuneledger.infrastructure.database.repositories.catalog_repository import SqlCatalogRepository

from .exceptions import CatalogItemNotFound
from .models import CatalogItem
from .repository import CatalogRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CatalogService:
    repository: CatalogRepository

    @classmethod
    def with_session(cls, session: AsyncSession) -> "CatalogService":
        return cls(SqlCatalogRepository(session))

    async def list_items(self, include_inactive: bool = False) -> list[CatalogItem]:
        rows = await self.repository.list_items(include_inactive)
        return [self._to_domain(row) for row in rows]

    async def add_item(
        self,
        *,
        code: str,
        name: str,
        price: Decimal,
        description: Optional[str] = None,
        category: Optional[str] = None,
        active: bool = True,
        sort_order: int = 0,
    ) -> CatalogItem:
        if price < 0:
            raise ValueError("price must not be negative")
        model = await self.repository.upsert(
            code=code,
            name=name,
            price_cents=to_cents(price),
            description=description,
            category=category,
            active=active,
            sort_order=sort_order,
        )
        return self._to_domain(model)

    async def update_item(
        self,
        code: str,
        *,
        price: Optional[Decimal] = None,
        active: Optional[bool] = None,
        name: Optional[str] = None,
    ) -> CatalogItem:
        if price is not None and price < 0:
            raise ValueError("price must not be negative")
        model = await self.repository.update_item(
            code,
            price_cents=to_cents(price) if price is not None else None,
            active=active,
            name=name,
        )
        if model is None:
            raise CatalogItemNotFound(f"Service {code} does not exist")
        logger.info("Catalog item %s updated (price=%s, active=%s)", code, price, active)
        return self._to_domain(model)

    @staticmethod
    def _to_domain(model: CatalogItemModel) -> CatalogItem:
        return CatalogItem(
            code=model.code,
            name=model.name,
            price=from_cents(model.price_cents),
            active=model.active,
            description=model.description,
            category=model.category,
            sort_order=model.sort_order,
        )
