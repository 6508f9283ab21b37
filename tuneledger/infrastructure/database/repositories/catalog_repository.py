"""SQLAlchemy implementation for the service catalog."""

from __future__ import annotations

from typing import Iterable, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.infrastructure.database.models import ServiceCatalogItem


class SqlCatalogRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_codes(self, codes: Iterable[str]) -> Sequence[ServiceCatalogItem]:
        codes = list(codes)
        if not codes:
            return []
        stmt = select(ServiceCatalogItem).where(ServiceCatalogItem.code.in_(codes))
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def get_by_code(self, code: str) -> ServiceCatalogItem | None:
        stmt = select(ServiceCatalogItem).where(ServiceCatalogItem.code == code)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_items(self, include_inactive: bool = False) -> Sequence[ServiceCatalogItem]:
        stmt = select(ServiceCatalogItem)
        if not include_inactive:
            stmt = stmt.where(ServiceCatalogItem.active.is_(True))
        stmt = stmt.order_by(ServiceCatalogItem.sort_order, ServiceCatalogItem.code)
        result = await self.session.execute(stmt)
        return result.scalars().all()

    async def upsert(
        self,
        *,
        code: str,
        name: str,
        price_cents: int,
        description: str | None = None,
        category: str | None = None,
        active: bool = True,
        sort_order: int = 0,
    ) -> ServiceCatalogItem:
        item = await self.get_by_code(code)
        if item is None:
            item = ServiceCatalogItem(code=code)
            self.session.add(item)
        item.name = name
        item.price_cents = price_cents
        item.description = description
        item.category = category
        item.active = active
        item.sort_order = sort_order
        await self.session.flush()
        return item

    async def update_item(
        self,
        code: str,
        *,
        price_cents: int | None = None,
        active: bool | None = None,
        name: str | None = None,
    ) -> ServiceCatalogItem | None:
        item = await self.get_by_code(code)
        if item is None:
            return None
        if price_cents is not None:
            item.price_cents = price_cents
        if active is not None:
            item.active = active
        if name is not None:
            item.name = name
        await self.session.flush()
        return item
