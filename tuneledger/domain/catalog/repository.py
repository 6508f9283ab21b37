"""Repository protocol for catalog reads and admin edits."""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence

from tuneledger.infrastructure.database.models import ServiceCatalogItem as CatalogItemModel


class CatalogRepository(Protocol):
    async def get_by_codes(self, codes: Iterable[str]) -> Sequence[CatalogItemModel]:
        ...

    async def get_by_code(self, code: str) -> CatalogItemModel | None:
        ...

    async def list_items(self, include_inactive: bool = False) -> Sequence[CatalogItemModel]:
        ...

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
    ) -> CatalogItemModel:
        ...

    async def update_item(
        self,
        code: str,
        *,
        price_cents: int | None = None,
        active: bool | None = None,
        name: str | None = None,
    ) -> CatalogItemModel | None:
        ...
