"""Service catalog listing."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from tuneledger.domain.accounts import Account
from tuneledger.domain.catalog import CatalogService
from tuneledger.interfaces.http.deps import get_current_account, get_db_session
from tuneledger.interfaces.http.schemas import CatalogItemResponse

router = APIRouter()


@router.get("/services", response_model=list[CatalogItemResponse], summary="Bookable services and prices")
async def list_services(
    include_inactive: bool = Query(False),
    account: Account = Depends(get_current_account),
    db: AsyncSession = Depends(get_db_session),
) -> list[CatalogItemResponse]:
    items = await CatalogService.with_session(db).list_items(include_inactive=include_inactive and account.is_admin())
    return [CatalogItemResponse.model_validate(item) for item in items]
