"""Pricing resolver: all-or-nothing pricing against the catalog."""
from decimal import Decimal
from types import SimpleNamespace

import pytest

from tests.conftest import run
from tuneledger.domain.catalog import (
    CatalogService,
    PricedItem,
    PricingResolver,
    UnknownServiceCode,
    dedupe_codes,
    resolve_prices,
    total_price,
)


def _row(code, price_cents, active=True):
    return SimpleNamespace(code=code, name=code.upper(), price_cents=price_cents, active=active)


CATALOG = {
    "stage1": _row("stage1", 15000),
    "dpf_off": _row("dpf_off", 10000),
    "retired": _row("retired", 5000, active=False),
}


def test_dedupe_keeps_first_seen_order():
    assert dedupe_codes(["dpf_off", " stage1 ", "dpf_off", ""]) == ["dpf_off", "stage1"]


def test_resolve_prices_returns_snapshot():
    items = resolve_prices(["stage1", "dpf_off"], CATALOG)

    assert items == [
        PricedItem(code="stage1", name="STAGE1", price=Decimal("150.00")),
        PricedItem(code="dpf_off", name="DPF_OFF", price=Decimal("100.00")),
    ]
    assert total_price(items) == Decimal("250.00")


def test_every_unknown_or_inactive_code_is_reported():
    with pytest.raises(UnknownServiceCode) as exc_info:
        resolve_prices(["stage1", "nope", "retired"], CATALOG)

    assert exc_info.value.codes == ["nope", "retired"]
    assert exc_info.value.status_code == 422


def test_empty_selection_is_rejected():
    with pytest.raises(UnknownServiceCode) as exc_info:
        resolve_prices([], CATALOG)

    assert exc_info.value.detail == "Select at least one service"


def test_total_of_nothing_is_zero():
    assert total_price([]) == Decimal("0.00")


def test_resolver_reads_current_catalog(seeded):
    async def _price(codes):
        async with seeded() as session:
            return await PricingResolver.with_session(session).price(codes)

    items = run(_price(["stage2", "egr_off", "stage2"]))

    assert [item.code for item in items] == ["stage2", "egr_off"]
    assert total_price(items) == Decimal("280.00")


def test_deactivated_service_can_no_longer_be_priced(seeded):
    async def _deactivate_and_price():
        async with seeded() as session:
            await CatalogService.with_session(session).update_item("dpf_off", active=False)
            await session.commit()
        async with seeded() as session:
            return await PricingResolver.with_session(session).price(["dpf_off"])

    with pytest.raises(UnknownServiceCode):
        run(_deactivate_and_price())
