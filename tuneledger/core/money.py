"""Credit amounts are Decimals with two places in the domain and integer cents on disk."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")


def to_decimal(value: Decimal | int | float | str) -> Decimal:
    try:
        amount = Decimal(str(value)) if not isinstance(value, Decimal) else value
    except InvalidOperation as exc:
        raise ValueError(f"invalid credit amount: {value!r}") from exc
    if not amount.is_finite():
        raise ValueError(f"invalid credit amount: {value!r}")
    if amount != amount.quantize(CENT, rounding=ROUND_HALF_UP):
        raise ValueError(f"credit amounts have at most two decimal places: {value!r}")
    return amount.quantize(CENT)


def to_cents(value: Decimal | int | float | str) -> int:
    return int(to_decimal(value) * 100)


def from_cents(cents: int) -> Decimal:
    return (Decimal(cents) / 100).quantize(CENT)


__all__ = ["CENT", "to_decimal", "to_cents", "from_cents"]
