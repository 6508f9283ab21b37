"""Catalog domain exports"""

from .exceptions import CatalogItemNotFound, UnknownServiceCode
from .models import CatalogItem, PricedItem
from .pricing import PricingResolver, dedupe_codes, resolve_prices, total_price
from .service import CatalogService

__all__ = [
    "CatalogItem",
    "CatalogItemNotFound",
    "CatalogService",
    "PricedItem",
    "PricingResolver",
    "UnknownServiceCode",
    "dedupe_codes",
    "resolve_prices",
    "total_price",
]
