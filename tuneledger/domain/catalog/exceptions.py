"""Catalog domain specific exceptions."""

from __future__ import annotations

from typing import Iterable

from tuneledger.core.errors import DomainError


class CatalogError(DomainError):
    """Base class for catalog errors."""


class UnknownServiceCode(CatalogError):
    code = "unknown_service_code"
    status_code = 422

    def __init__(self, codes: Iterable[str]) -> None:
        self.codes = sorted(codes)
        if self.codes:
            detail = "Unknown or inactive service code(s): " + ", ".join(self.codes)
        else:
            detail = "Select at least one service"
        super().__init__(detail, codes=self.codes)


class CatalogItemNotFound(CatalogError):
    code = "catalog_item_not_found"
    status_code = 404
