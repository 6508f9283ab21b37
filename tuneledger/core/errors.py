"""Base error types shared by every domain module."""

from __future__ import annotations

from typing import Any


class DomainError(Exception):
    """Base class for expected, caller-facing failures.

    ``code`` is machine readable and stable; ``status_code`` is the HTTP status
    the API layer answers with; ``detail`` is the human message.
    """

    code = "domain_error"
    status_code = 400

    def __init__(self, detail: str | None = None, **data: Any) -> None:
        self.detail = detail or self.default_detail()
        self.data = data
        super().__init__(self.detail)

    def default_detail(self) -> str:
        return self.code.replace("_", " ")

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"detail": self.detail, "code": self.code}
        if self.data:
            payload["data"] = self.data
        return payload


class Unauthenticated(DomainError):
    code = "unauthenticated"
    status_code = 401

    def default_detail(self) -> str:
        return "Could not validate credentials"


class Unauthorized(DomainError):
    code = "unauthorized"
    status_code = 403

    def default_detail(self) -> str:
        return "You are not allowed to perform this action"


class StorageUnavailable(DomainError):
    """The database could not complete the request; nothing was written."""

    code = "storage_unavailable"
    status_code = 503

    def default_detail(self) -> str:
        return "Storage is temporarily unavailable, please retry"


__all__ = ["DomainError", "Unauthenticated", "Unauthorized", "StorageUnavailable"]
