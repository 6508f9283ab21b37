from fastapi import APIRouter

from tuneledger.interfaces.http.routers import admin, catalog, customer, messages, payments, websocket


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(customer.router, prefix="/customer", tags=["customer"])
    router.include_router(catalog.router, prefix="/catalog", tags=["catalog"])
    router.include_router(messages.router, prefix="/jobs", tags=["messages"])
    router.include_router(admin.router, prefix="/admin", tags=["admin"])
    router.include_router(payments.router, prefix="/payments", tags=["payments"])
    return router


__all__ = [
    "create_api_router",
    "websocket",
]
