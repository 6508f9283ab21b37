import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from tuneledger import __version__
from tuneledger.core.config import get_settings
from tuneledger.core.errors import DomainError
from tuneledger.core.logging import configure_logging
from tuneledger.infrastructure.database.session import dispose_engine, init_db
from tuneledger.interfaces.http.routers import create_api_router
from tuneledger.interfaces.http.routers import websocket as websocket_router
from tuneledger.realtime import install_commit_hooks

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.create_tables:
        await init_db()
    yield
    await dispose_engine()


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    else:
        logger.info("%s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc.detail)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


def create_app(create_tables: bool = True) -> FastAPI:
    settings = get_settings()
    configure_logging(settings)
    install_commit_hooks()

    app = FastAPI(
        title=settings.project_name,
        description="Credit ledger and tuning job lifecycle",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.create_tables = create_tables

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DomainError, domain_error_handler)

    app.include_router(create_api_router(settings.api_prefix))
    app.include_router(websocket_router.router)

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok", "version": __version__}

    return app


app = create_app()
