"""Pytest fixtures: a temporary file-backed SQLite database per test."""
import asyncio
import uuid
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.pool import NullPool

from tuneledger.core.errors import StorageUnavailable
from tuneledger.core.security import create_access_token
from tuneledger.domain.accounts import AccountProfile, AccountService
from tuneledger.domain.catalog import CatalogService
from tuneledger.domain.ledger import EntryKind, LedgerService
from tuneledger.infrastructure.database.session import build_engine, build_session_factory, init_db
from tuneledger.interfaces.http.deps import get_db_session, get_notification_hub
from tuneledger.main import create_app
from tuneledger.realtime import NotificationHub, install_commit_hooks

CATALOG = [
    ("stage1", "Stage 1", Decimal("150.00")),
    ("stage2", "Stage 2", Decimal("200.00")),
    ("dpf_off", "DPF OFF", Decimal("100.00")),
    ("egr_off", "EGR OFF", Decimal("80.00")),
    ("speed_limiter", "Speed Limiter OFF", Decimal("60.00")),
]

VEHICLE = {
    "brand": "Volkswagen",
    "model": "Golf",
    "year": "2019",
    "engine_type": "2.0 TDI",
    "engine_power_hp": 150,
    "ecu_type": "EDC17C64",
}


def run(coro):
    """Drive a coroutine from a synchronous test."""
    return asyncio.run(coro)


@pytest.fixture(scope="function")
def db_engine(tmp_path):
    """Fresh SQLite database file for each test.

    NullPool keeps connections from leaking between the event loops that
    ``asyncio.run`` and the TestClient create.
    """
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", poolclass=NullPool)
    run(init_db(engine))
    yield engine
    run(engine.dispose())


@pytest.fixture(scope="function")
def session_factory(db_engine):
    install_commit_hooks()
    return build_session_factory(db_engine)


@pytest.fixture(scope="function")
def hub():
    return NotificationHub(queue_size=10)


@pytest.fixture(scope="function")
def seeded(session_factory):
    """Catalog with a few services."""

    async def _seed():
        async with session_factory() as session:
            service = CatalogService.with_session(session)
            for index, (code, name, price) in enumerate(CATALOG):
                await service.add_item(code=code, name=name, price=price, sort_order=index)
            await session.commit()

    run(_seed())
    return session_factory


@pytest.fixture(scope="function")
def client(session_factory, hub):
    """FastAPI TestClient with the database dependency bound to the test database."""
    app = create_app(create_tables=False)

    async def _override_get_db_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except OperationalError as exc:
                await session.rollback()
                raise StorageUnavailable() from exc
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = _override_get_db_session
    app.dependency_overrides[get_notification_hub] = lambda: hub
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------
def new_id() -> str:
    return str(uuid.uuid4())


def auth_headers(account_id: str, **claims) -> dict:
    return {"Authorization": f"Bearer {create_access_token(account_id, **claims)}"}


async def make_account(session_factory, account_id=None, balance=Decimal("0"), role="client"):
    """Provision an account and fund it through the ledger; returns the domain account."""
    account_id = account_id or new_id()
    async with session_factory() as session:
        accounts = AccountService.with_session(session)
        account = await accounts.ensure_account(AccountProfile(account_id=account_id, email=f"{account_id}@example.com"))
        if role != "client":
            account = await accounts.set_role(account_id, role)
        if balance > 0:
            await LedgerService.with_session(session).credit(
                account_id=account_id,
                amount=balance,
                external_ref=f"seed:{new_id()}",
                kind=EntryKind.PURCHASE_CREDIT,
            )
        await session.commit()
    return account


def create_account(session_factory, balance=Decimal("0"), role="client", account_id=None):
    return run(make_account(session_factory, account_id=account_id, balance=balance, role=role))


async def balance_of(session_factory, account_id: str) -> Decimal:
    async with session_factory() as session:
        return await LedgerService.with_session(session).get_balance(account_id)
