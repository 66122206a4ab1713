from pathlib import Path
from typing import Any, AsyncIterator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.schema import CreateTable

from forecast_portal.common import Storage, tables
from forecast_portal.config import Settings
from forecast_portal.games import RecordOutcome, record_deployment
from forecast_portal.web.app import build_app

from helpers import (
    AGENT_ID,
    CHAIN_ID,
    FACTORY_ABI,
    FACTORY_ADDRESS,
    Record,
    make_event,
    make_metadata,
)


@pytest.fixture(autouse=True)
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def database_url(tmp_path: Path) -> str:
    return f"sqlite:///{tmp_path / 'portal.db'}"


@pytest.fixture
async def storage(database_url: str) -> AsyncIterator[Storage]:
    storage = Storage(database_url)
    await storage.connect()
    assert storage.database.is_connected
    # The deployment script owns this table in production.
    await storage.database.execute(
        query=CreateTable(tables.deployed_contracts, if_not_exists=True)
    )
    yield storage
    await storage.disconnect()
    assert not storage.database.is_connected


@pytest.fixture
def unreachable_storage(tmp_path: Path) -> Storage:
    """Points at a sqlite file in a directory that doesn't exist."""
    return Storage(f"sqlite:///{tmp_path / 'missing' / 'portal.db'}")


@pytest.fixture
async def factory_id(storage: Storage) -> int:
    factory_id: int = await storage.database.execute(
        query=tables.deployed_contracts.insert().values(
            contract_name="ForecastGameFactory",
            address=FACTORY_ADDRESS,
            abi=FACTORY_ABI,
            bytecode="0x6080604052",
            status="deployed",
            chain_id=CHAIN_ID,
            compiler_version="0.8.24",
        )
    )
    return factory_id


@pytest.fixture
def settings(database_url: str) -> Settings:
    return Settings(
        database_url=database_url,
        factory_address=FACTORY_ADDRESS,
        chain_id=CHAIN_ID,
        agent_id=AGENT_ID,
    )


@pytest.fixture
def record(storage: Storage, factory_id: int) -> Record:
    """Records deployment number `n` against the test factory."""

    async def _record(
        n: int, categories: list[str] | None = None, **overrides: Any
    ) -> RecordOutcome:
        return await record_deployment(
            storage, make_event(n), make_metadata(categories, **overrides)
        )

    return _record


@pytest.fixture
async def api(storage: Storage, settings: Settings) -> AsyncIterator[AsyncClient]:
    app = build_app(storage, settings)
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as api:
        yield api
