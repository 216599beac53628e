"""Pytest configuration and fixtures."""

from collections.abc import AsyncGenerator, Generator
from decimal import Decimal
from typing import Any

import pytest
import pytest_asyncio
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from intelligence_service.config import Settings
from intelligence_service.errors import UpstreamUnavailable
from intelligence_service.infrastructure.database.connection import (
    create_engine,
    create_session_factory,
    create_tables,
)
from intelligence_service.main import create_app
from intelligence_service.models import CatalogItem, PreferenceQuery
from intelligence_service.services.run_store import RunStore

SAMPLE_CATALOG: list[dict[str, Any]] = [
    {
        "id": 1,
        "brand": "Lumintop",
        "name": "Tool AA",
        "model_code": "TOOL-AA",
        "category": "edc",
        "use_case_tags": ["edc", "keychain"],
        "price_usd": 45.0,
        "weight_g": 55,
        "length_mm": 110,
        "battery_types": ["14500"],
        "max_lumens": 1000,
        "max_candela": 5000,
        "beam_distance_m": 140,
        "runtime_high_min": 60,
        "runtime_medium_min": 240,
        "waterproof_rating": "IPX8",
        "impact_resistance_m": 1.5,
        "edc_score": 88.5,
        "value_score": 91.0,
    },
    {
        "id": 2,
        "brand": "Streamlight",
        "name": "ProTac 2.0",
        "model_code": "PT-21",
        "category": "tactical",
        "use_case_tags": ["tactical", "law-enforcement"],
        "price_usd": 99.0,
        "weight_g": 180,
        "length_mm": 160,
        "battery_types": ["21700"],
        "max_lumens": 3000,
        "max_candela": 50000,
        "beam_distance_m": 450,
        "runtime_high_min": 120,
        "runtime_medium_min": 400,
        "waterproof_rating": "IP68",
        "impact_resistance_m": 2,
        "tactical_score": 84.0,
    },
    {
        "id": 3,
        "brand": "Fenix",
        "name": "PD36R",
        "model_code": "PD36R",
        "category": "tactical",
        "use_case_tags": ["tactical"],
        "price_usd": 89.0,
        "weight_g": 140,
        "length_mm": 150,
        "battery_types": ["18650"],
        "max_lumens": 1800,
        "max_candela": 45000,
        "beam_distance_m": 420,
        "runtime_high_min": 95,
        "runtime_medium_min": 240,
        "waterproof_rating": "IP68",
        "impact_resistance_m": 1.5,
    },
    {
        "id": 4,
        "brand": "Acebeam",
        "name": "L19",
        "model_code": "L19-2",
        "category": "search-rescue",
        "use_case_tags": ["search-rescue"],
        "price_usd": 149.0,
        "weight_g": 300,
        "length_mm": 190,
        "battery_types": ["21700"],
        "max_lumens": 2500,
        "max_candela": 110000,
        "beam_distance_m": 660,
        "runtime_high_min": 150,
        "runtime_medium_min": 500,
        "waterproof_rating": "IPX8",
        "impact_resistance_m": 1.5,
        "throw_score": 97.0,
    },
    {
        "id": 5,
        "brand": "Nameless",
        "name": "Unlisted Light",
    },
    {
        "id": 6,
        "brand": "Black Diamond",
        "name": "Moji",
        "category": "camping",
        "use_case_tags": ["camping"],
        "price_usd": 35.0,
        "weight_g": 120,
        "length_mm": 130,
        "battery_types": ["proprietary"],
        "max_lumens": 600,
        "runtime_medium_min": 720,
        "waterproof_rating": "IPX4",
        "flood_score": 72.0,
    },
]


class StaticCatalog:
    """Catalog source returning a fixed snapshot."""

    def __init__(self, raw_items: list[dict[str, Any]]):
        self.items = [CatalogItem.model_validate(raw) for raw in raw_items]
        self.calls = 0

    async def fetch_catalog(self) -> list[CatalogItem]:
        self.calls += 1
        return list(self.items)


class FailingCatalog:
    """Catalog source whose upstream is down."""

    async def fetch_catalog(self) -> list[CatalogItem]:
        raise UpstreamUnavailable("catalog unreachable: connection refused")


@pytest.fixture
def test_settings() -> Settings:
    """Get test settings with overrides."""
    return Settings(
        app_env="test",
        debug=False,
        database_dsn="sqlite+aiosqlite://",
        db_create_tables=True,
        redis_enabled=False,
    )


@pytest.fixture
def sample_catalog() -> StaticCatalog:
    """Six-item catalog covering tactical, edc, camping and a bare listing."""
    return StaticCatalog(SAMPLE_CATALOG)


@pytest.fixture
def failing_catalog() -> FailingCatalog:
    return FailingCatalog()


@pytest.fixture
def sample_items(sample_catalog: StaticCatalog) -> list[CatalogItem]:
    return list(sample_catalog.items)


@pytest.fixture
def edc_pocket_query() -> PreferenceQuery:
    """EDC buyer with $50 and a pocket-size constraint."""
    return PreferenceQuery(
        intended_use="edc",
        budget_usd=Decimal("50.00"),
        battery_preference="any",
        size_constraint="pocket",
    )


@pytest_asyncio.fixture
async def engine(test_settings: Settings) -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with the schema created."""
    engine = create_engine(test_settings)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(engine)


@pytest.fixture
def run_store(
    session_factory: async_sessionmaker[AsyncSession],
    sample_catalog: StaticCatalog,
) -> RunStore:
    """Run store over the in-memory database and the sample catalog."""
    return RunStore(session_factory, sample_catalog)


@pytest.fixture
def app(test_settings: Settings, sample_catalog: StaticCatalog) -> FastAPI:
    """Create test application."""
    return create_app(test_settings, catalog=sample_catalog)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Create synchronous test client with the lifespan running."""
    with TestClient(app) as test_client:
        yield test_client
