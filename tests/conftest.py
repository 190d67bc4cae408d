"""
Pytest configuration and fixtures for pricefolio tests.

This module provides:
- A fixed epoch-millisecond clock
- In-memory SQLite database fixtures
- In-memory and failing key-value stores
- Deterministic and failing market data providers
- Service and repository fixtures
- Price series and holding factories
"""

import math
import os
import tempfile
from typing import Callable, Optional

import pytest
from sqlalchemy import create_engine, StaticPool
from sqlalchemy.orm import sessionmaker, Session
from fastapi.testclient import TestClient

from pricefolio.main import app
from pricefolio.repositories.sqlalchemy.database import Base, get_db, reset_database
# Import ORM models to register them with Base before creating tables
from pricefolio.repositories.sqlalchemy import orm_models  # noqa: F401
from pricefolio.repositories.sqlalchemy import (
    SqlAlchemyKeyValueStore,
    SqlAlchemyHoldingsRepository,
)
from pricefolio.api.deps import get_cache_store, get_market_provider
from pricefolio.config.settings import Settings, set_settings, reset_settings
from pricefolio.core.exceptions import QuoteUnavailableError
from pricefolio.core.timezone import MS_PER_DAY
from pricefolio.domain.models import (
    Holding,
    HoldingRecord,
    MarketTicker,
    PortfolioValue,
    PriceBar,
    Quote,
)
from pricefolio.providers.stub_provider import StubMarketDataProvider
from pricefolio.services import (
    PriceCacheService,
    PriceResolver,
    MarketDataService,
    HoldingsService,
    PortfolioAnalyticsService,
    TechnicalAnalysisService,
    AnalysisService,
)
from pricefolio.csv import CsvHoldingsImporter


# =============================================================================
# CLOCK HELPERS
# =============================================================================

# 2024-06-15 14:30:00 UTC
FIXED_NOW_MS = 1718461800000


class FakeClock:
    """Manually advanced epoch-millisecond clock."""

    def __init__(self, now_ms: int = FIXED_NOW_MS):
        self.now_ms = now_ms

    def __call__(self) -> int:
        return self.now_ms

    def advance(self, ms: int) -> None:
        self.now_ms += ms


@pytest.fixture
def clock() -> FakeClock:
    """Fixed 'now' clock for deterministic tests."""
    return FakeClock()


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture(scope="function")
def test_engine():
    """Create test database engine with shared in-memory SQLite."""
    # Reset settings for clean state
    reset_settings()

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def test_session(test_engine) -> Session:
    """Create test database session."""
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()


# =============================================================================
# STORE FIXTURES
# =============================================================================


class InMemoryKeyValueStore:
    """Dict-backed KeyValueStore that records every write."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})
        self.writes: list[tuple[str, str]] = []
        self.reads = 0

    def get(self, key: str) -> Optional[str]:
        self.reads += 1
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.writes.append((key, value))
        self.data[key] = value


class FailingKeyValueStore:
    """KeyValueStore whose storage is unavailable."""

    def get(self, key: str) -> Optional[str]:
        raise OSError("Storage unavailable")

    def set(self, key: str, value: str) -> None:
        raise OSError("Storage unavailable")


@pytest.fixture
def memory_store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def failing_store() -> FailingKeyValueStore:
    return FailingKeyValueStore()


@pytest.fixture
def kv_store(test_session) -> SqlAlchemyKeyValueStore:
    """Provide test KeyValueStore."""
    return SqlAlchemyKeyValueStore(test_session)


@pytest.fixture
def holdings_repo(test_session) -> SqlAlchemyHoldingsRepository:
    """Provide test HoldingsRepository."""
    return SqlAlchemyHoldingsRepository(test_session)


# =============================================================================
# MARKET DATA FIXTURES
# =============================================================================


class DeterministicMarketProvider:
    """
    Deterministic market data provider for testing.

    Provides fixed quotes, a fixed listing and caller-supplied series.
    """

    FIXED_QUOTES = {
        "AAPL": (185.50, 0.68),
        "MSFT": (378.25, 0.38),
        "TSLA": (248.75, -0.54),
        "BTC": (60000.0, 2.5),
        "ETH": (3300.0, 1.2),
    }

    FIXED_TICKERS = [
        MarketTicker(id="bitcoin", symbol="btc", current_price=59000.0, price_change_percentage_24h=1.5),
        MarketTicker(id="ethereum", symbol="eth", current_price=3250.0, price_change_percentage_24h=0.9),
        MarketTicker(id="solana", symbol="sol", current_price=97.0, price_change_percentage_24h=-2.0),
    ]

    def __init__(self, series: Optional[dict[str, list[PriceBar]]] = None):
        self.series = series or {}
        self.quote_calls: list[str] = []

    def fetch_quote(self, symbol: str) -> Quote:
        self.quote_calls.append(symbol)
        upper_symbol = symbol.upper()
        if upper_symbol not in self.FIXED_QUOTES:
            raise QuoteUnavailableError(upper_symbol)
        price, change = self.FIXED_QUOTES[upper_symbol]
        return Quote(
            symbol=upper_symbol,
            price=price,
            change_percent=change,
            timestamp=FIXED_NOW_MS,
            dividend_yield=0.5 if upper_symbol == "AAPL" else None,
        )

    def fetch_series(self, symbol: str, range_spec: str) -> list[PriceBar]:
        return list(self.series.get(symbol.upper(), []))

    def fetch_market_data(self, limit: int = 50) -> list[MarketTicker]:
        return list(self.FIXED_TICKERS[:limit])


class FailingMarketProvider:
    """Market provider that always raises an exception."""

    def fetch_quote(self, symbol: str) -> Quote:
        raise ConnectionError("Network unavailable")

    def fetch_series(self, symbol: str, range_spec: str) -> list[PriceBar]:
        raise ConnectionError("Network unavailable")

    def fetch_market_data(self, limit: int = 50) -> list[MarketTicker]:
        raise ConnectionError("Network unavailable")


@pytest.fixture
def deterministic_provider() -> DeterministicMarketProvider:
    """Provide deterministic market data provider."""
    return DeterministicMarketProvider()


@pytest.fixture
def failing_provider() -> FailingMarketProvider:
    """Provide a market provider that always fails."""
    return FailingMarketProvider()


@pytest.fixture
def stub_provider(clock) -> StubMarketDataProvider:
    """Provide stub MarketDataProvider with fixed seed."""
    return StubMarketDataProvider(seed=42, clock=clock)


# =============================================================================
# SERVICE FIXTURES
# =============================================================================


@pytest.fixture
def price_cache(memory_store, clock) -> PriceCacheService:
    """Provide PriceCacheService over an in-memory store."""
    return PriceCacheService(store=memory_store, clock=clock)


@pytest.fixture
def fallback_prices() -> dict[str, float]:
    return {"BTC": 51200.0, "ETH": 3200.0, "USDT": 1.0}


@pytest.fixture
def resolver(price_cache, fallback_prices) -> PriceResolver:
    """Provide PriceResolver with the standard strategy chain."""
    return PriceResolver(cache=price_cache, fallback_prices=fallback_prices)


@pytest.fixture
def market_data_service(deterministic_provider, clock) -> MarketDataService:
    """Provide test MarketDataService with deterministic provider."""
    return MarketDataService(
        provider=deterministic_provider,
        fetch_timeout_seconds=5,
        clock=clock,
    )


@pytest.fixture
def holdings_service(holdings_repo, market_data_service, resolver) -> HoldingsService:
    """Provide test HoldingsService."""
    return HoldingsService(
        repository=holdings_repo,
        market_data=market_data_service,
        resolver=resolver,
    )


@pytest.fixture
def analytics_service() -> PortfolioAnalyticsService:
    return PortfolioAnalyticsService(risk_free_rate=0.02)


@pytest.fixture
def technical_service() -> TechnicalAnalysisService:
    return TechnicalAnalysisService()


@pytest.fixture
def analysis_service(holdings_service, market_data_service) -> AnalysisService:
    """Provide test AnalysisService."""
    return AnalysisService(
        holdings_service=holdings_service,
        market_data_service=market_data_service,
    )


@pytest.fixture
def csv_importer(holdings_repo) -> CsvHoldingsImporter:
    """Provide test CsvHoldingsImporter."""
    return CsvHoldingsImporter(repository=holdings_repo)


# =============================================================================
# FACTORY FIXTURES
# =============================================================================


@pytest.fixture
def holding_factory() -> Callable[..., Holding]:
    """Factory for creating priced holdings."""

    def _create_holding(
        symbol: str = "BTC",
        quantity: float = 1.0,
        average_price: float = 50000.0,
        current_price: float = 60000.0,
        annual_dividend_income: Optional[float] = None,
    ) -> Holding:
        return Holding(
            symbol=symbol,
            quantity=quantity,
            average_price=average_price,
            current_price=current_price,
            annual_dividend_income=annual_dividend_income,
        )

    return _create_holding


@pytest.fixture
def sample_records(holdings_repo) -> list[HoldingRecord]:
    """Store a small mixed portfolio."""
    records = [
        HoldingRecord(symbol="BTC", quantity=0.5, average_price=40000.0, coin_id="bitcoin"),
        HoldingRecord(symbol="AAPL", quantity=10, average_price=150.0),
        HoldingRecord(symbol="XYZ", quantity=3, average_price=10.0),
    ]
    for record in records:
        holdings_repo.upsert(record)
    return records


# =============================================================================
# CSV FIXTURES
# =============================================================================


@pytest.fixture
def temp_csv_file():
    """Provide a temporary CSV file path that is cleaned up after test."""
    with tempfile.NamedTemporaryFile(
        mode="w",
        suffix=".csv",
        delete=False,
        encoding="utf-8",
    ) as f:
        tmp_path = f.name

    yield tmp_path

    # Cleanup
    if os.path.exists(tmp_path):
        os.unlink(tmp_path)


@pytest.fixture
def sample_csv_content() -> str:
    """Sample valid CSV content for import testing."""
    return """symbol,quantity,average_price,currency,coin_id,annual_dividend_income,dividend_yield
BTC,0.5,40000,USD,bitcoin,,
AAPL,10,150.00,USD,,,0.5
MSFT,"1,000",300,usd,,7.5,
"""


# =============================================================================
# API TEST CLIENT FIXTURE
# =============================================================================


@pytest.fixture
def client(test_engine, tmp_path, deterministic_provider) -> TestClient:
    """Provide FastAPI test client with test database and deterministic quotes."""
    reset_database()
    set_settings(Settings(data_dir=tmp_path))
    TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    def override_get_db():
        session = TestSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache_store] = lambda: SqlAlchemyKeyValueStore(session_factory=TestSessionLocal)
    app.dependency_overrides[get_market_provider] = lambda: deterministic_provider
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
    reset_database()
    reset_settings()


# =============================================================================
# HELPER FUNCTIONS (exported for use in tests)
# =============================================================================


def make_series(
    closes: list[float],
    start_ms: int = FIXED_NOW_MS,
    interval_ms: int = MS_PER_DAY,
    spread: float = 0.0,
) -> list[PriceBar]:
    """Build daily bars from closes; high/low are close +/- spread when spread > 0."""
    bars = []
    for i, close in enumerate(closes):
        bars.append(
            PriceBar(
                close=close,
                high=close + spread if spread else None,
                low=close - spread if spread else None,
                timestamp=start_ms + i * interval_ms,
            )
        )
    return bars


def wave(count: int, base: float = 100.0, amplitude: float = 5.0, drift: float = 0.1) -> list[float]:
    """Deterministic oscillating closes with a slight upward drift."""
    return [base + amplitude * math.sin(i / 3) + drift * i for i in range(count)]


def make_values(values: list[float], start_ms: int = FIXED_NOW_MS, interval_ms: int = MS_PER_DAY) -> list[PortfolioValue]:
    """Build an evenly spaced portfolio value history."""
    return [PortfolioValue(timestamp=start_ms + i * interval_ms, value=v) for i, v in enumerate(values)]
