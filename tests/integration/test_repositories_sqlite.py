"""
Integration tests for SQLAlchemy repositories with SQLite.

Tests cover:
- Key-value store get/set/overwrite
- Holdings repository CRUD operations
- Price cache persisted through the SQL store and reloaded by a new instance
- AppContext wiring against an on-disk database
"""

import json
from concurrent.futures import ThreadPoolExecutor

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from pricefolio.app_context import AppContext
from pricefolio.config.settings import reset_settings
from pricefolio.domain.models import HoldingRecord
from pricefolio.repositories.sqlalchemy import (
    Base,
    reset_database,
    SqlAlchemyKeyValueStore,
    SqlAlchemyHoldingsRepository,
)
from pricefolio.services import PriceCacheService

from tests.conftest import DeterministicMarketProvider, FakeClock


# =============================================================================
# KEY-VALUE STORE TESTS
# =============================================================================


class TestKeyValueStore:
    """Tests for SqlAlchemyKeyValueStore."""

    def test_missing_key_returns_none(self, kv_store: SqlAlchemyKeyValueStore):
        assert kv_store.get("nope") is None

    def test_set_then_get(self, kv_store: SqlAlchemyKeyValueStore):
        """
        GIVEN an in-memory SQLite database
        WHEN I set a key
        THEN the value can be read back
        """
        kv_store.set("greeting", "hello")

        assert kv_store.get("greeting") == "hello"

    def test_set_overwrites(self, kv_store: SqlAlchemyKeyValueStore):
        kv_store.set("k", "one")
        kv_store.set("k", "two")

        assert kv_store.get("k") == "two"

    def test_value_visible_to_new_session(self, kv_store: SqlAlchemyKeyValueStore, test_engine):
        kv_store.set("k", "persisted")

        with Session(test_engine) as other:
            assert SqlAlchemyKeyValueStore(other).get("k") == "persisted"

    def test_factory_bound_store_shared_across_threads(self, tmp_path):
        """
        GIVEN a store bound to a session factory over a SQLite file
        WHEN several threads write through the same store instance
        THEN every write lands, each in its own session
        """
        engine = create_engine(
            f"sqlite:///{tmp_path / 'kv.db'}",
            connect_args={"check_same_thread": False},
        )
        Base.metadata.create_all(bind=engine)
        store = SqlAlchemyKeyValueStore(session_factory=sessionmaker(bind=engine))

        with ThreadPoolExecutor(max_workers=4) as pool:
            list(pool.map(lambda i: store.set(f"k{i}", str(i)), range(8)))

        assert [store.get(f"k{i}") for i in range(8)] == [str(i) for i in range(8)]
        engine.dispose()


# =============================================================================
# HOLDINGS REPOSITORY TESTS
# =============================================================================


class TestHoldingsRepository:
    """Tests for SqlAlchemyHoldingsRepository."""

    def test_upsert_creates(self, holdings_repo: SqlAlchemyHoldingsRepository):
        """
        GIVEN no holdings
        WHEN I upsert a lower-case symbol
        THEN it is stored under the upper-case symbol with all fields
        """
        created = holdings_repo.upsert(
            HoldingRecord(
                symbol="btc",
                quantity=0.5,
                average_price=40000.0,
                coin_id="bitcoin",
                dividend_yield=None,
            )
        )

        assert created.symbol == "BTC"
        retrieved = holdings_repo.get("btc")
        assert retrieved == HoldingRecord(
            symbol="BTC",
            quantity=0.5,
            average_price=40000.0,
            currency="USD",
            coin_id="bitcoin",
        )

    def test_upsert_updates(self, holdings_repo: SqlAlchemyHoldingsRepository):
        holdings_repo.upsert(HoldingRecord(symbol="AAPL", quantity=10, average_price=150.0))
        holdings_repo.upsert(
            HoldingRecord(symbol="AAPL", quantity=12, average_price=155.0, annual_dividend_income=11.0)
        )

        records = holdings_repo.list_holdings()
        assert len(records) == 1
        assert records[0].quantity == 12.0
        assert records[0].annual_dividend_income == 11.0

    def test_symbols_are_stripped(self, holdings_repo: SqlAlchemyHoldingsRepository):
        holdings_repo.upsert(HoldingRecord(symbol=" aapl ", quantity=1, average_price=1.0))

        assert [r.symbol for r in holdings_repo.list_holdings()] == ["AAPL"]
        assert holdings_repo.get("AAPL ") is not None
        assert holdings_repo.delete(" aapl") is True

    def test_list_ordered_by_symbol(self, holdings_repo: SqlAlchemyHoldingsRepository):
        for symbol in ("MSFT", "AAPL", "BTC"):
            holdings_repo.upsert(HoldingRecord(symbol=symbol, quantity=1, average_price=1.0))

        assert [r.symbol for r in holdings_repo.list_holdings()] == ["AAPL", "BTC", "MSFT"]

    def test_delete(self, holdings_repo: SqlAlchemyHoldingsRepository):
        holdings_repo.upsert(HoldingRecord(symbol="AAPL", quantity=1, average_price=1.0))

        assert holdings_repo.delete("aapl") is True
        assert holdings_repo.get("AAPL") is None
        assert holdings_repo.delete("AAPL") is False


# =============================================================================
# PRICE CACHE OVER SQL TESTS
# =============================================================================


class TestPriceCachePersistence:
    """Tests for the price cache persisted through the SQL key-value store."""

    def test_cache_survives_new_instance(self, kv_store: SqlAlchemyKeyValueStore, clock: FakeClock):
        """
        GIVEN a cache that saved BTC through the SQL store
        WHEN a new cache instance reads the same store
        THEN the price is loaded from the database
        """
        PriceCacheService(store=kv_store, clock=clock).save("BTC", 60000.0)

        reloaded = PriceCacheService(store=kv_store, clock=clock)

        assert reloaded.get("BTC") == 60000.0
        assert json.loads(kv_store.get("last_live_prices"))["BTC"]["price"] == 60000.0


# =============================================================================
# APP CONTEXT TESTS
# =============================================================================


@pytest.fixture
def app_context(tmp_path):
    """Provide an initialized AppContext and restore global database state afterwards."""
    ctx = AppContext(data_dir=tmp_path / "data", provider=DeterministicMarketProvider())
    ctx.initialize()
    yield ctx
    ctx.close()
    reset_database()
    reset_settings()


class TestAppContext:
    """Tests for AppContext against an on-disk database."""

    def test_initialization_creates_database(self, app_context: AppContext, tmp_path):
        assert app_context.is_initialized
        assert app_context.data_dir == tmp_path / "data"
        assert (tmp_path / "data" / "pricefolio.db").exists()
        assert app_context.holdings is not None
        assert app_context.analysis is not None

    def test_import_and_refresh(self, app_context: AppContext):
        """
        GIVEN an initialized context with a deterministic provider
        WHEN I import holdings from CSV and refresh them
        THEN prices resolve and the cache is populated
        """
        summary = app_context.csv_importer.import_text("symbol,quantity,average_price\nBTC,1,50000\n")
        assert summary.imported_count == 1

        holdings = app_context.holdings.refresh_holdings()

        assert holdings[0].current_price == 60000.0
        assert app_context.price_cache.get("BTC") == 60000.0
        assert app_context.price_refresher.refresh_now()
        assert app_context.analysis.portfolio_snapshot().capital_gains == 10000.0

    def test_refresh_on_worker_thread_while_importing(self, app_context: AppContext):
        """
        GIVEN an initialized context holding BTC
        WHEN holdings are refreshed on worker threads while the caller imports CSV rows
        THEN every refresh completes and every import is stored
        """
        app_context.csv_importer.import_text("symbol,quantity,average_price\nBTC,1,50000\n")

        with ThreadPoolExecutor(max_workers=2) as pool:
            refreshes = [pool.submit(app_context.holdings.refresh_holdings) for _ in range(5)]
            for i in range(5):
                app_context.csv_importer.import_text(f"symbol,quantity,average_price\nAAPL,{i + 1},150\n")
            results = [f.result() for f in refreshes]

        assert all("BTC" in {h.symbol for h in holdings} for holdings in results)
        records = {r.symbol: r for r in app_context.holdings.list_records()}
        assert records["AAPL"].quantity == 5.0
        assert app_context.price_cache.get("BTC") == 60000.0
