"""Persistent cache of last observed live prices."""

import json
import threading
import logging
from typing import Optional

from pricefolio.core.numbers import as_finite
from pricefolio.core.symbols import normalize_symbol
from pricefolio.core.timezone import Clock, now_ms
from pricefolio.domain.models import PricePoint
from pricefolio.repositories.protocols import KeyValueStore

logger = logging.getLogger(__name__)

DEFAULT_TTL_MS = 60 * 60 * 1000
DEFAULT_CACHE_KEY = "last_live_prices"


class PriceCacheService:
    """
    Last-known-good price per symbol, persisted as one JSON blob.

    The whole map is written through to the key-value store on every change
    and loaded lazily on first access. Storage failures are logged and the
    in-memory map stays authoritative for the rest of the process lifetime.
    """

    def __init__(
        self,
        store: KeyValueStore,
        ttl_ms: int = DEFAULT_TTL_MS,
        cache_key: str = DEFAULT_CACHE_KEY,
        clock: Optional[Clock] = None,
    ):
        self._store = store
        self._ttl_ms = ttl_ms
        self._cache_key = cache_key
        self._clock = clock or now_ms
        self._entries: dict[str, PricePoint] = {}
        self._loaded = False
        self._lock = threading.RLock()

    @property
    def ttl_ms(self) -> int:
        return self._ttl_ms

    def save(self, symbol: str, price: float) -> None:
        """Record price for symbol at the current time and persist the map."""
        value = as_finite(price)
        if value is None or value < 0:
            logger.warning("PriceCache: ignoring invalid price %r for %s", price, symbol)
            return

        with self._lock:
            self._ensure_loaded()
            self._entries[normalize_symbol(symbol)] = PricePoint(price=value, timestamp=self._clock())
            self._persist()

    def get(self, symbol: str) -> Optional[float]:
        """
        Return the cached price for symbol if it is within the TTL.

        An expired entry is evicted (and the reduced map persisted) on read.
        """
        key = normalize_symbol(symbol)
        with self._lock:
            self._ensure_loaded()
            point = self._entries.get(key)
            if point is None:
                return None

            if self._is_expired(point, self._clock()):
                del self._entries[key]
                self._persist()
                logger.debug("PriceCache: evicted expired price for %s", key)
                return None

            return point.price

    def get_all(self) -> dict[str, float]:
        """Return every non-expired cached price (expired entries are skipped, not evicted)."""
        with self._lock:
            self._ensure_loaded()
            now = self._clock()
            return {
                symbol: point.price
                for symbol, point in self._entries.items()
                if not self._is_expired(point, now)
            }

    def purge_expired(self) -> int:
        """Evict every expired entry. Returns the number of entries removed."""
        with self._lock:
            self._ensure_loaded()
            now = self._clock()
            expired = [s for s, point in self._entries.items() if self._is_expired(point, now)]

            for symbol in expired:
                del self._entries[symbol]

            if expired:
                self._persist()
                logger.info("PriceCache: cleared %d expired prices", len(expired))
            return len(expired)

    def _is_expired(self, point: PricePoint, now: int) -> bool:
        return point.age_ms(now) > self._ttl_ms

    def _ensure_loaded(self) -> None:
        """Load the persisted map once per instance."""
        if self._loaded:
            return
        self._loaded = True

        try:
            raw = self._store.get(self._cache_key)
        except Exception:
            logger.warning("PriceCache: failed to load cached prices", exc_info=True)
            return
        if not raw:
            return

        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("PriceCache: discarding unreadable cache blob")
            return
        if not isinstance(data, dict):
            logger.warning("PriceCache: discarding unexpected cache blob of type %s", type(data).__name__)
            return

        for symbol, entry in data.items():
            point = self._parse_entry(entry)
            if point is None:
                logger.debug("PriceCache: skipping malformed entry for %s", symbol)
                continue
            self._entries[normalize_symbol(symbol)] = point

    @staticmethod
    def _parse_entry(entry) -> Optional[PricePoint]:
        if not isinstance(entry, dict):
            return None
        price = as_finite(entry.get("price"))
        timestamp = as_finite(entry.get("timestamp"))
        if price is None or timestamp is None or price < 0:
            return None
        return PricePoint(price=price, timestamp=int(timestamp))

    def _persist(self) -> None:
        payload = json.dumps({symbol: point.to_dict() for symbol, point in self._entries.items()})
        try:
            self._store.set(self._cache_key, payload)
        except Exception:
            logger.warning("PriceCache: failed to persist cached prices", exc_info=True)
