"""Periodic price polling on a background thread."""

import logging
import threading
from typing import Callable, Optional

from pricefolio.core.timezone import Clock, now_ms

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SECONDS = 30.0
DEFAULT_STALE_AFTER_SECONDS = 60.0


class PriceRefresher:
    """
    Runs a refresh callable immediately and then every interval_seconds.

    stop() takes effect at the next wait: a cycle already running is allowed
    to finish but nothing is scheduled after it. A failing cycle is logged and
    polling continues.
    """

    def __init__(
        self,
        refresh: Callable[[], object],
        interval_seconds: float = DEFAULT_INTERVAL_SECONDS,
        stale_after_seconds: float = DEFAULT_STALE_AFTER_SECONDS,
        clock: Optional[Clock] = None,
    ):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._refresh = refresh
        self._interval = interval_seconds
        self._stale_after_ms = int(stale_after_seconds * 1000)
        self._clock = clock or now_ms
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._last_refreshed_ms: Optional[int] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stop_event.is_set()

    @property
    def last_refreshed_ms(self) -> Optional[int]:
        return self._last_refreshed_ms

    def start(self) -> None:
        """Start polling. Restarting replaces any previous schedule."""
        self.stop()
        with self._lock:
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._run,
                args=(self._stop_event,),
                name="price-refresher",
                daemon=True,
            )
            self._thread.start()
        logger.info("Price refresh started (every %.0fs)", self._interval)

    def stop(self, wait: bool = False, timeout: Optional[float] = None) -> None:
        """Cancel future cycles; optionally wait for an in-flight one to finish."""
        with self._lock:
            thread = self._thread
            self._stop_event.set()
            self._thread = None
        if thread is None:
            return
        if wait and thread is not threading.current_thread():
            thread.join(timeout)
        logger.info("Price refresh stopped")

    def needs_refresh(self, max_age_ms: Optional[int] = None) -> bool:
        """True if prices were never refreshed or are older than max_age_ms."""
        if self._last_refreshed_ms is None:
            return True
        limit = self._stale_after_ms if max_age_ms is None else max_age_ms
        return self._clock() - self._last_refreshed_ms > limit

    def refresh_if_stale(self, max_age_ms: Optional[int] = None) -> bool:
        """Refresh synchronously if stale. Returns True if a refresh ran."""
        if not self.needs_refresh(max_age_ms):
            return False
        return self.refresh_now()

    def refresh_now(self) -> bool:
        """Run one refresh cycle. Returns False if it failed."""
        try:
            self._refresh()
        except Exception:
            logger.exception("Price refresh failed")
            return False
        self._last_refreshed_ms = self._clock()
        return True

    def _run(self, stop_event: threading.Event) -> None:
        while not stop_event.is_set():
            self.refresh_now()
            if stop_event.wait(self._interval):
                break
