# ABOUTME: Background loop that keeps the forecast cache fresh while it is displayed
# ABOUTME: Ticks on a daemon thread and goes through the cache's staleness check

import logging
import threading
from typing import Optional

from weather_widget.cache.manager import ForecastCache

log = logging.getLogger(__name__)


class ForecastPoller:
    """Periodically refreshes the cache while a display consumer is attached"""

    def __init__(self, cache: ForecastCache, interval_seconds: float = 20):
        self.cache = cache
        self.interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the loop; does nothing if already running."""
        if self.is_running:
            return

        self._stop.clear()
        self._thread = threading.Thread(
            target=self._loop,
            name="forecast-poller",
            daemon=True
        )
        self._thread.start()
        log.info(f"Forecast poller started with {self.interval_seconds}s interval")

    def stop(self, timeout: float = 1.0) -> None:
        self._stop.set()
        if self._thread:
            self._thread.join(timeout=timeout)
            self._thread = None
        log.info("Forecast poller stopped")

    def tick(self) -> bool:
        """
        One iteration of the loop.

        Returns:
            True if a refresh was scheduled
        """
        if not self.cache.has_consumer:
            return False
        return self.cache.refresh_if_stale()

    def _loop(self) -> None:
        while not self._stop.wait(self.interval_seconds):
            try:
                self.tick()
            except Exception as e:
                log.error(f"Forecast poller tick failed: {e}")
