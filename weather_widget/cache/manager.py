# ABOUTME: Forecast cache with debounce and staleness-based refresh
# ABOUTME: Readers never block; one refresh at a time runs on a dedicated worker

import logging
import threading
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, Optional

from weather_widget.config import Config, WidgetSettings
from weather_widget.debug import debug_log
from weather_widget.weather.models import (
    CacheState,
    Error,
    ForecastResult,
    ForecastSample,
    NotPresent,
    Present,
)

log = logging.getLogger(__name__)

Fetcher = Callable[[WidgetSettings], list[ForecastSample]]
Listener = Callable[[ForecastResult], None]


def describe_error(error: BaseException) -> str:
    """Display string for a failed fetch: exception class, then message if any."""
    cls = type(error)
    name = f"{cls.__module__}.{cls.__qualname__}" if cls.__module__ != "builtins" else cls.__qualname__
    message = str(error)
    if message:
        return f"{name}:\n{message}"
    return name


class ForecastCache:
    """
    Last forecast result plus the timestamps that drive refreshes.

    Staleness policy, checked on every get_cached():
    - Within debounce_seconds of the last attempt: serve as-is
    - NotPresent or Error: refresh
    - Present: refresh once last_update is older than stale_after_seconds

    The previous value is always returned; refreshed data shows up on
    a later read.
    """

    def __init__(
        self,
        fetcher: Fetcher,
        settings: WidgetSettings,
        debounce_seconds: int = 30,
        stale_after_seconds: int = 300,
        clock: Callable[[], float] = time.time,
        executor: Optional[Executor] = None
    ):
        self.fetcher = fetcher
        self.settings = settings
        self.debounce_seconds = debounce_seconds
        self.stale_after_seconds = stale_after_seconds
        self._clock = clock

        self._state = CacheState()

        # One writer at a time
        self._refresh_lock = threading.Lock()
        # Guards _in_flight, _rerun_requested and the consumer registry
        self._schedule_lock = threading.Lock()
        self._in_flight = False
        self._rerun_requested = False

        self._executor = executor or ThreadPoolExecutor(
            max_workers=1,
            thread_name_prefix="forecast-refresh"
        )

        # Display consumers
        self._consumers = 0
        self._listeners: list[Listener] = []

    @classmethod
    def from_config(cls, fetcher: Fetcher, settings: WidgetSettings) -> "ForecastCache":
        return cls(
            fetcher=fetcher,
            settings=settings,
            debounce_seconds=Config.REFRESH_DEBOUNCE_SECONDS,
            stale_after_seconds=Config.FORECAST_STALE_SECONDS,
        )

    # ==================== State ====================

    @property
    def state(self) -> CacheState:
        return self._state

    @property
    def last_update(self) -> float:
        return self._state.last_update

    @property
    def last_attempt(self) -> float:
        return self._state.last_attempt

    # ==================== Read Path ====================

    def get_cached(self) -> ForecastResult:
        """
        Current forecast result, possibly scheduling a refresh.

        Never blocks on the fetch and never raises.
        """
        state = self._state
        try:
            self._refresh_if_stale(state)
        except Exception as e:
            log.error(f"Failed to schedule forecast refresh: {e}")
        return state.result

    def refresh_if_stale(self) -> bool:
        """
        Schedule a refresh if the staleness policy calls for one.

        Returns:
            True if a refresh was scheduled
        """
        return self._refresh_if_stale(self._state)

    def is_stale(self) -> bool:
        return self._needs_refresh(self._state, self._clock())

    def _refresh_if_stale(self, state: CacheState) -> bool:
        if not self._needs_refresh(state, self._clock()):
            return False
        return self._schedule(only_if_stale=True)

    def _needs_refresh(self, state: CacheState, now: float) -> bool:
        if state.last_attempt + self.debounce_seconds > now:
            return False

        if isinstance(state.result, (NotPresent, Error)):
            return True

        return state.last_update + self.stale_after_seconds < now

    # ==================== Refresh ====================

    def schedule_refresh(self, force: bool = False) -> bool:
        """
        Run refresh() on the worker unless one is already in flight.

        A forced trigger arriving while a refresh is in flight queues exactly
        one more refresh, run after the current one finishes.

        Returns:
            True if scheduled, False if coalesced into the running refresh
        """
        return self._schedule(force=force)

    def _schedule(self, force: bool = False, only_if_stale: bool = False) -> bool:
        with self._schedule_lock:
            if self._in_flight:
                if force:
                    self._rerun_requested = True
                    debug_log("Refresh in flight, queued one more", "CACHE")
                    return True
                debug_log("Refresh already in flight, skipping", "CACHE")
                return False
            # Recheck against the latest state; the caller may hold an older one
            if only_if_stale and not self._needs_refresh(self._state, self._clock()):
                return False
            self._in_flight = True

        self._submit()
        return True

    def _submit(self) -> None:
        try:
            self._executor.submit(self._run_scheduled)
        except RuntimeError:
            # Executor shut down
            with self._schedule_lock:
                self._in_flight = False
                self._rerun_requested = False
            raise

    def _run_scheduled(self) -> None:
        try:
            self.refresh()
        finally:
            with self._schedule_lock:
                rerun = self._rerun_requested
                self._rerun_requested = False
                if not rerun:
                    self._in_flight = False

            if rerun:
                debug_log("Running queued refresh", "CACHE")
                try:
                    self._submit()
                except RuntimeError:
                    log.warning("Refresh worker shut down, dropping queued refresh")

    def refresh(self) -> ForecastResult:
        """
        Fetch now and replace the cached state with the outcome.

        Blocks the calling thread for the duration of the fetch.

        Returns:
            The new result
        """
        with self._refresh_lock:
            started = self._clock()
            previous = self._state
            settings = self.settings.snapshot()

            try:
                samples = self.fetcher(settings)
                result: ForecastResult = Present(tuple(samples[:settings.hours]))
            except Exception as e:
                log.error(f"Forecast fetch failed: {type(e).__name__}: {e}")
                self._state = CacheState(
                    result=Error(describe_error(e)),
                    last_update=previous.last_update,
                    last_attempt=max(started, previous.last_update),
                )
            else:
                last_update = max(started, previous.last_update)
                self._state = CacheState(
                    result=result,
                    last_update=last_update,
                    last_attempt=last_update,
                )
                debug_log(f"Cached {len(result.samples)} forecast hours", "CACHE")

            new_result = self._state.result

        self._notify(new_result)
        return new_result

    # ==================== Settings ====================

    def settings_changed(self, **changes) -> bool:
        """
        Apply settings changes and refresh regardless of staleness.

        Raises:
            ValueError: Invalid settings; cache left untouched
        """
        self.settings.update(**changes)
        log.info(f"Settings changed: {sorted(changes)}")
        return self.schedule_refresh(force=True)

    # ==================== Consumers ====================

    def attach(self, listener: Optional[Listener] = None) -> None:
        """Register a display consumer, optionally listening for new results."""
        with self._schedule_lock:
            self._consumers += 1
            if listener is not None:
                self._listeners.append(listener)

    def detach(self, listener: Optional[Listener] = None) -> None:
        """Unregister a display consumer previously passed to attach()."""
        with self._schedule_lock:
            self._consumers = max(0, self._consumers - 1)
            if listener is not None and listener in self._listeners:
                self._listeners.remove(listener)

    @property
    def has_consumer(self) -> bool:
        return self._consumers > 0

    def _notify(self, result: ForecastResult) -> None:
        for listener in list(self._listeners):
            try:
                listener(result)
            except Exception as e:
                log.error(f"Forecast listener failed: {e}")

    def shutdown(self) -> None:
        """Stop the refresh worker, waiting for a running fetch."""
        self._executor.shutdown(wait=True)
