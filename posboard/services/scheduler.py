"""Polling and debounce timers driving live re-fetches."""

from __future__ import annotations

import enum
import logging
import threading
from typing import Callable, Optional

from .api_client import FetchError

logger = logging.getLogger("posboard.scheduler")

TimerFactory = Callable[[float, Callable[[], None]], threading.Timer]


class RefreshState(enum.Enum):
    IDLE = "idle"
    FETCHING = "fetching"
    FAILED = "failed"


class RefreshScheduler:
    """Run ``fetch`` on a fixed poll interval and after a quiet period following edits.

    The two triggers are independent and may overlap; callers that care about
    stale responses must guard their own state (see ``Pipeline``). ``close``
    cancels both timers and turns any later firing into a no-op.
    """

    def __init__(
        self,
        fetch: Callable[[], None],
        poll_interval: float,
        debounce: float,
        *,
        timer_factory: TimerFactory = threading.Timer,
        name: str = "refresh",
    ):
        if poll_interval <= 0:
            raise ValueError("poll_interval must be positive")
        if debounce < 0:
            raise ValueError("debounce must not be negative")
        self.fetch = fetch
        self.poll_interval = poll_interval
        self.debounce = debounce
        self.name = name
        self._timer_factory = timer_factory
        self._lock = threading.Lock()
        self._poll_timer: Optional[threading.Timer] = None
        self._debounce_timer: Optional[threading.Timer] = None
        self._in_flight = 0
        self._state = RefreshState.IDLE
        self._closed = False
        self.last_error: Optional[str] = None

    @property
    def state(self) -> RefreshState:
        return self._state

    @property
    def closed(self) -> bool:
        return self._closed

    def _new_timer(self, delay: float, func: Callable[[], None]) -> threading.Timer:
        timer = self._timer_factory(delay, func)
        timer.daemon = True
        timer.start()
        return timer

    # ---------- triggers ----------

    def start(self) -> None:
        """Fetch once and begin polling."""
        with self._lock:
            if self._closed:
                raise RuntimeError(f"{self.name} scheduler is closed")
            if self._poll_timer is not None:
                return
            self._poll_timer = self._new_timer(self.poll_interval, self._on_poll)
        logger.info("%s: polling every %.2fs", self.name, self.poll_interval)
        self.run_now("start")

    def notify_change(self) -> None:
        """Restart the debounce window; fetch fires once edits go quiet."""
        with self._lock:
            if self._closed:
                return
            if self._debounce_timer is not None:
                self._debounce_timer.cancel()
            self._debounce_timer = self._new_timer(self.debounce, self._on_debounce)

    def close(self) -> None:
        with self._lock:
            self._closed = True
            for timer in (self._poll_timer, self._debounce_timer):
                if timer is not None:
                    timer.cancel()
            self._poll_timer = None
            self._debounce_timer = None
        logger.info("%s: scheduler closed", self.name)

    # ---------- timer callbacks ----------

    def _on_poll(self) -> None:
        self.run_now("poll")
        with self._lock:
            if self._closed:
                return
            self._poll_timer = self._new_timer(self.poll_interval, self._on_poll)

    def _on_debounce(self) -> None:
        with self._lock:
            self._debounce_timer = None
        self.run_now("debounce")

    def run_now(self, reason: str = "manual") -> RefreshState:
        """Invoke ``fetch`` synchronously and return the resulting state."""
        with self._lock:
            if self._closed:
                return self._state
            self._in_flight += 1
            self._state = RefreshState.FETCHING

        outcome = RefreshState.IDLE
        try:
            self.fetch()
            self.last_error = None
        except FetchError as exc:
            logger.warning("%s: %s fetch failed: %s", self.name, reason, exc)
            self.last_error = str(exc)
            outcome = RefreshState.FAILED
        except Exception as exc:
            logger.exception("%s: %s fetch raised unexpectedly", self.name, reason)
            self.last_error = str(exc)
            outcome = RefreshState.FAILED

        with self._lock:
            self._in_flight -= 1
            if self._in_flight == 0 or outcome is RefreshState.FAILED:
                self._state = outcome
            return self._state


__all__ = ["RefreshScheduler", "RefreshState"]
