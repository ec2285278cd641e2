"""
One-second clock ticker for local countdowns.

Runs as an asyncio task on the caller's event loop, so tick observers never
run concurrently with other event handlers on that loop.

Usage:
    ticker = ClockTicker()
    unsubscribe = ticker.subscribe(reconciler.on_tick)
    ticker.start()
    ...
    ticker.stop()
    unsubscribe()
"""

import asyncio
import logging
from collections.abc import Callable

logger = logging.getLogger(__name__)


class ClockTicker:
    """Emits one tick per interval to every subscribed observer while running."""

    def __init__(self, interval: float = 1.0):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self._observers: list[Callable[[], None]] = []
        self._task: asyncio.Task | None = None
        self._generation = 0

    @property
    def running(self) -> bool:
        return self._task is not None

    def subscribe(self, observer: Callable[[], None]) -> Callable[[], None]:
        """Register an observer. Returns a callable that removes it again."""
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def start(self) -> None:
        """Begin a fresh cadence. No-op if already running."""
        if self._task is not None:
            return
        self._generation += 1
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(self._generation))
        logger.debug("Ticker started", extra={"interval": self.interval})

    def stop(self) -> None:
        """Stop ticking. Safe to call repeatedly."""
        if self._task is None:
            return
        # Bumping the generation stops delivery even mid-tick
        self._generation += 1
        self._task.cancel()
        self._task = None
        logger.debug("Ticker stopped")

    async def _run(self, generation: int) -> None:
        loop = asyncio.get_running_loop()
        next_at = loop.time() + self.interval
        try:
            while generation == self._generation:
                await asyncio.sleep(max(0.0, next_at - loop.time()))
                next_at += self.interval
                for observer in list(self._observers):
                    if generation != self._generation:
                        return
                    try:
                        observer()
                    except Exception:
                        logger.exception("Tick observer failed")
        except asyncio.CancelledError:
            pass
