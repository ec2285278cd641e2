"""
Session state reconciliation.

The service pushes a focus snapshot only when the session changes, so the
countdown is extrapolated locally between pushes:

  - on_authoritative_update: replaces the whole mirrored state, discarding any
    local decrement since the previous push
  - on_tick: decrements remaining_seconds by one, floored at 0

Displayed phase is derived from remaining_seconds alone (> 0 is focusing), so
it can never disagree with the countdown after local decrements.

SessionFeed bundles the push channel, the ticker subscription and the
reconciler into one handle with a single teardown call.
"""

import asyncio
import logging
from collections.abc import Callable
from enum import Enum
from typing import Optional

from coach_console.models import SessionState
from coach_console.push import GET_FOCUSING, FocusingPush, HookResultPush, PushChannel, decode_push
from coach_console.ticker import ClockTicker

logger = logging.getLogger(__name__)


class SessionPhase(str, Enum):
    UNKNOWN = "unknown"
    IDLE = "idle"
    FOCUSING = "focusing"


class SessionStateReconciler:
    """Owns the locally displayed session snapshot."""

    def __init__(self):
        self._state: SessionState | None = None
        self._closed = False
        self._listeners: list[Callable[[SessionState], None]] = []

    @property
    def closed(self) -> bool:
        return self._closed

    def on_change(self, listener: Callable[[SessionState], None]) -> None:
        """Call listener with the new snapshot after every update or tick."""
        self._listeners.append(listener)

    def on_authoritative_update(self, payload: SessionState) -> None:
        if self._closed:
            return
        previous = self.phase
        self._state = payload
        if self.phase != previous:
            logger.info(f"Session {previous.value} -> {self.phase.value}")
        self._notify()

    def on_tick(self) -> None:
        if self._closed or self._state is None:
            return
        if self._state.remaining_seconds == 0:
            return
        self._state = self._state.model_copy(
            update={"remaining_seconds": self._state.remaining_seconds - 1}
        )
        self._notify()

    def current(self) -> SessionState | None:
        """Latest reconciled snapshot, or None before the first push."""
        return self._state

    @property
    def phase(self) -> SessionPhase:
        if self._state is None:
            return SessionPhase.UNKNOWN
        if self._state.remaining_seconds > 0:
            return SessionPhase.FOCUSING
        return SessionPhase.IDLE

    def close(self) -> None:
        """Stop accepting events. The last snapshot stays readable."""
        self._closed = True
        self._listeners.clear()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._state)


class SessionFeed:
    """
    Scoped session subscription.

    Usage:
        async with SessionFeed(WebSocketChannel(url), ClockTicker()) as feed:
            ...
            print(feed.reconciler.current())

    After close() returns, no tick or push reaches the reconciler.
    """

    def __init__(
        self,
        channel: PushChannel,
        ticker: ClockTicker,
        reconciler: Optional[SessionStateReconciler] = None,
        on_hook_result: Optional[Callable[[HookResultPush], None]] = None,
    ):
        self.channel = channel
        self.ticker = ticker
        self.reconciler = reconciler or SessionStateReconciler()
        self.on_hook_result = on_hook_result
        self._reader: asyncio.Task | None = None
        self._unsubscribe: Callable[[], None] | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def start(self) -> None:
        """Open the channel, request a snapshot, start reading and ticking."""
        if self._closed:
            raise RuntimeError("SessionFeed already closed")
        await self.channel.open()
        await self.channel.send(GET_FOCUSING)
        self._reader = asyncio.create_task(self._pump())
        self._unsubscribe = self.ticker.subscribe(self.reconciler.on_tick)
        self.ticker.start()

    def dispatch(self, message: FocusingPush | HookResultPush) -> None:
        """Route one decoded push message."""
        if self._closed:
            return
        if isinstance(message, FocusingPush):
            self.reconciler.on_authoritative_update(message.to_session_state())
        elif isinstance(message, HookResultPush) and self.on_hook_result is not None:
            self.on_hook_result(message)

    async def _pump(self) -> None:
        async for raw in self.channel.messages():
            if self._closed:
                break
            message = decode_push(raw)
            if message is not None:
                self.dispatch(message)
        logger.debug("Push reader finished")

    async def close(self) -> None:
        """Single teardown: idempotent, safe before start()."""
        if self._closed:
            return
        self._closed = True

        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.ticker.stop()
        self.reconciler.close()

        reader, self._reader = self._reader, None
        try:
            if reader is not None:
                reader.cancel()
                try:
                    await reader
                except asyncio.CancelledError:
                    pass
                except Exception:
                    logger.exception("Push reader failed")
        finally:
            await self.channel.close()

    async def __aenter__(self) -> "SessionFeed":
        try:
            await self.start()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
