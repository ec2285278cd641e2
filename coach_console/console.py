"""
Console view: one operator's session mirror, hook registry, result feed and
history, with a single teardown.

Usage:
    async with Console(load_settings()) as console:
        await console.start_session()
        await console.refresh()
        print(console.session.reconciler.current())
"""

import asyncio
import logging
from typing import Optional

from coach_console.client import CoachClient
from coach_console.config import Settings
from coach_console.history import HistoryView
from coach_console.hooks import HookRegistryCache
from coach_console.observability import ViewContext
from coach_console.push import PushChannel, WebSocketChannel
from coach_console.results import ResultFeed
from coach_console.session import SessionFeed
from coach_console.ticker import ClockTicker

logger = logging.getLogger(__name__)


class Console:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[CoachClient] = None,
        channel: Optional[PushChannel] = None,
        ticker: Optional[ClockTicker] = None,
    ):
        self.settings = settings or Settings()
        self.view = ViewContext()
        self.client = client or CoachClient(
            self.settings.base_url, timeout=self.settings.http_timeout
        )
        self.hooks = HookRegistryCache(self.client)
        self.results = ResultFeed(self.client)
        self.history = HistoryView(self.client, days=self.settings.history_days)
        self.session = SessionFeed(
            channel or WebSocketChannel(self.settings.push_url),
            ticker or ClockTicker(self.settings.tick_interval),
            on_hook_result=self.results.on_push,
        )
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def start_session(self) -> None:
        """Open the push channel and start the local countdown."""
        with self.view:
            await self.session.start()

    async def refresh(self) -> None:
        """Reload hooks, results and history concurrently. Failures land in each load_state."""
        with self.view:
            await asyncio.gather(self.hooks.load(), self.results.load(), self.history.load())

    async def health(self) -> bool:
        return await self.client.fetch_health()

    async def close(self) -> None:
        """Tear down everything; late responses are discarded afterwards."""
        if self._closed:
            return
        self._closed = True
        with self.view:
            self.hooks.close()
            self.results.close()
            self.history.close()
            try:
                await self.session.close()
            finally:
                await self.client.aclose()
            logger.info("Console closed")

    async def __aenter__(self) -> "Console":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
