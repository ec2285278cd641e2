"""
Queue-backed PushChannel.

Frames pushed with push() are yielded by messages() in order; close() ends
the stream. Everything the console sends is recorded in `sent`.
"""

import asyncio
import json
from collections.abc import AsyncIterator

from coach_console.errors import TransportFailure

_CLOSED = object()


class FakeChannel:
    def __init__(self, fail_open: bool = False):
        self.fail_open = fail_open
        self.sent: list[dict] = []
        self.opened = False
        self.closed = False
        self._inbox: asyncio.Queue = asyncio.Queue()

    async def open(self) -> None:
        if self.fail_open:
            raise TransportFailure("connection refused")
        self.opened = True

    async def send(self, message: dict) -> None:
        if not self.opened:
            raise TransportFailure("Push channel is not open")
        self.sent.append(message)

    def push(self, frame) -> None:
        """Queue one frame; dicts are JSON-encoded like a real server would."""
        if isinstance(frame, dict):
            frame = json.dumps(frame)
        self._inbox.put_nowait(frame)

    async def messages(self) -> AsyncIterator[str | bytes]:
        while True:
            frame = await self._inbox.get()
            if frame is _CLOSED:
                return
            yield frame

    async def close(self) -> None:
        self.closed = True
        self._inbox.put_nowait(_CLOSED)
