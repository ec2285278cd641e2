"""
Push channel: tagged-union decoding of server messages and the websocket
transport that carries them.

Every frame is decoded by its `type` tag into one known variant. Unknown tags
are dropped explicitly; known tags with a bad shape are logged and dropped.

Message variants:
  - focusing: authoritative focus session snapshot
  - hook_result: a hook finished and stored a result
"""

import json
import logging
from collections.abc import AsyncIterator
from typing import Annotated, Any, Literal, Protocol, Union

from pydantic import BaseModel, Field, TypeAdapter, ValidationError
from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidURI

from coach_console.errors import TransportFailure
from coach_console.models import SessionState

logger = logging.getLogger(__name__)

GET_FOCUSING = {"type": "get_focusing"}


class FocusingPush(BaseModel):
    """Focus session snapshot as the service sends it."""

    type: Literal["focusing"]
    focusing: bool
    since_last_change: int = 0
    focus_time_left: int = 0
    num_focuses: int = 0

    def to_session_state(self) -> SessionState:
        return SessionState(
            focusing=self.focusing,
            remaining_seconds=max(0, self.focus_time_left),
            since_last_change_seconds=max(0, self.since_last_change),
            sessions_today=max(0, self.num_focuses),
        )


class HookResultPush(BaseModel):
    """Announcement of a freshly stored hook result."""

    type: Literal["hook_result"]
    id: str
    hook_id: str
    content: str = ""


PushMessage = Annotated[Union[FocusingPush, HookResultPush], Field(discriminator="type")]

_push_adapter: TypeAdapter = TypeAdapter(PushMessage)
KNOWN_TYPES = frozenset({"focusing", "hook_result"})


def decode_push(raw: str | bytes) -> FocusingPush | HookResultPush | None:
    """Decode one frame. Returns None for anything that is not a known variant."""
    try:
        data: Any = json.loads(raw)
    except (ValueError, TypeError):
        logger.warning("Dropping non-JSON push frame")
        return None

    if not isinstance(data, dict):
        logger.warning("Dropping push frame that is not an object")
        return None

    tag = data.get("type")
    if tag not in KNOWN_TYPES:
        logger.debug("Ignoring push message", extra={"push_type": tag})
        return None

    try:
        return _push_adapter.validate_python(data)
    except ValidationError as e:
        logger.warning(f"Malformed {tag} push: {e.error_count()} error(s)")
        return None


class PushChannel(Protocol):
    """Bidirectional connection to the coach service."""

    async def open(self) -> None: ...

    async def send(self, message: dict) -> None: ...

    def messages(self) -> AsyncIterator[str | bytes]: ...

    async def close(self) -> None: ...


class WebSocketChannel:
    """PushChannel over a websocket connection."""

    def __init__(self, url: str, open_timeout: float = 10.0):
        self.url = url
        self.open_timeout = open_timeout
        self._conn: ClientConnection | None = None

    async def open(self) -> None:
        try:
            self._conn = await connect(self.url, open_timeout=self.open_timeout)
        except (OSError, TimeoutError, InvalidHandshake, InvalidURI) as e:
            raise TransportFailure(f"Push channel connect failed: {e}") from e
        logger.info("Push channel open", extra={"url": self.url})

    async def send(self, message: dict) -> None:
        if self._conn is None:
            raise TransportFailure("Push channel is not open")
        try:
            await self._conn.send(json.dumps(message))
        except ConnectionClosed as e:
            raise TransportFailure(f"Push channel closed: {e}") from e

    async def messages(self) -> AsyncIterator[str | bytes]:
        if self._conn is None:
            return
        try:
            async for frame in self._conn:
                yield frame
        except ConnectionClosed as e:
            logger.warning(f"Push channel dropped: {e}")

    async def close(self) -> None:
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        await conn.close()
        logger.info("Push channel closed", extra={"url": self.url})
