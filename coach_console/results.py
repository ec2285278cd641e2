"""
Result feed: hook execution outcomes, newest first, with read/unread flags.

The read flag only ever moves false -> true; marking an already-read entry
is a successful no-op.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, Optional

from coach_console.client import CoachClient
from coach_console.errors import ActionResult, ConsoleError, ErrorKind
from coach_console.models import HookResult, LoadState
from coach_console.push import HookResultPush

logger = logging.getLogger(__name__)


def _newest_first(results: list[HookResult]) -> list[HookResult]:
    return sorted(results, key=lambda r: r.created_at, reverse=True)


class ResultFeed:
    """Time-ordered hook results owned by one console view."""

    def __init__(self, client: CoachClient, clock: Optional[Callable[[], datetime]] = None):
        self.client = client
        self.load_state = LoadState.IDLE
        self.load_error: str | None = None
        self._results: list[HookResult] = []
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._closed = False

    @property
    def results(self) -> list[HookResult]:
        return list(self._results)

    @property
    def unread_count(self) -> int:
        return sum(1 for r in self._results if not r.read)

    async def load(self) -> list[HookResult]:
        """Replace the feed with a fresh pull, ordered by created_at descending."""
        self.load_state = LoadState.LOADING
        try:
            fetched = await self.client.fetch_hook_results()
        except ConsoleError as e:
            if not self._closed:
                self.load_state = LoadState.FAILED
                self.load_error = str(e)
            logger.warning(f"Failed to load hook results: {e}")
            return self.results

        ordered = _newest_first(fetched)
        if self._closed:
            return ordered
        self._results = ordered
        self.load_state = LoadState.LOADED
        self.load_error = None
        return self.results

    async def mark_read(self, result_id: str) -> ActionResult:
        """Idempotent. Touches no entry other than result_id."""
        index = next((i for i, r in enumerate(self._results) if r.id == result_id), None)
        if index is None:
            return ActionResult.fail(ErrorKind.UNKNOWN_ID, f"Unknown result: {result_id}")
        if self._results[index].read:
            return ActionResult.ok()

        try:
            await self.client.mark_result_read(result_id)
        except ConsoleError as e:
            logger.warning(f"Mark read failed: {e}", extra={"result_id": result_id})
            return ActionResult.from_exception(e)

        if self._closed:
            return ActionResult.ok()
        # Position may have shifted while the request was in flight
        self._results = [
            r.model_copy(update={"read": True}) if r.id == result_id else r for r in self._results
        ]
        return ActionResult.ok()

    def on_push(self, message: HookResultPush) -> None:
        """Insert a pushed result at the head as unread. Known ids are ignored."""
        if self._closed or any(r.id == message.id for r in self._results):
            return
        result = HookResult(
            id=message.id,
            hook_id=message.hook_id,
            content=message.content,
            read=False,
            created_at=self._clock(),
        )
        self._results = _newest_first([result, *self._results])
        logger.info("New hook result", extra={"hook_id": message.hook_id})

    def close(self) -> None:
        self._closed = True
