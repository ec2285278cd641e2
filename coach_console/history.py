"""Recent focus sessions."""

import logging

from coach_console.client import CoachClient
from coach_console.config import DEFAULT_HISTORY_DAYS
from coach_console.errors import ConsoleError
from coach_console.models import FocusRecord, LoadState

logger = logging.getLogger(__name__)


class HistoryView:
    def __init__(self, client: CoachClient, days: int = DEFAULT_HISTORY_DAYS):
        self.client = client
        self.days = days
        self.load_state = LoadState.IDLE
        self.load_error: str | None = None
        self.records: list[FocusRecord] = []
        self._closed = False

    async def load(self, days: int | None = None) -> list[FocusRecord]:
        self.load_state = LoadState.LOADING
        try:
            records = await self.client.fetch_history(days or self.days)
        except ConsoleError as e:
            if not self._closed:
                self.load_state = LoadState.FAILED
                self.load_error = str(e)
            logger.warning(f"Failed to load history: {e}")
            return list(self.records)

        if not self._closed:
            self.records = records
            self.load_state = LoadState.LOADED
            self.load_error = None
        return records

    def close(self) -> None:
        self._closed = True
