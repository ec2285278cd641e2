"""
Per-view log tagging.

A Console claims a view id while it works; ViewFilter copies that id onto
every record the handler sees, so formatters never consult context state.
"""

import contextvars
import logging
import uuid

_current_view: contextvars.ContextVar[str | None] = contextvars.ContextVar("coach_view", default=None)


def current_view() -> str | None:
    """Id of the view active in this context, if any."""
    return _current_view.get()


class ViewContext:
    """
    Scope in which log records are tagged with view_id.

    Re-entrant: the same instance may be entered again while active (a
    Console enters its own view from nested calls). Tasks created inside the
    block copy the context and keep the id.
    """

    def __init__(self, view_id: str | None = None):
        self.view_id = view_id or f"view-{uuid.uuid4().hex[:12]}"
        self._tokens: list[contextvars.Token] = []

    def __enter__(self) -> "ViewContext":
        self._tokens.append(_current_view.set(self.view_id))
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        _current_view.reset(self._tokens.pop())


class ViewFilter(logging.Filter):
    """Sets record.view_id from the active view. Never drops a record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "view_id", None) is None:
            record.view_id = current_view()
        return True
