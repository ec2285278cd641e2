"""
Observability module: log formatting and view-tagged records.

Usage:
    from coach_console.observability import configure_logging, ViewContext

    configure_logging("DEBUG", json_format=False)

    with ViewContext() as view:
        logger.info("Console opened", extra={"base_url": url})
"""

from .context import ViewContext, ViewFilter, current_view
from .logging import LOG_LEVELS, HumanFormatter, JSONFormatter, configure_logging

__all__ = [
    # Logging
    "LOG_LEVELS",
    "configure_logging",
    "JSONFormatter",
    "HumanFormatter",
    # View tagging
    "ViewContext",
    "ViewFilter",
    "current_view",
]
