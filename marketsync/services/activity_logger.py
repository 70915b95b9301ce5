# marketsync/services/activity_logger.py
import logging
from typing import Any, Dict, Optional

from marketsync.core.enums import LogLevel
from marketsync.core.utils import format_metadata

_LEVELS = {
    LogLevel.INFO: logging.INFO,
    LogLevel.WARNING: logging.WARNING,
    LogLevel.ERROR: logging.ERROR,
}


class ActivityLogger:
    """
    Logging port handed to every component at construction.

    Each event carries a level, a category (e.g. "listing.publish"), a message
    and key-value metadata. Events are forwarded to a standard library logger;
    category and metadata are also attached to the record as `extra` so a
    structured handler can pick them up.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("marketsync.activity")

    def log_activity(
        self,
        level: LogLevel,
        category: str,
        message: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> None:
        """
        Log one activity event.

        Args:
            level: Severity of the event
            category: Dotted component/action name, e.g. "gateway.request"
            message: Human readable summary
            metadata: Optional key-value details (rendered as sorted JSON)
        """
        metadata = metadata or {}
        self.logger.log(
            _LEVELS[level],
            f"[{category}] {message} {format_metadata(metadata)}",
            extra={"category": category, "metadata": metadata}
        )

    def info(self, category: str, message: str, **metadata: Any) -> None:
        self.log_activity(LogLevel.INFO, category, message, metadata)

    def warning(self, category: str, message: str, **metadata: Any) -> None:
        self.log_activity(LogLevel.WARNING, category, message, metadata)

    def error(self, category: str, message: str, **metadata: Any) -> None:
        self.log_activity(LogLevel.ERROR, category, message, metadata)
