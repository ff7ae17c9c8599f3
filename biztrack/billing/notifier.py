# biztrack/billing/notifier.py

import logging
from abc import ABC, abstractmethod

logger = logging.getLogger("biztrack")

SEVERITY_LEVELS = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class Notifier(ABC):
    """Sink for user-facing feedback (toasts in a UI)."""

    @abstractmethod
    def notify(self, severity: str, title: str, description: str | None = None) -> None:
        ...

    def success(self, title: str, description: str | None = None) -> None:
        self.notify("success", title, description)

    def warning(self, title: str, description: str | None = None) -> None:
        self.notify("warning", title, description)

    def error(self, title: str, description: str | None = None) -> None:
        self.notify("error", title, description)


class LoggingNotifier(Notifier):
    def notify(self, severity, title, description=None):
        level = SEVERITY_LEVELS.get(severity, logging.INFO)
        message = f"{title} | {description}" if description else title
        logger.log(level, message)
