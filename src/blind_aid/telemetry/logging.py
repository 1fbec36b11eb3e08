"""Logging configuration and the log-backed notification sink."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from blind_aid.models import Severity


def configure_logging(level: str = "INFO") -> None:
    """Route ``blind_aid`` loggers through a rich console handler."""
    handler = RichHandler(show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))

    root = logging.getLogger("blind_aid")
    root.handlers = [handler]
    root.setLevel(level.upper())
    root.propagate = False


class LoggingNotifier:
    """Notification sink that only records notifications in the log."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or logging.getLogger("blind_aid.notifications")

    def notify(self, title: str, description: str, severity: Severity = Severity.INFO) -> None:
        level = logging.WARNING if severity == Severity.DESTRUCTIVE else logging.INFO
        self._logger.log(level, "notification", extra={"title": title, "description": description})
