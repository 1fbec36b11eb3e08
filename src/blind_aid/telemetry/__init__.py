"""Logging setup and notification sinks."""

from .logging import LoggingNotifier, configure_logging

__all__ = ["LoggingNotifier", "configure_logging"]
