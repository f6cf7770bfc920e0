"""Notification sinks: where the controller sends messages meant for the user."""
from __future__ import annotations

import logging
from typing import Protocol

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class ConsoleNotifier:
    """Print messages, the way the CLI talks to its user."""

    def success(self, message: str) -> None:
        print(f"  {message}")

    def error(self, message: str) -> None:
        print(f"  Error: {message}")


class LoggingNotifier:
    """Route messages to logging, for embedding the controller in a service."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.warning(message)
