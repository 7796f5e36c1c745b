import logging
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

Navigate = Callable[[str], None]


class Notifier(Protocol):
    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LoggingNotifier:
    """Notifier for headless use; user-facing messages go to the log."""

    def success(self, message: str) -> None:
        logger.info(message)

    def error(self, message: str) -> None:
        logger.error(message)
