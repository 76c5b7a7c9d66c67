"""Cooperative cancellation and progress reporting.

Long running operations poll a stop predicate between discrete steps and report human readable
status lines to a progress sink. Neither interrupts work that is already in flight.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterator

StopRequested = Callable[[], bool]
ProgressSink = Callable[[str], None]

logger = logging.getLogger(__name__)


def never_stop() -> bool:
    return False


def discard_progress(_message: str) -> None:
    pass


class CancellationToken:
    """A stop predicate that can be triggered from elsewhere, e.g. a signal handler."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def __call__(self) -> bool:
        return self._event.is_set()


class LoggingProgress:
    """Forwards progress lines to a logger."""

    def __init__(self, log: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self.log: logging.Logger = log if log is not None else logger
        self.level: int = level

    def __call__(self, message: str) -> None:
        self.log.log(self.level, message)


class ProgressLog:
    """Records progress lines in order."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)

    def __iter__(self) -> Iterator[str]:
        return iter(self.messages)

    def __len__(self) -> int:
        return len(self.messages)
