"""
Transient notification state and the timers that expire it.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Protocol


SUCCESS = "success"
DANGER = "danger"
WARNING = "warning"
INFO = "info"


@dataclass(frozen=True)
class Notification:
    visible: bool = False
    message: str = ""
    severity: str = SUCCESS
    ident: int = 0

    @classmethod
    def hidden(cls, severity: str = SUCCESS, message: str = "") -> "Notification":
        return cls(visible=False, message=message, severity=severity)


class ScheduledTask(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask: ...


class ThreadingScheduler:
    """Runs each callback once on a daemon timer thread."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, callback)
        timer.daemon = True
        timer.start()
        return timer


__all__ = [
    "SUCCESS",
    "DANGER",
    "WARNING",
    "INFO",
    "Notification",
    "ScheduledTask",
    "Scheduler",
    "ThreadingScheduler",
]
