"""Time source used by the merge watcher."""

import time
from abc import ABC, abstractmethod


class Clock(ABC):
    """Monotonic time in seconds plus a way to wait."""

    @abstractmethod
    def now(self) -> float: ...

    @abstractmethod
    def sleep(self, seconds: float) -> None: ...


class SystemClock(Clock):
    """Real time."""

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)
