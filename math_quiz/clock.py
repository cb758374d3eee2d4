from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Source of monotonic seconds for the round countdown.

    ``QuizSession`` only ever subtracts two readings, so any monotonic origin
    works; tests pass a hand-advanced clock instead of ``RealClock``.
    """

    def now(self) -> float: ...


class RealClock:
    def now(self) -> float:
        return time.monotonic()
