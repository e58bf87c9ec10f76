"""Clock collaborators: "now" for overdue triage and reminder timing"""

from datetime import datetime
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime: ...


class SystemClock:
    """Naive local wall-clock time, matching the canonical timestamps"""

    def now(self) -> datetime:
        return datetime.now()


class FixedClock:
    """Clock pinned to a given instant; advance() moves it forward"""

    def __init__(self, current: datetime):
        self.current = current

    def now(self) -> datetime:
        return self.current

    def advance(self, delta) -> datetime:
        self.current = self.current + delta
        return self.current
