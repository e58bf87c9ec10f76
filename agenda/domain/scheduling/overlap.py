"""
Interval Overlap Detection

Pure functions over half-open spans [start, end). An appointment without a
usable end is given a default span for the comparison only; the fallback
end is never written back.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ...config import DEFAULT_DURATION_MINUTES


@dataclass(frozen=True)
class DurationPolicy:
    """Span assumed for appointments that have no end time"""

    default_minutes: int = DEFAULT_DURATION_MINUTES

    @property
    def default_span(self) -> timedelta:
        return timedelta(minutes=self.default_minutes)


DEFAULT_POLICY = DurationPolicy()


def overlap(s1: datetime, e1: datetime, s2: datetime, e2: datetime) -> bool:
    """Two half-open spans intersect; touching endpoints do not"""
    return s1 < e2 and e1 > s2


def effective_end(
    start: datetime, end: Optional[datetime], policy: DurationPolicy = DEFAULT_POLICY
) -> datetime:
    """Explicit end when it is strictly after start, else start plus the default span"""
    if end is not None and end > start:
        return end
    return start + policy.default_span


def spans_overlap(
    start1: datetime,
    end1: Optional[datetime],
    start2: datetime,
    end2: Optional[datetime],
    policy: DurationPolicy = DEFAULT_POLICY,
) -> bool:
    return overlap(
        start1,
        effective_end(start1, end1, policy),
        start2,
        effective_end(start2, end2, policy),
    )
