"""
Ordering & Triage

Filter predicates and display order for appointment lists.

Display order (first shown first):
1. active before inactive (completed/cancelled)
2. priority: high, medium, low, then anything unrecognised
3. start ascending; records without a start last within their tier
"""

import unicodedata
from datetime import datetime
from enum import Enum
from typing import Iterable, Optional

from .statuses import (
    STATUS_CANCELLED,
    STATUS_COMPLETED,
    STATUS_PENDING,
    field,
    is_active,
    normalized_status,
    priority_rank,
)
from .timecodec import parse_local

ALL_PRIORITIES = "all"

# Text fields looked at by the free-text search
SEARCH_FIELDS = ("client_name", "description", "location", "priority", "status")


class StatusFilter(str, Enum):
    ALL = "all"
    PENDING = "pending"
    CANCELLED = "cancelled"
    COMPLETED = "completed"
    OVERDUE = "overdue"


def is_overdue(record, now: datetime) -> bool:
    """Started in the past and not completed; a missing start is never overdue"""
    if normalized_status(record) == STATUS_COMPLETED:
        return False
    start = parse_local(field(record, "start"))
    if start is None:
        return False
    return start < now


def matches_status(record, status_filter: StatusFilter, now: datetime) -> bool:
    status = normalized_status(record)
    status_filter = StatusFilter(status_filter)

    if status_filter is StatusFilter.ALL:
        return is_active(record)
    if status_filter is StatusFilter.PENDING:
        return status == STATUS_PENDING and not is_overdue(record, now)
    if status_filter is StatusFilter.CANCELLED:
        return status == STATUS_CANCELLED
    if status_filter is StatusFilter.COMPLETED:
        return status == STATUS_COMPLETED
    return is_active(record) and is_overdue(record, now)


def matches_priority(record, priority_filter: Optional[str]) -> bool:
    if not priority_filter or priority_filter == ALL_PRIORITIES:
        return True
    return field(record, "priority") == priority_filter


def matches(
    record, status_filter: StatusFilter, priority_filter: Optional[str], now: datetime
) -> bool:
    return matches_status(record, status_filter, now) and matches_priority(
        record, priority_filter
    )


def normalize_for_search(text: str) -> str:
    """Lowercase and strip accents so "José" is found by "jose" """
    decomposed = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return unicodedata.normalize("NFC", stripped)


def matches_query(record, query: Optional[str]) -> bool:
    if not query or not query.strip():
        return True
    needle = normalize_for_search(query.strip())
    for name in SEARCH_FIELDS:
        value = field(record, name)
        if isinstance(value, str) and needle in normalize_for_search(value):
            return True
    return False


def sort_key(record):
    start = parse_local(field(record, "start"))
    return (
        0 if is_active(record) else 1,
        priority_rank(field(record, "priority")),
        start is None,
        start or datetime.min,
    )


def sort_appointments(records: Iterable) -> list:
    # sorted() is stable, so sorting twice gives the same order
    return sorted(records, key=sort_key)


def triage(
    records: Iterable,
    status_filter: StatusFilter = StatusFilter.ALL,
    priority_filter: Optional[str] = ALL_PRIORITIES,
    now: Optional[datetime] = None,
    query: Optional[str] = None,
) -> list:
    """Filter by status, priority and search text, then sort for display"""
    now = now or datetime.now()
    selected = [
        r
        for r in records
        if matches(r, status_filter, priority_filter, now) and matches_query(r, query)
    ]
    return sort_appointments(selected)
