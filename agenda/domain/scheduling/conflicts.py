"""
Conflict Checker

Scans existing appointments for one that intersects a candidate span.

Considered:
- pending appointments only (cancelled/completed are historical)
- every record except the one being edited
- the default span for records without an end

A linear scan is enough for a single user's calendar. An indexed version
must keep the same exemptions and the same default-span policy.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional

from .overlap import DEFAULT_POLICY, DurationPolicy, effective_end, overlap
from .statuses import field, is_active
from .timecodec import parse_local

logger = logging.getLogger(__name__)


def find_conflict(
    appointments: Iterable,
    start: datetime,
    end: Optional[datetime] = None,
    exclude_id: Optional[str] = None,
    policy: DurationPolicy = DEFAULT_POLICY,
):
    """
    Return the first active appointment overlapping [start, end), or None.

    Args:
        appointments: records exposing id, start, end and status
        start: candidate start
        end: candidate end; absent or not after start means the default span
        exclude_id: record to skip (the one being edited)
        policy: default span policy
    """
    candidate_end = effective_end(start, end, policy)

    for appt in appointments:
        appt_id = field(appt, "id")
        if exclude_id is not None and appt_id == exclude_id:
            continue
        if not is_active(appt):
            continue

        appt_start = parse_local(field(appt, "start"))
        if appt_start is None:
            # Undecodable start: the record has no slot to collide with
            continue
        appt_end = effective_end(appt_start, parse_local(field(appt, "end")), policy)

        if overlap(start, candidate_end, appt_start, appt_end):
            logger.debug(f"Conflict: candidate {start} to {candidate_end} overlaps {appt_id}")
            return appt

    return None


def has_conflict(
    appointments: Iterable,
    start: datetime,
    end: Optional[datetime] = None,
    exclude_id: Optional[str] = None,
    policy: DurationPolicy = DEFAULT_POLICY,
) -> bool:
    return find_conflict(appointments, start, end, exclude_id, policy) is not None
