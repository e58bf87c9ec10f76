"""Tests for the conflict checker"""

from datetime import datetime

from agenda.domain.scheduling.conflicts import find_conflict, has_conflict
from agenda.domain.scheduling.overlap import DurationPolicy


def appt(appt_id, start, end=None, status="pending", **extra):
    return {"id": appt_id, "start": start, "end": end, "status": status, **extra}


def at(hour, minute=0):
    return datetime(2024, 6, 1, hour, minute)


A = appt("a", "2024-06-01T14:00:00.000")


def test_overlapping_pending_appointment_conflicts():
    assert find_conflict([A], at(14, 15)) is A


def test_adjacent_slot_is_free():
    assert find_conflict([A], at(14, 30)) is None


def test_candidate_before_existing_with_explicit_end():
    assert has_conflict([A], at(13, 30), at(14, 1))
    assert not has_conflict([A], at(13, 30), at(14))


def test_cancelled_and_completed_never_conflict():
    records = [
        appt("c", "2024-06-01T14:00:00.000", status="cancelled"),
        appt("d", "2024-06-01T14:00:00.000", status="completed"),
        appt("e", "2024-06-01T14:00:00.000", status=None, completed=True),
    ]
    assert find_conflict(records, at(14)) is None


def test_excluded_record_is_skipped():
    assert find_conflict([A], at(14), exclude_id="a") is None


def test_returns_first_conflict_in_order():
    b = appt("b", "2024-06-01T13:45:00.000", "2024-06-01T15:00:00.000")
    assert find_conflict([b, A], at(14)) is b


def test_record_without_usable_start_is_ignored():
    broken = appt("x", "someday")
    assert find_conflict([broken], at(14)) is None


def test_existing_end_before_start_falls_back_to_default():
    inverted = appt("i", "2024-06-01T14:00:00.000", "2024-06-01T13:00:00.000")
    assert has_conflict([inverted], at(14, 20))
    assert not has_conflict([inverted], at(14, 30))


def test_policy_applies_to_both_sides():
    policy = DurationPolicy(default_minutes=90)
    assert has_conflict([A], at(15), policy=policy)
