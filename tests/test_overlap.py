"""Tests for half-open interval overlap and the default duration"""

from datetime import datetime, timedelta

from agenda.domain.scheduling.overlap import (
    DEFAULT_POLICY,
    DurationPolicy,
    effective_end,
    overlap,
    spans_overlap,
)

A_START = datetime(2024, 6, 1, 14, 0)


def at(hour, minute=0):
    return datetime(2024, 6, 1, hour, minute)


def test_default_span_is_thirty_minutes():
    assert DEFAULT_POLICY.default_span == timedelta(minutes=30)


def test_open_ended_appointments_overlap_within_default_span():
    assert spans_overlap(A_START, None, at(14, 15), None)


def test_adjacent_spans_do_not_overlap():
    assert not spans_overlap(A_START, None, at(14, 30), None)
    assert not overlap(at(10), at(11), at(11), at(12))


def test_contained_span_overlaps():
    assert overlap(at(10), at(12), at(10, 30), at(11))


def test_overlap_is_symmetric():
    assert overlap(at(10), at(11), at(10, 59), at(12)) == overlap(at(10, 59), at(12), at(10), at(11))


def test_end_not_after_start_uses_default_span():
    assert effective_end(A_START, A_START) == at(14, 30)
    assert effective_end(A_START, at(13)) == at(14, 30)


def test_explicit_end_is_kept():
    assert effective_end(A_START, at(16)) == at(16)


def test_policy_is_injectable():
    hour = DurationPolicy(default_minutes=60)
    assert effective_end(A_START, None, hour) == at(15)
    assert spans_overlap(A_START, None, at(14, 45), None, hour)
    assert not spans_overlap(A_START, None, at(14, 45), at(15), DurationPolicy(10))
