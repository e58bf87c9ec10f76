"""Tests for canonical local timestamps"""

from datetime import datetime, timedelta, timezone

import pytest

from agenda.domain.scheduling.timecodec import (
    INVALID,
    LocalFields,
    compose,
    decode,
    encode,
    format_local,
    parse_local,
)


class TestDecode:
    def test_canonical_timestamp_reads_literal_digits(self):
        fields = decode("2024-03-10T09:05:00.000")
        assert (fields.year, fields.month, fields.day) == (2024, 3, 10)
        assert (fields.hour, fields.minute, fields.second) == (9, 5, 0)
        assert fields.millisecond == 0

    def test_date_only_means_midnight(self):
        assert decode("2024-03-10") == LocalFields(2024, 3, 10, 0, 0, 0, 0)

    def test_space_separator_and_short_time(self):
        assert decode("2024-03-10 14:30") == LocalFields(2024, 3, 10, 14, 30)

    def test_fraction_is_milliseconds(self):
        assert decode("2024-03-10T14:30:15.5").millisecond == 500
        assert decode("2024-03-10T14:30:15.042").millisecond == 42

    @pytest.mark.parametrize(
        "text",
        [
            None,
            "",
            "   ",
            "tomorrow",
            "2024-13-01",
            "2024-02-30",
            "2024-03-10T25:00",
            "2024-03-10T",
            "10/03/2024",
        ],
    )
    def test_unusable_text_is_invalid(self, text):
        assert decode(text) is INVALID
        assert not decode(text)

    def test_non_string_is_invalid(self):
        assert decode(20240310) is INVALID


class TestEncode:
    def test_encode_pads_every_field(self):
        assert encode(LocalFields(2024, 3, 9, 7, 5)) == "2024-03-09T07:05:00.000"

    def test_decode_encode_is_stable(self):
        text = "2024-11-30T23:59:59.999"
        assert encode(decode(text)) == text

    def test_format_local_ignores_tzinfo(self):
        aware = datetime(2024, 6, 1, 14, 0, tzinfo=timezone(timedelta(hours=-5)))
        assert format_local(aware) == "2024-06-01T14:00:00.000"


class TestParseLocal:
    def test_parse_local_is_naive(self):
        value = parse_local("2024-06-01T14:00")
        assert value == datetime(2024, 6, 1, 14, 0)
        assert value.tzinfo is None

    def test_parse_local_invalid_is_none(self):
        assert parse_local("not a date") is None


class TestCompose:
    def test_date_and_time(self):
        assert compose("2024-06-01", "08:15") == LocalFields(2024, 6, 1, 8, 15)

    def test_date_without_time_defaults_to_noon(self):
        assert compose("2024-06-01") == LocalFields(2024, 6, 1, 12, 0)
        assert compose("2024-06-01", "  ") == LocalFields(2024, 6, 1, 12, 0)

    def test_missing_date_is_invalid(self):
        assert compose(None, "10:00") is INVALID
        assert compose("", "10:00") is INVALID
