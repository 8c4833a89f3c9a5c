"""Unit tests for timestamp utilities."""

from datetime import datetime, timedelta, timezone

import pytest

from job_alerts.utils.timestamps import (
    ensure_utc,
    format_timestamp,
    from_storage,
    parse_iso_datetime,
    to_storage,
    utc_now,
)


class TestUtcNow:
    def test_utc_now_returns_aware_utc(self):
        now = utc_now()
        assert now.tzinfo == timezone.utc


class TestEnsureUtc:
    def test_none_passthrough(self):
        assert ensure_utc(None) is None

    def test_naive_treated_as_utc(self):
        result = ensure_utc(datetime(2025, 11, 4, 8, 0))
        assert result == datetime(2025, 11, 4, 8, 0, tzinfo=timezone.utc)

    def test_other_timezone_converted(self):
        plus_two = timezone(timedelta(hours=2))
        result = ensure_utc(datetime(2025, 11, 4, 10, 0, tzinfo=plus_two))
        assert result == datetime(2025, 11, 4, 8, 0, tzinfo=timezone.utc)
        assert result.tzinfo == timezone.utc


class TestParseIsoDatetime:
    @pytest.mark.parametrize(
        "value",
        [
            "2025-11-04T08:00:00Z",
            "2025-11-04T08:00:00+00:00",
            "2025-11-04T09:00:00+01:00",
            "2025-11-04T08:00:00",
        ],
    )
    def test_accepted_formats(self, value):
        assert parse_iso_datetime(value) == datetime(2025, 11, 4, 8, 0, tzinfo=timezone.utc)

    def test_date_only(self):
        assert parse_iso_datetime("2025-11-04") == datetime(2025, 11, 4, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, "", "   ", "not a date"])
    def test_unparseable_returns_none(self, value):
        assert parse_iso_datetime(value) is None


class TestStorageFormat:
    def test_to_storage_is_fixed_width(self):
        assert to_storage(datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)) == (
            "2025-01-02T03:04:05.000000Z"
        )

    def test_to_storage_converts_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        assert to_storage(datetime(2025, 11, 4, 10, 0, tzinfo=plus_two)) == (
            "2025-11-04T08:00:00.000000Z"
        )

    def test_storage_strings_sort_like_datetimes(self):
        earlier = datetime(2025, 11, 4, 8, 0, 0, 999999, tzinfo=timezone.utc)
        later = datetime(2025, 11, 4, 8, 0, 1, tzinfo=timezone.utc)
        assert to_storage(earlier) < to_storage(later)

    def test_from_storage_reads_written_value(self):
        value = datetime(2025, 11, 4, 8, 30, 15, 123456, tzinfo=timezone.utc)
        assert from_storage(to_storage(value)) == value

    def test_from_storage_accepts_plain_iso(self):
        assert from_storage("2025-11-04T08:00:00Z") == datetime(2025, 11, 4, 8, 0, tzinfo=timezone.utc)

    @pytest.mark.parametrize("value", [None, ""])
    def test_from_storage_empty(self, value):
        assert from_storage(value) is None


class TestFormatTimestamp:
    def test_second_precision_with_z(self):
        value = datetime(2025, 11, 4, 8, 0, 0, 123456, tzinfo=timezone.utc)
        assert format_timestamp(value) == "2025-11-04T08:00:00Z"
