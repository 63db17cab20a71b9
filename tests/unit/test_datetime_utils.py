# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for date and time helpers."""

from datetime import date, datetime, timedelta, timezone

import pytest

from src.utils.datetime import add_months, ensure_utc, months_between, today, utc_now


class TestUtcNow:
    def test_is_timezone_aware(self):
        assert utc_now().tzinfo is timezone.utc

    def test_today_is_utc_date(self):
        assert today() == utc_now().date()


class TestEnsureUtc:
    def test_none_passes_through(self):
        assert ensure_utc(None) is None

    def test_naive_assumed_utc(self):
        naive = datetime(2024, 1, 1, 12, 0)
        assert ensure_utc(naive) == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def test_aware_converted(self):
        ist = timezone(timedelta(hours=5, minutes=30))
        result = ensure_utc(datetime(2024, 1, 1, 17, 30, tzinfo=ist))

        assert result == datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        assert result.tzinfo is timezone.utc


class TestAddMonths:
    @pytest.mark.parametrize(
        "start,months,expected",
        [
            (date(2024, 1, 15), 6, date(2024, 7, 15)),
            (date(2024, 1, 31), 1, date(2024, 2, 29)),
            (date(2023, 1, 31), 1, date(2023, 2, 28)),
            (date(2024, 11, 30), 3, date(2025, 2, 28)),
            (date(2024, 3, 31), -1, date(2024, 2, 29)),
            (date(2024, 5, 10), 24, date(2026, 5, 10)),
        ],
    )
    def test_add_months(self, start, months, expected):
        assert add_months(start, months) == expected


class TestMonthsBetween:
    @pytest.mark.parametrize(
        "start,end,expected",
        [
            (date(2024, 1, 15), date(2024, 3, 14), 1),
            (date(2024, 1, 15), date(2024, 3, 15), 2),
            (date(2024, 1, 15), date(2024, 1, 15), 0),
            (date(2023, 1, 15), date(2024, 3, 14), 13),
            (date(2024, 3, 15), date(2024, 1, 16), -1),
        ],
    )
    def test_months_between(self, start, end, expected):
        assert months_between(start, end) == expected
