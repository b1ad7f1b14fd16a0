"""
Tests for weekly series expansion.
"""

import pytest
import uuid
from datetime import date, timedelta

from models.booking_errors import BookingValidationError
from models.booking_recurrence import expand_days, new_series_id

D0 = date(2026, 5, 4)


class TestExpandDays:
    """Tests for expand_days."""

    def test_single_day(self):
        assert expand_days(D0) == [D0]

    def test_until_plus_twenty_days(self):
        """D0+21 is past the end date and excluded."""
        days = expand_days(D0, recurring=True, repeat_until=D0 + timedelta(days=20))
        assert days == [D0, D0 + timedelta(days=7), D0 + timedelta(days=14)]

    def test_end_date_inclusive(self):
        days = expand_days(D0, recurring=True, repeat_until=D0 + timedelta(days=21))
        assert days[-1] == D0 + timedelta(days=21)
        assert len(days) == 4

    def test_end_before_anchor_gives_anchor_only(self):
        assert expand_days(D0, recurring=True, repeat_until=D0 - timedelta(days=1)) == [D0]

    def test_recurring_without_end_date(self):
        with pytest.raises(BookingValidationError):
            expand_days(D0, recurring=True)

    def test_repeat_until_ignored_when_not_recurring(self):
        assert expand_days(D0, recurring=False, repeat_until=D0 + timedelta(days=30)) == [D0]

    def test_series_length_limit(self):
        assert len(expand_days(D0, True, D0 + timedelta(weeks=51), max_weeks=52)) == 52
        with pytest.raises(BookingValidationError):
            expand_days(D0, True, D0 + timedelta(weeks=52), max_weeks=52)


class TestSeriesId:
    """Tests for series identifiers."""

    def test_series_id_is_uuid4(self):
        series_id = new_series_id()
        assert uuid.UUID(series_id).version == 4

    def test_series_ids_are_unique(self):
        assert new_series_id() != new_series_id()
