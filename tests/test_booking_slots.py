"""
Tests for the planner time grid.
"""

import pytest
from datetime import date, datetime, timezone
from zoneinfo import ZoneInfo

from models.booking_errors import BookingValidationError
from models.booking_slots import (
    minutes_of, snap_to_step, add_minutes, clamp_order, default_end,
    operating_window, day_slots, combine, slot_extent
)

ROME = ZoneInfo('Europe/Rome')
MONDAY = date(2026, 5, 4)
SATURDAY = date(2026, 5, 9)


class TestTimeOfDay:
    """Tests for HH:MM parsing and snapping."""

    def test_minutes_of(self):
        assert minutes_of('00:00') == 0
        assert minutes_of('15:30') == 930
        assert minutes_of('9:05') == 545
        assert minutes_of('24:00') == 1440

    def test_malformed_times_rejected(self):
        for value in ('', '1530', '25:00', '12:60', '24:10', 'ab:cd', None):
            with pytest.raises(BookingValidationError):
                minutes_of(value)

    def test_snap_rounds_to_nearest_step(self):
        assert snap_to_step('15:04') == '15:00'
        assert snap_to_step('15:06') == '15:10'
        assert snap_to_step('15:10') == '15:10'

    def test_snap_half_rounds_up(self):
        """Exactly half a step rounds up."""
        assert snap_to_step('15:05') == '15:10'
        assert snap_to_step('15:07', step=15) == '15:00'
        assert snap_to_step('15:08', step=15) == '15:15'

    def test_snap_never_past_end_of_day(self):
        assert snap_to_step('23:58') == '24:00'
        assert snap_to_step('24:00') == '24:00'

    def test_add_minutes_and_default_end(self):
        assert add_minutes('15:00', 90) == '16:30'
        assert add_minutes('23:00', 120) == '24:00'
        assert default_end('15:00') == '17:00'


class TestClampOrder:
    """end <= start always becomes start + one step."""

    def test_end_before_start(self):
        assert clamp_order('16:00', '15:00') == ('16:00', '16:10')

    def test_end_equal_start(self):
        assert clamp_order('16:00', '16:00') == ('16:00', '16:10')

    def test_valid_range_untouched(self):
        assert clamp_order('15:00', '16:00') == ('15:00', '16:00')

    def test_clamped_end_always_after_start(self):
        for start_min in range(0, 24 * 60, 10):
            start = f'{start_min // 60:02d}:{start_min % 60:02d}'
            for end in ('00:00', start):
                clamped_start, clamped_end = clamp_order(start, end)
                assert minutes_of(clamped_end) > minutes_of(clamped_start)


class TestOperatingWindow:
    """Tests for the day's opening window and grid."""

    def test_weekday_window(self):
        assert operating_window(MONDAY) == ('15:00', '21:00')

    def test_weekend_window(self):
        assert operating_window(SATURDAY) == ('09:00', '21:00')
        assert operating_window(date(2026, 5, 10)) == ('09:00', '21:00')

    def test_custom_hours(self):
        assert operating_window(MONDAY, weekday_hours=(14, 22)) == ('14:00', '22:00')

    def test_day_slots(self):
        slots = day_slots(MONDAY)
        assert slots[0] == '15:00'
        assert slots[-1] == '20:50'
        assert len(slots) == 36


class TestCombine:
    """Tests for anchoring wall-clock times on a day."""

    def test_combine_is_timezone_aware(self):
        instant = combine(MONDAY, '15:00', ROME)
        assert instant.tzinfo is not None
        # CEST is UTC+2 in May
        assert instant.astimezone(timezone.utc) == datetime(2026, 5, 4, 13, 0, tzinfo=timezone.utc)

    def test_end_of_day_is_next_midnight(self):
        assert combine(MONDAY, '24:00', ROME) == combine(date(2026, 5, 5), '00:00', ROME)


class TestSlotExtent:
    """Tests for grid placement."""

    def test_extent_inside_window(self):
        window = combine(MONDAY, '15:00', ROME)
        start = combine(MONDAY, '15:30', ROME)
        end = combine(MONDAY, '17:00', ROME)
        assert slot_extent(start, end, window) == (3, 9)

    def test_extent_before_window_clamps_to_top(self):
        window = combine(MONDAY, '15:00', ROME)
        start = combine(MONDAY, '14:00', ROME)
        end = combine(MONDAY, '14:05', ROME)
        assert slot_extent(start, end, window) == (0, 1)
