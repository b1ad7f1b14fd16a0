"""
Slot/time model for the planner grid.

The facility day is a wall-clock day split into fixed steps. Times of day
travel as "HH:MM" strings (like the planner form fields); "24:00" is the end
of the day. Everything here is pure.
"""

import math
import re
from datetime import date, datetime, timedelta, tzinfo
from zoneinfo import ZoneInfo

from .booking_errors import BookingValidationError


STEP_MINUTES = 10
WEEKDAY_HOURS = (15, 21)
WEEKEND_HOURS = (9, 21)
DEFAULT_DURATION_MINUTES = 120
MINUTES_PER_DAY = 24 * 60
DEFAULT_TIMEZONE = ZoneInfo('Europe/Rome')

_HHMM_RE = re.compile(r'^(\d{1,2}):(\d{2})$')


# =============================================================================
# TIME OF DAY
# =============================================================================

def minutes_of(hhmm: str) -> int:
    """
    Convert "HH:MM" to minutes since midnight.

    Raises:
        BookingValidationError: If the string is not a valid time of day
    """
    match = _HHMM_RE.match(hhmm.strip()) if isinstance(hhmm, str) else None
    if not match:
        raise BookingValidationError(f"Orario non valido: {hhmm!r}")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if (hours, minutes) == (24, 0):
        return MINUTES_PER_DAY
    if hours > 23 or minutes > 59:
        raise BookingValidationError(f"Orario non valido: {hhmm!r}")

    return hours * 60 + minutes


def format_hhmm(minutes: int) -> str:
    """Format minutes since midnight as "HH:MM"."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def snap_to_step(hhmm: str, step: int = STEP_MINUTES) -> str:
    """
    Round a time of day to the nearest step boundary (half rounds up).

    Args:
        hhmm: Time of day "HH:MM"
        step: Grid step in minutes

    Returns:
        str: Snapped "HH:MM" (never past "24:00")
    """
    total = minutes_of(hhmm)
    snapped = (2 * total + step) // (2 * step) * step
    return format_hhmm(min(snapped, MINUTES_PER_DAY))


def add_minutes(hhmm: str, delta: int, step: int = STEP_MINUTES) -> str:
    """Shift a time of day, snap it, and keep it inside the day."""
    shifted = max(0, min(minutes_of(hhmm) + delta, MINUTES_PER_DAY))
    return snap_to_step(format_hhmm(shifted), step)


def clamp_order(start: str, end: str, step: int = STEP_MINUTES) -> tuple:
    """
    Guarantee a strictly positive interval.

    If end <= start, end becomes start + one step.

    Returns:
        tuple: (start, end) as "HH:MM"
    """
    start_min = minutes_of(start)
    if minutes_of(end) <= start_min:
        return start, format_hhmm(start_min + step)
    return start, end


def default_end(start: str, step: int = STEP_MINUTES) -> str:
    """End time pre-filled when a slot is clicked (two hours later)."""
    return add_minutes(start, DEFAULT_DURATION_MINUTES, step)


# =============================================================================
# CALENDAR DAY
# =============================================================================

def is_weekend(day: date) -> bool:
    """Saturday and Sunday have the longer opening window."""
    return day.weekday() >= 5


def operating_window(day: date, weekday_hours: tuple = WEEKDAY_HOURS,
                     weekend_hours: tuple = WEEKEND_HOURS) -> tuple:
    """
    Opening window of the facility for a calendar day.

    Returns:
        tuple: (start "HH:MM", end "HH:MM")
    """
    start_hour, end_hour = weekend_hours if is_weekend(day) else weekday_hours
    return format_hhmm(start_hour * 60), format_hhmm(end_hour * 60)


def day_slots(day: date, step: int = STEP_MINUTES, **window_kwargs) -> list:
    """All grid rows of the day's operating window as "HH:MM"."""
    window_start, window_end = operating_window(day, **window_kwargs)
    return [
        format_hhmm(m)
        for m in range(minutes_of(window_start), minutes_of(window_end), step)
    ]


def combine(day: date, hhmm: str, tz: tzinfo = DEFAULT_TIMEZONE) -> datetime:
    """
    Absolute instant for a wall-clock time on a calendar day.

    "24:00" resolves to midnight of the following day.
    """
    midnight = datetime(day.year, day.month, day.day, tzinfo=tz)
    return midnight + timedelta(minutes=minutes_of(hhmm))


def to_local(instant: datetime, tz: tzinfo = DEFAULT_TIMEZONE) -> datetime:
    """Convert an aware instant to facility wall-clock time."""
    return instant.astimezone(tz)


def slot_extent(start: datetime, end: datetime, window_start: datetime,
                step: int = STEP_MINUTES) -> tuple:
    """
    Grid placement of a time range.

    Args:
        start: Range start
        end: Range end
        window_start: First instant of the day's operating window

    Returns:
        tuple: (top_row, row_count); rows before the window clamp to 0 and
            every range covers at least one row
    """
    offset = (start - window_start).total_seconds() / 60
    duration = (end - start).total_seconds() / 60

    top_row = max(0, math.floor(offset / step))
    row_count = max(1, math.ceil(duration / step))
    return top_row, row_count
