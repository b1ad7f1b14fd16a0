"""
Recurrence expander.
Weekly series: the anchor day, then every 7 days up to an inclusive end date.
"""

import uuid
from datetime import date, timedelta

from .booking_errors import BookingValidationError


RECURRENCE_STEP = timedelta(days=7)
MAX_SERIES_WEEKS = 52


def expand_days(anchor: date, recurring: bool = False, repeat_until: date = None,
                max_weeks: int = MAX_SERIES_WEEKS) -> list:
    """
    Calendar days a request must be planned on.

    Args:
        anchor: First day of the booking
        recurring: Whether the request repeats weekly
        repeat_until: Inclusive last day of the repetition
        max_weeks: Longest series accepted

    Returns:
        list: Non-empty, ascending list of dates starting with the anchor

    Raises:
        BookingValidationError: If a recurring request has no end date or
            would exceed max_weeks occurrences
    """
    if not recurring:
        return [anchor]

    if repeat_until is None:
        raise BookingValidationError("Seleziona la data di fine ripetizione.")

    days = [anchor]
    candidate = anchor + RECURRENCE_STEP
    while candidate <= repeat_until:
        days.append(candidate)
        if len(days) > max_weeks:
            raise BookingValidationError(
                f"La ripetizione non può superare {max_weeks} settimane."
            )
        candidate += RECURRENCE_STEP

    return days


def new_series_id() -> str:
    """Identifier shared by every booking of one recurring request."""
    return str(uuid.uuid4())
