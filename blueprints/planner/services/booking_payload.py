"""
Booking payload service.
Parses planner form payloads into booking requests and turns booking-core
results and errors into API responses.
"""

from dataclasses import asdict

from models.booking import (
    BookingRequest, BookingValidationError, OverlapConflict,
    BookingPermissionError, BookingNotFound, BookingReplaceFailed, default_end
)
from models.booking_allocation import DEFAULT_LOCKER_PADDING, DEFAULT_STATUS
from utils.api_response import api_error
from utils.messages import MESSAGES
from utils.validators import (
    validate_date, validate_optional_date, validate_hhmm, validate_optional_id,
    validate_integer_list, validate_minutes, sanitize_input
)


NOTES_MAX_LENGTH = 500


# =============================================================================
# PARSING
# =============================================================================

def parse_booking_payload(data: dict, step: int) -> tuple:
    """
    Parse a create/update payload.

    Request body:
        resource_id: Clicked resource
        squad_id: Squad the booking is for
        date: Anchor day YYYY-MM-DD
        start: "HH:MM"
        end: "HH:MM" (optional, defaults to two hours after start)
        category: TRAINING | MATCH | MAINTENANCE (optional)
        field_mode: FULL | HALF_A | HALF_B (optional)
        locker_ids: Up to two locker IDs (optional)
        locker_before_min / locker_after_min: Locker padding (optional, 60)
        notes: Free text (optional)
        recurring: Repeat weekly (optional)
        repeat_until: Inclusive last day YYYY-MM-DD (required if recurring)

    Returns:
        Tuple of (is_valid, (BookingRequest, date) or None, error_message)
    """
    valid, day, err = validate_date(data.get('date'), 'data')
    if not valid:
        return False, None, err

    valid, resource_id, err = validate_optional_id(data.get('resource_id'), 'risorsa')
    if not valid:
        return False, None, err

    valid, squad_id, err = validate_optional_id(data.get('squad_id'), 'squadra')
    if not valid:
        return False, None, err

    valid, start, err = validate_hhmm(data.get('start'), 'inizio')
    if not valid:
        return False, None, err

    if data.get('end'):
        valid, end, err = validate_hhmm(data.get('end'), 'fine')
        if not valid:
            return False, None, err
    else:
        end = default_end(start, step)

    valid, locker_ids, err = validate_integer_list(data.get('locker_ids'), 'spogliatoi')
    if not valid:
        return False, None, err

    valid, before, err = validate_minutes(
        data.get('locker_before_min'), 'anticipo spogliatoio', DEFAULT_LOCKER_PADDING
    )
    if not valid:
        return False, None, err

    valid, after, err = validate_minutes(
        data.get('locker_after_min'), 'posticipo spogliatoio', DEFAULT_LOCKER_PADDING
    )
    if not valid:
        return False, None, err

    recurring = bool(data.get('recurring'))
    valid, repeat_until, err = validate_optional_date(data.get('repeat_until'), 'fine ripetizione')
    if not valid:
        return False, None, err

    booking_request = BookingRequest(
        resource_id=resource_id,
        squad_id=squad_id,
        start=start,
        end=end,
        category=data.get('category') or None,
        field_mode=data.get('field_mode') or None,
        locker_ids=locker_ids,
        locker_before_min=before,
        locker_after_min=after,
        notes=sanitize_input(data.get('notes'), NOTES_MAX_LENGTH),
        status=data.get('status') or DEFAULT_STATUS,
        recurring=recurring,
        repeat_until=repeat_until if recurring else None,
    )
    return True, (booking_request, day), ''


def squad_allowed(store, actor, squad_id) -> bool:
    """Coaches may only book for the squads they manage."""
    if squad_id is None or actor.is_admin:
        return True
    return any(squad['id'] == squad_id for squad in store.list_squads(actor))


# =============================================================================
# SERIALIZATION
# =============================================================================

def serialize_outcome(outcome: dict) -> dict:
    """JSON-friendly copy of a create/update outcome."""
    data = dict(outcome)
    data.pop('success', None)
    for key in ('days_requested', 'days_booked', 'skipped_days'):
        data[key] = [day.isoformat() for day in outcome[key]]
    return data


def serialize_request(booking_request: BookingRequest) -> dict:
    data = asdict(booking_request)
    if booking_request.repeat_until:
        data['repeat_until'] = booking_request.repeat_until.isoformat()
    return data


def serialize_interval(row: dict, tz) -> dict:
    return {
        'id': row['id'],
        'resource_id': row['resource_id'],
        'resource_name': row['resource_name'],
        'resource_kind': row['resource_kind'],
        'start_at': row['start_at'].astimezone(tz).isoformat(),
        'end_at': row['end_at'].astimezone(tz).isoformat(),
    }


def outcome_warning(outcome: dict) -> str:
    """Warning for a series where some weeks were already taken."""
    if not outcome['partial']:
        return None
    skipped = ', '.join(day.strftime('%d/%m/%Y') for day in outcome['skipped_days'])
    return f"{MESSAGES['slot_taken']} Settimane saltate: {skipped}"


# =============================================================================
# ERRORS
# =============================================================================

def booking_error_response(error) -> tuple:
    """
    Map a booking-core error to an API error response.

    Returns:
        Tuple of (Response, status_code)
    """
    if isinstance(error, BookingReplaceFailed):
        return api_error(MESSAGES['replace_failed'], 500,
                         data_loss=True, booking_id=error.booking_id)
    if isinstance(error, OverlapConflict):
        return api_error(
            MESSAGES['slot_taken'], 409,
            resource_id=error.resource_id,
            day=error.day.isoformat() if error.day else None
        )
    if isinstance(error, BookingPermissionError):
        return api_error(str(error), 403)
    if isinstance(error, BookingNotFound):
        return api_error(MESSAGES['booking_not_found'], 404)
    if isinstance(error, BookingValidationError):
        return api_error(str(error), 400)
    raise error
