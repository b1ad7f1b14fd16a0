"""
Allocation planner.

Turns one booking request into the ordered list of per-resource intervals to
write for a single calendar day. The same request always yields the same
drafts, which is what makes delete-then-recreate an exact replacement.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional

from .booking_errors import BookingValidationError
from .booking_slots import (
    DEFAULT_TIMEZONE, MINUTES_PER_DAY, STEP_MINUTES,
    clamp_order, combine, format_hhmm, minutes_of, snap_to_step, to_local
)
from .resource import ResourceCatalog, is_field_half, is_locker, is_mini_field, is_vehicle


FIELD_MODES = ('FULL', 'HALF_A', 'HALF_B')
BOOKING_CATEGORIES = ('TRAINING', 'MATCH', 'MAINTENANCE')
DEFAULT_STATUS = 'PROPOSED'
DEFAULT_LOCKER_PADDING = 60
MAX_LOCKER_PADDING = 240
MAX_CHOSEN_LOCKERS = 2


@dataclass
class BookingRequest:
    """What a coach asks for: one resource, one squad, one time window."""

    resource_id: Optional[int]
    squad_id: Optional[int]
    start: str
    end: str
    category: Optional[str] = None
    # None means "whatever the clicked resource implies"
    field_mode: Optional[str] = None
    locker_ids: list = field(default_factory=list)
    locker_before_min: int = DEFAULT_LOCKER_PADDING
    locker_after_min: int = DEFAULT_LOCKER_PADDING
    notes: str = ''
    status: str = DEFAULT_STATUS
    recurring: bool = False
    repeat_until: Optional[date] = None


@dataclass(frozen=True)
class IntervalDraft:
    """One interval to reserve, not yet tied to a booking id."""

    resource_id: int
    start: datetime
    end: datetime


# =============================================================================
# RESOURCE RULES
# =============================================================================

def booking_kind_for(resource: dict) -> str:
    """Which booking flow a resource belongs to (stored on the header)."""
    if is_vehicle(resource):
        return 'MINIBUS'
    if is_locker(resource):
        return 'LOCKER'
    return 'FIELD'


def default_category_for(resource: dict) -> str:
    """Lockers booked on their own are maintenance slots."""
    return 'MAINTENANCE' if is_locker(resource) else 'TRAINING'


def resolve_field_mode(resource: dict, requested_mode: Optional[str],
                       catalog: ResourceCatalog) -> str:
    """
    Decide which part of the field a request occupies.

    A click on half A or half B forces that half; only an explicit FULL
    widens it to the whole field. Otherwise the requested half applies,
    and with no mode at all the full field is booked.
    """
    if requested_mode and requested_mode not in FIELD_MODES:
        raise BookingValidationError(f"Modalità campo non valida: {requested_mode}")

    if requested_mode == 'FULL':
        return 'FULL'
    if catalog.is_half_a(resource):
        return 'HALF_A'
    if catalog.is_half_b(resource):
        return 'HALF_B'
    return requested_mode or 'FULL'


# =============================================================================
# VALIDATION HELPERS
# =============================================================================

def _distinct(ids) -> list:
    seen = []
    for value in ids or []:
        if value is not None and value not in seen:
            seen.append(value)
    return seen


def _validated_padding(value, label: str, max_padding: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise BookingValidationError(f"{label} deve essere un numero intero di minuti")
    if value < 0:
        raise BookingValidationError(f"{label} non può essere negativo")
    if value > max_padding:
        raise BookingValidationError(f"{label} non può superare {max_padding} minuti")
    return value


def _chosen_lockers(request: BookingRequest, catalog: ResourceCatalog) -> list:
    locker_ids = _distinct(request.locker_ids)
    if len(locker_ids) > MAX_CHOSEN_LOCKERS:
        raise BookingValidationError("Puoi scegliere al massimo due spogliatoi.")

    for locker_id in locker_ids:
        locker = catalog.by_id(locker_id)
        if not locker or not is_locker(locker):
            raise BookingValidationError(f"Spogliatoio non trovato: {locker_id}")
    return locker_ids


def resolve_time_range(request: BookingRequest, day: date, tz: tzinfo = DEFAULT_TIMEZONE,
                       step: int = STEP_MINUTES) -> tuple:
    """
    Snap, order and anchor the requested times on a calendar day.

    Returns:
        tuple: (start datetime, end datetime)
    """
    start = snap_to_step(request.start, step)
    end = snap_to_step(request.end, step)

    if minutes_of(start) >= MINUTES_PER_DAY:
        raise BookingValidationError("L'orario di inizio deve essere entro la giornata.")

    start, end = clamp_order(start, end, step)
    start_at = combine(day, start, tz)
    end_at = start_at + timedelta(minutes=minutes_of(end) - minutes_of(start))

    if end_at <= start_at:
        raise BookingValidationError("L'orario di fine deve essere dopo l'inizio.")
    return start_at, end_at


# =============================================================================
# PLANNER
# =============================================================================

def plan_intervals(
    request: BookingRequest,
    catalog: ResourceCatalog,
    day: date,
    tz: tzinfo = DEFAULT_TIMEZONE,
    step: int = STEP_MINUTES,
    max_padding: int = MAX_LOCKER_PADDING
) -> list:
    """
    Produce the interval drafts for one day of a booking request.

    Args:
        request: The booking request
        catalog: Resource catalog
        day: Calendar day to anchor the request on
        tz: Facility timezone
        step: Grid step in minutes
        max_padding: Upper bound for locker before/after padding

    Returns:
        list: IntervalDraft objects, field halves first, lockers last

    Raises:
        BookingValidationError: If the request cannot be allocated
    """
    if request.resource_id is None:
        raise BookingValidationError("Seleziona una risorsa.")

    resource = catalog.by_id(request.resource_id)
    if not resource:
        raise BookingValidationError("Risorsa non trovata.")

    if request.squad_id is None:
        raise BookingValidationError("Seleziona una squadra.")

    if request.category is not None and request.category not in BOOKING_CATEGORIES:
        raise BookingValidationError(f"Tipo di prenotazione non valido: {request.category}")

    start_at, end_at = resolve_time_range(request, day, tz, step)
    chosen_lockers = _chosen_lockers(request, catalog)

    if is_vehicle(resource):
        return [IntervalDraft(resource['id'], start_at, end_at)]

    if is_locker(resource):
        extra = [lid for lid in chosen_lockers if lid != resource['id']]
        if len(extra) > 1:
            raise BookingValidationError("Puoi aggiungere al massimo un altro spogliatoio.")
        return [
            IntervalDraft(locker_id, start_at, end_at)
            for locker_id in [resource['id']] + extra
        ]

    if not is_field_half(resource) and not is_mini_field(resource):
        raise BookingValidationError(f"Tipo di risorsa non gestito: {resource['kind']}")

    drafts = []
    mode = None if is_mini_field(resource) else resolve_field_mode(resource, request.field_mode, catalog)
    half_a, half_b = catalog.half_a, catalog.half_b

    if mode is None:
        drafts.append(IntervalDraft(resource['id'], start_at, end_at))
    elif mode == 'HALF_A':
        if not half_a:
            raise BookingValidationError("Campo A non trovato.")
        drafts.append(IntervalDraft(half_a['id'], start_at, end_at))
    elif mode == 'HALF_B':
        if not half_b:
            raise BookingValidationError("Campo B non trovato.")
        drafts.append(IntervalDraft(half_b['id'], start_at, end_at))
    else:
        if not half_a or not half_b:
            raise BookingValidationError("Campo A/B non trovati.")
        drafts.append(IntervalDraft(half_a['id'], start_at, end_at))
        drafts.append(IntervalDraft(half_b['id'], start_at, end_at))

    if chosen_lockers:
        before = _validated_padding(request.locker_before_min, 'Anticipo spogliatoio', max_padding)
        after = _validated_padding(request.locker_after_min, 'Posticipo spogliatoio', max_padding)
        locker_start = start_at - timedelta(minutes=before)
        locker_end = end_at + timedelta(minutes=after)
        for locker_id in chosen_lockers:
            drafts.append(IntervalDraft(locker_id, locker_start, locker_end))

    return drafts


# =============================================================================
# INVERSE (EDIT FORM)
# =============================================================================

def request_from_intervals(
    booking: dict,
    intervals: list,
    catalog: ResourceCatalog,
    tz: tzinfo = DEFAULT_TIMEZONE,
    step: int = STEP_MINUTES
) -> Optional[BookingRequest]:
    """
    Rebuild the request that an existing booking corresponds to.

    Used to pre-fill the edit form. Both halves present means the full
    field; locker padding is read back from the locker rows.

    Args:
        booking: Booking header dict (squad_id, category, notes, status)
        intervals: Interval dicts with resource_id, start_at, end_at (datetimes)
        catalog: Resource catalog

    Returns:
        BookingRequest or None if the booking has no intervals
    """
    if not intervals:
        return None

    half_a_id, half_b_id = catalog.half_a_id, catalog.half_b_id
    resource_ids = {row['resource_id'] for row in intervals}
    has_a = half_a_id in resource_ids
    has_b = half_b_id in resource_ids

    def _is_locker_row(row):
        resource = catalog.by_id(row['resource_id'])
        return bool(resource and is_locker(resource))

    primary = (
        next((r for r in intervals if r['resource_id'] == half_a_id), None)
        or next((r for r in intervals if r['resource_id'] == half_b_id), None)
        or next((r for r in intervals if not _is_locker_row(r)), None)
        or intervals[0]
    )

    if has_a and has_b:
        field_mode = 'FULL'
    elif has_a:
        field_mode = 'HALF_A'
    elif has_b:
        field_mode = 'HALF_B'
    else:
        field_mode = 'FULL'

    start_local = to_local(primary['start_at'], tz)
    end_local = to_local(primary['end_at'], tz)
    start = snap_to_step(start_local.strftime('%H:%M'), step)
    end_minutes = minutes_of(start) + round((end_local - start_local).total_seconds() / 60)
    end = snap_to_step(format_hhmm(min(end_minutes, MINUTES_PER_DAY)), step)
    start, end = clamp_order(start, end, step)

    locker_rows = [r for r in intervals if _is_locker_row(r) and r is not primary]
    before = after = DEFAULT_LOCKER_PADDING
    if locker_rows and not _is_locker_row(primary):
        before = round((primary['start_at'] - locker_rows[0]['start_at']).total_seconds() / 60)
        after = round((locker_rows[0]['end_at'] - primary['end_at']).total_seconds() / 60)

    return BookingRequest(
        resource_id=primary['resource_id'],
        squad_id=booking.get('squad_id'),
        start=start,
        end=end,
        category=booking.get('category'),
        field_mode=field_mode,
        locker_ids=[r['resource_id'] for r in locker_rows][:MAX_CHOSEN_LOCKERS],
        locker_before_min=before,
        locker_after_min=after,
        notes=booking.get('notes') or '',
        status=booking.get('status') or DEFAULT_STATUS,
    )
