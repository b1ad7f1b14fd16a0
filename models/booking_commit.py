"""
Conflict and commit orchestration.

Sequences the writes of a booking request: create (one booking per day of
the series), update (delete then recreate) and delete. Overlap conflicts on
a recurring series skip the day; on a single booking they abort the request.
"""

import logging
from datetime import date

from .actor import can_modify
from .booking_allocation import (
    BookingRequest, booking_kind_for, default_category_for, plan_intervals
)
from .booking_errors import (
    BookingNotFound, BookingPermissionError, BookingReplaceFailed, OverlapConflict
)
from .booking_recurrence import expand_days, new_series_id
from .booking_store import SqliteBookingStore
from .planner_settings import PlannerSettings
from .resource import ResourceCatalog

logger = logging.getLogger(__name__)


# =============================================================================
# PLANNING
# =============================================================================

def _resolve(store, catalog, settings):
    store = store if store is not None else SqliteBookingStore()
    settings = settings or PlannerSettings()
    if catalog is None:
        catalog = ResourceCatalog(store.list_resources(), settings.half_a_name, settings.half_b_name)
    return store, catalog, settings


def plan_request(request: BookingRequest, day: date, catalog: ResourceCatalog,
                 settings: PlannerSettings) -> list:
    """
    Validate a request and plan every day of it before anything is written.

    Returns:
        list: (day, drafts) tuples in calendar order

    Raises:
        BookingValidationError: If the request or its recurrence is invalid
    """
    days = expand_days(day, request.recurring, request.repeat_until, settings.max_weeks)
    return [
        (d, plan_intervals(request, catalog, d, settings.tz, settings.step, settings.max_padding))
        for d in days
    ]


def _header_fields(request: BookingRequest, catalog: ResourceCatalog, created_by) -> dict:
    resource = catalog.by_id(request.resource_id)
    return {
        'squad_id': request.squad_id,
        'category': request.category or default_category_for(resource),
        'status': request.status,
        'kind': booking_kind_for(resource),
        'notes': (request.notes or '').strip() or None,
        'created_by': created_by,
        'series_id': new_series_id() if request.recurring else None,
    }


def _write_days(store, plans: list, header: dict, recurring: bool) -> dict:
    """
    Write one booking per planned day.

    Each day is its own atomic unit: header plus intervals, or nothing.
    """
    booking_ids = []
    days_booked = []
    skipped_days = []
    intervals_written = 0

    for day, drafts in plans:
        try:
            with store.atomic():
                booking_id = store.insert_booking(header)
                store.insert_intervals(booking_id, drafts)
        except OverlapConflict as conflict:
            conflict.day = day
            if not recurring:
                logger.info('Booking rejected on %s: resource %s already taken',
                            day.isoformat(), conflict.resource_id)
                raise
            logger.info('Series %s: skipping %s, resource %s already taken',
                        header['series_id'], day.isoformat(), conflict.resource_id)
            skipped_days.append(day)
            continue

        booking_ids.append(booking_id)
        days_booked.append(day)
        intervals_written += len(drafts)

    return {
        'success': True,
        'booking_ids': booking_ids,
        'series_id': header['series_id'],
        'days_requested': [day for day, _ in plans],
        'days_booked': days_booked,
        'skipped_days': skipped_days,
        'intervals_written': intervals_written,
        'partial': bool(skipped_days),
    }


# =============================================================================
# CREATE
# =============================================================================

def create_booking(
    request: BookingRequest,
    day: date,
    actor,
    store=None,
    catalog: ResourceCatalog = None,
    settings: PlannerSettings = None
) -> dict:
    """
    Create a booking, or a weekly series of bookings.

    Args:
        request: Booking request
        day: Anchor day (first occurrence)
        actor: Acting user (id, is_admin)
        store: Booking store (defaults to the SQLite store)
        catalog: Resource catalog (defaults to the store's resources)
        settings: Planner settings

    Returns:
        dict: {
            'success': True,
            'booking_ids': [int],
            'series_id': str or None,
            'days_requested': [date],
            'days_booked': [date],
            'skipped_days': [date],
            'intervals_written': int,
            'partial': bool
        }

    Raises:
        BookingValidationError: If the request is invalid (nothing written)
        OverlapConflict: If a single booking collides (nothing written)
    """
    store, catalog, settings = _resolve(store, catalog, settings)
    plans = plan_request(request, day, catalog, settings)
    header = _header_fields(request, catalog, actor.id)

    outcome = _write_days(store, plans, header, request.recurring)

    logger.info('Actor %s booked %d/%d day(s) on resource %s',
                actor.id, len(outcome['days_booked']), len(plans), request.resource_id)
    return outcome


# =============================================================================
# UPDATE
# =============================================================================

def update_booking(
    booking_id: int,
    request: BookingRequest,
    day: date,
    actor,
    store=None,
    catalog: ResourceCatalog = None,
    settings: PlannerSettings = None
) -> dict:
    """
    Replace a booking: delete it with its intervals, then create anew.

    On a transactional store both phases share one transaction, so a failed
    recreate leaves the original booking in place. Otherwise a failure after
    the delete raises BookingReplaceFailed.

    Raises:
        BookingNotFound: If the booking does not exist
        BookingPermissionError: If the actor is neither creator nor admin
        BookingValidationError: If the new request is invalid (nothing changed)
        OverlapConflict: If the new request collides (original kept)
        BookingReplaceFailed: If the original was deleted but not replaced
    """
    store, catalog, settings = _resolve(store, catalog, settings)

    existing = store.get_booking(booking_id)
    if not existing:
        raise BookingNotFound(f"Prenotazione {booking_id} non trovata.")
    if not can_modify(existing, actor):
        raise BookingPermissionError("Non hai permessi per modificare questa prenotazione.")

    plans = plan_request(request, day, catalog, settings)
    header = _header_fields(request, catalog, existing['created_by'])

    if store.transactional:
        with store.atomic():
            store.delete_booking(booking_id)
            outcome = _write_days(store, plans, header, request.recurring)
            if not outcome['booking_ids']:
                raise OverlapConflict(day=day, resource_id=request.resource_id)
    else:
        store.delete_booking(booking_id)
        try:
            outcome = _write_days(store, plans, header, request.recurring)
        except OverlapConflict as conflict:
            logger.error('Booking %s deleted but not recreated: %s', booking_id, conflict)
            raise BookingReplaceFailed(booking_id, conflict) from conflict
        if not outcome['booking_ids']:
            logger.error('Booking %s deleted and every day of the new series conflicted', booking_id)
            raise BookingReplaceFailed(booking_id, OverlapConflict(day=day))

    outcome['replaced_booking_id'] = booking_id
    logger.info('Actor %s replaced booking %s with %s', actor.id, booking_id, outcome['booking_ids'])
    return outcome


# =============================================================================
# DELETE
# =============================================================================

def delete_booking(booking_id: int, actor, store=None) -> dict:
    """
    Delete a booking and all its intervals.

    Deleting a booking that no longer exists is not an error.

    Returns:
        dict: {'success': True, 'deleted': bool}

    Raises:
        BookingPermissionError: If the actor is neither creator nor admin
    """
    store = store if store is not None else SqliteBookingStore()

    existing = store.get_booking(booking_id)
    if not existing:
        return {'success': True, 'deleted': False}
    if not can_modify(existing, actor):
        raise BookingPermissionError("Non hai permessi per eliminare questa prenotazione.")

    deleted = store.delete_booking(booking_id)
    logger.info('Actor %s deleted booking %s', actor.id, booking_id)
    return {'success': True, 'deleted': deleted}
