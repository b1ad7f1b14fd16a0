"""
Booking API routes.
Create (single or weekly series), read for the edit form, update by
replacement, delete, and a pre-save availability check.
"""

from flask import request
from flask_login import login_required

from models.actor import can_modify, current_actor
from models.booking import (
    BookingError, SqliteBookingStore, create_booking, update_booking, delete_booking,
    plan_request, request_from_intervals
)
from models.booking_slots import to_local
from models.planner_settings import current_settings
from models.resource import ResourceCatalog
from blueprints.planner.services.booking_payload import (
    parse_booking_payload, squad_allowed, serialize_outcome, serialize_request,
    serialize_interval, outcome_warning, booking_error_response
)
from utils.api_response import api_error, api_success
from utils.messages import MESSAGES
from utils.validators import validate_optional_id


def _catalog(store, settings) -> ResourceCatalog:
    return ResourceCatalog(store.list_resources(), settings.half_a_name, settings.half_b_name)


def _parse(store, actor, settings) -> tuple:
    """
    Parse and authorize the JSON body.

    Returns:
        Tuple of (parsed (BookingRequest, date) or None, error response or None)
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return None, api_error(MESSAGES['data_required'], 400)

    valid, parsed, err = parse_booking_payload(data, settings.step)
    if not valid:
        return None, api_error(err, 400)

    if not squad_allowed(store, actor, parsed[0].squad_id):
        return None, api_error(MESSAGES['squad_not_allowed'], 403)

    return parsed, None


def register_routes(bp):
    """Register booking routes on the blueprint."""

    @bp.route('/bookings/<int:booking_id>')
    @login_required
    def get_booking(booking_id):
        """
        Booking header, its intervals and the request that rebuilds it.

        Returns:
            JSON with booking, intervals, request (edit form values), can_modify
        """
        settings = current_settings()
        store = SqliteBookingStore()

        booking = store.get_booking(booking_id)
        if not booking:
            return api_error(MESSAGES['booking_not_found'], 404)

        intervals = store.list_booking_intervals(booking_id)
        form_request = request_from_intervals(
            booking, intervals, _catalog(store, settings), settings.tz, settings.step
        )

        day = None
        if form_request:
            primary = [r for r in intervals if r['resource_id'] == form_request.resource_id]
            day = to_local(min(r['start_at'] for r in primary), settings.tz).date().isoformat()

        return api_success(data={
            'booking': booking,
            'date': day,
            'intervals': [serialize_interval(row, settings.tz) for row in intervals],
            'request': serialize_request(form_request) if form_request else None,
            'can_modify': can_modify(booking, current_actor()),
        })

    @bp.route('/bookings', methods=['POST'])
    @login_required
    def create():
        """
        Create a booking, or one booking per week of a series.

        Request body: see parse_booking_payload.

        Returns:
            201 with the outcome; a partial series carries a warning.
            409 if nothing could be booked.
        """
        actor = current_actor()
        settings = current_settings()
        store = SqliteBookingStore()

        parsed, error = _parse(store, actor, settings)
        if error:
            return error
        booking_request, day = parsed

        try:
            outcome = create_booking(booking_request, day, actor, store=store, settings=settings)
        except BookingError as e:
            return booking_error_response(e)

        if not outcome['booking_ids']:
            return api_error(MESSAGES['series_all_taken'], 409,
                             skipped_days=serialize_outcome(outcome)['skipped_days'])

        if booking_request.recurring:
            message = MESSAGES['booking_series_created'].format(
                booked=len(outcome['days_booked']), requested=len(outcome['days_requested'])
            )
        else:
            message = MESSAGES['booking_created']

        return api_success(
            data=serialize_outcome(outcome),
            message=message,
            warning=outcome_warning(outcome),
            status=201
        )

    @bp.route('/bookings/<int:booking_id>', methods=['PUT'])
    @login_required
    def update(booking_id):
        """
        Replace a booking with the submitted request.

        Returns:
            200 with the outcome (new booking ids, replaced_booking_id)
        """
        actor = current_actor()
        settings = current_settings()
        store = SqliteBookingStore()

        parsed, error = _parse(store, actor, settings)
        if error:
            return error
        booking_request, day = parsed

        try:
            outcome = update_booking(booking_id, booking_request, day, actor,
                                     store=store, settings=settings)
        except BookingError as e:
            return booking_error_response(e)

        return api_success(
            data=serialize_outcome(outcome),
            message=MESSAGES['booking_updated'],
            warning=outcome_warning(outcome)
        )

    @bp.route('/bookings/<int:booking_id>', methods=['DELETE'])
    @login_required
    def delete(booking_id):
        """Delete a booking and all its intervals. Deleting twice is fine."""
        try:
            outcome = delete_booking(booking_id, current_actor(), store=SqliteBookingStore())
        except BookingError as e:
            return booking_error_response(e)

        message = MESSAGES['booking_deleted'] if outcome['deleted'] else MESSAGES['booking_already_deleted']
        return api_success(data={'deleted': outcome['deleted']}, message=message)

    @bp.route('/bookings/check', methods=['POST'])
    @login_required
    def check_availability():
        """
        Intervals already occupying what the request would reserve.

        Request body: same as create, plus exclude_booking_id (optional).
        Only a hint for the form; the save itself is authoritative.
        """
        actor = current_actor()
        settings = current_settings()
        store = SqliteBookingStore()

        parsed, error = _parse(store, actor, settings)
        if error:
            return error
        booking_request, day = parsed
        valid, exclude_id, err = validate_optional_id(
            request.get_json(silent=True).get('exclude_booking_id'), 'prenotazione'
        )
        if not valid:
            return api_error(err, 400)

        try:
            plans = plan_request(booking_request, day, _catalog(store, settings), settings)
        except BookingError as e:
            return booking_error_response(e)

        conflicts = []
        for plan_day, drafts in plans:
            for row in store.find_conflicts(drafts, exclude_booking_id=exclude_id):
                item = serialize_interval(row, settings.tz)
                item['booking_id'] = row['booking_id']
                item['day'] = plan_day.isoformat()
                conflicts.append(item)

        return api_success(data={'available': not conflicts, 'conflicts': conflicts})
