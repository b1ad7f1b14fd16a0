"""
Occupancy board API routes.
Day planner (every resource) and week board (fields only).
"""

from datetime import timedelta

from flask import request
from flask_login import login_required

from models.booking import (
    SqliteBookingStore, reduce_blocks, reduce_week, blocks_by_anchor, block_extent,
    operating_window, day_slots, combine, week_monday, week_days
)
from models.planner_settings import current_settings
from models.resource import ResourceCatalog
from models.user import get_public_names
from utils.api_response import api_error, api_success
from utils.datetime_helpers import get_today
from utils.validators import validate_date


def _catalog(store, settings) -> ResourceCatalog:
    return ResourceCatalog(store.list_resources(), settings.half_a_name, settings.half_b_name)


def _coach_names(rows: list) -> dict:
    return get_public_names({row['created_by'] for row in rows if row.get('created_by')})


def _block_payload(block, settings) -> dict:
    data = block.to_dict()
    top_row, row_count = block_extent(block, settings.step, settings.tz, **settings.window_kwargs)
    data['top_row'] = top_row
    data['row_count'] = row_count
    return data


def _requested_day(param: str) -> tuple:
    value = request.args.get(param)
    if not value:
        return True, get_today(), ''
    return validate_date(value, param)


def register_routes(bp):
    """Register day and week board routes on the blueprint."""

    @bp.route('/planner/day')
    @login_required
    def planner_day():
        """
        Occupancy of one day.

        Query params:
            date: YYYY-MM-DD (default: today)

        Returns:
            JSON with window, slots, resources, blocks and blocks per column
        """
        valid, day, err = _requested_day('date')
        if not valid:
            return api_error(err, 400)

        settings = current_settings()
        store = SqliteBookingStore()
        catalog = _catalog(store, settings)

        rows = store.list_intervals_between(
            combine(day, '00:00', settings.tz),
            combine(day + timedelta(days=1), '00:00', settings.tz)
        )
        blocks = reduce_blocks(rows, catalog.half_a_id, catalog.half_b_id,
                               settings.tz, _coach_names(rows))

        window_start, window_end = operating_window(day, **settings.window_kwargs)
        columns = {
            anchor: [block.booking_id for block in column]
            for anchor, column in blocks_by_anchor(blocks).items()
        }

        return api_success(data={
            'date': day.isoformat(),
            'window': {'start': window_start, 'end': window_end},
            'step': settings.step,
            'slots': day_slots(day, settings.step, **settings.window_kwargs),
            'resources': catalog.resources,
            'half_a_id': catalog.half_a_id,
            'half_b_id': catalog.half_b_id,
            'blocks': [_block_payload(block, settings) for block in blocks],
            'columns': columns,
        })

    @bp.route('/planner/week')
    @login_required
    def planner_week():
        """
        Occupancy of the fields over a Monday-based week.

        Query params:
            week: Any day of the week YYYY-MM-DD (default: today)

        Returns:
            JSON with the seven days and their blocks
        """
        valid, day, err = _requested_day('week')
        if not valid:
            return api_error(err, 400)

        settings = current_settings()
        store = SqliteBookingStore()
        catalog = _catalog(store, settings)
        monday = week_monday(day)

        rows = store.list_intervals_between(
            combine(monday, '00:00', settings.tz),
            combine(monday + timedelta(days=7), '00:00', settings.tz)
        )
        fields = catalog.fields()
        week = reduce_week(
            rows, monday, catalog.half_a_id, catalog.half_b_id, settings.tz,
            resource_ids={resource['id'] for resource in fields},
            coach_names=_coach_names(rows)
        )

        return api_success(data={
            'monday': monday.isoformat(),
            'days': [d.isoformat() for d in week_days(monday)],
            'resources': fields,
            'blocks': {
                key: [_block_payload(block, settings) for block in blocks]
                for key, blocks in week.items()
            },
        })
