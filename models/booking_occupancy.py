"""
Occupancy reducer.

Inverse of the allocation planner: rebuilds, from the flat reserved
intervals of a day or week, the rectangles a person expects to see. The two
half-field intervals of a full-field booking become a single block spanning
both columns.
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, tzinfo
from typing import Optional

from .booking_slots import (
    DEFAULT_TIMEZONE, STEP_MINUTES, combine, operating_window, slot_extent, to_local
)


@dataclass
class DisplayBlock:
    booking_id: int
    day: date
    anchor_resource_id: int
    span: int
    start_at: datetime
    end_at: datetime
    squad_id: Optional[int] = None
    squad_name: str = ''
    category: str = ''
    status: str = ''
    created_by: Optional[int] = None
    coach_name: str = ''
    notes: Optional[str] = None
    series_id: Optional[str] = None
    is_minibus: bool = False

    def to_dict(self) -> dict:
        return {
            'booking_id': self.booking_id,
            'day': self.day.isoformat(),
            'anchor_resource_id': self.anchor_resource_id,
            'span': self.span,
            'start_at': self.start_at.isoformat(),
            'end_at': self.end_at.isoformat(),
            'start': self.start_at.strftime('%H:%M'),
            'end': self.end_at.strftime('%H:%M'),
            'squad_id': self.squad_id,
            'squad_name': self.squad_name,
            'category': self.category,
            'status': self.status,
            'created_by': self.created_by,
            'coach_name': self.coach_name,
            'notes': self.notes,
            'series_id': self.series_id,
            'is_minibus': self.is_minibus,
        }


# =============================================================================
# DAY / WEEK HELPERS
# =============================================================================

def week_monday(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def week_days(monday: date) -> list:
    """The seven days Monday to Sunday."""
    return [monday + timedelta(days=i) for i in range(7)]


# =============================================================================
# REDUCTION
# =============================================================================

def _group_rows(rows: list, tz: tzinfo) -> dict:
    groups = {}
    for row in rows:
        key = (row['booking_id'], to_local(row['start_at'], tz).date())
        groups.setdefault(key, []).append(row)
    return groups


def _block(booking_id, day, anchor, span, start_at, end_at, first, is_minibus,
           coach_names, tz) -> DisplayBlock:
    created_by = first.get('created_by')
    notes = (first.get('notes') or '').strip() or None
    return DisplayBlock(
        booking_id=booking_id,
        day=day,
        anchor_resource_id=anchor,
        span=span,
        start_at=to_local(start_at, tz),
        end_at=to_local(end_at, tz),
        squad_id=first.get('squad_id'),
        squad_name=first.get('squad_name') or f'#{booking_id}',
        category=first.get('category') or 'TRAINING',
        status=first.get('status') or '',
        created_by=created_by,
        coach_name=coach_names.get(created_by, '') if coach_names else '',
        notes=notes,
        series_id=first.get('series_id'),
        is_minibus=is_minibus,
    )


def reduce_blocks(
    rows: list,
    half_a_id: Optional[int],
    half_b_id: Optional[int],
    tz: tzinfo = DEFAULT_TIMEZONE,
    coach_names: dict = None
) -> list:
    """
    Turn reserved intervals into display blocks.

    Args:
        rows: Interval dicts joined with their booking header
            (booking_id, resource_id, resource_kind, start_at, end_at, ...)
        half_a_id: Resource ID of field half A (None if not in the catalog)
        half_b_id: Resource ID of field half B (None if not in the catalog)
        tz: Facility timezone
        coach_names: Optional {user_id: name} for the coach label

    Returns:
        list: DisplayBlock objects, one per booking per day and column,
            ordered by start time then anchor
    """
    blocks = []
    halves = {half_a_id, half_b_id} - {None}

    for (booking_id, day), group in _group_rows(rows, tz).items():
        first = group[0]
        resource_ids = {row['resource_id'] for row in group}
        merged = (
            half_a_id is not None and half_b_id is not None
            and half_a_id in resource_ids and half_b_id in resource_ids
        )
        is_minibus = any(row.get('resource_kind') == 'VEHICLE' for row in group)

        if merged:
            # The halves should share bounds, but older rows may not
            field_rows = [row for row in group if row['resource_id'] in halves]
            blocks.append(_block(
                booking_id, day, half_a_id, 2,
                min(row['start_at'] for row in field_rows),
                max(row['end_at'] for row in field_rows),
                first, is_minibus, coach_names, tz
            ))

        for row in group:
            if merged and row['resource_id'] in halves:
                continue
            blocks.append(_block(
                booking_id, day, row['resource_id'], 1,
                row['start_at'], row['end_at'],
                first, is_minibus, coach_names, tz
            ))

    blocks.sort(key=lambda b: (b.start_at, b.anchor_resource_id, b.booking_id))
    return blocks


def blocks_by_anchor(blocks: list) -> dict:
    """Group blocks into planner columns, each column ordered by start."""
    columns = {}
    for block in blocks:
        columns.setdefault(block.anchor_resource_id, []).append(block)
    for column in columns.values():
        column.sort(key=lambda b: b.start_at)
    return columns


def reduce_week(
    rows: list,
    monday: date,
    half_a_id: Optional[int],
    half_b_id: Optional[int],
    tz: tzinfo = DEFAULT_TIMEZONE,
    resource_ids: set = None,
    coach_names: dict = None
) -> dict:
    """
    Display blocks of a Monday-based week, keyed by ISO day.

    Args:
        resource_ids: If given, only intervals on these resources are shown
            (the week board shows the fields only)

    Returns:
        dict: {'YYYY-MM-DD': [DisplayBlock]} with all seven days present
    """
    if resource_ids is not None:
        rows = [row for row in rows if row['resource_id'] in resource_ids]

    week = {d.isoformat(): [] for d in week_days(monday)}
    for block in reduce_blocks(rows, half_a_id, half_b_id, tz, coach_names):
        key = block.day.isoformat()
        if key in week:
            week[key].append(block)
    return week


def block_extent(block: DisplayBlock, step: int = STEP_MINUTES,
                 tz: tzinfo = DEFAULT_TIMEZONE, **window_kwargs) -> tuple:
    """
    Grid rows covered by a block in its day's operating window.

    Returns:
        tuple: (top_row, row_count)
    """
    window_start, _ = operating_window(block.day, **window_kwargs)
    return slot_extent(block.start_at, block.end_at, combine(block.day, window_start, tz), step)
