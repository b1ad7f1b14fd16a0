"""
Booking core.
Allocation, recurrence, commit orchestration and occupancy reduction for the
club's bookable resources.

This module re-exports the public functions of the split modules:
- booking_slots.py: Time-of-day grid (snapping, ordering, operating window)
- booking_allocation.py: Request → per-resource interval drafts
- booking_recurrence.py: Weekly series expansion
- booking_store.py: SQLite persistence with the no-overlap constraint
- booking_commit.py: Create / update / delete orchestration
- booking_occupancy.py: Intervals → display blocks
"""

# =============================================================================
# RE-EXPORTS
# =============================================================================

# Errors
from .booking_errors import (
    BookingError,
    BookingValidationError,
    OverlapConflict,
    BookingPermissionError,
    BookingNotFound,
    BookingReplaceFailed,
)

# Time grid
from .booking_slots import (
    snap_to_step,
    clamp_order,
    combine,
    operating_window,
    day_slots,
    default_end,
)

# Allocation
from .booking_allocation import (
    FIELD_MODES,
    BOOKING_CATEGORIES,
    BookingRequest,
    IntervalDraft,
    plan_intervals,
    resolve_field_mode,
    request_from_intervals,
)

# Recurrence
from .booking_recurrence import (
    expand_days,
    new_series_id,
)

# Persistence
from .booking_store import SqliteBookingStore

# Orchestration
from .booking_commit import (
    plan_request,
    create_booking,
    update_booking,
    delete_booking,
)

# Occupancy
from .booking_occupancy import (
    DisplayBlock,
    reduce_blocks,
    reduce_week,
    blocks_by_anchor,
    block_extent,
    week_monday,
    week_days,
)

# =============================================================================
# PUBLIC API
# =============================================================================

__all__ = [
    # Errors
    'BookingError',
    'BookingValidationError',
    'OverlapConflict',
    'BookingPermissionError',
    'BookingNotFound',
    'BookingReplaceFailed',

    # Time grid
    'snap_to_step',
    'clamp_order',
    'combine',
    'operating_window',
    'day_slots',
    'default_end',

    # Allocation
    'FIELD_MODES',
    'BOOKING_CATEGORIES',
    'BookingRequest',
    'IntervalDraft',
    'plan_intervals',
    'resolve_field_mode',
    'request_from_intervals',

    # Recurrence
    'expand_days',
    'new_series_id',

    # Persistence
    'SqliteBookingStore',

    # Orchestration
    'plan_request',
    'create_booking',
    'update_booking',
    'delete_booking',

    # Occupancy
    'DisplayBlock',
    'reduce_blocks',
    'reduce_week',
    'blocks_by_anchor',
    'block_extent',
    'week_monday',
    'week_days',
]
