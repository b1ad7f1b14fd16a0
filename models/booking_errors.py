"""
Booking error taxonomy.

Validation errors are local and never retried. Overlap conflicts come from
the store's exclusion constraint. A partially booked series is not an error:
it is reported in the create outcome.
"""


class BookingError(Exception):
    """Base class for booking failures surfaced to the caller."""


class BookingValidationError(BookingError, ValueError):
    """The request is incomplete or inconsistent."""


class OverlapConflict(BookingError):
    """The store rejected an interval that overlaps an existing one."""

    def __init__(self, message: str = 'booking_resources_no_overlap',
                 resource_id: int = None, day=None):
        super().__init__(message)
        self.resource_id = resource_id
        self.day = day


class BookingPermissionError(BookingError, PermissionError):
    """The actor may not modify this booking."""


class BookingNotFound(BookingError, LookupError):
    """The booking does not exist (any more)."""


class BookingReplaceFailed(BookingError):
    """
    Update deleted the old booking but could not create the new one.

    Raised only by stores that cannot run the delete and the recreate in one
    transaction. The original booking is gone.
    """

    def __init__(self, booking_id: int, cause: Exception):
        super().__init__(f'Booking {booking_id} was removed but not replaced: {cause}')
        self.booking_id = booking_id
        self.cause = cause
