"""
Booking store backed by SQLite.

The narrow persistence boundary of the booking core. Mutual exclusion of
intervals on the same resource is not checked here: the
booking_resources_no_overlap triggers reject the write, and this module turns
that rejection into an OverlapConflict.
"""

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone

from database import get_db
from .booking_errors import OverlapConflict


STORAGE_FORMAT = '%Y-%m-%dT%H:%M:%SZ'
OVERLAP_SIGNAL = 'booking_resources_no_overlap'


def to_storage(instant: datetime) -> str:
    """Serialize an aware instant as a fixed-width UTC string."""
    return instant.astimezone(timezone.utc).strftime(STORAGE_FORMAT)


def from_storage(value: str) -> datetime:
    """Parse a stored UTC string back into an aware instant."""
    return datetime.strptime(value, STORAGE_FORMAT).replace(tzinfo=timezone.utc)


def is_overlap_error(error: Exception) -> bool:
    """Recognize the store's exclusion violation among integrity errors."""
    message = str(error).lower()
    return OVERLAP_SIGNAL in message or 'overlap' in message


_INTERVAL_SELECT = '''
    SELECT br.id, br.booking_id, br.resource_id, br.start_at, br.end_at,
           r.name as resource_name, r.kind as resource_kind,
           b.squad_id, b.category, b.status, b.kind as booking_kind, b.notes,
           b.created_by, b.series_id, b.created_at,
           s.name as squad_name
    FROM booking_resources br
    JOIN bookings b ON br.booking_id = b.id
    JOIN resources r ON br.resource_id = r.id
    LEFT JOIN squads s ON b.squad_id = s.id
'''


def _interval_row(row) -> dict:
    item = dict(row)
    item['start_at'] = from_storage(item['start_at'])
    item['end_at'] = from_storage(item['end_at'])
    return item


class SqliteBookingStore:
    """
    Booking persistence on the request's SQLite connection.

    atomic() opens a savepoint, so blocks nest: a recurring create can roll
    back one day without touching the days already written, and an update
    can wrap delete and recreate in one outer block.
    """

    transactional = True

    def __init__(self, db=None):
        self.db = db if db is not None else get_db()
        self._depth = 0
        self._counter = 0

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    @contextmanager
    def atomic(self):
        self._counter += 1
        name = f'booking_sp_{self._counter}'
        self.db.execute(f'SAVEPOINT {name}')
        self._depth += 1
        try:
            yield self
        except BaseException:
            self.db.execute(f'ROLLBACK TO SAVEPOINT {name}')
            self.db.execute(f'RELEASE SAVEPOINT {name}')
            raise
        else:
            self.db.execute(f'RELEASE SAVEPOINT {name}')
        finally:
            self._depth -= 1

        if self._depth == 0:
            self.db.commit()

    def _commit(self):
        if self._depth == 0:
            self.db.commit()

    # -------------------------------------------------------------------------
    # Reference data
    # -------------------------------------------------------------------------

    def list_resources(self) -> list:
        cursor = self.db.execute('''
            SELECT id, name, kind, display_order, active
            FROM resources
            WHERE active = 1
            ORDER BY display_order, id
        ''')
        return [dict(row) for row in cursor.fetchall()]

    def list_squads(self, actor) -> list:
        """Admins see every squad; coaches see the squads they manage."""
        if actor.is_admin:
            cursor = self.db.execute('''
                SELECT id, name FROM squads WHERE active = 1 ORDER BY name
            ''')
        else:
            cursor = self.db.execute('''
                SELECT s.id, s.name
                FROM squads s
                JOIN squad_managers sm ON sm.squad_id = s.id
                WHERE sm.user_id = ? AND s.active = 1
                ORDER BY s.name
            ''', (actor.id,))
        return [dict(row) for row in cursor.fetchall()]

    # -------------------------------------------------------------------------
    # Bookings
    # -------------------------------------------------------------------------

    def get_booking(self, booking_id: int):
        row = self.db.execute('''
            SELECT b.*, s.name as squad_name
            FROM bookings b
            LEFT JOIN squads s ON b.squad_id = s.id
            WHERE b.id = ?
        ''', (booking_id,)).fetchone()
        return dict(row) if row else None

    def insert_booking(self, fields: dict) -> int:
        """
        Insert a booking header.

        Args:
            fields: squad_id, category, status, kind, notes, created_by, series_id

        Returns:
            int: New booking ID
        """
        cursor = self.db.execute('''
            INSERT INTO bookings (squad_id, category, status, kind, notes, created_by, series_id)
            VALUES (?, ?, ?, ?, ?, ?, ?)
        ''', (
            fields['squad_id'],
            fields.get('category') or 'TRAINING',
            fields.get('status') or 'PROPOSED',
            fields.get('kind') or 'FIELD',
            fields.get('notes') or None,
            fields.get('created_by'),
            fields.get('series_id'),
        ))
        self._commit()
        return cursor.lastrowid

    def insert_intervals(self, booking_id: int, drafts: list) -> None:
        """
        Insert all intervals of a booking, or none of them.

        Raises:
            OverlapConflict: If any interval overlaps an existing one on the
                same resource
        """
        with self.atomic():
            for draft in drafts:
                try:
                    self.db.execute('''
                        INSERT INTO booking_resources (booking_id, resource_id, start_at, end_at)
                        VALUES (?, ?, ?, ?)
                    ''', (booking_id, draft.resource_id,
                          to_storage(draft.start), to_storage(draft.end)))
                except sqlite3.IntegrityError as e:
                    if is_overlap_error(e):
                        raise OverlapConflict(str(e), resource_id=draft.resource_id) from e
                    raise

    def delete_booking(self, booking_id: int) -> bool:
        """
        Delete a booking and, by cascade, its intervals.

        Returns:
            bool: True if a booking was removed, False if it was already gone
        """
        cursor = self.db.execute('DELETE FROM bookings WHERE id = ?', (booking_id,))
        self._commit()
        return cursor.rowcount > 0

    # -------------------------------------------------------------------------
    # Intervals
    # -------------------------------------------------------------------------

    def list_booking_intervals(self, booking_id: int) -> list:
        cursor = self.db.execute(
            _INTERVAL_SELECT + ' WHERE br.booking_id = ? ORDER BY br.id',
            (booking_id,)
        )
        return [_interval_row(row) for row in cursor.fetchall()]

    def list_intervals_between(self, start: datetime, end: datetime) -> list:
        """
        Intervals starting in [start, end), joined with their booking header.

        Returns:
            list: Interval dicts with aware start_at / end_at
        """
        cursor = self.db.execute(
            _INTERVAL_SELECT + '''
            WHERE br.start_at >= ? AND br.start_at < ?
            ORDER BY br.start_at, br.resource_id
            ''',
            (to_storage(start), to_storage(end))
        )
        return [_interval_row(row) for row in cursor.fetchall()]

    def find_conflicts(self, drafts: list, exclude_booking_id: int = None) -> list:
        """
        Existing intervals that would collide with the drafts.

        Only a hint for the planner form: the triggers remain the authority.
        """
        conflicts = []
        for draft in drafts:
            query = _INTERVAL_SELECT + '''
                WHERE br.resource_id = ? AND br.start_at < ? AND ? < br.end_at
            '''
            params = [draft.resource_id, to_storage(draft.end), to_storage(draft.start)]
            if exclude_booking_id:
                query += ' AND br.booking_id != ?'
                params.append(exclude_booking_id)
            conflicts.extend(_interval_row(row) for row in self.db.execute(query, params).fetchall())
        return conflicts
