"""
Pytest configuration and fixtures.
Ensures tests use an isolated test database, not the production database.
"""

import copy
import os
import pytest
import tempfile
from contextlib import contextmanager

# Set test database path BEFORE importing app
# This ensures all tests use an isolated database
TEST_DB_PATH = os.path.join(tempfile.gettempdir(), 'club_planner_test.db')
os.environ['DATABASE_PATH'] = TEST_DB_PATH


@pytest.fixture(scope='session', autouse=True)
def setup_test_environment():
    """Set up test environment before any tests run."""
    os.environ['DATABASE_PATH'] = TEST_DB_PATH
    os.environ['FLASK_ENV'] = 'test'

    yield

    # Cleanup: remove test database after all tests
    for suffix in ('', '-wal', '-shm'):
        path = TEST_DB_PATH + suffix
        if os.path.exists(path):
            try:
                os.remove(path)
            except PermissionError:
                pass  # Windows may have file locked


@pytest.fixture
def app():
    """Create test application with isolated database."""
    from app import create_app
    from database import init_db

    os.environ['DATABASE_PATH'] = TEST_DB_PATH

    app = create_app('test')
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False
    app.config['DATABASE_PATH'] = TEST_DB_PATH

    # Requests must not share the fixture's app context: Flask-Login caches
    # the loaded user on g.
    with app.app_context():
        init_db()

    yield app


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


def _login(app, username, password):
    client = app.test_client()
    response = client.post('/login', data={'username': username, 'password': password})
    assert response.status_code == 200, response.get_json()
    return client


@pytest.fixture
def admin_client(app):
    """Test client logged in as the seeded admin."""
    return _login(app, 'admin', 'admin123')


@pytest.fixture
def coach_client(app):
    """Test client logged in as the seeded coach (manages Pulcini)."""
    return _login(app, 'mister', 'mister123')


@pytest.fixture
def login(app):
    """Log in any user: login(username, password) -> client."""
    return lambda username, password: _login(app, username, password)


@pytest.fixture
def sqlite_store(app):
    """Booking store on the test database (inside an app context)."""
    from models.booking_store import SqliteBookingStore

    with app.app_context():
        yield SqliteBookingStore()


@pytest.fixture
def ids(app):
    """Seeded resource/squad/user IDs by name."""
    from database import get_db

    with app.app_context():
        db = get_db()
        return {
            'resources': {r['name']: r['id'] for r in db.execute('SELECT id, name FROM resources')},
            'squads': {s['name']: s['id'] for s in db.execute('SELECT id, name FROM squads')},
            'users': {u['username']: u['id'] for u in db.execute('SELECT id, username FROM users')},
        }


# =============================================================================
# IN-MEMORY STORE
# =============================================================================

SEED_RESOURCES = [
    {'id': 1, 'name': 'Campo A', 'kind': 'FIELD_HALF', 'display_order': 1, 'active': 1},
    {'id': 2, 'name': 'Campo B', 'kind': 'FIELD_HALF', 'display_order': 2, 'active': 1},
    {'id': 3, 'name': 'Campetto', 'kind': 'MINI_FIELD', 'display_order': 3, 'active': 1},
    {'id': 4, 'name': 'Spogliatoio 1', 'kind': 'LOCKER', 'display_order': 4, 'active': 1},
    {'id': 5, 'name': 'Spogliatoio 2', 'kind': 'LOCKER', 'display_order': 5, 'active': 1},
    {'id': 6, 'name': 'Spogliatoio 3', 'kind': 'LOCKER', 'display_order': 6, 'active': 1},
    {'id': 7, 'name': 'Spogliatoio 4', 'kind': 'LOCKER', 'display_order': 7, 'active': 1},
    {'id': 8, 'name': 'Pulmino', 'kind': 'VEHICLE', 'display_order': 8, 'active': 1},
]


class MemoryBookingStore:
    """
    In-memory booking store enforcing the same exclusion rule as the
    SQLite triggers: no two intervals on one resource may overlap.
    """

    def __init__(self, resources=None, transactional=True):
        self.resources = copy.deepcopy(resources or SEED_RESOURCES)
        self.squads = [{'id': 1, 'name': 'Pulcini'}, {'id': 2, 'name': 'Esordienti'}]
        self.managers = {}
        self.transactional = transactional
        self.bookings = {}
        self.intervals = []
        self._next_booking = 1
        self._next_interval = 1

    def _state(self):
        return (copy.deepcopy(self.bookings), copy.deepcopy(self.intervals),
                self._next_booking, self._next_interval)

    @contextmanager
    def atomic(self):
        snapshot = self._state()
        try:
            yield self
        except BaseException:
            self.bookings, self.intervals, self._next_booking, self._next_interval = snapshot
            raise

    def list_resources(self):
        return list(self.resources)

    def list_squads(self, actor):
        if actor.is_admin:
            return list(self.squads)
        return [s for s in self.squads if actor.id in self.managers.get(s['id'], ())]

    def get_booking(self, booking_id):
        booking = self.bookings.get(booking_id)
        return dict(booking) if booking else None

    def insert_booking(self, fields):
        booking_id = self._next_booking
        self._next_booking += 1
        self.bookings[booking_id] = dict(fields, id=booking_id)
        return booking_id

    def insert_intervals(self, booking_id, drafts):
        from models.booking_errors import OverlapConflict

        with self.atomic():
            for draft in drafts:
                for row in self.intervals:
                    if (row['resource_id'] == draft.resource_id
                            and row['start_at'] < draft.end and draft.start < row['end_at']):
                        raise OverlapConflict(resource_id=draft.resource_id)
                self.intervals.append({
                    'id': self._next_interval,
                    'booking_id': booking_id,
                    'resource_id': draft.resource_id,
                    'start_at': draft.start,
                    'end_at': draft.end,
                })
                self._next_interval += 1

    def delete_booking(self, booking_id):
        if booking_id not in self.bookings:
            return False
        del self.bookings[booking_id]
        self.intervals = [r for r in self.intervals if r['booking_id'] != booking_id]
        return True

    def _joined(self, row):
        booking = self.bookings[row['booking_id']]
        resource = next(r for r in self.resources if r['id'] == row['resource_id'])
        return dict(
            row,
            resource_name=resource['name'],
            resource_kind=resource['kind'],
            squad_id=booking['squad_id'],
            squad_name=None,
            category=booking.get('category'),
            status=booking.get('status'),
            booking_kind=booking.get('kind'),
            notes=booking.get('notes'),
            created_by=booking.get('created_by'),
            series_id=booking.get('series_id'),
        )

    def list_booking_intervals(self, booking_id):
        return [self._joined(r) for r in self.intervals if r['booking_id'] == booking_id]

    def list_intervals_between(self, start, end):
        rows = [self._joined(r) for r in self.intervals if start <= r['start_at'] < end]
        return sorted(rows, key=lambda r: (r['start_at'], r['resource_id']))

    def find_conflicts(self, drafts, exclude_booking_id=None):
        return [
            self._joined(row)
            for draft in drafts
            for row in self.intervals
            if row['resource_id'] == draft.resource_id
            and row['start_at'] < draft.end and draft.start < row['end_at']
            and row['booking_id'] != exclude_booking_id
        ]


@pytest.fixture
def memory_store():
    """Fresh transactional in-memory store."""
    return MemoryBookingStore()


@pytest.fixture
def non_transactional_store():
    """In-memory store that cannot wrap delete and recreate in one transaction."""
    return MemoryBookingStore(transactional=False)


@pytest.fixture
def catalog():
    """Resource catalog matching the seeded resources."""
    from models.resource import ResourceCatalog
    return ResourceCatalog(SEED_RESOURCES)
