"""
Database schema definitions.
Table creation, indexes, triggers and structure management.
"""


def drop_tables(db):
    """Drop all existing tables."""
    # Disable foreign key constraints before dropping
    db.execute('PRAGMA foreign_keys = OFF')

    tables = [
        'booking_resources',
        'bookings',
        'squad_managers',
        'squads',
        'resources',
        'users'
    ]

    for table in tables:
        db.execute(f'DROP TABLE IF EXISTS {table}')

    # Re-enable foreign key constraints
    db.execute('PRAGMA foreign_keys = ON')


def create_tables(db):
    """Create all database tables."""

    # 1. Users
    db.execute('''
        CREATE TABLE users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT UNIQUE NOT NULL,
            email TEXT UNIQUE NOT NULL,
            password_hash TEXT NOT NULL,
            full_name TEXT,
            role TEXT NOT NULL DEFAULT 'coach' CHECK (role IN ('admin', 'coach')),
            active INTEGER DEFAULT 1,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
            last_login TIMESTAMP
        )
    ''')

    # 2. Bookable resources and squads (reference data)
    db.execute('''
        CREATE TABLE resources (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT UNIQUE NOT NULL,
            kind TEXT NOT NULL CHECK (kind IN ('FIELD_HALF', 'MINI_FIELD', 'LOCKER', 'VEHICLE')),
            display_order INTEGER DEFAULT 0,
            active INTEGER DEFAULT 1
        )
    ''')

    db.execute('''
        CREATE TABLE squads (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT UNIQUE NOT NULL,
            active INTEGER DEFAULT 1
        )
    ''')

    db.execute('''
        CREATE TABLE squad_managers (
            squad_id INTEGER NOT NULL REFERENCES squads(id) ON DELETE CASCADE,
            user_id INTEGER NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            PRIMARY KEY (squad_id, user_id)
        )
    ''')

    # 3. Bookings (header) and their reserved intervals
    db.execute('''
        CREATE TABLE bookings (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            squad_id INTEGER NOT NULL REFERENCES squads(id),
            category TEXT NOT NULL DEFAULT 'TRAINING',
            status TEXT NOT NULL DEFAULT 'PROPOSED',
            kind TEXT NOT NULL DEFAULT 'FIELD',
            notes TEXT,
            created_by INTEGER REFERENCES users(id),
            series_id TEXT,
            created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
        )
    ''')

    # start_at / end_at are UTC ISO-8601 strings of fixed width, so text
    # comparison is chronological comparison.
    db.execute('''
        CREATE TABLE booking_resources (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            booking_id INTEGER NOT NULL REFERENCES bookings(id) ON DELETE CASCADE,
            resource_id INTEGER NOT NULL REFERENCES resources(id),
            start_at TEXT NOT NULL,
            end_at TEXT NOT NULL,
            CHECK (end_at > start_at)
        )
    ''')


def create_indexes(db):
    """Create performance indexes."""

    db.execute('CREATE INDEX idx_booking_resources_range ON booking_resources(resource_id, start_at, end_at)')
    db.execute('CREATE INDEX idx_booking_resources_start ON booking_resources(start_at)')
    db.execute('CREATE INDEX idx_booking_resources_booking ON booking_resources(booking_id)')
    db.execute('CREATE INDEX idx_bookings_series ON bookings(series_id)')
    db.execute('CREATE INDEX idx_squad_managers_user ON squad_managers(user_id)')


def create_triggers(db):
    """
    Create the exclusion constraint on reserved intervals.

    SQLite has no EXCLUDE constraint, so overlapping intervals on the same
    resource are rejected by triggers. The abort message is the signal the
    booking store translates into an overlap conflict.
    """
    db.execute('''
        CREATE TRIGGER booking_resources_no_overlap_insert
        BEFORE INSERT ON booking_resources
        WHEN EXISTS (
            SELECT 1 FROM booking_resources br
            WHERE br.resource_id = NEW.resource_id
              AND br.start_at < NEW.end_at
              AND NEW.start_at < br.end_at
        )
        BEGIN
            SELECT RAISE(ABORT, 'booking_resources_no_overlap');
        END
    ''')

    db.execute('''
        CREATE TRIGGER booking_resources_no_overlap_update
        BEFORE UPDATE OF resource_id, start_at, end_at ON booking_resources
        WHEN EXISTS (
            SELECT 1 FROM booking_resources br
            WHERE br.resource_id = NEW.resource_id
              AND br.id != OLD.id
              AND br.start_at < NEW.end_at
              AND NEW.start_at < br.end_at
        )
        BEGIN
            SELECT RAISE(ABORT, 'booking_resources_no_overlap');
        END
    ''')
