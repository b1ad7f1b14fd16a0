"""
Database seed data.
Initial data population for fresh database installations.
"""

from werkzeug.security import generate_password_hash


def seed_database(db):
    """Insert initial seed data."""

    # 1. Bookable resources (display order = planner column order)
    resources_data = [
        ('Campo A', 'FIELD_HALF', 1),
        ('Campo B', 'FIELD_HALF', 2),
        ('Campetto', 'MINI_FIELD', 3),
        ('Spogliatoio 1', 'LOCKER', 4),
        ('Spogliatoio 2', 'LOCKER', 5),
        ('Spogliatoio 3', 'LOCKER', 6),
        ('Spogliatoio 4', 'LOCKER', 7),
        ('Pulmino', 'VEHICLE', 8),
    ]

    for name, kind, display_order in resources_data:
        db.execute('''
            INSERT INTO resources (name, kind, display_order)
            VALUES (?, ?, ?)
        ''', (name, kind, display_order))

    # 2. Squads
    squads_data = [
        'Pulcini',
        'Esordienti',
        'Giovanissimi',
        'Allievi',
        'Juniores',
        'Prima Squadra',
    ]

    for name in squads_data:
        db.execute('INSERT INTO squads (name) VALUES (?)', (name,))

    # 3. Default users: one admin, one coach managing a single squad
    db.execute('''
        INSERT INTO users (username, email, password_hash, full_name, role)
        VALUES (?, ?, ?, ?, ?)
    ''', ('admin', 'admin@club.local', generate_password_hash('admin123'),
          'Amministratore', 'admin'))

    cursor = db.execute('''
        INSERT INTO users (username, email, password_hash, full_name, role)
        VALUES (?, ?, ?, ?, ?)
    ''', ('mister', 'mister@club.local', generate_password_hash('mister123'),
          'Mister Pulcini', 'coach'))
    coach_id = cursor.lastrowid

    squad_id = db.execute("SELECT id FROM squads WHERE name = 'Pulcini'").fetchone()[0]
    db.execute('''
        INSERT INTO squad_managers (squad_id, user_id) VALUES (?, ?)
    ''', (squad_id, coach_id))
