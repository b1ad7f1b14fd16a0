"""
Squad data access.
Squads tag bookings; coaches manage one or more squads.
"""

from database import get_db


def get_squad_by_name(name: str) -> dict:
    """
    Get squad by name.

    Returns:
        Squad dict or None if not found
    """
    db = get_db()
    row = db.execute('SELECT id, name, active FROM squads WHERE name = ?', (name,)).fetchone()
    return dict(row) if row else None


def assign_squad_manager(squad_id: int, user_id: int) -> bool:
    """
    Make a user manager of a squad.

    Returns:
        bool: True if the link was created, False if it already existed
    """
    db = get_db()
    cursor = db.execute('''
        INSERT OR IGNORE INTO squad_managers (squad_id, user_id) VALUES (?, ?)
    ''', (squad_id, user_id))
    db.commit()
    return cursor.rowcount > 0
