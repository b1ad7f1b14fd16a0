"""
Acting user as seen by the booking core.
Only two facts matter: who the actor is and whether they are an admin.
"""

from dataclasses import dataclass

from flask_login import current_user


@dataclass(frozen=True)
class Actor:
    id: int
    is_admin: bool = False


def current_actor():
    """
    Actor for the logged-in Flask-Login user.

    Returns:
        Actor or None for anonymous requests
    """
    if not current_user or not current_user.is_authenticated:
        return None
    return Actor(id=current_user.id, is_admin=current_user.is_admin)


def can_modify(booking: dict, actor) -> bool:
    """Admins may change anything; coaches only what they created."""
    if actor is None or booking is None:
        return False
    return actor.is_admin or booking.get('created_by') == actor.id
