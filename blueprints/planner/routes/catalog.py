"""
Catalog API routes.
Resources shown as planner columns and squads selectable in the booking form.
"""

from flask_login import login_required

from models.actor import current_actor
from models.booking import SqliteBookingStore
from utils.api_response import api_success


def register_routes(bp):
    """Register catalog routes on the blueprint."""

    @bp.route('/resources')
    @login_required
    def list_resources():
        """Active resources in column order."""
        return api_success(data=SqliteBookingStore().list_resources())

    @bp.route('/squads')
    @login_required
    def list_squads():
        """Squads the current user may book for (admins: all)."""
        return api_success(data=SqliteBookingStore().list_squads(current_actor()))
