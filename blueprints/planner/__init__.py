"""
Planner blueprint initialization.
Registers the planner JSON API (catalog, day/week boards, bookings).

Individual route logic is in:
- routes/catalog.py - Resources and squads
- routes/board.py - Day and week occupancy
- routes/bookings.py - Booking CRUD
"""

from flask import Blueprint

planner_bp = Blueprint('planner', __name__)

# =============================================================================
# REGISTER ROUTE MODULES
# =============================================================================

from blueprints.planner.routes import catalog  # noqa: E402
from blueprints.planner.routes import board  # noqa: E402
from blueprints.planner.routes import bookings  # noqa: E402

catalog.register_routes(planner_bp)
board.register_routes(planner_bp)
bookings.register_routes(planner_bp)
