"""Planner route modules."""
