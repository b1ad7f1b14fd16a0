"""Planner services package."""
