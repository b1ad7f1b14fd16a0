"""
Planner settings resolved from the Flask configuration.
"""

from dataclasses import dataclass, field
from datetime import tzinfo
from zoneinfo import ZoneInfo

from .booking_slots import DEFAULT_TIMEZONE, STEP_MINUTES, WEEKDAY_HOURS, WEEKEND_HOURS
from .booking_allocation import MAX_LOCKER_PADDING
from .booking_recurrence import MAX_SERIES_WEEKS


@dataclass(frozen=True)
class PlannerSettings:
    tz: tzinfo = field(default=DEFAULT_TIMEZONE)
    step: int = STEP_MINUTES
    weekday_hours: tuple = WEEKDAY_HOURS
    weekend_hours: tuple = WEEKEND_HOURS
    half_a_name: str = 'Campo A'
    half_b_name: str = 'Campo B'
    max_padding: int = MAX_LOCKER_PADDING
    max_weeks: int = MAX_SERIES_WEEKS

    @property
    def window_kwargs(self) -> dict:
        return {'weekday_hours': self.weekday_hours, 'weekend_hours': self.weekend_hours}

    @classmethod
    def from_config(cls, config) -> 'PlannerSettings':
        """Build settings from a Flask config mapping."""
        return cls(
            tz=ZoneInfo(config.get('TIMEZONE', 'Europe/Rome')),
            step=config.get('PLANNER_STEP_MINUTES', STEP_MINUTES),
            weekday_hours=tuple(config.get('PLANNER_WEEKDAY_HOURS', WEEKDAY_HOURS)),
            weekend_hours=tuple(config.get('PLANNER_WEEKEND_HOURS', WEEKEND_HOURS)),
            half_a_name=config.get('FIELD_HALF_A_NAME', 'Campo A'),
            half_b_name=config.get('FIELD_HALF_B_NAME', 'Campo B'),
            max_padding=config.get('LOCKER_PADDING_MAX_MINUTES', MAX_LOCKER_PADDING),
            max_weeks=config.get('RECURRENCE_MAX_WEEKS', MAX_SERIES_WEEKS),
        )


def current_settings() -> PlannerSettings:
    """Settings of the running Flask app."""
    from flask import current_app
    return PlannerSettings.from_config(current_app.config)
