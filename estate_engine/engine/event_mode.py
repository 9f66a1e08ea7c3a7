"""Revenue for a space-rental asset whose daily rate jumps on event days.

A month is a flat 30 days by default. Event dates come from a pluggable
calendar; the calendar is a collaborator, not part of the yield maths.
"""
from __future__ import annotations

from datetime import date
from typing import Iterable, Protocol

from ..errors import InvalidInputError
from ..models import EventModeConfig
from .constants import DAYS_PER_MONTH, MONTHS_PER_YEAR


class EventCalendar(Protocol):
    def event_dates(self, year: int, month: int) -> list[date]:
        ...


class StaticEventCalendar:
    def __init__(self, dates: Iterable[date] = ()):
        self._dates = sorted(set(dates))

    def event_dates(self, year: int, month: int) -> list[date]:
        return [d for d in self._dates if d.year == year and d.month == month]


def _blended(config: EventModeConfig, event_days: float, days_in_month: int) -> float:
    if event_days < 0 or event_days > days_in_month:
        raise InvalidInputError(f"{event_days} event days do not fit a {days_in_month}-day month")
    normal = (days_in_month - event_days) * config.normal_daily_rate * config.spaces
    event = event_days * config.event_daily_rate * config.spaces
    return normal + event


def event_mode_yield(config: EventModeConfig, event_dates: Iterable[date] = (), days_in_month: int = DAYS_PER_MONTH) -> float:
    return _blended(config, len(set(event_dates)), days_in_month)


def annual_event_mode_yield(config: EventModeConfig, avg_events_per_month: float = 2, days_in_month: int = DAYS_PER_MONTH) -> float:
    return _blended(config, avg_events_per_month, days_in_month) * MONTHS_PER_YEAR


def month_yield(config: EventModeConfig, calendar: EventCalendar, year: int, month: int, days_in_month: int = DAYS_PER_MONTH) -> float:
    return event_mode_yield(config, calendar.event_dates(year, month), days_in_month)
