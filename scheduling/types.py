"""
Data types and constants for the scheduling core.

This module contains:
- Value types passed into and returned from the occurrence expander
- DTOs used by the agenda and calendar builders
- Constants used across the application
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import FrozenSet, Optional, Union


REFERENCE_TIMEZONE = 'America/New_York'

DATE_FORMAT = '%Y-%m-%d'
COMPACT_DATE_FORMAT = '%Y%m%d'

DEFAULT_WEEKDAY_LOCALE = 'es'

STATUS_ACTIVE = 'active'
STATUS_UPCOMING = 'upcoming'
STATUS_COMPLETED = 'completed'


DateInput = Union[str, date]


@dataclass(frozen=True)
class SessionDescriptor:
    """
    Plain description of a recurring session.

    Dates are `YYYY-MM-DD` strings (or `date` objects), times are `HH:MM`
    strings. `weekday_spec` is free-form; empty means every date qualifies.
    `inline_cancellations` is the comma-separated cancel list stored on the
    session row itself.
    """
    start_date: DateInput
    end_date: Optional[DateInput] = None
    start_time: str = ''
    end_time: str = ''
    weekday_spec: str = ''
    inline_cancellations: Optional[str] = None


@dataclass(frozen=True)
class Occurrence:
    """One concrete calendar instance of a session."""
    date: date
    start: datetime
    end: datetime

    @property
    def ymd(self) -> str:
        """Canonical `YYYY-MM-DD` form used for exclusion lookups."""
        return self.date.strftime(DATE_FORMAT)

    @property
    def compact_date(self) -> str:
        return self.date.strftime(COMPACT_DATE_FORMAT)

    @property
    def weekday(self) -> int:
        return self.date.isoweekday()

    @property
    def duration(self) -> timedelta:
        # Negative when end_time precedes start_time; no overnight rollover.
        return self.end - self.start


@dataclass(frozen=True)
class ScheduledSession:
    """A session as the agenda and calendar builders receive it."""
    session_id: str
    descriptor: SessionDescriptor
    title: str = ''
    excluded_dates: FrozenSet[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class AgendaEntry:
    """DTO for one row of a day's agenda."""
    session_id: str
    title: str
    occurrence: Occurrence
    status: str
    start_label: str
    end_label: str


@dataclass(frozen=True)
class CalendarEvent:
    """DTO for one event of the weekly calendar."""
    id: str
    session_id: str
    title: str
    occurrence: Occurrence
