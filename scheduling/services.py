"""
Service layer for schedule business logic.

The occurrence expander turns a session description into concrete
calendar occurrences. The agenda and calendar builders are its callers:
they expand many sessions and filter, sort and label the results.
Nothing here touches the database.
"""

import logging
import re
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Union
from zoneinfo import ZoneInfo

from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime

from .exceptions import InvalidDateRange
from .exclusions import ExclusionSet
from .formatting import format_clock_time
from .types import (
    REFERENCE_TIMEZONE,
    STATUS_ACTIVE,
    STATUS_COMPLETED,
    STATUS_UPCOMING,
    AgendaEntry,
    CalendarEvent,
    Occurrence,
    ScheduledSession,
    SessionDescriptor,
)
from .weekdays import parse_weekdays

logger = logging.getLogger(__name__)

ZoneLike = Union[str, ZoneInfo]

_CLOCK = re.compile(r'^\s*(\d{1,2})(?::(\d{1,2}))?(?::\d{1,2}(?:\.\d+)?)?\s*$')


def expand_occurrences(
    descriptor: SessionDescriptor,
    exclusions: Iterable[Union[str, date]] = (),
    zone: ZoneLike = REFERENCE_TIMEZONE
) -> List[Occurrence]:
    """
    Enumerate every occurrence a session produces.

    Walks the session's date range one calendar day at a time, keeping
    dates whose weekday is allowed (an empty weekday set allows all) and
    that are neither in the inline cancel list nor in `exclusions`.

    Args:
        descriptor: SessionDescriptor to expand
        exclusions: Externally recorded excluded dates (`YYYY-MM-DD`),
                    or an ExclusionSet
        zone: Reference timezone name or ZoneInfo

    Returns:
        List of Occurrence instances ordered by date

    Raises:
        InvalidDateRange: If the start date cannot be parsed
    """
    tz = _resolve_zone(zone)

    first_day = _parse_day(descriptor.start_date, tz)
    if first_day is None:
        raise InvalidDateRange(descriptor.start_date)

    last_day = _get_last_day(descriptor, first_day, tz)
    if last_day is None:
        return []

    excluded = _merge_exclusions(descriptor.inline_cancellations, exclusions)
    weekdays = parse_weekdays(descriptor.weekday_spec)
    start_clock = _parse_clock(descriptor.start_time, 'start_time')
    end_clock = _parse_clock(descriptor.end_time, 'end_time')

    occurrences = [
        Occurrence(
            date=day,
            start=_make_aware_datetime(day, start_clock, tz),
            end=_make_aware_datetime(day, end_clock, tz),
        )
        for day in _calculate_occurrence_dates(first_day, last_day, weekdays, excluded)
    ]
    occurrences.sort(key=lambda occurrence: occurrence.date)
    return occurrences


def _resolve_zone(zone: ZoneLike) -> ZoneInfo:
    if isinstance(zone, ZoneInfo):
        return zone
    return ZoneInfo(zone)


def _parse_day(value, tz: ZoneInfo) -> Optional[date]:
    """Parse a date or ISO datetime into a calendar date in tz."""
    if isinstance(value, datetime):
        return _local_date(value, tz)
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        parsed_date = parse_date(text)
        if parsed_date is not None:
            return parsed_date
        parsed_datetime = parse_datetime(text)
    except ValueError:
        return None

    if parsed_datetime is None:
        return None
    return _local_date(parsed_datetime, tz)


def _local_date(value: datetime, tz: ZoneInfo) -> date:
    if timezone.is_aware(value):
        return timezone.localtime(value, tz).date()
    return value.date()


def _get_last_day(descriptor: SessionDescriptor, first_day: date, tz: ZoneInfo) -> Optional[date]:
    """Determine the inclusive upper bound; an absent end date means one day."""
    end_date = descriptor.end_date
    if end_date is None or (isinstance(end_date, str) and not end_date.strip()):
        return first_day

    last_day = _parse_day(end_date, tz)
    if last_day is None:
        logger.debug("Unparseable end date %r, no occurrences produced", end_date)
    return last_day


def _merge_exclusions(inline_cancellations: Optional[str], exclusions) -> ExclusionSet:
    if isinstance(exclusions, ExclusionSet):
        exclusions = exclusions.inline | exclusions.external
    return ExclusionSet.from_sources(inline_cancellations, exclusions)


def _parse_clock(value: Optional[str], field_name: str) -> time:
    """Parse `H`, `HH:MM` or `HH:MM:SS`; anything else falls back to midnight."""
    match = _CLOCK.match(value or '')
    if match:
        hour, minute = int(match.group(1)), int(match.group(2) or 0)
        if hour <= 23 and minute <= 59:
            return time(hour, minute)

    if value:
        logger.debug("Unparseable %s %r, using 00:00", field_name, value)
    return time(0, 0)


def _calculate_occurrence_dates(
    first_day: date,
    last_day: date,
    weekdays: frozenset,
    excluded: ExclusionSet
) -> List[date]:
    """Calculate all dates in [first_day, last_day] on which the session happens."""
    dates = []

    for offset in range((last_day - first_day).days + 1):
        current_date = first_day + timedelta(days=offset)
        allowed = not weekdays or current_date.isoweekday() in weekdays
        if allowed and not excluded.is_excluded(current_date):
            dates.append(current_date)

    return dates


def _make_aware_datetime(date_obj: date, time_obj: time, tz: ZoneInfo) -> datetime:
    """Combine date and time into a datetime aware in tz."""
    dt = timezone.make_aware(datetime.combine(date_obj, time_obj), tz)
    # Wall times inside a DST gap move to the real post-transition time.
    try:
        return timezone.localtime(dt, tz)
    except OverflowError:
        # The UTC round-trip leaves the supported range on 9999-12-31.
        return dt


def occurrences_on(occurrences: Iterable[Occurrence], day: date) -> List[Occurrence]:
    """Get the occurrences falling on a single date."""
    return [occurrence for occurrence in occurrences if occurrence.date == day]


def occurrences_between(
    occurrences: Iterable[Occurrence],
    first_day: date,
    last_day: date
) -> List[Occurrence]:
    """Get the occurrences within an inclusive date window."""
    return [
        occurrence for occurrence in occurrences
        if first_day <= occurrence.date <= last_day
    ]


def upcoming_occurrences(
    occurrences: Iterable[Occurrence],
    now: Optional[datetime] = None
) -> List[Occurrence]:
    """Get the occurrences that have not started yet."""
    if now is None:
        now = timezone.now()
    return [occurrence for occurrence in occurrences if occurrence.start >= now]


def occurrence_status(occurrence: Occurrence, now: Optional[datetime] = None) -> str:
    """
    Classify an occurrence relative to now.

    Returns:
        'active' while it is running (bounds inclusive), 'upcoming' before
        it starts, 'completed' afterwards
    """
    if now is None:
        now = timezone.now()

    if occurrence.start <= now <= occurrence.end:
        return STATUS_ACTIVE
    if now < occurrence.start:
        return STATUS_UPCOMING
    return STATUS_COMPLETED


def build_agenda(
    sessions: Iterable[ScheduledSession],
    day: Optional[date] = None,
    zone: ZoneLike = REFERENCE_TIMEZONE,
    now: Optional[datetime] = None
) -> List[AgendaEntry]:
    """
    Build a day's agenda across many sessions.

    Args:
        sessions: ScheduledSession instances to expand
        day: Agenda date (defaults to today in the reference zone)
        zone: Reference timezone name or ZoneInfo
        now: Current instant, used for each entry's status

    Returns:
        List of AgendaEntry instances sorted by start time. Sessions with
        an invalid start date are skipped.
    """
    tz = _resolve_zone(zone)
    if now is None:
        now = timezone.now()
    if day is None:
        day = timezone.localtime(now, tz).date()

    entries = []
    for session in sessions:
        for occurrence in occurrences_on(_expand_or_skip(session, tz), day):
            entries.append(AgendaEntry(
                session_id=session.session_id,
                title=session.title,
                occurrence=occurrence,
                status=occurrence_status(occurrence, now),
                start_label=format_clock_time(session.descriptor.start_time),
                end_label=format_clock_time(session.descriptor.end_time),
            ))

    entries.sort(key=lambda entry: entry.occurrence.start)
    return entries


def build_calendar(
    sessions: Iterable[ScheduledSession],
    first_day: date,
    last_day: date,
    zone: ZoneLike = REFERENCE_TIMEZONE
) -> List[CalendarEvent]:
    """
    Build calendar events for a date window.

    Each event id is `<session_id>-<YYYYMMDD>`, unique per occurrence.

    Raises:
        ValueError: If first_day is after last_day
    """
    if first_day > last_day:
        raise ValueError("Start date must be on or before end date")

    tz = _resolve_zone(zone)
    events = []
    for session in sessions:
        window = occurrences_between(_expand_or_skip(session, tz), first_day, last_day)
        for occurrence in window:
            events.append(CalendarEvent(
                id=f"{session.session_id}-{occurrence.compact_date}",
                session_id=session.session_id,
                title=session.title,
                occurrence=occurrence,
            ))

    events.sort(key=lambda event: event.occurrence.start)
    return events


def _expand_or_skip(session: ScheduledSession, tz: ZoneInfo) -> List[Occurrence]:
    """Expand one session; an invalid start date drops only that session."""
    try:
        return expand_occurrences(session.descriptor, session.excluded_dates, tz)
    except InvalidDateRange as exc:
        logger.warning("Skipping session %s: %s", session.session_id, exc)
        return []
