"""
Presentation helpers for schedules.

Nothing here affects which occurrences a session produces.
"""

import re
from typing import Optional

from .types import DEFAULT_WEEKDAY_LOCALE
from .weekdays import format_weekdays, parse_weekdays


_CLOCK_TIME = re.compile(r'^\s*(\d{1,2}):(\d{2})(?::\d{2}(?:\.\d+)?)?\s*$')


def format_clock_time(hhmm: str) -> str:
    """
    Format a 24-hour `HH:MM` time as a 12-hour clock string.

    "15:30" -> "3:30 PM", "00:05" -> "12:05 AM". Malformed input is
    returned unchanged.
    """
    match = _CLOCK_TIME.match(hhmm or '')
    if not match:
        return hhmm

    hour, minutes = int(match.group(1)), match.group(2)
    if hour > 23 or int(minutes) > 59:
        return hhmm

    ampm = 'PM' if hour >= 12 else 'AM'
    display_hour = hour % 12 or 12
    return f"{display_hour}:{minutes} {ampm}"


def format_weekday_spec(spec: Optional[str], locale: str = DEFAULT_WEEKDAY_LOCALE) -> str:
    """Parse a weekday spec and render it as short labels, e.g. "Lun, Mié"."""
    return format_weekdays(parse_weekdays(spec), locale=locale)
