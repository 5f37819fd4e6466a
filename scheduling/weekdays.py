"""
Weekday parsing and formatting.

Weekday specs are free-form strings typed by staff ("Mon, Wed",
"lunes/miércoles", "1 3"). They are parsed into sets of ISO weekday
numbers (1=Monday, 7=Sunday). Unrecognized tokens are dropped.
"""

import re
import unicodedata
from typing import FrozenSet, Iterable, Optional

from .types import DEFAULT_WEEKDAY_LOCALE


WEEKDAY_TOKENS = {
    # English
    'monday': 1, 'mon': 1, 'm': 1,
    'tuesday': 2, 'tue': 2, 'tues': 2, 'tu': 2,
    'wednesday': 3, 'wed': 3, 'w': 3,
    'thursday': 4, 'thu': 4, 'thur': 4, 'thurs': 4, 'th': 4,
    'friday': 5, 'fri': 5, 'f': 5,
    'saturday': 6, 'sat': 6, 'sa': 6,
    'sunday': 7, 'sun': 7, 'su': 7,
    # Spanish
    'lunes': 1, 'lun': 1,
    'martes': 2, 'mar': 2,
    'miercoles': 3, 'miércoles': 3, 'mie': 3, 'mié': 3,
    'jueves': 4, 'jue': 4,
    'viernes': 5, 'vie': 5,
    'sabado': 6, 'sábado': 6, 'sab': 6, 'sáb': 6,
    'domingo': 7, 'dom': 7,
    # Digits; both 0 and 7 mean Sunday
    '0': 7,
    '1': 1,
    '2': 2,
    '3': 3,
    '4': 4,
    '5': 5,
    '6': 6,
    '7': 7,
}

WEEKDAY_LABELS = {
    'es': {1: 'Lun', 2: 'Mar', 3: 'Mié', 4: 'Jue', 5: 'Vie', 6: 'Sáb', 7: 'Dom'},
    'en': {1: 'Mon', 2: 'Tue', 3: 'Wed', 4: 'Thu', 5: 'Fri', 6: 'Sat', 7: 'Sun'},
}

WEEKDAY_NAMES = {
    1: 'monday',
    2: 'tuesday',
    3: 'wednesday',
    4: 'thursday',
    5: 'friday',
    6: 'saturday',
    7: 'sunday',
}

_SEPARATORS = re.compile(r'[\s,;|/]+')


def _normalize_token(token: str) -> str:
    return unicodedata.normalize('NFC', token.strip().lower())


def parse_weekdays(spec: Optional[str]) -> FrozenSet[int]:
    """
    Parse a weekday spec into a set of ISO weekday numbers.

    Args:
        spec: Free-form weekday string (None is treated as empty)

    Returns:
        Frozenset of ints in 1..7. Empty when nothing was recognized,
        which callers of the expander treat as "every day".
    """
    if not spec:
        return frozenset()

    days = set()
    for token in _SEPARATORS.split(spec):
        day = WEEKDAY_TOKENS.get(_normalize_token(token))
        if day is not None:
            days.add(day)
    return frozenset(days)


def validate_weekdays(spec: Optional[str]) -> bool:
    """Return True if the weekday string names at least one recognized weekday."""
    if not spec or not spec.strip():
        return False
    return len(parse_weekdays(spec)) > 0


def format_weekdays(days: Iterable[int], locale: str = DEFAULT_WEEKDAY_LOCALE) -> str:
    """
    Render weekdays as short labels in Monday-first order.

    Args:
        days: Parsed weekday numbers, in any order
        locale: Label table to use ('es' or 'en')

    Returns:
        Comma-joined labels, e.g. "Lun, Mié"

    Raises:
        ValueError: If the locale has no label table
    """
    try:
        labels = WEEKDAY_LABELS[locale]
    except KeyError:
        raise ValueError(f"Unsupported weekday locale: {locale!r}") from None

    return ', '.join(labels[day] for day in sorted(set(days)) if day in labels)


def encode_weekdays(days: Iterable[int]) -> str:
    """
    Encode an ordered list of weekday numbers as full English names.

    The given order is kept, e.g. [1, 3] -> "monday,wednesday".

    Raises:
        ValueError: If a day is outside 1..7
    """
    names = []
    for day in days:
        if day not in WEEKDAY_NAMES:
            raise ValueError("Weekday must be between 1 (Monday) and 7 (Sunday)")
        names.append(WEEKDAY_NAMES[day])
    return ','.join(names)


def weekday_label(day: int, locale: str = DEFAULT_WEEKDAY_LOCALE) -> str:
    """Short label for a single ISO weekday, e.g. 3 -> "Mié"."""
    return format_weekdays({day}, locale=locale)
