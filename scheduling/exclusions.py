"""
Exclusion handling for recurring sessions.

A session's regular occurrence can be suppressed on a given date by two
independent sources:
- the inline cancel list stored on the session row ("2024-01-08,2024-01-15")
- exclusion rows persisted elsewhere, handed in as a set of dates

Both are compared as canonical `YYYY-MM-DD` strings, never as instants.
"""

import json
import re
from datetime import date, datetime
from typing import FrozenSet, Iterable, List, Optional, Union

from .types import DATE_FORMAT


_CANONICAL_DATE = re.compile(r'^\d{4}-\d{2}-\d{2}$')


def is_canonical_date(value) -> bool:
    """Check that value is a `YYYY-MM-DD` string naming a real date."""
    if not isinstance(value, str) or not _CANONICAL_DATE.match(value):
        return False
    try:
        datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        return False
    return True


def parse_inline_cancellations(value: Optional[str]) -> List[str]:
    """
    Split an inline cancel list into date tokens.

    Accepts the comma-separated form as well as a JSON array of strings.
    Tokens are stripped and kept literally; malformed ones simply never
    match a candidate date.
    """
    if not value:
        return []

    stripped = value.strip()
    if stripped.startswith('['):
        try:
            items = json.loads(stripped)
        except ValueError:
            items = None
        if isinstance(items, list):
            tokens = [str(item).strip() for item in items]
            return [token for token in tokens if token]

    tokens = [token.strip() for token in value.split(',')]
    return [token for token in tokens if token]


def _to_date_string(value: Union[str, date]) -> str:
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    return value.strip()


class ExclusionSet:
    """
    Union of inline cancellations and externally recorded exclusions.

    Membership is a pure union; neither source takes precedence.
    """

    def __init__(self, inline: Iterable[str] = (), external: Iterable[Union[str, date]] = ()):
        self.inline: FrozenSet[str] = frozenset(_to_date_string(d) for d in inline)
        self.external: FrozenSet[str] = frozenset(_to_date_string(d) for d in external)

    @classmethod
    def from_sources(
        cls,
        inline_cancellations: Optional[str] = None,
        excluded_dates: Iterable[Union[str, date]] = ()
    ) -> 'ExclusionSet':
        """Build from the raw cancel string and a set of excluded dates."""
        return cls(parse_inline_cancellations(inline_cancellations), excluded_dates)

    def is_excluded(self, day: Union[str, date]) -> bool:
        key = _to_date_string(day)
        return key in self.inline or key in self.external

    def __contains__(self, day) -> bool:
        return self.is_excluded(day)

    def __len__(self) -> int:
        return len(self.inline | self.external)

    def __repr__(self):
        return f"ExclusionSet({sorted(self.inline | self.external)!r})"


def add_cancellation(cancel_field: Optional[str], day: str) -> str:
    """
    Add a date to an inline cancel list.

    Args:
        cancel_field: Current cancel value (CSV, JSON array or empty)
        day: Date to cancel, `YYYY-MM-DD`

    Returns:
        Updated comma-separated cancel list for the caller to persist

    Raises:
        ValueError: If day is not a canonical date
    """
    _validate_canonical(day)
    dates = parse_inline_cancellations(cancel_field)
    if day not in dates:
        dates.append(day)
    return ','.join(dates)


def remove_cancellation(cancel_field: Optional[str], day: str) -> str:
    """Remove a date from an inline cancel list; missing dates are a no-op."""
    _validate_canonical(day)
    return ','.join(d for d in parse_inline_cancellations(cancel_field) if d != day)


def _validate_canonical(day: str) -> None:
    """Validate date format (YYYY-MM-DD)."""
    if not is_canonical_date(day):
        raise ValueError("Invalid date format. Use YYYY-MM-DD")
