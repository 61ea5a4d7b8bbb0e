# ==============================================================================
# FILTER - Shared narrowing shape for every list view
# ==============================================================================
# {search text, day of month, month range, year}
# Months and days are two-digit strings and are compared as strings.
# ==============================================================================

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Optional


ALL_DAYS = 'all'

# Accepted spellings for "no day filter"
_ANY_DAY_VALUES = frozenset(['all', 'any', ''])

MONTHS = tuple(f'{m:02d}' for m in range(1, 13))
DAYS = tuple(f'{d:02d}' for d in range(1, 32))


def _current_year() -> str:
    return str(date.today().year)


def _two_digits(value: Any, default: str) -> str:
    """Normalizes 3 / '3' / '03' into '03'. Anything unparsable gives default."""
    if value is None or value == '':
        return default
    try:
        return f'{int(value):02d}'
    except (TypeError, ValueError):
        return default


@dataclass(frozen=True)
class Filter:
    """
    Filter applied to work logs, tickets, assets and inspections.

    Attributes:
        search_text: Case-insensitive substring; empty matches everything
        day: '01'..'31' or 'all'
        start_month: '01'..'12', inclusive lower bound
        end_month: '01'..'12', inclusive upper bound
        year: Four digit year, compared exactly

    A wrapped range (start_month > end_month) matches nothing.
    """
    search_text: str = ''
    day: str = ALL_DAYS
    start_month: str = '01'
    end_month: str = '12'
    year: str = field(default_factory=_current_year)

    @property
    def any_day(self) -> bool:
        return self.day in _ANY_DAY_VALUES

    @classmethod
    def from_args(cls, args: Mapping[str, Any], year: Optional[str] = None) -> 'Filter':
        """
        Builds a Filter from request query args.

        Recognized keys: search (or q), day, startMonth, endMonth, year.
        Out of range days and months fall back to their defaults.
        """
        day = str(args.get('day') or ALL_DAYS).strip().lower()
        if day not in _ANY_DAY_VALUES:
            day = _two_digits(day, ALL_DAYS)
        start_month = _two_digits(args.get('startMonth'), '01')
        end_month = _two_digits(args.get('endMonth'), '12')
        return cls(
            search_text=(args.get('search') or args.get('q') or '').strip(),
            day=day if day in DAYS else ALL_DAYS,
            start_month=start_month if start_month in MONTHS else '01',
            end_month=end_month if end_month in MONTHS else '12',
            year=str(args.get('year') or year or _current_year()).strip(),
        )
