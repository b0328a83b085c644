"""
Named filter presets.

WHAT: Pure functions turning a preset token ("30days", "25_35",
"last_month", ...) into date bounds relative to a given day, plus the
field specs that bind a preset family to a column.

WHY: Presets only depend on (today, token), so they can be tested with a
fixed date and reused by every list endpoint. Unknown tokens return None
and the builder skips the criterion.
"""

import calendar
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Collection, Optional


@dataclass(frozen=True)
class Bounds:
    """
    Date range produced by a preset.

    A missing side means the range is open on that side.
    """

    lower: Optional[date] = None
    upper: Optional[date] = None
    lower_inclusive: bool = True
    upper_inclusive: bool = True

    def contains(self, value: date) -> bool:
        if self.lower is not None:
            if value < self.lower or (value == self.lower and not self.lower_inclusive):
                return False
        if self.upper is not None:
            if value > self.upper or (value == self.upper and not self.upper_inclusive):
                return False
        return True


# ============================================================================
# Date arithmetic
# ============================================================================


def years_before(day: date, years: int) -> date:
    """Same calendar day `years` earlier; Feb 29 falls back to Feb 28."""
    try:
        return day.replace(year=day.year - years)
    except ValueError:
        return day.replace(year=day.year - years, day=28)


def month_start(day: date, months_back: int = 0) -> date:
    """First day of the month `months_back` months before `day`'s month."""
    month_index = day.year * 12 + (day.month - 1) - months_back
    return date(month_index // 12, month_index % 12 + 1, 1)


def month_end(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


# ============================================================================
# Preset functions
# ============================================================================

_DAYS_TOKEN = re.compile(r"^(\d+)days$")
_MONTHS_TOKEN = re.compile(r"^(\d+)months$")
_AGE_RANGE_TOKEN = re.compile(r"^(\d+)_(\d+)$")
_AGE_UNDER_TOKEN = re.compile(r"^under_(\d+)$")
_AGE_OVER_TOKEN = re.compile(r"^over_(\d+)$")

MAX_MONTHS_WINDOW = 24


def expiry_window(
    today: date,
    token: str,
    windows: Collection[int],
    allow_valid: bool = True,
) -> Optional[Bounds]:
    """
    Bounds for an expiry date column.

    - "expired": strictly before today
    - "<N>days" (N in windows): from today inclusive to today + N exclusive
    - "valid": strictly after today, no upper bound

    Args:
        today: Reference day
        token: Preset token
        windows: Day counts accepted for "<N>days"
        allow_valid: Whether "valid" is accepted for this field

    Returns:
        Bounds, or None for an unknown token
    """
    if token == "expired":
        return Bounds(upper=today, upper_inclusive=False)

    if token == "valid":
        if not allow_valid:
            return None
        return Bounds(lower=today, lower_inclusive=False)

    match = _DAYS_TOKEN.match(token)
    if match and int(match.group(1)) in windows:
        days = int(match.group(1))
        return Bounds(
            lower=today,
            upper=today + timedelta(days=days),
            lower_inclusive=True,
            upper_inclusive=False,
        )

    return None


def age_band(today: date, token: str) -> Optional[Bounds]:
    """
    Bounds on a birth date column for an age band.

    - "under_<N>": born after today minus N years
    - "over_<N>": born before today minus N years
    - "<A>_<B>": born between today minus B years and today minus A years,
      both inclusive

    Returns:
        Bounds, or None for an unknown or inverted token
    """
    match = _AGE_UNDER_TOKEN.match(token)
    if match:
        return Bounds(lower=years_before(today, int(match.group(1))), lower_inclusive=False)

    match = _AGE_OVER_TOKEN.match(token)
    if match:
        return Bounds(upper=years_before(today, int(match.group(1))), upper_inclusive=False)

    match = _AGE_RANGE_TOKEN.match(token)
    if match:
        youngest, oldest = int(match.group(1)), int(match.group(2))
        if youngest >= oldest:
            return None
        return Bounds(
            lower=years_before(today, oldest),
            upper=years_before(today, youngest),
        )

    return None


def calendar_window(today: date, token: str) -> Optional[Bounds]:
    """
    Closed date interval for a relative calendar window.

    - "this_month": first to last day of the current month
    - "last_month": first to last day of the previous month
    - "<N>months": first day of the month N-1 months back through the end
      of the current month (so "3months" covers three calendar months)
    - "this_year": January 1 to December 31 of the current year

    Returns:
        Bounds with both ends inclusive, or None for an unknown token
    """
    if token == "this_month":
        return Bounds(lower=month_start(today), upper=month_end(today))

    if token == "last_month":
        first = month_start(today, 1)
        return Bounds(lower=first, upper=month_end(first))

    if token == "this_year":
        return Bounds(lower=date(today.year, 1, 1), upper=date(today.year, 12, 31))

    match = _MONTHS_TOKEN.match(token)
    if match:
        months = int(match.group(1))
        if not 1 <= months <= MAX_MONTHS_WINDOW:
            return None
        return Bounds(lower=month_start(today, months - 1), upper=month_end(today))

    return None


# ============================================================================
# Field specs
# ============================================================================


class Preset:
    """
    Binds a preset family to the column it constrains.

    Subclasses implement bounds(); the builder turns the result into SQL.
    """

    def __init__(self, column: Any):
        self.column = column

    def bounds(self, today: date, token: str) -> Optional[Bounds]:
        raise NotImplementedError


class ExpiryWindowPreset(Preset):
    """Expired / due within N days / valid, on an expiry date column."""

    def __init__(self, column: Any, windows: Collection[int], allow_valid: bool = True):
        super().__init__(column)
        self.windows = frozenset(windows)
        self.allow_valid = allow_valid

    def bounds(self, today: date, token: str) -> Optional[Bounds]:
        return expiry_window(today, token, self.windows, self.allow_valid)


class AgeBandPreset(Preset):
    """Age bands on a birth date column."""

    def bounds(self, today: date, token: str) -> Optional[Bounds]:
        return age_band(today, token)


class CalendarWindowPreset(Preset):
    """Relative calendar windows on a date or timestamp column."""

    def bounds(self, today: date, token: str) -> Optional[Bounds]:
        return calendar_window(today, token)
