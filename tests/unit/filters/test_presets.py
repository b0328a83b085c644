"""
Tests for named filter presets.

WHY: Presets are pure (today, token) -> bounds functions; pinning `today`
makes the window arithmetic checkable day by day, including month and
leap-year edges.
"""

from datetime import date, timedelta

import pytest

from backoffice.filters.presets import (
    Bounds,
    expiry_window,
    age_band,
    calendar_window,
    years_before,
    month_start,
    month_end,
)


TODAY = date(2024, 6, 15)


class TestExpiryWindow:
    """Tests for expired / N days / valid tokens."""

    def test_days_window_is_half_open(self):
        """
        "30days" covers today through today + 29.

        WHY: A visa expiring exactly 30 days from now belongs to the next
        window, not this one.
        """
        bounds = expiry_window(TODAY, "30days", windows=(30, 60))

        assert bounds == Bounds(
            lower=TODAY,
            upper=TODAY + timedelta(days=30),
            lower_inclusive=True,
            upper_inclusive=False,
        )
        assert bounds.contains(TODAY)
        assert bounds.contains(TODAY + timedelta(days=29))
        assert not bounds.contains(TODAY + timedelta(days=30))

    def test_expired_excludes_today(self):
        bounds = expiry_window(TODAY, "expired", windows=(30,))

        assert bounds.contains(TODAY - timedelta(days=1))
        assert not bounds.contains(TODAY)

    def test_valid_excludes_today(self):
        bounds = expiry_window(TODAY, "valid", windows=(30,))

        assert bounds.contains(TODAY + timedelta(days=1))
        assert not bounds.contains(TODAY)
        assert bounds.upper is None

    def test_valid_rejected_when_not_allowed(self):
        """Contract end presets have no "valid" token."""
        assert expiry_window(TODAY, "valid", windows=(30, 60, 90), allow_valid=False) is None

    def test_window_not_in_list_is_unknown(self):
        assert expiry_window(TODAY, "45days", windows=(30, 60)) is None

    @pytest.mark.parametrize("token", ["", "days", "30", "30 days", "-30days"])
    def test_malformed_tokens_are_unknown(self, token):
        assert expiry_window(TODAY, token, windows=(30, 60)) is None


class TestAgeBand:
    """Tests for age band tokens on birth dates."""

    def test_range_is_inclusive_on_both_ends(self):
        bounds = age_band(TODAY, "25_35")

        assert bounds.lower == date(1989, 6, 15)
        assert bounds.upper == date(1999, 6, 15)
        assert bounds.contains(date(1989, 6, 15))
        assert bounds.contains(date(1999, 6, 15))
        assert not bounds.contains(date(1999, 6, 16))

    def test_under(self):
        bounds = age_band(TODAY, "under_25")

        assert bounds.lower == date(1999, 6, 15)
        assert not bounds.lower_inclusive
        assert bounds.contains(date(2001, 1, 1))
        assert not bounds.contains(date(1999, 6, 15))

    def test_over(self):
        bounds = age_band(TODAY, "over_60")

        assert bounds.upper == date(1964, 6, 15)
        assert not bounds.upper_inclusive
        assert bounds.contains(date(1950, 1, 1))

    def test_inverted_range_is_unknown(self):
        assert age_band(TODAY, "35_25") is None
        assert age_band(TODAY, "30_30") is None

    def test_unknown_token(self):
        assert age_band(TODAY, "teen") is None


class TestCalendarWindow:
    """Tests for relative calendar windows."""

    def test_this_month(self):
        assert calendar_window(TODAY, "this_month") == Bounds(
            lower=date(2024, 6, 1), upper=date(2024, 6, 30)
        )

    def test_last_month_across_year_boundary(self):
        assert calendar_window(date(2024, 1, 10), "last_month") == Bounds(
            lower=date(2023, 12, 1), upper=date(2023, 12, 31)
        )

    def test_n_months_covers_n_calendar_months(self):
        bounds = calendar_window(TODAY, "3months")

        assert bounds.lower == date(2024, 4, 1)
        assert bounds.upper == date(2024, 6, 30)

    def test_this_year(self):
        assert calendar_window(TODAY, "this_year") == Bounds(
            lower=date(2024, 1, 1), upper=date(2024, 12, 31)
        )

    @pytest.mark.parametrize("token", ["0months", "25months", "next_month", "yesterday"])
    def test_unknown_tokens(self, token):
        assert calendar_window(TODAY, token) is None


class TestDateArithmetic:
    """Tests for helper date functions."""

    def test_years_before_leap_day(self):
        """Feb 29 has no counterpart in a common year."""
        assert years_before(date(2024, 2, 29), 1) == date(2023, 2, 28)

    def test_month_start_wraps_years(self):
        assert month_start(date(2024, 2, 20), 3) == date(2023, 11, 1)

    def test_month_end_february_leap_year(self):
        assert month_end(date(2024, 2, 3)) == date(2024, 2, 29)
