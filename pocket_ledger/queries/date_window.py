"""
Date Window Resolution

Turns a reporting window (sliding range or calendar month) into concrete
inclusive date bounds, and steps windows forward/backward by one month.

Month overflow convention: shifting a sliding window moves each bound by
one calendar month with relativedelta, which clamps a day that does not
exist in the target month to that month's last day (Jan 31 + 1 month is
Feb 29 in 2024, Feb 28 in 2023). Such a shift is therefore not reversible;
a bound whose day exists in both months round-trips exactly.

Sliding and monthly windows keep independent state. Nothing here
translates one into the other.
"""

import calendar
from datetime import date
from typing import Optional, Union

from dateutil.relativedelta import relativedelta

from pocket_ledger.models.ledger import MonthlyWindow, NavigationDirection, SlidingWindow


Window = Union[SlidingWindow, MonthlyWindow]

_ONE_MONTH = relativedelta(months=1)


def last_day_of_month(year: int, month: int) -> int:
    """28, 29, 30 or 31."""
    return calendar.monthrange(year, month)[1]


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First and last calendar day of a month."""
    return date(year, month, 1), date(year, month, last_day_of_month(year, month))


class DateWindowResolver:
    """
    Pure calendar logic for reporting windows.

    Stateless; every method is a static function of its arguments.
    """

    @staticmethod
    def resolve(window: Window) -> tuple[date, date]:
        """
        Concrete (start_date, end_date) for a window, both inclusive.

        A sliding window is returned exactly as given, even if inverted.
        """
        if isinstance(window, MonthlyWindow):
            return month_bounds(window.year, window.month)
        return window.start_date, window.end_date

    @staticmethod
    def navigate(window: Window, direction: NavigationDirection) -> Window:
        """
        Shift a window one month in the given direction.

        Sliding: both bounds move by one calendar month (clamped to month end).
        Monthly: the month moves by one with year rollover.

        A window that would leave the supported calendar (years 1..9999)
        is returned unchanged.
        """
        step = _ONE_MONTH if direction == NavigationDirection.NEXT else -_ONE_MONTH

        if isinstance(window, MonthlyWindow):
            first = date(window.year, window.month, 1)
            try:
                shifted = first + step
            except (OverflowError, ValueError):
                return window
            return MonthlyWindow(year=shifted.year, month=shifted.month)

        try:
            return SlidingWindow(
                start_date=window.start_date + step,
                end_date=window.end_date + step,
            )
        except (OverflowError, ValueError):
            return window

    @staticmethod
    def default_sliding(today: Optional[date] = None) -> SlidingWindow:
        """The last month up to and including today."""
        today = today or date.today()
        return SlidingWindow(start_date=today - _ONE_MONTH, end_date=today)

    @staticmethod
    def current_month(today: Optional[date] = None) -> MonthlyWindow:
        today = today or date.today()
        return MonthlyWindow(year=today.year, month=today.month)

    @staticmethod
    def describe(window: Window) -> str:
        """
        Plain label for a window.

        "2024-03-01 ~ 2024-03-31" for sliding, "March 2024" for monthly.
        Locale-specific formatting is left to the presentation layer.
        """
        if isinstance(window, MonthlyWindow):
            return date(window.year, window.month, 1).strftime("%B %Y")
        return f"{window.start_date.isoformat()} ~ {window.end_date.isoformat()}"
