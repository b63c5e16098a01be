"""Working-day calendar: fixed weekend plus fixed annual holidays.

Every other component asks this calendar whether a date is a working day
and what the next working day is.  There is no locale awareness; the
holiday set is a list of ``(month, day)`` pairs repeated every year.
"""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

# Christmas Day, Boxing Day, New Year's Day
DEFAULT_HOLIDAYS: tuple[str, ...] = ("12-25", "12-26", "01-01")

_ONE_DAY = timedelta(days=1)


def parse_month_day(value: str) -> tuple[int, int]:
    """Convert ``"MM-DD"`` to ``(month, day)``.

    Raises:
        ValueError: If the string is not a valid month-day.
    """
    try:
        month_str, day_str = value.strip().split("-")
        month, day = int(month_str), int(day_str)
        # 2024 is a leap year so 02-29 is accepted
        date(2024, month, day)
    except ValueError as exc:
        raise ValueError(f"Invalid holiday {value!r}, expected MM-DD") from exc
    return month, day


class WorkingDayCalendar:
    """Pure date predicates over a weekend + fixed-holiday model.

    Args:
        holidays: Month-day strings (``"MM-DD"``).  Defaults to
            Dec 25, Dec 26 and Jan 1.
    """

    def __init__(self, holidays: Iterable[str] = DEFAULT_HOLIDAYS) -> None:
        self._holidays = frozenset(parse_month_day(h) for h in holidays)

    @property
    def holidays(self) -> frozenset[tuple[int, int]]:
        return self._holidays

    def is_weekend(self, day: date) -> bool:
        return day.weekday() >= 5  # Sat=5, Sun=6

    def is_holiday(self, day: date) -> bool:
        return (day.month, day.day) in self._holidays

    def is_working_day(self, day: date) -> bool:
        return not self.is_weekend(day) and not self.is_holiday(day)

    def next_working_day(self, day: date) -> date:
        """Return the first working day strictly after *day*."""
        candidate = day + _ONE_DAY
        while not self.is_working_day(candidate):
            candidate += _ONE_DAY
        return candidate

    def are_consecutive_working_days(self, first: date, second: date) -> bool:
        """True when *second* is the working day immediately after *first*."""
        return self.next_working_day(first) == second
