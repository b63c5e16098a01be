"""Candidate cake date for one person in one year."""

from __future__ import annotations

from datetime import date

from cake_days.core.calendar import WorkingDayCalendar
from cake_days.core.models import Person


class CakeDateResolver:
    """Map a person + target year to the date their cake is bought.

    The birthday becomes a day off (moved to the next working day when it
    falls on a weekend or holiday).  Cake arrives on the first working day
    after the day off, never on the day off itself.
    """

    def __init__(self, calendar: WorkingDayCalendar | None = None) -> None:
        self._calendar = calendar or WorkingDayCalendar()

    @property
    def calendar(self) -> WorkingDayCalendar:
        return self._calendar

    def day_off(self, person: Person, year: int) -> date:
        birthday = person.birthday_for_year(year)
        if self._calendar.is_working_day(birthday):
            return birthday
        return self._calendar.next_working_day(birthday)

    def resolve(self, person: Person, year: int) -> date:
        return self._calendar.next_working_day(self.day_off(person, year))
