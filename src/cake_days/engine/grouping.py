"""Date-keyed grouping arena.

A ``DateIndex`` accumulates attendee names per date and turns them into
``CakeDay`` entries.  Each grouping step builds its own index and drops
it afterwards; nothing outside the owning function writes to it.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

from cake_days.core.models import CakeDay


class DateIndex:
    """Ordered mapping of date -> attendee names, in first-seen order."""

    def __init__(self) -> None:
        self._slots: dict[date, int] = {}
        self._names: list[list[str]] = []

    def add(self, day: date, names: Iterable[str]) -> None:
        slot = self._slots.get(day)
        if slot is None:
            slot = len(self._names)
            self._slots[day] = slot
            self._names.append([])
        self._names[slot].extend(names)

    def cake_days(self) -> list[CakeDay]:
        """Build one cake day per date, sorted ascending by date."""
        return [
            CakeDay.for_attendees(day, self._names[slot])
            for day, slot in sorted(self._slots.items())
            if self._names[slot]
        ]


def consolidate_by_date(cake_days: Iterable[CakeDay]) -> list[CakeDay]:
    """Group cake days by exact date, concatenating attendees.

    Cake counts are recomputed from the merged attendee lists.  Adjacent
    dates are left alone.
    """
    index = DateIndex()
    for cake_day in cake_days:
        index.add(cake_day.date, cake_day.attendees)
    return index.cake_days()
