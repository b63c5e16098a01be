"""Shared fixtures for the cake-days test suite."""

from __future__ import annotations

from datetime import date
from pathlib import Path
from typing import Callable

import pytest

from cake_days.core.calendar import WorkingDayCalendar
from cake_days.core.models import CakeDay, Person
from cake_days.engine.batch import BatchScheduler
from cake_days.engine.resolver import CakeDateResolver
from cake_days.engine.rules import RuleEngine

# Weekdays used throughout the suite (2025):
#   Fri 2025-01-03, Mon 2025-01-06 .. Fri 2025-01-10, Mon 2025-01-13
#   Mon 2025-06-02, Wed 2025-12-24, Thu/Fri 2025-12-25/26 (holidays)


# ---------------------------------------------------------------------------
# Calendar / engine
# ---------------------------------------------------------------------------

@pytest.fixture
def calendar() -> WorkingDayCalendar:
    return WorkingDayCalendar()


@pytest.fixture
def resolver(calendar) -> CakeDateResolver:
    return CakeDateResolver(calendar)


@pytest.fixture
def engine(calendar) -> RuleEngine:
    return RuleEngine(calendar=calendar)


@pytest.fixture
def scheduler(engine) -> BatchScheduler:
    return BatchScheduler(engine)


# ---------------------------------------------------------------------------
# Person / cake day helpers
# ---------------------------------------------------------------------------

def make_person(name: str, born: str) -> Person:
    return Person(name=name, date_of_birth=date.fromisoformat(born))


def make_cake_day(day: str, *names: str) -> CakeDay:
    return CakeDay.for_attendees(date.fromisoformat(day), names)


def canonical(cake_days: list[CakeDay]) -> list[tuple]:
    """Comparable form that ignores attendee order."""
    return sorted(
        (cd.date, cd.small_cakes, cd.large_cakes, tuple(sorted(cd.attendees)))
        for cd in cake_days
    )


@pytest.fixture
def person() -> Callable[[str, str], Person]:
    return make_person


@pytest.fixture
def write_source(tmp_path: Path) -> Callable[[list[str]], Path]:
    """Write source lines to a file and return its path."""

    def _write(lines: list[str], name: str = "people.txt") -> Path:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def cake_day() -> Callable[..., CakeDay]:
    return make_cake_day


@pytest.fixture
def canonicalize() -> Callable[[list[CakeDay]], list[tuple]]:
    return canonical
