"""Core domain models used across the cake-day calculator.

These are the canonical value types for the system.  All of them are
immutable: rule passes build new ``CakeDay`` instances instead of
editing existing ones.
"""

from __future__ import annotations

from datetime import date
from typing import Iterable

from pydantic import BaseModel, Field, model_validator

from .enums import CakeSize


# ---------------------------------------------------------------------------
# Person
# ---------------------------------------------------------------------------

class Person(BaseModel):
    """A person and their date of birth."""

    model_config = {"frozen": True}

    name: str = Field(min_length=1)
    date_of_birth: date

    def birthday_for_year(self, year: int) -> date:
        """Return the birthday re-scoped to *year*.

        A 29 February birthday falls on 1 March in non-leap years.
        """
        month, day = self.date_of_birth.month, self.date_of_birth.day
        try:
            return date(year, month, day)
        except ValueError:
            if (month, day) != (2, 29):
                raise
            return date(year, 3, 1)


# ---------------------------------------------------------------------------
# Cake day
# ---------------------------------------------------------------------------

class CakeDay(BaseModel):
    """A date on which cake is provided, and who it is for.

    Exactly one of ``small_cakes`` / ``large_cakes`` is 1.  A large cake
    is bought whenever two or more people share the day.
    """

    model_config = {"frozen": True}

    date: date
    small_cakes: int = Field(ge=0, le=1)
    large_cakes: int = Field(ge=0, le=1)
    attendees: tuple[str, ...]

    @model_validator(mode="after")
    def _check_counts(self) -> CakeDay:
        if not self.attendees:
            raise ValueError("A cake day needs at least one attendee")
        if self.small_cakes + self.large_cakes != 1:
            raise ValueError("Exactly one of small_cakes/large_cakes must be 1")
        if (self.large_cakes == 1) != (len(self.attendees) >= 2):
            raise ValueError(
                f"large_cakes={self.large_cakes} does not match "
                f"{len(self.attendees)} attendee(s)"
            )
        return self

    @classmethod
    def for_attendees(cls, day: date, attendees: Iterable[str]) -> CakeDay:
        """Build a cake day, deriving the cake counts from the attendees."""
        names = tuple(attendees)
        large = 1 if len(names) >= 2 else 0
        return cls(date=day, small_cakes=1 - large, large_cakes=large, attendees=names)

    @property
    def size(self) -> CakeSize:
        return CakeSize.LARGE if self.large_cakes else CakeSize.SMALL

    def moved_to(self, day: date) -> CakeDay:
        """Return a copy dated *day* with counts and attendees unchanged."""
        return self.model_copy(update={"date": day})

    def formatted_date(self) -> str:
        """``2025-01-07 (Tuesday)``"""
        return f"{self.date.isoformat()} ({self.date.strftime('%A')})"


# ---------------------------------------------------------------------------
# Spill record
# ---------------------------------------------------------------------------

class SpillRecord(BaseModel):
    """Flattened cake day as written to the spill store, one JSON line each."""

    date: date
    small: int
    large: int
    names: list[str]

    @classmethod
    def from_cake_day(cls, cake_day: CakeDay) -> SpillRecord:
        return cls(
            date=cake_day.date,
            small=cake_day.small_cakes,
            large=cake_day.large_cakes,
            names=list(cake_day.attendees),
        )
