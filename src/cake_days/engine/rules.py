"""Rule engine: group, merge and postpone cake days until stable.

Three rules decide the final calendar:

(a) Grouping -- everyone whose candidate date is the same shares one cake
    day (large when two or more people share it).
(b) No adjacency -- cake days on two consecutive working days collapse
    into one large cake on the later day.
(c) Cake-free day -- the working day after a cake day stays cake-free; a
    cake day landing there moves to the next working day after its own
    date.

Merging can land a cake on a day that (c) forbids, and postponing can
create a new adjacency that (b) forbids, so passes (b) and (c) repeat
until a fingerprint of the set stops changing or ``max_rounds`` is hit.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable

from cake_days.core.calendar import WorkingDayCalendar
from cake_days.core.errors import EngineNonConvergence
from cake_days.core.ids import payload_hash
from cake_days.core.models import CakeDay, Person

from .grouping import DateIndex
from .resolver import CakeDateResolver

logger = logging.getLogger(__name__)

DEFAULT_MAX_ROUNDS = 5


@dataclass
class EngineResult:
    """Cake days produced by the engine plus how the fixed point went."""

    cake_days: list[CakeDay] = field(default_factory=list)
    converged: bool = True
    rounds: int = 0

    def raise_if_unstable(self) -> EngineResult:
        """Raise ``EngineNonConvergence`` if no fixed point was reached."""
        if not self.converged:
            raise EngineNonConvergence(self.rounds)
        return self


def _by_date(cake_days: Iterable[CakeDay]) -> list[CakeDay]:
    # Stable sort: ties keep their relative order
    return sorted(cake_days, key=lambda cd: cd.date)


def fingerprint(cake_days: Iterable[CakeDay]) -> str:
    """Order-independent digest of dates, counts and attendee sets."""
    entries = sorted(
        [
            cd.date.isoformat(),
            cd.small_cakes,
            cd.large_cakes,
            sorted(cd.attendees),
        ]
        for cd in cake_days
    )
    return payload_hash(entries, length=32)


class RuleEngine:
    """Resolve persons into a stable, sorted list of cake days.

    Args:
        calendar: Working-day calendar.  Shared with the resolver.
        resolver: Candidate date resolver.  Built from *calendar* if omitted.
        max_rounds: Ceiling on merge + postpone rounds.
    """

    def __init__(
        self,
        calendar: WorkingDayCalendar | None = None,
        resolver: CakeDateResolver | None = None,
        max_rounds: int = DEFAULT_MAX_ROUNDS,
    ) -> None:
        if max_rounds < 1:
            raise ValueError("max_rounds must be at least 1")
        self._calendar = calendar or (resolver.calendar if resolver else WorkingDayCalendar())
        self._resolver = resolver or CakeDateResolver(self._calendar)
        self._max_rounds = max_rounds

    @property
    def calendar(self) -> WorkingDayCalendar:
        return self._calendar

    @property
    def max_rounds(self) -> int:
        return self._max_rounds

    # -- public API -----------------------------------------------------------

    def run(self, persons: Iterable[Person], year: int) -> EngineResult:
        """Group candidates for *year* and stabilise them."""
        return self.stabilize(self.group(persons, year))

    def group(self, persons: Iterable[Person], year: int) -> list[CakeDay]:
        """One cake day per distinct candidate date, sorted by date."""
        index = DateIndex()
        for person in persons:
            index.add(self._resolver.resolve(person, year), (person.name,))
        return index.cake_days()

    def stabilize(self, cake_days: Iterable[CakeDay]) -> EngineResult:
        """Apply merge + postponement until the set stops changing."""
        current = _by_date(cake_days)
        if not current:
            return EngineResult(cake_days=[], converged=True, rounds=0)

        for round_no in range(1, self._max_rounds + 1):
            before = fingerprint(current)

            current = _by_date(self.merge_adjacent(current))
            current = _by_date(self.postpone_onto_free_days(current))

            if fingerprint(current) == before:
                logger.debug(
                    "Cake day rules stable",
                    extra={"rounds": round_no, "cake_days": len(current)},
                )
                return EngineResult(cake_days=current, converged=True, rounds=round_no)

        logger.warning(
            "Cake day rules did not stabilise",
            extra={"rounds": self._max_rounds, "cake_days": len(current)},
        )
        return EngineResult(cake_days=current, converged=False, rounds=self._max_rounds)

    # -- rule passes ----------------------------------------------------------

    def merge_adjacent(self, cake_days: list[CakeDay]) -> list[CakeDay]:
        """Collapse consecutive-working-day pairs into a large cake.

        Expects input sorted by date.  Greedy left to right: a merged pair
        is skipped as a whole, so each entry merges at most once per pass.
        """
        merged: list[CakeDay] = []
        i = 0
        while i < len(cake_days):
            current = cake_days[i]
            if i + 1 < len(cake_days):
                nxt = cake_days[i + 1]
                if self._calendar.are_consecutive_working_days(current.date, nxt.date):
                    merged.append(
                        CakeDay.for_attendees(nxt.date, current.attendees + nxt.attendees)
                    )
                    i += 2
                    continue
            merged.append(current)
            i += 1
        return merged

    def postpone_onto_free_days(self, cake_days: list[CakeDay]) -> list[CakeDay]:
        """Move any cake day that lands on the day after the previous one.

        Expects input sorted by date.  A postponed entry keeps its counts
        and attendees; the next comparison uses its new date.
        """
        adjusted: list[CakeDay] = []
        last_date: date | None = None
        for cake_day in cake_days:
            if last_date is not None and cake_day.date == self._calendar.next_working_day(last_date):
                cake_day = cake_day.moved_to(self._calendar.next_working_day(cake_day.date))
            adjusted.append(cake_day)
            last_date = cake_day.date
        return adjusted
