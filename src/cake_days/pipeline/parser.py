"""Parse ``name,yyyy-mm-dd`` records into Person values, lazily."""

from __future__ import annotations

import re
from datetime import date
from pathlib import Path
from typing import Iterable, Iterator

from pydantic import ValidationError

from cake_days.core.errors import MalformedRecordError
from cake_days.core.models import Person
from cake_days.engine.chunking import Chunker

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class PersonParser:
    """Turn source lines into Person records.

    Blank lines and lines starting with ``#`` are skipped.  Everything
    returned is a generator: the source is read one line at a time and
    cannot be restarted without reopening it.
    """

    def parse_line(self, line: str, line_number: int = 1) -> Person:
        name, sep, date_str = line.partition(",")
        name, date_str = name.strip(), date_str.strip()
        if not sep:
            raise MalformedRecordError(line_number, line, f"Invalid record format: {line!r}")
        if not name:
            raise MalformedRecordError(line_number, line, "Name cannot be empty")
        if not _DATE_RE.match(date_str):
            raise MalformedRecordError(
                line_number, line, f"Invalid date format: {date_str!r}. Expected YYYY-MM-DD."
            )
        try:
            return Person(name=name, date_of_birth=date.fromisoformat(date_str))
        except (ValueError, ValidationError) as exc:
            raise MalformedRecordError(
                line_number, line, f"Invalid date: {date_str!r}"
            ) from exc

    def parse_lines(self, lines: Iterable[str]) -> Iterator[Person]:
        for line_number, raw in enumerate(lines, start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            yield self.parse_line(line, line_number)

    def parse_file(self, path: str | Path) -> Iterator[Person]:
        with open(path, "rb") as f:
            yield from self.parse_lines(_decoded(f))

    def parse_in_batches(self, path: str | Path, batch_size: int = 100) -> Iterator[list[Person]]:
        return Chunker(batch_size).chunks(self.parse_file(path))


def _decoded(raw_lines: Iterable[bytes]) -> Iterator[str]:
    # Decoded per line so an encoding error points at the line that holds it.
    for line_number, raw in enumerate(raw_lines, start=1):
        try:
            yield raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedRecordError(
                line_number,
                raw.decode("utf-8", errors="replace"),
                f"Invalid UTF-8 at byte {exc.start}",
            ) from exc
