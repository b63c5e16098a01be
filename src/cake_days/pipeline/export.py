"""Cake day export to CSV and JSON.

Usage::

    exporter = CakeDayExporter()
    csv_str = exporter.to_csv(cake_days)
    exporter.write(cake_days, "cakes.csv")
"""

from __future__ import annotations

import csv
import io
import json
import logging
from pathlib import Path
from typing import Any, Callable, TextIO

from cake_days.core.models import CakeDay

logger = logging.getLogger(__name__)

# Default CSV columns
_CSV_COLUMNS = ["Date", "Small Cakes", "Large Cakes", "Names"]

ProgressCallback = Callable[[int, int], None]


class CakeDayExporter:
    """Export cake days to CSV/JSON.

    Parameters
    ----------
    name_separator : str
        Joins attendee names inside the ``Names`` column.  Default ``", "``.
    """

    def __init__(self, *, name_separator: str = ", ") -> None:
        self._sep = name_separator

    # ------------------------------------------------------------------ #
    # CSV Export                                                           #
    # ------------------------------------------------------------------ #

    def to_csv(self, cake_days: list[CakeDay]) -> str:
        """Export cake days as a CSV string with header row."""
        buf = io.StringIO()
        self._write_rows(buf, cake_days)
        return buf.getvalue()

    def write(
        self,
        cake_days: list[CakeDay],
        output_path: str | Path,
        progress_callback: ProgressCallback | None = None,
    ) -> Path:
        """Write cake days to *output_path* as CSV.

        Parameters
        ----------
        progress_callback : callable | None
            Called with ``(processed, total)`` after every row.

        Returns
        -------
        Path
            The written file.
        """
        path = Path(output_path)
        with open(path, "w", newline="", encoding="utf-8") as f:
            self._write_rows(f, cake_days, progress_callback)
        logger.info("Exported cake days", extra={"path": str(path), "rows": len(cake_days)})
        return path

    # ------------------------------------------------------------------ #
    # JSON Export                                                          #
    # ------------------------------------------------------------------ #

    def to_json(self, cake_days: list[CakeDay], *, indent: int = 2) -> str:
        rows = [
            {
                "date": cd.date.isoformat(),
                "small_cakes": cd.small_cakes,
                "large_cakes": cd.large_cakes,
                "names": list(cd.attendees),
            }
            for cd in cake_days
        ]
        return json.dumps(rows, indent=indent)

    # ------------------------------------------------------------------ #
    # Private helpers                                                      #
    # ------------------------------------------------------------------ #

    def _write_rows(
        self,
        stream: TextIO,
        cake_days: list[CakeDay],
        progress_callback: ProgressCallback | None = None,
    ) -> None:
        writer = csv.DictWriter(stream, fieldnames=_CSV_COLUMNS)
        writer.writeheader()
        total = len(cake_days)
        for processed, cake_day in enumerate(cake_days, start=1):
            writer.writerow(self._cake_day_to_row(cake_day))
            if progress_callback is not None:
                progress_callback(processed, total)

    def _cake_day_to_row(self, cake_day: CakeDay) -> dict[str, Any]:
        return {
            "Date": cake_day.formatted_date(),
            "Small Cakes": cake_day.small_cakes,
            "Large Cakes": cake_day.large_cakes,
            "Names": self._sep.join(cake_day.attendees),
        }
