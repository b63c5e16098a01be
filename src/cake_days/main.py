"""Application bootstrap.

Wires settings, logging, the calendar/engine stack, the streaming
pipeline and the exporter together for one run.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from .core.calendar import WorkingDayCalendar
from .core.config import Settings, load_settings
from .engine.batch import BatchScheduler
from .engine.rules import RuleEngine
from .observability.logger import get_logger, setup_logging, start_run
from .pipeline.export import CakeDayExporter, ProgressCallback
from .pipeline.streaming import ProcessingResult, StreamingPipeline

logger = get_logger(__name__)


def build_pipeline(settings: Settings) -> StreamingPipeline:
    """Build the streaming pipeline described by *settings*."""
    calendar = WorkingDayCalendar(settings.calendar.holidays)
    engine = RuleEngine(calendar=calendar, max_rounds=settings.engine.max_rounds)
    scheduler = BatchScheduler(engine, ceiling=settings.engine.batch_ceiling)
    return StreamingPipeline(
        scheduler=scheduler,
        chunk_size=settings.pipeline.chunk_size,
        spill_dir=settings.pipeline.spill_dir,
        reapply_rules=settings.pipeline.reapply_rules_on_consolidation,
    )


def run(
    input_file: str | Path,
    output_file: str | Path | None,
    year: int,
    config_path: str | None = None,
    overrides: dict[str, Any] | None = None,
    progress_callback: ProgressCallback | None = None,
) -> ProcessingResult:
    """Main entry point. Load config, set up logging, compute, export."""

    # 1. Load settings
    settings = load_settings(config_path=config_path, overrides=overrides)

    # 2. Set up logging
    setup_logging(
        level=settings.observability.log_level,
        format=settings.observability.log_format.value,
    )
    start_run(input_file=str(input_file), year=year)
    logger.info("Starting cake day calculation")

    # 3. Compute
    result = build_pipeline(settings).run_file(input_file, year)
    if not result.converged:
        logger.warning("Cake day rules did not fully stabilise", rounds_ceiling=settings.engine.max_rounds)

    # 4. Export
    if output_file is not None:
        export_result(result, output_file, progress_callback)

    logger.info(
        "Cake day calculation complete",
        cake_days=result.total_cake_days,
        persons=result.total_persons,
        seconds=round(result.processing_time_seconds, 3),
    )
    return result


def export_result(
    result: ProcessingResult,
    output_file: str | Path,
    progress_callback: ProgressCallback | None = None,
) -> Path | None:
    """Write *result* as CSV, creating the output directory.

    Nothing is written when there are no cake days.
    """
    if not result.cake_days:
        return None
    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    return CakeDayExporter().write(result.cake_days, output_path, progress_callback)
