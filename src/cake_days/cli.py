"""CLI entry point for the cake day calculator."""

from __future__ import annotations

from datetime import date

import click

from .core.errors import CakeDayError

_PREVIEW_LIMIT = 10


@click.group()
def main() -> None:
    """Cake Day Calculator."""


@main.command()
@click.argument("input_file", type=click.Path(exists=True, dir_okay=False, readable=True))
@click.argument("output_file", type=click.Path(dir_okay=False, writable=True))
@click.option(
    "--year",
    "-y",
    default=None,
    type=click.IntRange(1, 9998),
    help="Year to calculate cake days for",
)
@click.option("--config", default=None, help="Config file path")
@click.option("--log-level", default=None, help="Log level override")
@click.option(
    "--reapply-rules/--no-reapply-rules",
    default=None,
    help="Re-run merge/postponement after cross-chunk consolidation",
)
@click.option("--verbose", "-v", is_flag=True, help="Preview the first cake days")
def calculate(
    input_file: str,
    output_file: str,
    year: int | None,
    config: str | None,
    log_level: str | None,
    reapply_rules: bool | None,
    verbose: bool,
) -> None:
    """Calculate cake days from a file of ``name,yyyy-mm-dd`` lines.

    Example input line: Steve,1992-10-14
    """
    from .main import export_result, run

    year = year if year is not None else date.today().year

    overrides: dict = {}
    if log_level:
        overrides["observability"] = {"log_level": log_level}
    if reapply_rules is not None:
        overrides["pipeline"] = {"reapply_rules_on_consolidation": reapply_rules}

    click.echo(f"Calculating cake days for {year}...")
    try:
        result = run(input_file, None, year, config_path=config, overrides=overrides)

        if not result.cake_days:
            click.secho("No cake days calculated for the given year.", fg="yellow")
            return

        if verbose:
            _preview(result.cake_days)

        with click.progressbar(length=result.total_cake_days, label="Exporting to CSV") as bar:
            export_result(result, output_file, lambda processed, total: bar.update(1))
    except CakeDayError as exc:
        raise click.ClickException(str(exc)) from exc

    if not result.converged:
        click.secho(
            "Warning: cake day rules did not reach a stable result; "
            "check the output for adjacent cake days.",
            fg="yellow",
        )

    click.echo("")
    click.echo("Summary:")
    click.echo(f"  Persons processed : {result.total_persons:,}")
    click.echo(f"  Total cake days   : {result.total_cake_days:,}")
    click.echo(f"  Small cakes       : {result.total_small_cakes:,}")
    click.echo(f"  Large cakes       : {result.total_large_cakes:,}")
    click.echo(f"  Input size        : {result.input_size_mb:.2f} MB")
    click.echo(f"  Processing time   : {result.formatted_processing_time}")
    click.echo(f"  Peak memory       : {result.peak_memory_mb:.2f} MB")
    click.secho(f"Cake days written to {output_file}", fg="green")


def _preview(cake_days: list) -> None:
    shown = cake_days[:_PREVIEW_LIMIT]
    click.echo(f"First {len(shown)} cake days:")
    for cake_day in shown:
        click.echo(
            f"  - {cake_day.formatted_date()}: {cake_day.size.value.capitalize()} cake "
            f"for {', '.join(cake_day.attendees)}"
        )
    if len(cake_days) > len(shown):
        click.echo(f"  ... and {len(cake_days) - len(shown)} more cake days")


if __name__ == "__main__":
    main()
