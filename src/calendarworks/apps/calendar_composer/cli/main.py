"""Command line interface for the calendar composer module."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn

from calendarworks.logging_utils import configure_logging

from ..core.config import ComposerConfig, load_config
from ..core.errors import ComposerError
from ..core.models import BatchSummary, PairStatus
from ..core.reporting import write_jsonl
from ..core.runner import ComposerRunner

logger = logging.getLogger(__name__)

PROG_NAME = "calendar-composer"

# typer may ship its own click; take the usage error base from typer itself.
UsageError = next(
    cls for cls in typer.BadParameter.__mro__ if cls.__name__ == "UsageError"
)

app = typer.Typer(
    help="Stack every month header above every image and label it with the image's palette colours.",
    add_completion=False,
)


@app.command()
def compose(
    months_dir: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="Directory of month header images (placed on top).",
    ),
    images_dir: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="Directory of images (placed below; source of the label colours).",
    ),
    export_dir: Path = typer.Argument(
        ...,
        exists=True,
        file_okay=False,
        dir_okay=True,
        help="Existing directory that receives MONTH-IMAGE.png composites.",
    ),
    palette_size: Optional[int] = typer.Option(
        None, "--palette-size", help="Number of palette entries to quantize to (1-256)."
    ),
    kmeans: Optional[int] = typer.Option(
        None, "--kmeans", help="K-means refinement iterations for the quantizer."
    ),
    primary_index: Optional[int] = typer.Option(
        None, "--primary-index", help="Palette index used for the first label."
    ),
    secondary_index: Optional[int] = typer.Option(
        None, "--secondary-index", help="Palette index used for the second label."
    ),
    font_size: Optional[int] = typer.Option(
        None, "--font-size", help="Label font size in pixels."
    ),
    outer_workers: Optional[int] = typer.Option(
        None, "--outer-workers", help="Images processed concurrently."
    ),
    inner_workers: Optional[int] = typer.Option(
        None, "--inner-workers", help="Months processed concurrently per image."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run/--no-dry-run", help="List the planned outputs without writing anything."
    ),
    report: Optional[Path] = typer.Option(
        None, "--report", help="Write a JSONL record per pair to this path."
    ),
    log_dir: Optional[Path] = typer.Option(
        None, "--log-dir", help="Directory for calendar_composer.log."
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug detail."),
) -> None:
    log_path = configure_logging(
        "calendar_composer",
        level=logging.DEBUG if verbose else logging.INFO,
        log_dir=log_dir,
    )
    logger.info("Calendar composer logging initialised → %s", log_path)

    overrides: dict[str, object] = {
        "palette_size": palette_size,
        "kmeans_iterations": kmeans,
        "primary_index": primary_index,
        "secondary_index": secondary_index,
        "font_size": font_size,
        "outer_workers": outer_workers,
        "inner_workers": inner_workers,
        "report_path": report,
    }
    try:
        config = load_config(
            months_dir=months_dir,
            images_dir=images_dir,
            export_dir=export_dir,
            dry_run=dry_run,
            **{k: v for k, v in overrides.items() if v is not None},
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    logger.info(
        "composer_run_config",
        extra={
            "event_type": "config",
            "months_dir": str(config.months_dir),
            "images_dir": str(config.images_dir),
            "export_dir": str(config.export_dir),
            "palette_size": config.palette_size,
            "indices": [config.primary_index, config.secondary_index],
            "dry_run": config.dry_run,
        },
    )

    runner = ComposerRunner(config)
    try:
        plan = runner.plan()
        total = sum(len(pairs) for pairs in plan.values())
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=Console(stderr=True),
            transient=True,
        ) as progress:
            task = progress.add_task("Composing pairs…", total=total)
            summary = runner.run(
                plan=plan, on_result=lambda _result: progress.advance(task)
            )
    except ComposerError as exc:
        logger.error("Run aborted (%s): %s", exc.kind, exc)
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    _print_terminal_summary(summary, config)

    if config.report_path is not None:
        try:
            write_jsonl(summary.results, config.report_path)
        except OSError as exc:
            logger.error("Cannot write report %s: %s", config.report_path, exc)
            typer.echo(f"Error: cannot write report {config.report_path}: {exc}", err=True)
            raise typer.Exit(code=1) from exc
        typer.echo(f"\nDetailed JSONL → {config.report_path}")

    if not summary.ok:
        raise typer.Exit(code=1)


def _print_terminal_summary(summary: BatchSummary, config: ComposerConfig) -> None:
    typer.echo("\nSummary:")
    for status in PairStatus:
        typer.echo(f"  {status.value.upper():>7}: {summary.count(status)}")

    if config.dry_run:
        typer.echo("\nPlanned outputs:")
        for result in summary.results:
            typer.echo(f"  {result.pair.output}")

    if summary.failures:
        typer.echo("\nFailures:")
        for result in summary.failures:
            typer.echo(f"  {result.pair.label}: [{result.error_kind}] {result.message}")


def main(argv: Optional[List[str]] = None) -> int:
    """Console entry point: usage errors print to stderr and exit with status 1."""

    try:
        rv = app(args=argv, prog_name=PROG_NAME, standalone_mode=False)
    except UsageError as exc:
        exc.show()
        return 1
    except typer.Abort:
        typer.echo("Aborted!", err=True)
        return 1
    return rv if isinstance(rv, int) else 0


if __name__ == "__main__":
    raise SystemExit(main())
