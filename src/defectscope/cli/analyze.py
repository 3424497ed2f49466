"""analyze command — run the selected detectors over the given inputs."""

from __future__ import annotations

import signal
import threading
from contextlib import contextmanager, nullcontext
from pathlib import Path
from typing import Iterator, List, Optional

import click
import typer

from ..config import EngineConfig
from ..decoding import PythonModuleDecoder
from ..detectors.plugins import load_registry
from ..engine import AnalysisEngine, CancellationToken, RunSummary
from ..exceptions import AnalysisCancelled, DefectScopeError
from ..logging_config import get_logger, setup_logging
from ..reporting import REPORTERS, ErrorVerbosity, get_reporter
from . import app
from ._common import err_console, resolve_config
from .progress import RichProgress

logger = get_logger(__name__)


@contextmanager
def cancel_on_sigint(token: CancellationToken) -> Iterator[None]:
    """Turn the first Ctrl-C into a cancellation request.

    A second Ctrl-C falls through to the previous handler.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = signal.getsignal(signal.SIGINT)

    def _handler(signum, frame):
        logger.debug("SIGINT received, cancelling run")
        token.cancel()
        signal.signal(signal.SIGINT, previous)

    signal.signal(signal.SIGINT, _handler)
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def build_engine(settings: EngineConfig) -> AnalysisEngine:
    """Load plugins and wire registry, reporter and decoder for ``settings``."""
    registry = load_registry(settings.plugin_dir)
    reporter = get_reporter(settings.output_format, catalog=registry.catalog)
    if settings.quiet:
        reporter.set_error_verbosity(ErrorVerbosity.SILENT)

    engine = AnalysisEngine(
        registry,
        reporter,
        selection=settings.selection(),
        decoder=PythonModuleDecoder(settings.unit_suffixes, settings.source_roots),
        archive_suffixes=settings.archive_suffixes,
    )
    if settings.filter_file is not None:
        engine.set_filter(settings.filter_file, settings.filter_include)
    return engine


def _print_summary(summary: RunSummary) -> None:
    errors = summary.unit_errors + summary.internal_errors
    err_console.print(
        f"[dim]{summary.units} units, {summary.detectors} detectors, "
        f"{summary.bugs_reported} findings, {errors} detector errors[/dim]"
    )


@app.command()
def analyze(
    inputs: List[Path] = typer.Argument(
        ...,
        help="Archives (.zip, .whl, .egg, .jar), directories or .py files to analyze",
    ),
    detectors: Optional[str] = typer.Option(
        None,
        "--detectors",
        help="Run only these detectors (comma-separated, in this order)",
    ),
    omit_detectors: Optional[str] = typer.Option(
        None,
        "--omit-detectors",
        help="Run every detector except these (comma-separated)",
    ),
    include_filter: Optional[Path] = typer.Option(
        None,
        "--include-filter",
        help="Report only findings matching this filter file",
    ),
    exclude_filter: Optional[Path] = typer.Option(
        None,
        "--exclude-filter",
        help="Drop findings matching this filter file",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        "-q",
        help="Do not print the analysis error summary",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
    sort_by_class: bool = typer.Option(
        False,
        "--sort-by-class",
        help="Print findings sorted by module (same as --format sorted)",
    ),
    output_format: Optional[str] = typer.Option(
        None,
        "--format",
        "-f",
        help="Output format",
        click_type=click.Choice(list(REPORTERS), case_sensitive=False),
    ),
    plugin_dir: Optional[Path] = typer.Option(
        None,
        "--plugin-dir",
        help="Directory of detector plugins (default: $DEFECTSCOPE_HOME/plugin or ./plugin)",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "-c",
        "--config",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
        readable=True,
    ),
    log_file: Optional[Path] = typer.Option(
        None,
        "--log-file",
        help="Also write log records to this file",
    ),
    progress: Optional[bool] = typer.Option(
        None,
        "--progress/--no-progress",
        help="Show a progress bar on stderr",
    ),
):
    """
    Analyze Python archives, directories and files with the selected detectors.

    [bold cyan]Examples:[/bold cyan]

      defectscope analyze dist/app-1.0-py3-none-any.whl

      defectscope analyze src/ --omit-detectors SlowCheck --sort-by-class

      defectscope analyze app.zip tools/cli.py --format json --quiet
    """
    if detectors is not None and omit_detectors is not None:
        err_console.print("[red]Error:[/red] --detectors and --omit-detectors are mutually exclusive")
        raise typer.Exit(1)
    if include_filter is not None and exclude_filter is not None:
        err_console.print(
            "[red]Error:[/red] --include-filter and --exclude-filter are mutually exclusive"
        )
        raise typer.Exit(1)

    try:
        settings = resolve_config(
            config=config,
            plugin_dir=plugin_dir,
            detectors=detectors,
            omit_detectors=omit_detectors,
            include_filter=include_filter,
            exclude_filter=exclude_filter,
            output_format=output_format.lower() if output_format else None,
            sort_by_class=sort_by_class,
            quiet=quiet,
            verbose=verbose,
            progress=progress,
            log_file=log_file,
        )
    except DefectScopeError as e:
        err_console.print(f"[red]Configuration error:[/red] {e}")
        raise typer.Exit(1)

    setup_logging(
        verbose=settings.verbose,
        quiet=settings.quiet,
        log_file=settings.log_file,
        console=err_console,
    )

    token = CancellationToken()
    try:
        engine = build_engine(settings)
        display = RichProgress(err_console) if settings.show_progress else nullcontext()
        with cancel_on_sigint(token), display:
            if settings.show_progress:
                engine.set_progress_callback(display)
            summary = engine.execute(inputs, token)

    except AnalysisCancelled:
        err_console.print("\n[yellow]Analysis cancelled[/yellow]")
        raise typer.Exit(130)

    except KeyboardInterrupt:
        err_console.print("\n[yellow]Analysis interrupted[/yellow]")
        raise typer.Exit(130)

    except DefectScopeError as e:
        logger.debug("Fatal analysis error", exc_info=True)
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    except Exception as e:
        logger.exception("Unexpected error during analysis")
        err_console.print(f"[red]Unexpected error:[/red] {e}")
        if settings.verbose:
            err_console.print_exception()
        raise typer.Exit(1)

    if settings.verbose:
        _print_summary(summary)
