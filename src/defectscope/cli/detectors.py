"""detectors command — list what the plugin directory provides."""

from pathlib import Path
from typing import Optional

import typer
from rich.table import Table

from ..config import load_config
from ..detectors.plugins import load_registry
from ..exceptions import DefectScopeError
from ..logging_config import setup_logging
from . import app
from ._common import console, err_console


@app.command()
def detectors(
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
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
):
    """List registered detectors in registration order."""
    try:
        settings = load_config(config_file=config, plugin_dir=plugin_dir, verbose=verbose)
        setup_logging(verbose=settings.verbose, console=err_console)
        registry = load_registry(settings.plugin_dir)
    except DefectScopeError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not len(registry):
        console.print(f"[yellow]No detectors found in {settings.plugin_dir}[/yellow]")
        return

    table = Table(title=f"Detectors ({len(registry)})")
    table.add_column("Name", style="bold")
    table.add_column("Plugin", style="cyan")
    table.add_column("Default")
    table.add_column("Reports", style="dim")
    table.add_column("Description")

    for factory in registry:
        table.add_row(
            factory.name,
            factory.plugin_id,
            "[green]enabled[/green]" if factory.enabled_by_default else "[dim]disabled[/dim]",
            ", ".join(factory.reports),
            factory.description,
        )
    console.print(table)
