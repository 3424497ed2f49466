"""
Logging for defectscope.

Every module logs through ``get_logger(__name__)``. Records are rendered by
rich on stderr, so bug reports on stdout stay machine readable.
"""

import logging
from pathlib import Path
from typing import Optional, Union

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "defectscope"

FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def level_for(verbose: bool = False, quiet: bool = False) -> int:
    """Map the CLI verbosity switches to a logging level. Quiet wins."""
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.DEBUG
    return logging.WARNING


def setup_logging(
    verbose: bool = False,
    quiet: bool = False,
    log_file: Optional[Union[str, Path]] = None,
    console: Optional[Console] = None,
) -> logging.Logger:
    """
    Install the rich stderr handler, plus a plain file handler if asked.

    Args:
        verbose: Log at DEBUG and show timestamps, paths and locals in tracebacks
        quiet: Only log errors
        log_file: Append every record to this file as well
        console: Console to render on; pass the one a progress display uses
                 so log lines are printed above the bar instead of through it

    Returns:
        The ``defectscope`` logger
    """
    level = level_for(verbose, quiet)

    handlers: list[logging.Handler] = [
        RichHandler(
            console=console or Console(stderr=True),
            rich_tracebacks=True,
            tracebacks_show_locals=verbose,
            markup=False,
            show_time=verbose,
            show_path=verbose,
        )
    ]

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, mode="a", encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handlers.append(file_handler)

    # force: the CLI may be invoked several times in one process (tests)
    logging.basicConfig(level=level, format="%(message)s", datefmt="[%X]", handlers=handlers, force=True)

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Logger under the ``defectscope`` namespace.

    ``get_logger(__name__)`` inside the package returns the module's own
    logger; any other name is nested under ``defectscope.``.
    """
    if name is None:
        return logging.getLogger(ROOT_LOGGER)
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)
