"""Shared CLI helpers."""

from pathlib import Path
from typing import Optional

from rich.console import Console

from ..config import EngineConfig, load_config
from ..detectors.selection import parse_detector_list

console = Console()
err_console = Console(stderr=True, soft_wrap=True)


def resolve_config(
    config: Optional[Path] = None,
    plugin_dir: Optional[Path] = None,
    detectors: Optional[str] = None,
    omit_detectors: Optional[str] = None,
    include_filter: Optional[Path] = None,
    exclude_filter: Optional[Path] = None,
    output_format: Optional[str] = None,
    sort_by_class: bool = False,
    quiet: bool = False,
    verbose: bool = False,
    progress: Optional[bool] = None,
    log_file: Optional[Path] = None,
) -> EngineConfig:
    """Build configuration from CLI options."""
    overrides: dict = {}
    if plugin_dir is not None:
        overrides["plugin_dir"] = plugin_dir
    if detectors is not None:
        overrides["detectors"] = parse_detector_list(detectors)
    if omit_detectors is not None:
        overrides["omit_detectors"] = parse_detector_list(omit_detectors)
    if include_filter is not None:
        overrides["filter_file"] = include_filter
        overrides["filter_include"] = True
    elif exclude_filter is not None:
        overrides["filter_file"] = exclude_filter
        overrides["filter_include"] = False
    if sort_by_class:
        overrides["output_format"] = "sorted"
    elif output_format is not None:
        overrides["output_format"] = output_format
    if progress is not None:
        overrides["show_progress"] = progress
    if log_file is not None:
        overrides["log_file"] = log_file
    return load_config(config_file=config, quiet=quiet, verbose=verbose, **overrides)
