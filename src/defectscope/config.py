"""Configuration loading and management for defectscope.

Configuration sources are merged in priority order:
    1. Defaults (defined in EngineConfig)
    2. Global config (~/.defectscope.toml)
    3. Project config (./defectscope.toml)
    4. Explicit config file
    5. Environment variables (DEFECTSCOPE_* prefix)
    6. CLI overrides (passed as kwargs)

Example:
    >>> config = load_config(quiet=True, detectors=["NullDeref"])
    >>> config.verbosity
    'quiet'
    >>> config.selection().mode
    <SelectionMode.INCLUDE: 'include'>
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Literal, Optional

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]
OutputFormat = Literal["text", "sorted", "json"]

HOME_ENV = "DEFECTSCOPE_HOME"
ENV_PREFIX = "DEFECTSCOPE_"

_VERBOSITIES = ("quiet", "normal", "verbose")
_FORMATS = ("text", "sorted", "json")
_TUPLE_FIELDS = {"detectors", "omit_detectors", "archive_suffixes", "unit_suffixes", "source_roots"}
_PATH_FIELDS = {"plugin_dir", "filter_file", "log_file"}


def default_plugin_dir() -> Path:
    """``$DEFECTSCOPE_HOME/plugin`` when the home is set, else ``./plugin``."""
    home = os.environ.get(HOME_ENV)
    if home:
        return Path(home) / "plugin"
    return Path.cwd() / "plugin"


@dataclass(frozen=True)
class EngineConfig:
    """Configuration for one analysis invocation.

    Attributes:
        Plugins and selection:
            plugin_dir: Directory scanned for plugin bundles
            detectors: Run only these detectors, in this order
            omit_detectors: Run every registered detector except these

        Filtering and output:
            filter_file: TOML filter file applied to findings
            filter_include: Keep only matching findings (True) or drop them (False)
            output_format: "text", "sorted" or "json"
            verbosity: "quiet" silences the queued error summary

        Inputs:
            archive_suffixes: File suffixes opened as zip archives
            unit_suffixes: Entry suffixes decoded as units
            source_roots: Leading directories dropped from module names

        Runtime:
            show_progress: Show a progress bar on stderr
            log_file: Also write log records to this file
    """

    plugin_dir: Path = field(default_factory=default_plugin_dir)
    detectors: Optional[tuple[str, ...]] = None
    omit_detectors: Optional[tuple[str, ...]] = None

    filter_file: Optional[Path] = None
    filter_include: bool = False
    output_format: OutputFormat = "text"
    verbosity: Verbosity = "normal"

    archive_suffixes: tuple[str, ...] = (".zip", ".whl", ".egg", ".jar")
    unit_suffixes: tuple[str, ...] = (".py",)
    source_roots: tuple[str, ...] = ("src",)

    show_progress: bool = False
    log_file: Optional[Path] = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.detectors is not None and self.omit_detectors is not None:
            raise InvalidConfigError(
                "detectors", ",".join(self.detectors), "cannot be combined with omit_detectors"
            )
        if self.verbosity not in _VERBOSITIES:
            raise InvalidConfigError("verbosity", self.verbosity, f"must be one of {_VERBOSITIES}")
        if self.output_format not in _FORMATS:
            raise InvalidConfigError("output_format", self.output_format, f"must be one of {_FORMATS}")
        for name in ("archive_suffixes", "unit_suffixes"):
            for suffix in getattr(self, name):
                if not suffix.startswith("."):
                    raise InvalidConfigError(name, suffix, "suffixes must start with '.'")
        if not self.unit_suffixes:
            raise InvalidConfigError("unit_suffixes", "", "at least one unit suffix is required")

    @property
    def quiet(self) -> bool:
        return self.verbosity == "quiet"

    @property
    def verbose(self) -> bool:
        return self.verbosity == "verbose"

    def selection(self):
        """SelectionSpec for this configuration."""
        from .detectors.selection import SelectionSpec

        return SelectionSpec.from_options(include=self.detectors, omit=self.omit_detectors)


def load_config(config_file: Optional[Path] = None, **overrides: Any) -> EngineConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags); ``None``
            values are ignored so unset CLI options do not mask files

    Returns:
        Validated EngineConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
    """
    merged: dict[str, Any] = {}

    global_config = Path.home() / ".defectscope.toml"
    if global_config.exists():
        merged.update(_load_config_file(global_config, "global config"))

    project_config = Path.cwd() / "defectscope.toml"
    if project_config.exists():
        merged.update(_load_config_file(project_config, "project config"))

    if config_file is not None:
        config_file = Path(config_file)
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        merged.update(_load_config_file(config_file, "config file"))

    merged.update(_load_env_vars())

    if overrides.pop("verbose", False):
        overrides["verbosity"] = "verbose"
    if overrides.pop("quiet", False):
        overrides["verbosity"] = "quiet"
    overrides = {k: v for k, v in overrides.items() if v is not None}

    # A selection given directly replaces the other mode from lower layers
    if "detectors" in overrides:
        merged.pop("omit_detectors", None)
    if "omit_detectors" in overrides:
        merged.pop("detectors", None)
    merged.update(overrides)

    try:
        return EngineConfig(**_coerce(merged))
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_config_file(path: Path, label: str) -> dict[str, Any]:
    try:
        data = load_toml(path)
    except Exception as e:
        raise ConfigurationError(f"Invalid {label} '{path}': {e}")
    section = data.get("defectscope", data)
    if not isinstance(section, dict):
        raise ConfigurationError(f"Invalid {label} '{path}': [defectscope] must be a table")
    return dict(section)


def _coerce(values: dict[str, Any]) -> dict[str, Any]:
    """Normalise list values to tuples and strings to paths."""
    known = {f.name for f in fields(EngineConfig)}
    result: dict[str, Any] = {}
    for key, value in values.items():
        if key not in known:
            raise ConfigurationError(f"Invalid configuration: unknown option '{key}'")
        if key in _TUPLE_FIELDS and value is not None:
            if isinstance(value, str):
                value = [item.strip() for item in value.split(",") if item.strip()]
            value = tuple(value)
        elif key in _PATH_FIELDS and value is not None:
            value = Path(value)
        result[key] = value
    return result


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from DEFECTSCOPE_* environment variables.

    Supported environment variables:
        DEFECTSCOPE_PLUGIN_DIR: path
        DEFECTSCOPE_DETECTORS: comma-separated names
        DEFECTSCOPE_OMIT_DETECTORS: comma-separated names
        DEFECTSCOPE_FILTER_FILE: path
        DEFECTSCOPE_FILTER_INCLUDE: bool (true/false/1/0)
        DEFECTSCOPE_OUTPUT_FORMAT: text/sorted/json
        DEFECTSCOPE_VERBOSITY: quiet/normal/verbose
        DEFECTSCOPE_SHOW_PROGRESS: bool
        DEFECTSCOPE_LOG_FILE: path

    DEFECTSCOPE_HOME is not a config field; it only moves the default
    plugin directory.
    """
    result: dict[str, Any] = {}
    for f in fields(EngineConfig):
        env_key = f"{ENV_PREFIX}{f.name.upper()}"
        value = os.environ.get(env_key)
        if value is None:
            continue
        if f.name in ("filter_include", "show_progress"):
            result[f.name] = _parse_bool(value, env_key)
        else:
            result[f.name] = value
    return result


def _parse_bool(value: str, env_key: str) -> bool:
    lower = value.lower()
    if lower in ("true", "1", "yes", "on"):
        return True
    if lower in ("false", "0", "no", "off"):
        return False
    raise ConfigurationError(f"Invalid {env_key}: expected true/false, got '{value}'")


def load_toml(path: Path) -> dict:
    """Load a TOML file and return the parsed dict."""
    try:
        # Python 3.11+ has tomllib in stdlib
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore

    with open(path, "rb") as f:
        return tomllib.load(f)
