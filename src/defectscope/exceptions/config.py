"""Configuration exceptions: settings, plugins, detector selection, filters."""

from pathlib import Path
from typing import Any, Optional

from .base import DefectScopeError


class ConfigurationError(DefectScopeError):
    """Base class for configuration-related errors.

    Every configuration error is fatal for the run that raised it.
    """

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class PluginDirectoryError(ConfigurationError):
    """Raised when the plugin directory is missing or unreadable."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"The path {path} does not seem to be a plugin directory",
            details={"path": str(path), "reason": reason},
        )
        self.path = path
        self.reason = reason


class DuplicateDetectorError(ConfigurationError):
    """Raised when two detector factories share a short name."""

    def __init__(self, name: str, plugin_id: Optional[str] = None):
        super().__init__(
            f"Detector already registered: {name}",
            details={"detector": name, "plugin": plugin_id},
        )
        self.name = name
        self.plugin_id = plugin_id


class UnknownDetectorError(ConfigurationError):
    """Raised when a selection names a detector that is not registered."""

    def __init__(self, name: str):
        super().__init__(f"No such detector: {name}", details={"detector": name})
        self.name = name


class DetectorSelectionError(ConfigurationError):
    """Raised when a detector selection is internally inconsistent."""

    pass


class DuplicateOmitError(DetectorSelectionError):
    """Raised when the omit list names the same detector more than once."""

    def __init__(self, name: str):
        super().__init__(
            f"Bad omit list: detector {name} is listed more than once",
            details={"detector": name},
        )
        self.name = name


class FilterError(ConfigurationError):
    """Raised when a bug filter file cannot be loaded."""

    def __init__(self, path: Path, reason: str):
        super().__init__(
            f"Invalid filter file: {path}", details={"path": str(path), "reason": reason}
        )
        self.path = path
        self.reason = reason
