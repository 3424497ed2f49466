"""Root of the defectscope exception hierarchy."""

from typing import Any, Dict, Optional


class DefectScopeError(Exception):
    """Base exception for all defectscope errors.

    ``details`` is rendered after the message as ``(key=value, ...)``.
    Values are stored as strings; ``None`` values are dropped so optional
    context (an archive entry, a unit name) can be passed unconditionally.
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, str] = {
            key: str(value) for key, value in (details or {}).items() if value is not None
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        rendered = ", ".join(f"{key}={value}" for key, value in self.details.items())
        return f"{self.message} ({rendered})"
