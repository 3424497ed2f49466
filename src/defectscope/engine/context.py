"""Per-unit analysis context handed to every detector."""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar

from ..models import ProgramUnit

T = TypeVar("T")


class UnitContext:
    """Wraps one unit for the duration of its detector pass.

    Detectors that derive the same data from a unit (a symbol table, a
    call list) can share it through ``memo`` instead of recomputing it.
    """

    def __init__(self, unit: ProgramUnit):
        self.unit = unit
        self._memo: dict[str, Any] = {}

    @property
    def name(self) -> str:
        return self.unit.name

    @property
    def body(self) -> Any:
        return self.unit.body

    @property
    def source_file(self) -> Optional[str]:
        return self.unit.source_file

    def memo(self, key: str, compute: Callable[[ProgramUnit], T]) -> T:
        """Return the cached value for ``key``, computing it on first use."""
        if key not in self._memo:
            self._memo[key] = compute(self.unit)
        return self._memo[key]

    def __repr__(self) -> str:
        return f"UnitContext({self.unit.name!r})"
