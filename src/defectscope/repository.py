"""Run-scoped store of decoded program units."""

from __future__ import annotations

from collections.abc import Iterator

from .exceptions import UnitNotFoundError
from .logging_config import get_logger
from .models import ProgramUnit

logger = get_logger(__name__)


class UnitRepository:
    """Maps fully-qualified unit names to decoded units.

    One repository belongs to one analysis run at a time; the engine clears
    it before every ingestion so nothing leaks between runs.
    """

    def __init__(self) -> None:
        self._units: dict[str, ProgramUnit] = {}

    def add(self, unit: ProgramUnit) -> bool:
        """Store a unit. Returns False when it replaced an earlier definition."""
        previous = self._units.get(unit.name)
        self._units[unit.name] = unit
        if previous is not None:
            logger.warning(
                f"Unit {unit.name} defined more than once "
                f"({previous.origin} and {unit.origin}); keeping the later one"
            )
            return False
        return True

    def lookup(self, name: str) -> ProgramUnit:
        try:
            return self._units[name]
        except KeyError:
            raise UnitNotFoundError(name) from None

    def clear(self) -> None:
        if self._units:
            logger.debug(f"Clearing {len(self._units)} units from repository")
        self._units.clear()

    def names(self) -> list[str]:
        return list(self._units)

    def __contains__(self, name: object) -> bool:
        return name in self._units

    def __len__(self) -> int:
        return len(self._units)

    def __iter__(self) -> Iterator[ProgramUnit]:
        return iter(self._units.values())
