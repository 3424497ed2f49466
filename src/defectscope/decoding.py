"""Decoders turn the raw bytes of one unit file into a ProgramUnit.

The engine only depends on the ``Decoder`` protocol. The shipped
``PythonModuleDecoder`` treats every ``.py`` file as a unit and parses it
with :mod:`ast`; detectors receive the resulting ``ast.Module`` as the unit
body.
"""

from __future__ import annotations

import ast
from collections.abc import Sequence
from pathlib import Path, PurePosixPath
from typing import Optional, Protocol

from .exceptions import DecodeError
from .models import ProgramUnit, UnitOrigin

DEFAULT_UNIT_SUFFIXES = (".py",)
DEFAULT_SOURCE_ROOTS = ("src",)


class Decoder(Protocol):
    """Anything that can recognise and decode unit files."""

    def is_unit(self, name: str) -> bool: ...

    def decode(
        self, raw: bytes, source_name: str, origin: Optional[UnitOrigin] = None
    ) -> ProgramUnit: ...


def package_relative_name(path: Path) -> str:
    """Return ``path`` relative to the top of its enclosing package tree.

    ``/work/b/Baz.py`` with ``/work/b/__init__.py`` present gives
    ``b/Baz.py``; a file outside any package gives just its base name.
    """
    path = Path(path)
    parts = [path.name]
    parent = path.parent
    while (parent / "__init__.py").is_file() and parent.name:
        parts.append(parent.name)
        parent = parent.parent
    return "/".join(reversed(parts))


class PythonModuleDecoder:
    """Decode Python source files into units whose body is an ``ast.Module``."""

    def __init__(
        self,
        unit_suffixes: Sequence[str] = DEFAULT_UNIT_SUFFIXES,
        source_roots: Sequence[str] = DEFAULT_SOURCE_ROOTS,
    ):
        self.unit_suffixes = tuple(s.lower() for s in unit_suffixes)
        self.source_roots = frozenset(source_roots)

    def is_unit(self, name: str) -> bool:
        return name.lower().endswith(self.unit_suffixes) and not name.endswith("/")

    def module_name(self, source_name: str) -> str:
        """Derive the dotted module name from an entry path."""
        path = PurePosixPath(source_name.replace("\\", "/"))
        parts = [p for p in path.parts if p not in ("/", ".", "")]
        if not parts:
            raise DecodeError(source_name, "empty unit name")

        last = parts[-1]
        for suffix in self.unit_suffixes:
            if last.lower().endswith(suffix):
                last = last[: -len(suffix)]
                break
        parts[-1] = last

        if len(parts) > 1 and parts[0] in self.source_roots:
            parts = parts[1:]
        if len(parts) > 1 and parts[-1] == "__init__":
            parts = parts[:-1]
        if not all(parts):
            raise DecodeError(source_name, "cannot derive a module name")
        return ".".join(parts)

    def decode(
        self, raw: bytes, source_name: str, origin: Optional[UnitOrigin] = None
    ) -> ProgramUnit:
        name = self.module_name(source_name)
        try:
            # ast.parse on bytes honours PEP 263 coding cookies and a UTF-8 BOM
            tree = ast.parse(raw, filename=source_name)
        except SyntaxError as e:
            raise DecodeError(source_name, f"syntax error at line {e.lineno}: {e.msg}") from e
        except ValueError as e:
            raise DecodeError(source_name, str(e)) from e
        except (RecursionError, MemoryError) as e:
            raise DecodeError(source_name, f"nesting too deep to parse ({type(e).__name__})") from e

        return ProgramUnit(
            name=name,
            source_file=PurePosixPath(source_name.replace("\\", "/")).name,
            body=tree,
            origin=origin,
        )
