"""Ingestion — read inputs, decode their units, fill the repository.

An input is one of:

* an archive (zip-family file): every entry the decoder recognises as a
  unit is decoded, in archive entry order;
* a directory: unit files found by a sorted recursive walk;
* anything else: decoded as a single unit.

Any read or decode failure is fatal for the run and raises IngestionError
naming the offending input.
"""

from __future__ import annotations

import os
import zipfile
import zlib
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Optional, Union

from ..decoding import Decoder, package_relative_name
from ..exceptions import DecodeError, IngestionError
from ..logging_config import get_logger
from ..models import ProgramUnit, UnitOrigin
from ..repository import UnitRepository
from .cancellation import CancellationToken
from .progress import NullProgress, ProgressCallback

logger = get_logger(__name__)

DEFAULT_ARCHIVE_SUFFIXES = (".zip", ".whl", ".egg", ".jar")

_SKIPPED_DIRS = {"__pycache__"}

PathLike = Union[str, Path]


class Ingester:
    """Populates a UnitRepository from a list of input paths."""

    def __init__(
        self,
        repository: UnitRepository,
        decoder: Decoder,
        progress: Optional[ProgressCallback] = None,
        token: Optional[CancellationToken] = None,
        archive_suffixes: Sequence[str] = DEFAULT_ARCHIVE_SUFFIXES,
    ):
        self.repository = repository
        self.decoder = decoder
        self.progress = progress or NullProgress()
        self.token = token or CancellationToken()
        self.archive_suffixes = tuple(s.lower() for s in archive_suffixes)

    def ingest(self, paths: Sequence[PathLike]) -> list[str]:
        """Decode every unit in ``paths`` and return their names in input order.

        Raises:
            IngestionError: If an input cannot be read or decoded
            AnalysisCancelled: If cancellation is requested mid-ingestion
        """
        self.repository.clear()
        self.progress.report_number_of_archives(len(paths))

        names: list[str] = []
        seen: set[str] = set()
        for raw_path in paths:
            path = Path(raw_path)
            count = 0
            for unit in self._units_in(path):
                self.repository.add(unit)
                count += 1
                if unit.name not in seen:
                    seen.add(unit.name)
                    names.append(unit.name)
            logger.debug(f"Ingested {count} units from {path}")
            self.progress.finish_archive()

        logger.info(f"Ingested {len(names)} units from {len(paths)} inputs")
        return names

    def is_archive(self, path: Path) -> bool:
        return path.suffix.lower() in self.archive_suffixes

    def _units_in(self, path: Path) -> Iterator[ProgramUnit]:
        if path.is_dir():
            return self._directory_units(path)
        if not path.exists():
            raise IngestionError(path, "No such file or directory")
        if self.is_archive(path):
            return self._archive_units(path)
        return self._single_unit(path)

    def _archive_units(self, path: Path) -> Iterator[ProgramUnit]:
        try:
            archive = zipfile.ZipFile(path)
        except (zipfile.BadZipFile, OSError) as e:
            raise IngestionError(path, str(e)) from e

        with archive:
            for info in archive.infolist():
                self.token.raise_if_cancelled(f"{path}!{info.filename}")
                if info.is_dir() or not self.decoder.is_unit(info.filename):
                    continue
                try:
                    raw = archive.read(info)
                except (zipfile.BadZipFile, zlib.error, OSError, RuntimeError) as e:
                    raise IngestionError(path, str(e), entry=info.filename) from e
                yield self._decode(raw, info.filename, path, entry=info.filename)

    def _directory_units(self, root: Path) -> Iterator[ProgramUnit]:
        try:
            files = sorted(_walk_files(root))
        except OSError as e:
            raise IngestionError(root, str(e)) from e

        for file in files:
            entry = file.relative_to(root).as_posix()
            if not self.decoder.is_unit(entry):
                continue
            self.token.raise_if_cancelled(str(file))
            yield self._decode(self._read(file, root, entry), entry, root, entry=entry)

    def _single_unit(self, path: Path) -> Iterator[ProgramUnit]:
        self.token.raise_if_cancelled(str(path))
        raw = self._read(path, path)
        yield self._decode(raw, package_relative_name(path), path)

    @staticmethod
    def _read(file: Path, input_path: Path, entry: Optional[str] = None) -> bytes:
        try:
            return file.read_bytes()
        except OSError as e:
            raise IngestionError(input_path, e.strerror or str(e), entry=entry) from e

    def _decode(
        self, raw: bytes, source_name: str, input_path: Path, entry: Optional[str] = None
    ) -> ProgramUnit:
        try:
            return self.decoder.decode(raw, source_name, UnitOrigin(input_path, entry))
        except DecodeError as e:
            raise IngestionError(input_path, e.reason, entry=entry or source_name) from e


def _raise(error: OSError) -> None:
    raise error


def _walk_files(root: Path) -> Iterator[Path]:
    """Files under ``root``, never descending into hidden or cache directories."""
    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
        dirnames[:] = [d for d in dirnames if not d.startswith(".") and d not in _SKIPPED_DIRS]
        for filename in filenames:
            yield Path(dirpath) / filename
