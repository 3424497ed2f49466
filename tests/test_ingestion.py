"""Tests for ingestion and the unit repository."""

import logging
import os
import zipfile
from pathlib import Path

import pytest

from conftest import write_source, write_zip

from defectscope.decoding import PythonModuleDecoder
from defectscope.engine import CancellationToken, Ingester
from defectscope.exceptions import AnalysisCancelled, IngestionError, UnitNotFoundError
from defectscope.models import ProgramUnit
from defectscope.repository import UnitRepository


class RecordingProgress:
    def __init__(self):
        self.events = []

    def report_number_of_archives(self, num_archives):
        self.events.append(("archives", num_archives))

    def finish_archive(self):
        self.events.append(("finish_archive",))

    def start_analysis(self, num_units):
        self.events.append(("start", num_units))

    def finish_class(self):
        self.events.append(("finish_class",))

    def finish_per_class_analysis(self):
        self.events.append(("done",))


class CancelAfterDecoder(PythonModuleDecoder):
    """Cancels the token once ``limit`` units have been decoded."""

    def __init__(self, token, limit):
        super().__init__()
        self.token = token
        self.limit = limit
        self.decoded = []

    def decode(self, raw, source_name, origin=None):
        self.decoded.append(source_name)
        if len(self.decoded) >= self.limit:
            self.token.cancel()
        return super().decode(raw, source_name, origin)


@pytest.fixture
def repository():
    return UnitRepository()


def make_ingester(repository, **kwargs):
    return Ingester(repository, kwargs.pop("decoder", PythonModuleDecoder()), **kwargs)


class TestUnitRepository:
    def test_add_and_lookup(self, repository):
        unit = ProgramUnit("a.Foo", "Foo.py", body=None)
        assert repository.add(unit) is True
        assert repository.lookup("a.Foo") is unit
        assert "a.Foo" in repository
        assert len(repository) == 1

    def test_lookup_missing(self, repository):
        with pytest.raises(UnitNotFoundError) as exc_info:
            repository.lookup("nope")
        assert exc_info.value.name == "nope"

    def test_replacement_warns(self, repository, caplog):
        repository.add(ProgramUnit("a.Foo", "Foo.py", body=1))
        with caplog.at_level(logging.WARNING, logger="defectscope"):
            assert repository.add(ProgramUnit("a.Foo", "Foo.py", body=2)) is False
        assert repository.lookup("a.Foo").body == 2
        assert "a.Foo" in caplog.text

    def test_clear(self, repository):
        repository.add(ProgramUnit("a.Foo", None, body=None))
        repository.clear()
        assert len(repository) == 0
        assert repository.names() == []


class TestIngestOrder:
    def test_input_order_then_entry_order(self, repository, sample_inputs):
        names = make_ingester(repository).ingest(sample_inputs)
        assert names == ["a.Foo", "a.Bar", "b.Baz"]
        assert repository.lookup("b.Baz").source_file == "Baz.py"
        assert repository.lookup("a.Bar").origin.entry == "a/Bar.py"

    def test_multiple_archives(self, repository, tmp_path):
        first = write_zip(tmp_path / "one.zip", {"p/B.py": "", "p/A.py": ""})
        second = write_zip(tmp_path / "two.whl", {"q/C.py": ""})
        names = make_ingester(repository).ingest([second, first])
        assert names == ["q.C", "p.B", "p.A"]

    def test_non_unit_entries_skipped(self, repository, tmp_path):
        archive = write_zip(
            tmp_path / "lib.whl",
            {
                "lib/__init__.py": "",
                "lib/core.py": "",
                "lib-1.0.dist-info/METADATA": "Name: lib\n",
                "lib/data.json": "{}",
            },
        )
        assert make_ingester(repository).ingest([archive]) == ["lib", "lib.core"]

    def test_directory_walk_sorted(self, repository, tmp_path):
        root = tmp_path / "project"
        write_source(root / "src" / "pkg" / "b.py")
        write_source(root / "src" / "pkg" / "a.py")
        write_source(root / "src" / "pkg" / "__init__.py", "")
        write_source(root / "src" / "pkg" / "__pycache__" / "junk.py")
        write_source(root / ".venv" / "site.py")
        names = make_ingester(repository).ingest([root])
        assert names == ["pkg", "pkg.a", "pkg.b"]

    def test_hidden_and_cache_directories_not_entered(self, repository, tmp_path, monkeypatch):
        root = tmp_path / "project"
        write_source(root / "pkg" / "a.py")
        write_source(root / "pkg" / "__pycache__" / "junk.py")
        write_source(root / ".git" / "hooks" / "hook.py")

        visited = []
        real_walk = os.walk

        def recording_walk(top, *args, **kwargs):
            for dirpath, dirnames, filenames in real_walk(top, *args, **kwargs):
                visited.append(Path(dirpath).relative_to(root).as_posix())
                yield dirpath, dirnames, filenames

        monkeypatch.setattr(os, "walk", recording_walk)
        assert make_ingester(repository).ingest([root]) == ["pkg.a"]
        assert sorted(visited) == [".", "pkg"]

    def test_duplicate_unit_listed_once(self, repository, tmp_path):
        first = write_zip(tmp_path / "one.zip", {"m/X.py": "x = 1\n"})
        second = write_zip(tmp_path / "two.zip", {"m/X.py": "x = 2\n", "m/Y.py": ""})
        names = make_ingester(repository).ingest([first, second])
        assert names == ["m.X", "m.Y"]
        assert repository.lookup("m.X").origin.path == second

    def test_repository_cleared_between_runs(self, repository, tmp_path):
        ingester = make_ingester(repository)
        ingester.ingest([write_source(tmp_path / "old.py")])
        names = ingester.ingest([write_source(tmp_path / "new.py")])
        assert names == ["new"]
        assert "old" not in repository


class TestIngestProgress:
    def test_milestones(self, repository, sample_inputs):
        progress = RecordingProgress()
        make_ingester(repository, progress=progress).ingest(sample_inputs)
        assert progress.events == [("archives", 2), ("finish_archive",), ("finish_archive",)]


class TestIngestErrors:
    def test_missing_input(self, repository, tmp_path):
        missing = tmp_path / "missing.zip"
        with pytest.raises(IngestionError) as exc_info:
            make_ingester(repository).ingest([missing])
        assert exc_info.value.path == missing

    def test_corrupt_archive(self, repository, tmp_path):
        bad = tmp_path / "bad.zip"
        bad.write_bytes(b"this is not a zip file")
        with pytest.raises(IngestionError) as exc_info:
            make_ingester(repository).ingest([bad])
        assert exc_info.value.path == bad

    def test_undecodable_entry_names_input_and_entry(self, repository, tmp_path):
        archive = write_zip(tmp_path / "A.jar", {"a/Ok.py": "", "a/Bad.py": "def (:\n"})
        with pytest.raises(IngestionError) as exc_info:
            make_ingester(repository).ingest([archive])
        assert exc_info.value.path == archive
        assert exc_info.value.entry == "a/Bad.py"
        assert "Could not analyze" in str(exc_info.value)

    def test_undecodable_standalone_file(self, repository, tmp_path):
        bad = write_source(tmp_path / "bad.py", "class :\n")
        with pytest.raises(IngestionError) as exc_info:
            make_ingester(repository).ingest([bad])
        assert exc_info.value.path == bad

    def test_archive_suffixes_configurable(self, repository, tmp_path):
        archive = write_zip(tmp_path / "bundle.pyz", {"m/X.py": ""})
        ingester = make_ingester(repository, archive_suffixes=(".pyz",))
        assert ingester.ingest([archive]) == ["m.X"]


class TestIngestCancellation:
    def test_cancelled_before_start(self, repository, sample_inputs):
        token = CancellationToken()
        token.cancel()
        with pytest.raises(AnalysisCancelled):
            make_ingester(repository, token=token).ingest(sample_inputs)
        assert len(repository) == 0

    def test_cancel_mid_archive_stops_decoding(self, repository, tmp_path):
        archive = write_zip(
            tmp_path / "big.zip", {f"m/U{i}.py": "" for i in range(5)}
        )
        token = CancellationToken()
        decoder = CancelAfterDecoder(token, limit=2)
        with pytest.raises(AnalysisCancelled):
            make_ingester(repository, decoder=decoder, token=token).ingest([archive])
        assert decoder.decoded == ["m/U0.py", "m/U1.py"]

    def test_cancel_before_standalone_input(self, repository, tmp_path):
        first = write_source(tmp_path / "first.py")
        second = write_source(tmp_path / "second.py")
        token = CancellationToken()
        decoder = CancelAfterDecoder(token, limit=1)
        with pytest.raises(AnalysisCancelled):
            make_ingester(repository, decoder=decoder, token=token).ingest([first, second])
        assert decoder.decoded == ["first.py"]


def test_zip_entries_are_read_in_archive_order(tmp_path):
    archive = write_zip(tmp_path / "order.zip", {"z.py": "", "a.py": ""})
    with zipfile.ZipFile(archive) as zf:
        assert [i.filename for i in zf.infolist()] == ["z.py", "a.py"]
