"""
Tests for the File Watcher and Debouncer.

Requires Python 3.11+.
"""

import threading
from dataclasses import fields
from pathlib import Path

import pytest
from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from compiler.models import CompilerConfig
from watcher.debouncer import Debouncer, PendingChange
from watcher.file_watcher import FileWatcher, TemplateFileHandler


class TestDebouncer:
    """Test cases for Debouncer."""

    def test_flush_collapses_repeated_events(self):
        """Test one entry per path, keeping the latest change type."""
        batches: list = []
        debouncer = Debouncer(delay_ms=60_000, callback=batches.append)

        debouncer.debounce(Path("a.j2"), "created")
        debouncer.debounce(Path("b.j2"), "modified")
        debouncer.debounce(Path("a.j2"), "modified")

        assert debouncer.pending_count == 2
        changes = debouncer.flush()

        assert changes == [(Path("a.j2"), "modified"), (Path("b.j2"), "modified")]
        assert batches == [changes]
        assert debouncer.pending_count == 0

    def test_timer_delivers_batch(self):
        """Test the batch is delivered after the quiet period."""
        delivered = threading.Event()
        batches: list = []

        def callback(changes):
            batches.append(changes)
            delivered.set()

        debouncer = Debouncer(delay_ms=20, callback=callback)
        debouncer.debounce(Path("a.j2"), "modified")

        assert delivered.wait(timeout=5)
        assert batches == [[(Path("a.j2"), "modified")]]

    def test_callback_errors_are_contained(self):
        """Test a failing callback does not propagate."""

        def callback(changes):
            raise RuntimeError("boom")

        debouncer = Debouncer(delay_ms=60_000, callback=callback)
        debouncer.debounce(Path("a.j2"), "modified")

        assert debouncer.flush() == [(Path("a.j2"), "modified")]

    def test_clear_drops_pending(self):
        """Test clear discards changes without delivering them."""
        batches: list = []
        debouncer = Debouncer(delay_ms=60_000, callback=batches.append)
        debouncer.debounce(Path("a.j2"), "modified")

        debouncer.clear()

        assert debouncer.flush() == []
        assert batches == []

    def test_pending_change_holds_path_and_type(self):
        """Test a pending change records only what a batch delivers."""
        change = PendingChange(path=Path("a.j2"), change_type="created")

        assert [field.name for field in fields(change)] == ["path", "change_type"]


class TestTemplateFileHandler:
    """Test cases for TemplateFileHandler."""

    @pytest.fixture
    def base_dir(self, tmp_path: Path) -> Path:
        """Resolved project directory."""
        return tmp_path.resolve()

    @pytest.fixture
    def debouncer(self) -> Debouncer:
        """Debouncer that only delivers on flush."""
        return Debouncer(delay_ms=60_000)

    @pytest.fixture
    def handler(self, debouncer: Debouncer, base_dir: Path) -> TemplateFileHandler:
        """Handler matching .j2 sources under src/."""
        config = CompilerConfig(input_root="src")
        return TemplateFileHandler(
            debouncer=debouncer,
            matcher=config.matches_source,
            base_dir=base_dir,
            ignore_patterns=["node_modules", "*.swp"],
        )

    def test_records_template_sources(
        self, handler: TemplateFileHandler, debouncer: Debouncer, base_dir: Path
    ):
        """Test matching events are recorded relative to the base directory."""
        handler.on_created(FileCreatedEvent(str(base_dir / "src" / "a.j2")))
        handler.on_modified(FileModifiedEvent(str(base_dir / "src" / "sub" / "b.j2")))

        assert debouncer.flush() == [
            (Path("src/a.j2"), "created"),
            (Path("src/sub/b.j2"), "modified"),
        ]

    def test_filters_other_files(
        self, handler: TemplateFileHandler, debouncer: Debouncer, base_dir: Path
    ):
        """Test non-templates, outside paths, ignored paths and directories are skipped."""
        handler.on_modified(FileModifiedEvent(str(base_dir / "src" / "style.css")))
        handler.on_modified(FileModifiedEvent(str(base_dir / "other" / "a.j2")))
        handler.on_modified(FileModifiedEvent(str(base_dir / "src" / "node_modules" / "x.j2")))
        handler.on_modified(FileModifiedEvent(str(base_dir / "src" / ".a.j2.swp")))
        handler.on_created(DirCreatedEvent(str(base_dir / "src" / "dir.j2")))

        assert debouncer.pending_count == 0

    def test_deleted(
        self, handler: TemplateFileHandler, debouncer: Debouncer, base_dir: Path
    ):
        """Test deletions are recorded as such."""
        handler.on_deleted(FileDeletedEvent(str(base_dir / "src" / "a.j2")))

        assert debouncer.flush() == [(Path("src/a.j2"), "deleted")]

    def test_moved_is_delete_plus_create(
        self, handler: TemplateFileHandler, debouncer: Debouncer, base_dir: Path
    ):
        """Test a rename becomes a deletion and a creation."""
        handler.on_moved(
            FileMovedEvent(str(base_dir / "src" / "old.j2"), str(base_dir / "src" / "new.j2"))
        )

        assert debouncer.flush() == [
            (Path("src/old.j2"), "deleted"),
            (Path("src/new.j2"), "created"),
        ]

    def test_editor_temp_file_rename(
        self, handler: TemplateFileHandler, debouncer: Debouncer, base_dir: Path
    ):
        """Test saving through a temporary file reports only the template."""
        handler.on_moved(
            FileMovedEvent(str(base_dir / "src" / "page.j2~"), str(base_dir / "src" / "page.j2"))
        )

        assert debouncer.flush() == [(Path("src/page.j2"), "created")]


class TestFileWatcher:
    """Test cases for FileWatcher."""

    def test_start_stop(self, tmp_path: Path):
        """Test the watcher starts and stops cleanly."""
        watcher = FileWatcher(
            root_path=tmp_path,
            matcher=CompilerConfig().matches_source,
            debounce_delay_ms=100,
        )

        with watcher:
            assert watcher.is_running

        assert not watcher.is_running
        assert watcher.pending_count == 0
