"""
RenderWatch File Watcher.

Cross-platform template source monitoring using watchdog.
Requires Python 3.11+.
"""

import fnmatch
import os
from collections.abc import Callable
from pathlib import Path
from typing import Any

from watchdog.observers import Observer
from watchdog.events import (
    FileSystemEvent,
    FileSystemEventHandler,
    FileCreatedEvent,
    FileModifiedEvent,
    FileDeletedEvent,
    FileMovedEvent,
    DirCreatedEvent,
    DirDeletedEvent,
    DirModifiedEvent,
    DirMovedEvent,
)

from watcher.debouncer import ChangeBatch, Debouncer
from utils.config import get_settings
from utils.logger import LoggerMixin

SourceMatcher = Callable[[Path], bool]


class TemplateFileHandler(FileSystemEventHandler, LoggerMixin):
    """
    Handles file system events for template sources.

    Event paths are made relative to ``base_dir`` before they are matched,
    so the matcher sees the same paths a user would type.
    """

    def __init__(
        self,
        debouncer: Debouncer,
        matcher: SourceMatcher,
        base_dir: Path | None = None,
        ignore_patterns: list[str] | None = None,
    ) -> None:
        """
        Initialize the file handler.

        Args:
            debouncer: Debouncer to accumulate changes
            matcher: Predicate selecting template sources
            base_dir: Directory reported paths are relative to (cwd by default)
            ignore_patterns: Glob patterns or substrings to ignore
        """
        super().__init__()
        self._debouncer = debouncer
        self._matcher = matcher
        self._base_dir = (base_dir or Path.cwd()).resolve()
        self._ignore_patterns = ignore_patterns or []

    def _relative(self, raw_path: str | bytes) -> Path:
        path = Path(os.fsdecode(raw_path))
        if path.is_absolute():
            try:
                return path.relative_to(self._base_dir)
            except ValueError:
                return path
        return path

    def _should_ignore(self, path: Path) -> bool:
        """Check if a path should be ignored."""
        path_str = path.as_posix()
        for pattern in self._ignore_patterns:
            if pattern in path.parts or fnmatch.fnmatch(path.name, pattern):
                return True
            if fnmatch.fnmatch(path_str, pattern):
                return True
        return False

    def _accept(self, raw_path: str | bytes) -> Path | None:
        """Relative path of a template source worth reporting, else None."""
        path = self._relative(raw_path)
        if self._should_ignore(path) or not self._matcher(path):
            return None
        return path

    def _record(self, event: FileSystemEvent, change_type: str) -> None:
        path = self._accept(event.src_path)
        if path is None:
            return
        self.log.debug(f"file_{change_type}", path=str(path))
        self._debouncer.debounce(path, change_type)

    def on_created(self, event: FileCreatedEvent | DirCreatedEvent) -> None:
        """Handle file creation."""
        if not isinstance(event, DirCreatedEvent):
            self._record(event, "created")

    def on_modified(self, event: FileModifiedEvent | DirModifiedEvent) -> None:
        """Handle file modification."""
        if not isinstance(event, DirModifiedEvent):
            self._record(event, "modified")

    def on_deleted(self, event: FileDeletedEvent | DirDeletedEvent) -> None:
        """Handle file deletion."""
        if not isinstance(event, DirDeletedEvent):
            self._record(event, "deleted")

    def on_moved(self, event: FileMovedEvent | DirMovedEvent) -> None:
        """Handle move/rename as a deletion plus a creation."""
        if isinstance(event, DirMovedEvent):
            return

        src_path = self._accept(event.src_path)
        if src_path is not None:
            self.log.debug("file_moved_from", path=str(src_path))
            self._debouncer.debounce(src_path, "deleted")

        # Editors that save via rename land here
        dest_path = self._accept(event.dest_path)
        if dest_path is not None:
            self.log.debug("file_moved_to", path=str(dest_path))
            self._debouncer.debounce(dest_path, "created")


class FileWatcher(LoggerMixin):
    """
    Watches a directory tree for template source changes.

    Uses watchdog for cross-platform file system monitoring
    with debouncing to prevent excessive recompiles during rapid saves.
    """

    def __init__(
        self,
        root_path: Path,
        matcher: SourceMatcher,
        on_change: Callable[[ChangeBatch], Any] | None = None,
        debounce_delay_ms: int | None = None,
        ignore_patterns: list[str] | None = None,
        recursive: bool | None = None,
        base_dir: Path | None = None,
    ) -> None:
        """
        Initialize the file watcher.

        Args:
            root_path: Root directory to watch
            matcher: Predicate selecting template sources
            on_change: Callback for batched changes (path, change_type)
            debounce_delay_ms: Debounce delay in milliseconds
            ignore_patterns: Glob patterns to ignore
            recursive: Whether to watch subdirectories
            base_dir: Directory reported paths are relative to
        """
        settings = get_settings()

        self._root_path = root_path
        self._recursive = settings.watcher.recursive if recursive is None else recursive
        self._ignore_patterns = (
            settings.watcher.ignore_patterns if ignore_patterns is None else ignore_patterns
        )
        self._debounce_delay = debounce_delay_ms or settings.watcher.debounce_delay_ms

        self._debouncer = Debouncer(
            delay_ms=self._debounce_delay,
            callback=on_change,
        )

        self._handler = TemplateFileHandler(
            debouncer=self._debouncer,
            matcher=matcher,
            base_dir=base_dir,
            ignore_patterns=self._ignore_patterns,
        )

        self._observer: Observer | None = None
        self._running = False

    def set_callback(self, callback: Callable[[ChangeBatch], Any]) -> None:
        """Set or update the change callback."""
        self._debouncer.set_callback(callback)

    def start(self) -> None:
        """Start watching for file changes."""
        if self._running:
            return

        self._observer = Observer()
        self._observer.schedule(
            self._handler,
            str(self._root_path),
            recursive=self._recursive,
        )
        self._observer.start()
        self._running = True

        self.log.info(
            "file_watcher_started",
            path=str(self._root_path),
            recursive=self._recursive,
            ignore_patterns=self._ignore_patterns,
        )

    def stop(self) -> None:
        """Stop watching; pending changes are delivered first."""
        if not self._running:
            return

        self._debouncer.flush()

        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._observer = None

        self._running = False
        self.log.info("file_watcher_stopped")

    def flush(self) -> ChangeBatch:
        """Immediately process any pending changes."""
        return self._debouncer.flush()

    @property
    def is_running(self) -> bool:
        """Check if the watcher is running."""
        return self._running

    @property
    def pending_count(self) -> int:
        """Get number of pending changes."""
        return self._debouncer.pending_count

    def __enter__(self) -> "FileWatcher":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.stop()
