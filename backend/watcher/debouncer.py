"""
RenderWatch Debouncer.

Collapses bursts of file system events into one batch.
Requires Python 3.11+.
"""

import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from utils.logger import LoggerMixin

ChangeBatch = list[tuple[Path, str]]


@dataclass
class PendingChange:
    """A file change waiting for the burst to settle."""

    path: Path
    change_type: str  # created, modified, deleted


class Debouncer(LoggerMixin):
    """
    Debounces rapid file changes.

    Accumulates changes and calls the callback once no new change has
    arrived for ``delay_ms``. Editors that save through a temporary file
    produce several events per save; the batch holds the last event for
    each path, in the order paths first appeared.
    """

    def __init__(
        self,
        delay_ms: int = 200,
        callback: Callable[[ChangeBatch], Any] | None = None,
    ) -> None:
        """
        Initialize the debouncer.

        Args:
            delay_ms: Quiet period in milliseconds before a batch is delivered
            callback: Function called with the accumulated batch
        """
        self._delay = delay_ms / 1000.0
        self._callback = callback
        self._pending: dict[Path, PendingChange] = {}
        self._timer: threading.Timer | None = None
        self._lock = threading.Lock()
        # Batches are delivered one at a time
        self._delivery_lock = threading.Lock()

    def set_callback(self, callback: Callable[[ChangeBatch], Any]) -> None:
        """Set or update the callback function."""
        self._callback = callback

    def debounce(self, path: Path, change_type: str) -> None:
        """
        Add a file change to the pending batch and restart the quiet period.

        Args:
            path: Path to the changed file
            change_type: Type of change (created, modified, deleted)
        """
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()

            self._pending[path] = PendingChange(path=path, change_type=change_type)

            self._timer = threading.Timer(self._delay, self._process_pending)
            self._timer.daemon = True
            self._timer.start()

    def _take_pending(self) -> ChangeBatch:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

            changes = [
                (change.path, change.change_type)
                for change in self._pending.values()
            ]
            self._pending.clear()
        return changes

    def _deliver(self, changes: ChangeBatch) -> None:
        if not changes or self._callback is None:
            return

        with self._delivery_lock:
            try:
                self._callback(changes)
            except Exception as e:
                # Keep the watcher alive; the next save retries the file
                self.log.error("debounce_callback_failed", error=str(e), count=len(changes))

    def _process_pending(self) -> None:
        """Timer entry point."""
        changes = self._take_pending()
        if changes:
            self.log.debug("processing_debounced_changes", count=len(changes))
        self._deliver(changes)

    def flush(self) -> ChangeBatch:
        """
        Immediately deliver all pending changes.

        Returns:
            List of (path, change_type) tuples that were pending
        """
        changes = self._take_pending()
        self._deliver(changes)
        return changes

    def clear(self) -> None:
        """Drop all pending changes without delivering them."""
        self._take_pending()

    @property
    def pending_count(self) -> int:
        """Get number of pending changes."""
        return len(self._pending)

    @property
    def pending_paths(self) -> list[Path]:
        """Get list of paths with pending changes."""
        return list(self._pending.keys())
