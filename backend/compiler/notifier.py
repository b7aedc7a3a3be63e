"""
RenderWatch Notifier.

Delivers user-visible compile notifications.
Requires Python 3.11+.
"""

import sys
from typing import Protocol, TextIO

from utils.logger import LoggerMixin


class Notifier(Protocol):
    """Anything that can tell the user a compile succeeded or failed."""

    def notify(self, success: bool, message: str) -> None:
        ...


class LogNotifier(LoggerMixin):
    """Emits notifications as structured log events."""

    def notify(self, success: bool, message: str) -> None:
        if success:
            self.log.info("notification", success=True, message=message)
        else:
            self.log.error("notification", success=False, message=message)


class TerminalNotifier(LogNotifier):
    """
    Logs the notification and rings the terminal bell on failure.

    Useful when the watcher runs in a background terminal tab.
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stderr

    def notify(self, success: bool, message: str) -> None:
        super().notify(success, message)
        if not success:
            self._stream.write("\a")
            self._stream.flush()
