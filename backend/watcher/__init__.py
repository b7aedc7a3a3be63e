"""
RenderWatch File Watcher Package.

File system monitoring that feeds changed templates to the compiler.
Requires Python 3.11+.
"""

from watcher.file_watcher import FileWatcher, TemplateFileHandler
from watcher.debouncer import Debouncer

__all__ = ["FileWatcher", "TemplateFileHandler", "Debouncer"]
