"""
RenderWatch Compiler Exceptions.

Requires Python 3.11+.
"""

from pathlib import Path


class CompilerError(Exception):
    """Base class for errors raised while compiling a single template."""

    def __init__(self, path: Path | str, message: str) -> None:
        self.path = Path(path)
        self.message = message
        super().__init__(f"{path}: {message}")


class ReadError(CompilerError):
    """The template source could not be read."""


class RenderError(CompilerError):
    """The render engine rejected the template."""


class WriteError(CompilerError):
    """A rendered output file could not be written."""
