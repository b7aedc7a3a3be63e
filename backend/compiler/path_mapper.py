"""
RenderWatch Path Mapper.

Maps a template source path to the output path(s) it compiles to.
Pure string manipulation; nothing here touches the filesystem.
Requires Python 3.11+.
"""

import os
import re
from pathlib import Path, PurePath

from compiler.models import CompilerConfig, normalize_path

_HTML_EXT = re.compile(r"\.html?")


def resolve_file_name(file_name: str, default_ext: str, template_ext: str) -> str:
    """
    Generate an output file name from a source file name.

    Examples (template_ext="j2", default_ext="html"):
        "foo.j2"     -> "foo.html"
        "foo"        -> "foo.html"
        "foo.bar"    -> "foo.bar.html"
        "foo.bar.j2" -> "foo.bar"

    Dropping the template suffix from a name that still carries another
    extension keeps that extension verbatim; the default extension is only
    used when nothing else is left.
    """
    base_name, *extensions = file_name.split(".")

    if extensions and extensions[-1] == template_ext:
        extensions.pop()
        if not extensions:
            return f"{base_name}.{default_ext}"
        return ".".join([base_name, *extensions])

    return ".".join([base_name, *extensions, default_ext])


def should_append_html_ext(file_name: str, auto_append_file_ext: bool) -> bool:
    """Check whether ``.html`` must be appended to a resolved file name."""
    if not auto_append_file_ext:
        return False
    return _HTML_EXT.search(file_name) is None


def relative_directory(source_path: Path | str, input_root: str | None) -> str:
    """
    Directory of ``source_path`` with a leading ``input_root`` removed.

    Both paths are compared in normalized POSIX form, so ``./src`` and
    ``src`` are the same root. A plain leading occurrence of the root is
    removed together with at most one following separator. Returns an empty
    string for sources that sit directly in the input root (or in the
    working directory when no root is configured).
    """
    directory = normalize_path(PurePath(os.fspath(source_path)).parent)
    root = normalize_path(input_root) if input_root else ""
    if not root or not directory.startswith(root):
        return directory

    directory = directory[len(root):]
    if directory.startswith("/"):
        directory = directory[1:]
    return directory


def output_file_name(source_path: Path | str, config: CompilerConfig) -> str:
    """Resolved output file name, including the auto-appended extension."""
    file_name = resolve_file_name(
        os.path.basename(os.fspath(source_path)),
        config.default_ext,
        config.template_ext,
    )
    if should_append_html_ext(file_name, config.auto_append_file_ext):
        file_name = f"{file_name}.html"
    return file_name


def map_output_paths(source_path: Path | str, config: CompilerConfig) -> list[Path]:
    """
    Get the path(s) the compiled output of ``source_path`` is written to.

    Paths are relative to the working directory unless an output root is
    absolute. One path per configured output root, in configuration order.

    Args:
        source_path: Path of the changed template source
        config: Compile configuration

    Returns:
        Non-empty list of output paths
    """
    file_name = output_file_name(source_path, config)
    relative_dir = relative_directory(source_path, config.input_root)

    if config.output_roots:
        return [
            Path(os.path.join(root, relative_dir, file_name))
            for root in config.output_roots
        ]

    if relative_dir == "":
        return [Path(file_name)]
    return [Path(os.path.join(relative_dir, file_name))]
