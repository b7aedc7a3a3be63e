"""
RenderWatch Compile Orchestrator.

Compiles batches of changed template sources: maps output paths, renders,
writes outputs and reports each file. A failing file never stops the batch.
Requires Python 3.11+.
"""

import fnmatch
import os
from collections.abc import Iterable
from pathlib import Path

from compiler.exceptions import WriteError
from compiler.models import (
    CompileFailure,
    CompileResult,
    CompileSuccess,
    CompilerConfig,
    FailureKind,
    RenderFailure,
)
from compiler.notifier import LogNotifier, Notifier
from compiler.path_mapper import map_output_paths
from compiler.renderer import TemplateRenderer
from utils.logger import LoggerMixin


def display_path(path: Path | str) -> str:
    """Path as shown in reports: relative to the working directory when inside it."""
    text = os.fspath(path)
    if os.path.isabs(text):
        cwd = os.getcwd()
        if text.startswith(cwd + os.sep):
            return text[len(cwd) + 1:]
    return text


class Orchestrator(LoggerMixin):
    """
    Runs the compile pipeline for each changed source.

    Files are processed strictly in the order given so reports come out
    in source order.
    """

    def __init__(
        self,
        config: CompilerConfig,
        renderer: TemplateRenderer | None = None,
        notifier: Notifier | None = None,
        ignore_patterns: list[str] | None = None,
    ) -> None:
        """
        Initialize the orchestrator.

        Args:
            config: Compile configuration
            renderer: Template renderer, a Jinja2 renderer when omitted
            notifier: Failure notifier, used only when notifications are on
            ignore_patterns: Patterns skipped when discovering sources for a full run
        """
        self._config = config
        self._renderer = renderer or TemplateRenderer()
        self._notifier = notifier or LogNotifier()
        self._ignore_patterns = ignore_patterns or []

    @property
    def config(self) -> CompilerConfig:
        return self._config

    def process_changes(self, paths: Iterable[Path | str]) -> list[CompileResult]:
        """
        Compile every changed source.

        Args:
            paths: Changed template sources, in the order they were reported

        Returns:
            One CompileResult per source, in the same order

        Raises:
            WriteError: Only when write errors are not isolated
        """
        results = [self.compile_file(Path(path)) for path in paths]

        failed = sum(1 for result in results if not result.ok)
        self.log.debug(
            "changes_processed",
            total=len(results),
            succeeded=len(results) - failed,
            failed=failed,
        )
        return results

    def compile_file(self, source_path: Path) -> CompileResult:
        """Compile one source to all of its output paths."""
        output_paths = map_output_paths(source_path, self._config)
        rendered = self._renderer.render(source_path, self._config.render_options)

        if isinstance(rendered, RenderFailure):
            return self._fail(source_path, rendered.message, rendered.kind)

        try:
            for output_path in output_paths:
                self._write_output(output_path, rendered.text)
        except WriteError as e:
            if not self._config.isolate_write_errors:
                raise
            return self._fail(source_path, str(e), FailureKind.WRITE)

        self._report_success(source_path, output_paths)
        return CompileSuccess(source_path, tuple(output_paths), rendered.text)

    def on_removals(self, paths: Iterable[Path | str]) -> None:
        """Removed sources leave their outputs in place."""
        for path in paths:
            self.log.debug("source_removed", path=display_path(path))

    def discover_sources(self) -> list[Path]:
        """All template sources under the input root, sorted."""
        root = Path(self._config.input_root or ".")
        if not root.is_dir():
            self.log.warning("input_root_missing", path=str(root))
            return []

        sources = [
            path
            for path in root.rglob(f"*.{self._config.template_ext}")
            if path.is_file()
            and self._config.matches_source(path)
            and not self._should_ignore(path)
        ]
        return sorted(sources)

    def run_all(self) -> list[CompileResult]:
        """Recompile every template source."""
        sources = self.discover_sources()
        self.log.info("compiling_all_templates", count=len(sources))
        return self.process_changes(sources)

    def _should_ignore(self, path: Path) -> bool:
        path_str = path.as_posix()
        for pattern in self._ignore_patterns:
            if pattern in path.parts or fnmatch.fnmatch(path_str, pattern):
                return True
        return False

    def _write_output(self, output_path: Path, text: str) -> None:
        # Encode before opening so an unencodable result leaves no empty file.
        try:
            data = text.encode("utf-8")
        except UnicodeError as e:
            raise WriteError(output_path, str(e)) from e

        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)
            output_path.write_bytes(data)
        except OSError as e:
            raise WriteError(output_path, e.strerror or str(e)) from e

    def _report_success(self, source_path: Path, output_paths: list[Path]) -> None:
        outputs = [display_path(path) for path in output_paths]
        message = (
            "Successfully compiled template!\n"
            f"# {display_path(source_path)} -> {', '.join(outputs)}"
        )
        self.log.info(
            "template_compiled",
            source=display_path(source_path),
            outputs=outputs,
            message=message,
        )

    def _fail(self, source_path: Path, error: str, kind: FailureKind) -> CompileFailure:
        message = f"Compiling {display_path(source_path)} failed!\nError: {error}"
        self.log.error(
            "template_compile_failed",
            source=display_path(source_path),
            stage=kind.value,
            error=error,
            message=message,
        )
        if self._config.notifications:
            self._notifier.notify(False, message)
        return CompileFailure(source_path, error, kind)
