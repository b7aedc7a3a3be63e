"""
RenderWatch Template Renderer.

Turns a template source file into rendered text through a pluggable
render engine. Jinja2 is the default engine.
Requires Python 3.11+.
"""

from collections.abc import Callable, Mapping, Sequence
from pathlib import Path
from typing import Any, Protocol

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from compiler.exceptions import CompilerError, ReadError, RenderError
from compiler.models import FailureKind, RenderFailure, RenderResult, RenderSuccess
from utils.logger import LoggerMixin


class RenderEngine(Protocol):
    """Anything that can turn template text into output text."""

    def render(
        self,
        template_text: str,
        options: Mapping[str, Any],
        context: Mapping[str, Callable[..., Any]],
    ) -> str:
        """Render ``template_text``; may raise on malformed templates."""
        ...


class Jinja2Engine:
    """
    Render engine backed by Jinja2.

    ``options`` are keyword overrides for the Jinja2 ``Environment``; an
    optional ``globals`` entry is added to the environment globals.
    Helpers in ``context`` are exposed to templates as globals too.
    """

    ENVIRONMENT_DEFAULTS: dict[str, Any] = {
        "undefined": StrictUndefined,
        "autoescape": False,
        "trim_blocks": True,
        "lstrip_blocks": True,
        "keep_trailing_newline": True,
    }

    def __init__(self, search_paths: Sequence[Path | str] | None = None) -> None:
        """
        Initialize the engine.

        Args:
            search_paths: Directories ``{% include %}`` and ``{% extends %}``
                resolve against
        """
        self._search_paths = [str(p) for p in (search_paths or [])]

    def _environment(self, options: Mapping[str, Any]) -> Environment:
        env_options = {**self.ENVIRONMENT_DEFAULTS, **options}
        template_globals = env_options.pop("globals", None) or {}

        env = Environment(
            loader=FileSystemLoader(self._search_paths) if self._search_paths else None,
            **env_options,
        )
        env.globals.update(template_globals)
        return env

    def render(
        self,
        template_text: str,
        options: Mapping[str, Any],
        context: Mapping[str, Callable[..., Any]],
    ) -> str:
        env = self._environment(options)
        env.globals.update(context)
        return env.from_string(template_text).render()


class TemplateRenderer(LoggerMixin):
    """
    Reads template sources and renders them with a render engine.

    Never raises: read and render problems come back as ``RenderFailure``.
    """

    def __init__(
        self,
        engine: RenderEngine | None = None,
        helpers: Mapping[str, Callable[..., Any]] | None = None,
    ) -> None:
        """
        Initialize the renderer.

        Args:
            engine: Render engine, Jinja2 when omitted
            helpers: Callables templates may call back into (asset tags etc.)
        """
        self._engine = engine or Jinja2Engine()
        self._helpers = dict(helpers or {})

    def render(
        self, source_path: Path | str, render_options: Mapping[str, Any] | None = None
    ) -> RenderResult:
        """
        Render a single template source.

        Args:
            source_path: Template source file
            render_options: Opaque options forwarded to the engine

        Returns:
            RenderSuccess with the text, or RenderFailure with the reason
        """
        source_path = Path(source_path)
        try:
            content = self._read(source_path)
            text = self._render(source_path, content, render_options or {})
        except ReadError as e:
            return RenderFailure(source_path, e.message, FailureKind.READ)
        except CompilerError as e:
            return RenderFailure(source_path, e.message, FailureKind.RENDER)

        self.log.debug("template_rendered", path=str(source_path), size=len(text))
        return RenderSuccess(source_path, text)

    def _read(self, source_path: Path) -> str:
        try:
            return source_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ReadError(source_path, str(e)) from e

    def _render(
        self, source_path: Path, content: str, render_options: Mapping[str, Any]
    ) -> str:
        try:
            return self._engine.render(content, render_options, self._helpers)
        except Exception as e:
            raise RenderError(source_path, str(e) or e.__class__.__name__) from e
