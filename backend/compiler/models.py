"""
RenderWatch Compiler Data Models.

Immutable compile configuration plus the per-file results passed between
the renderer, the orchestrator and the report stream.
Requires Python 3.11+.
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

from utils.config import Settings

DEFAULT_OPTIONS: dict[str, Any] = {
    "notifications": True,
    "default_ext": "html",
    "port": 3111,
    "auto_append_file_ext": False,
}


def normalize_path(path: Path | str) -> str:
    """
    POSIX form of ``path`` with "." segments and duplicate separators removed.

    Absolute paths inside the working directory become relative to it, the
    same way the watcher reports event paths. The working directory itself
    normalizes to an empty string.
    """
    normalized = Path(path)
    if normalized.is_absolute():
        try:
            normalized = normalized.relative_to(Path.cwd())
        except ValueError:
            pass
    text = normalized.as_posix()
    return "" if text == "." else text


class CompilerConfig(BaseModel):
    """
    Compile configuration, built once at startup and never mutated.

    ``output_roots`` empty means outputs are written next to the
    input-relative directory; otherwise one output per root.
    """

    model_config = ConfigDict(frozen=True)

    input_root: str | None = Field(default=None)
    output_roots: tuple[str, ...] = Field(default=())
    default_ext: str = Field(default="html", min_length=1)
    auto_append_file_ext: bool = Field(default=False)
    template_ext: str = Field(default="j2", min_length=1)
    render_options: Mapping[str, Any] = Field(default_factory=dict)
    notifications: bool = Field(default=True)
    port: int = Field(default=3111, ge=1, le=65535)
    compile_on_start: bool = Field(default=False)
    isolate_write_errors: bool = Field(default=True)

    @field_validator("input_root", mode="before")
    @classmethod
    def normalize_input_root(cls, v: str | Path | None) -> str | None:
        """Normalize like pathlib; the working directory itself means no root."""
        if v is None or str(v) == "":
            return None
        return normalize_path(v) or None

    @field_validator("render_options")
    @classmethod
    def freeze_render_options(cls, v: Mapping[str, Any]) -> Mapping[str, Any]:
        return MappingProxyType(dict(v))

    @field_serializer("render_options")
    def dump_render_options(self, v: Mapping[str, Any]) -> dict[str, Any]:
        return dict(v)

    @field_validator("output_roots", mode="before")
    @classmethod
    def parse_output_roots(cls, v: Any) -> tuple[str, ...]:
        """Accept a single root or an ordered collection of roots."""
        if v is None:
            return ()
        if isinstance(v, (str, Path)):
            return (str(v),)
        return tuple(str(root) for root in v)

    @field_validator("template_ext", "default_ext")
    @classmethod
    def strip_leading_dot(cls, v: str) -> str:
        return v.lstrip(".")

    @classmethod
    def from_settings(cls, settings: Settings) -> "CompilerConfig":
        """Build the config from application settings."""
        compiler = settings.compiler
        return cls(
            input_root=compiler.input,
            output_roots=compiler.output,
            default_ext=compiler.default_ext,
            auto_append_file_ext=compiler.auto_append_file_ext,
            template_ext=compiler.template_ext,
            render_options=compiler.render_options,
            notifications=settings.notifications.enabled,
            port=settings.livereload.port,
            compile_on_start=compiler.compile_on_start,
            isolate_write_errors=compiler.isolate_write_errors,
        )

    @classmethod
    def from_options(cls, options: Mapping[str, Any] | None = None) -> "CompilerConfig":
        """
        Build the config from a loose option map merged over the defaults.

        Recognizes ``input``, ``output``, ``default_ext``,
        ``auto_append_file_ext``, ``notifications``, ``port`` and
        ``render_options`` (``haml_options`` is accepted as an alias).
        Remaining keys are matched against field names; unknown keys are
        ignored.
        """
        merged = {**DEFAULT_OPTIONS, **(options or {})}
        render_options = merged.pop("render_options", None)
        if render_options is None:
            render_options = merged.pop("haml_options", None)

        fields: dict[str, Any] = {
            "input_root": merged.pop("input", None),
            "output_roots": merged.pop("output", None),
            "render_options": dict(render_options or {}),
        }
        fields.update(
            (key, value) for key, value in merged.items() if key in cls.model_fields
        )
        return cls(**fields)

    @property
    def watch_pattern(self) -> re.Pattern[str]:
        """Pattern a source path must match to be compiled."""
        suffix = re.escape(f".{self.template_ext}")
        if self.input_root:
            return re.compile(rf"^{re.escape(self.input_root)}/(.+{suffix})$")
        return re.compile(rf"^(.+{suffix})$")

    def matches_source(self, path: Path | str) -> bool:
        """Check whether a (working-directory relative) path is a template source."""
        return self.watch_pattern.match(Path(path).as_posix()) is not None


class FailureKind(str, Enum):
    """Stage at which compiling a single file failed."""

    READ = "read"
    RENDER = "render"
    WRITE = "write"


@dataclass(frozen=True, slots=True)
class RenderSuccess:
    """Rendered text for one source."""

    source_path: Path
    text: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class RenderFailure:
    """A read or render failure, converted at the renderer boundary."""

    source_path: Path
    message: str
    kind: FailureKind = FailureKind.RENDER

    @property
    def ok(self) -> bool:
        return False


RenderResult = RenderSuccess | RenderFailure


@dataclass(frozen=True, slots=True)
class CompileSuccess:
    """A source compiled and written to every output path."""

    source_path: Path
    output_paths: tuple[Path, ...]
    rendered_text: str

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class CompileFailure:
    """A source that produced no (or only partial) output."""

    source_path: Path
    error_message: str
    kind: FailureKind = FailureKind.RENDER

    @property
    def ok(self) -> bool:
        return False


CompileResult = CompileSuccess | CompileFailure
