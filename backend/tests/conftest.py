"""
RenderWatch Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

from collections.abc import Callable
from pathlib import Path

import pytest

from compiler.models import CompilerConfig
from compiler.orchestrator import Orchestrator
from compiler.renderer import Jinja2Engine, TemplateRenderer


class RecordingNotifier:
    """Notifier that remembers what it was asked to deliver."""

    def __init__(self) -> None:
        self.notifications: list[tuple[bool, str]] = []

    def notify(self, success: bool, message: str) -> None:
        self.notifications.append((success, message))


@pytest.fixture
def project_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary project directory used as the working directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def write_source(project_dir: Path) -> Callable[[str, str], Path]:
    """Write a template source relative to the project directory."""

    def _write(relative_path: str, content: str) -> Path:
        path = project_dir / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return Path(relative_path)

    return _write


@pytest.fixture
def notifier() -> RecordingNotifier:
    """Recording notifier."""
    return RecordingNotifier()


@pytest.fixture
def config() -> CompilerConfig:
    """Config compiling sources under src/ into the working directory."""
    return CompilerConfig(input_root="src")


@pytest.fixture
def make_orchestrator(
    project_dir: Path, notifier: RecordingNotifier
) -> Callable[..., Orchestrator]:
    """Build an orchestrator over the project directory with a recording notifier."""

    def _make(config: CompilerConfig, **kwargs) -> Orchestrator:
        renderer = TemplateRenderer(
            engine=Jinja2Engine(search_paths=[project_dir / (config.input_root or ".")])
        )
        kwargs.setdefault("renderer", renderer)
        kwargs.setdefault("notifier", notifier)
        return Orchestrator(config, **kwargs)

    return _make
