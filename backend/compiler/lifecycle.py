"""
RenderWatch Lifecycle Controller.

The surface the file watcher drives: start/stop/reload plus change and
removal dispatch.
Requires Python 3.11+.
"""

from collections.abc import Iterable
from pathlib import Path

from compiler.helpers import AssetTagHelpers
from compiler.models import CompileResult, CompilerConfig
from compiler.notifier import Notifier, TerminalNotifier
from compiler.orchestrator import Orchestrator
from compiler.renderer import Jinja2Engine, TemplateRenderer
from utils.logger import LoggerMixin

REMOVAL_EVENTS = frozenset({"deleted"})


class LifecycleController(LoggerMixin):
    """Hooks the watcher calls; holds no state besides the started flag."""

    def __init__(self, orchestrator: Orchestrator) -> None:
        self._orchestrator = orchestrator
        self._started = False

    @property
    def is_started(self) -> bool:
        return self._started

    def start(self) -> bool:
        """
        Start compiling.

        Recompiles every existing source only when ``compile_on_start`` is
        configured. Calling start again is a no-op.
        """
        if self._started:
            return True

        self._started = True
        compile_on_start = self._orchestrator.config.compile_on_start
        self.log.info("compiler_started", compile_on_start=compile_on_start)
        if compile_on_start:
            self.run_all()
        return True

    def stop(self) -> bool:
        self._started = False
        self.log.info("compiler_stopped")
        return True

    def reload(self) -> bool:
        # No caches to invalidate
        return True

    def run_all(self) -> list[CompileResult]:
        return self._orchestrator.run_all()

    def run_on_changes(self, paths: Iterable[Path | str]) -> list[CompileResult]:
        return self._orchestrator.process_changes(paths)

    def run_on_removals(self, paths: Iterable[Path | str]) -> None:
        self._orchestrator.on_removals(paths)

    def dispatch(self, events: list[tuple[Path, str]]) -> list[CompileResult]:
        """
        Handle one debounced batch of ``(path, change_type)`` events.

        Removals are handled first, then the remaining paths are compiled
        in the order they were reported.
        """
        removed = [path for path, change_type in events if change_type in REMOVAL_EVENTS]
        changed = [path for path, change_type in events if change_type not in REMOVAL_EVENTS]

        if removed:
            self.run_on_removals(removed)
        if not changed:
            return []
        return self.run_on_changes(changed)


def create_controller(
    config: CompilerConfig,
    notifier: Notifier | None = None,
    ignore_patterns: list[str] | None = None,
) -> LifecycleController:
    """
    Wire a controller with the default Jinja2 renderer and asset helpers.

    Args:
        config: Compile configuration
        notifier: Failure notifier, a terminal notifier when omitted
        ignore_patterns: Patterns skipped when compiling everything

    Returns:
        Controller ready to be started
    """
    engine = Jinja2Engine(search_paths=[config.input_root or "."])
    renderer = TemplateRenderer(engine=engine, helpers=AssetTagHelpers().as_context())
    orchestrator = Orchestrator(
        config,
        renderer=renderer,
        notifier=notifier or TerminalNotifier(),
        ignore_patterns=ignore_patterns,
    )
    return LifecycleController(orchestrator)
