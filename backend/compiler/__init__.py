"""
RenderWatch Compiler Package.

Maps template sources to output paths and compiles them.
Requires Python 3.11+.
"""

from compiler.models import (
    CompileFailure,
    CompileResult,
    CompileSuccess,
    CompilerConfig,
    FailureKind,
    RenderFailure,
    RenderSuccess,
)
from compiler.path_mapper import map_output_paths, resolve_file_name
from compiler.renderer import Jinja2Engine, TemplateRenderer
from compiler.orchestrator import Orchestrator
from compiler.lifecycle import LifecycleController, create_controller

__all__ = [
    "CompileFailure",
    "CompileResult",
    "CompileSuccess",
    "CompilerConfig",
    "FailureKind",
    "RenderFailure",
    "RenderSuccess",
    "map_output_paths",
    "resolve_file_name",
    "Jinja2Engine",
    "TemplateRenderer",
    "Orchestrator",
    "LifecycleController",
    "create_controller",
]
