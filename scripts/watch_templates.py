#!/usr/bin/env python3
"""
RenderWatch Template Watcher Script.

Watches template sources and recompiles them whenever they change.
Requires Python 3.11+.

Usage:
    python scripts/watch_templates.py --input src --output dist
"""

import argparse
import sys
import time
from pathlib import Path
from typing import Any

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from compiler.lifecycle import create_controller
from compiler.models import CompileResult, CompilerConfig
from utils.config import Settings, get_settings
from utils.logger import configure_logging, get_logger
from watcher.file_watcher import FileWatcher


logger = get_logger("watch_templates")


def build_config(args: argparse.Namespace) -> CompilerConfig:
    """Settings-derived config with command-line overrides applied."""
    config = CompilerConfig.from_settings(get_settings())

    overrides: dict[str, Any] = {}
    if args.input is not None:
        overrides["input_root"] = args.input
    if args.output:
        overrides["output_roots"] = args.output
    if args.default_ext is not None:
        overrides["default_ext"] = args.default_ext
    if args.template_ext is not None:
        overrides["template_ext"] = args.template_ext
    if args.auto_append_ext:
        overrides["auto_append_file_ext"] = True
    if args.no_notifications:
        overrides["notifications"] = False
    if getattr(args, "compile_on_start", False):
        overrides["compile_on_start"] = True

    return CompilerConfig.model_validate({**config.model_dump(), **overrides})


def add_compiler_arguments(parser: argparse.ArgumentParser) -> None:
    """Options shared by the watch and compile scripts."""
    parser.add_argument(
        "--input",
        default=None,
        help="Directory holding template sources; stripped from output paths",
    )
    parser.add_argument(
        "--output",
        action="append",
        default=[],
        help="Output root directory (repeatable, one output per root)",
    )
    parser.add_argument(
        "--default-ext",
        default=None,
        help="Extension given to outputs of plain sources (default: html)",
    )
    parser.add_argument(
        "--template-ext",
        default=None,
        help="Template source extension (default: j2)",
    )
    parser.add_argument(
        "--auto-append-ext",
        action="store_true",
        help="Append .html to output names that lack an .htm/.html extension",
    )
    parser.add_argument(
        "--no-notifications",
        action="store_true",
        help="Do not notify on compile failures",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )


def watch(config: CompilerConfig, settings: Settings | None = None) -> list[CompileResult]:
    """
    Run the watcher until interrupted.

    With the watcher disabled every source is compiled once and the
    results are returned without starting an observer.
    """
    settings = settings or get_settings()
    root = Path(config.input_root or ".")
    if not root.is_dir():
        raise FileNotFoundError(f"Input directory does not exist: {root}")

    controller = create_controller(
        config, ignore_patterns=settings.watcher.ignore_patterns
    )

    if not settings.watcher.enabled:
        logger.info("watcher_disabled", input=str(root))
        return controller.run_all()

    watcher = FileWatcher(
        root_path=root,
        matcher=config.matches_source,
        on_change=controller.dispatch,
        debounce_delay_ms=settings.watcher.debounce_delay_ms,
        ignore_patterns=settings.watcher.ignore_patterns,
        recursive=settings.watcher.recursive,
    )

    controller.start()
    try:
        with watcher:
            logger.info(
                "watching_templates",
                input=str(root),
                outputs=list(config.output_roots),
                template_ext=config.template_ext,
            )
            while True:
                time.sleep(1)
    finally:
        controller.stop()


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Watch template sources and recompile them on change"
    )
    add_compiler_arguments(parser)
    parser.add_argument(
        "--compile-on-start",
        action="store_true",
        help="Compile every existing source before watching",
    )

    args = parser.parse_args()
    configure_logging("DEBUG" if args.verbose else None)

    try:
        results = watch(build_config(args))
    except KeyboardInterrupt:
        print("\nStopped watching")
        return
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)

    if any(not result.ok for result in results):
        sys.exit(1)


if __name__ == "__main__":
    main()
