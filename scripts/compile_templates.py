#!/usr/bin/env python3
"""
RenderWatch One-shot Compile Script.

Compiles the given template sources, or every source under the input
directory when none are given, then exits.
Requires Python 3.11+.

Usage:
    python scripts/compile_templates.py --input src --output dist
    python scripts/compile_templates.py --input src src/index.j2
"""

import argparse
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from compiler.lifecycle import create_controller
from utils.config import get_settings
from utils.logger import configure_logging
from watch_templates import add_compiler_arguments, build_config


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Compile template sources once"
    )
    parser.add_argument(
        "sources",
        nargs="*",
        type=Path,
        help="Template sources to compile (default: all sources under --input)",
    )
    add_compiler_arguments(parser)

    args = parser.parse_args()
    configure_logging("DEBUG" if args.verbose else None)

    try:
        config = build_config(args)
        controller = create_controller(
            config, ignore_patterns=get_settings().watcher.ignore_patterns
        )
        if args.sources:
            results = controller.run_on_changes(args.sources)
        else:
            results = controller.run_all()
    except KeyboardInterrupt:
        print("\nCancelled by user")
        sys.exit(1)
    except Exception as e:
        print(f"Error: {e}")
        sys.exit(1)

    failures = [result for result in results if not result.ok]
    print(f"\nCompiled {len(results) - len(failures)} of {len(results)} template(s)")
    for failure in failures[:5]:
        print(f"  - {failure.source_path}: {failure.error_message}")
    if len(failures) > 5:
        print(f"  ... and {len(failures) - 5} more")

    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
