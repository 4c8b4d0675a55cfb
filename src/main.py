# src/main.py - v1
"""CLI entry point - plan, check, export commands.

Usage:
    ppsequencer plan <project.json>
    ppsequencer check <project.json>
    ppsequencer export <project.json> [-o DIR] [--formats json,graphml]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from ppsequencer.core.errors import SequencingError
from ppsequencer.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except SequencingError as exc:
        print(f"Rejected: {exc}", file=sys.stderr)
        return 2
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="ppsequencer",
        description=f"ppsequencer v{__version__}: dependency & sequencing engine",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- plan ---
    p_plan = subparsers.add_parser(
        "plan", help="Print build order, critical path and violations",
    )
    p_plan.add_argument("project", type=Path, help="Path to project definition (JSON)")
    p_plan.set_defaults(func=_cmd_plan)

    # --- check ---
    p_check = subparsers.add_parser(
        "check", help="Exit non-zero if the definition is rejected or has violations",
    )
    p_check.add_argument("project", type=Path, help="Path to project definition (JSON)")
    p_check.add_argument(
        "--allow-warnings", action="store_true",
        help="Do not fail on phase or manual-order violations",
    )
    p_check.set_defaults(func=_cmd_check)

    # --- export ---
    p_export = subparsers.add_parser(
        "export", help="Write the computed snapshot to disk",
    )
    p_export.add_argument("project", type=Path, help="Path to project definition (JSON)")
    p_export.add_argument(
        "-o", "--output", type=Path, default=None,
        help="Output directory (default: EXPORT_DIR setting)",
    )
    p_export.add_argument(
        "--formats", default=None,
        help="Comma-separated formats: json, graphml (default: EXPORT_FORMATS setting)",
    )
    p_export.set_defaults(func=_cmd_export)

    return parser


async def _load(path: Path, settings=None):
    from ppsequencer.project.loader import load_project

    if not path.exists():
        raise FileNotFoundError(f"Project file not found: {path}")
    return await load_project(path, settings=settings)


async def _cmd_plan(args: argparse.Namespace) -> int:
    """Print the computed plan."""
    coordinator, report = await _load(args.project)
    snapshot = coordinator.get_snapshot()

    print(f"\nProject {snapshot.project_id} (version {snapshot.version}):")
    print(f"  Components:     {len(snapshot.components)}")
    print(f"  Dependencies:   {len(snapshot.edges)}")
    print(f"  Build order:    {' -> '.join(snapshot.order) or '(empty)'}")
    if snapshot.presentation_order != snapshot.order:
        print(f"  Presented as:   {' -> '.join(snapshot.presentation_order)}")
    print(
        f"  Critical path:  {' -> '.join(snapshot.critical_path) or '(empty)'}"
        f" (length {snapshot.critical_path_length:g})"
    )
    _print_violations(snapshot.violations)
    if report.warnings:
        print(f"  Warnings:       {len(report.warnings)}")
    return 0


async def _cmd_check(args: argparse.Namespace) -> int:
    """Validate a definition."""
    coordinator, _ = await _load(args.project)
    snapshot = coordinator.get_snapshot()
    if snapshot.violations and not args.allow_warnings:
        _print_violations(snapshot.violations)
        return 3
    print(f"OK: {snapshot.project_id} ({len(snapshot.components)} components)")
    return 0


async def _cmd_export(args: argparse.Namespace) -> int:
    """Export the computed snapshot."""
    from ppsequencer.config.settings import Settings
    from ppsequencer.export.exporter_factory import export_snapshot

    overrides = {}
    if args.formats:
        overrides["export_formats"] = args.formats
    settings = Settings(**overrides)
    output_dir = args.output or settings.export_dir

    coordinator, _ = await _load(args.project, settings=settings)
    paths = await export_snapshot(coordinator.get_snapshot(), str(output_dir), settings)
    for path in paths:
        print(f"  Wrote {path}")
    return 0


def _print_violations(violations) -> None:
    if not violations:
        return
    print(f"  Violations:     {len(violations)}")
    for v in violations:
        print(f"    [{v.kind}] {v.message}")


def _setup_logging(verbose: bool) -> None:
    """Configure logging for CLI usage."""
    from ppsequencer.logging.logger import setup_logging

    setup_logging(level="DEBUG" if verbose else "WARNING", log_format="text")


if __name__ == "__main__":
    sys.exit(main())
