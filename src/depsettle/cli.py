"""Command-line interface for depsettle: check dependencies, list workspaces, show hints."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from depsettle.api import analyze_project, list_workspaces, load_references
from depsettle.core.constants import ISSUE_TITLES, ISSUE_TYPES
from depsettle.core.models import ConfigurationHint, Report
from depsettle.errors import DepsettleError
from depsettle.log import setup_logging


def _print_report_text(report: Report) -> None:
    """Print issues grouped by category, then per workspace."""
    for category in ISSUE_TYPES:
        issues = report.issues.get(category, [])
        if not issues:
            continue
        print(f"{ISSUE_TITLES[category]} ({len(issues)})")
        by_workspace: dict[str, list[str]] = {}
        for issue in issues:
            by_workspace.setdefault(issue.workspace, []).append(
                f"{issue.symbol}  {issue.file_path}" if issue.file_path else issue.symbol
            )
        for workspace in sorted(by_workspace):
            print(f"  {workspace}")
            for line in by_workspace[workspace]:
                print(f"    - {line}")
        print()


def _print_hints_text(hints: list[ConfigurationHint]) -> None:
    if not hints:
        return
    print(f"Configuration hints ({len(hints)})")
    for hint in hints:
        print(f"  {hint.workspace}: remove '{hint.identifier}' from {hint.kind}")
    print()


def _analyze(args: argparse.Namespace) -> Report:
    references = load_references(Path(args.references)) if args.references else None
    return analyze_project(
        Path(args.root),
        references=references,
        strict=True if args.strict else None,
        config_path=Path(args.config) if args.config else None,
        jobs=max(1, args.jobs),
    )


def cmd_check(args: argparse.Namespace) -> int:
    """Report unused, unlisted and misclassified dependencies."""
    report = _analyze(args)

    if args.json:
        print(json.dumps(report.to_dict(), indent=2))
    else:
        if report.issue_count == 0:
            print("No dependency issues found.")
        else:
            _print_report_text(report)
        _print_hints_text(report.hints)
        print(
            f"Processed {report.counters['processed']} reference unit(s), "
            f"{report.counters['total']} declared dependencies.",
            file=sys.stderr,
        )
    return 1 if report.issue_count else 0


def cmd_hints(args: argparse.Namespace) -> int:
    """Show only configuration hints."""
    report = _analyze(args)
    if args.json:
        print(json.dumps([h.to_dict() for h in report.hints], indent=2))
    elif not report.hints:
        print("No configuration hints.")
    else:
        _print_hints_text(report.hints)
    return 0


def cmd_workspaces(args: argparse.Namespace) -> int:
    """List discovered workspaces."""
    workspaces = list_workspaces(
        Path(args.root),
        config_path=Path(args.config) if args.config else None,
    )
    if args.json:
        print(json.dumps([ws.to_dict() for ws in workspaces], indent=2))
        return 0

    print(f"Found {len(workspaces)} workspace(s):\n")
    for ws in workspaces:
        label = f" ({ws.pkg_name})" if ws.pkg_name else ""
        print(f"  {ws.name}{label}")
        if args.verbose:
            print(f"    Path: {ws.dir}")
            if ws.ancestors:
                print(f"    Ancestors: {', '.join(ws.ancestors)}")
            if ws.ignore_dependencies:
                print(f"    Ignored dependencies: {', '.join(ws.ignore_dependencies)}")
            if ws.ignore_binaries:
                print(f"    Ignored binaries: {', '.join(ws.ignore_binaries)}")
    return 0


def cmd_tui(args: argparse.Namespace) -> int:
    """Launch the interactive TUI."""
    from depsettle.tui.app import ReportApp

    app = ReportApp(
        root=Path(getattr(args, "root", ".")),
        references_path=Path(args.references) if getattr(args, "references", None) else None,
        strict=bool(getattr(args, "strict", False)),
    )
    app.run()
    return 0


def _add_verbose_argument(parser: argparse.ArgumentParser) -> None:
    # Absent: keep whatever the top-level -v set
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=argparse.SUPPRESS,
        help="Verbose output and debug logging",
    )


def _add_analysis_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Repository root containing package.json (default: current directory)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Only consider each workspace's own dependencies (no ancestor fallback)",
    )
    parser.add_argument(
        "-r",
        "--references",
        metavar="FILE",
        help="JSON reference feed produced by a source analyzer",
    )
    parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="Config file (default: depsettle.json or package.json#depsettle)",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=1,
        help="Threads used to feed references (default: 1)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    _add_verbose_argument(parser)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the depsettle CLI."""
    parser = argparse.ArgumentParser(
        prog="depsettle",
        description="Find unused, unlisted and misclassified dependencies across workspaces.",
    )
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Verbose output and debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # depsettle check
    check_parser = subparsers.add_parser(
        "check",
        help="Report dependency issues",
        description="Reconcile declared dependencies and binaries against references.",
    )
    _add_analysis_arguments(check_parser)
    check_parser.set_defaults(func=cmd_check)

    # depsettle hints
    hints_parser = subparsers.add_parser(
        "hints",
        help="Show ignore entries that can be removed from the config",
        description="Suggest pruning of ignoreDependencies/ignoreBinaries entries.",
    )
    _add_analysis_arguments(hints_parser)
    hints_parser.set_defaults(func=cmd_hints)

    # depsettle workspaces
    ws_parser = subparsers.add_parser(
        "workspaces",
        help="List workspaces of the repository",
        description="Discover workspaces from the root package.json.",
    )
    ws_parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Repository root containing package.json (default: current directory)",
    )
    ws_parser.add_argument(
        "-c",
        "--config",
        metavar="FILE",
        help="Config file (default: depsettle.json or package.json#depsettle)",
    )
    ws_parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )
    _add_verbose_argument(ws_parser)
    ws_parser.set_defaults(func=cmd_workspaces)

    # depsettle tui (default if no command)
    tui_parser = subparsers.add_parser(
        "tui",
        help="Launch the interactive terminal UI",
        description="Browse the dependency report interactively.",
    )
    tui_parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Repository root containing package.json (default: current directory)",
    )
    tui_parser.add_argument(
        "-r",
        "--references",
        metavar="FILE",
        help="JSON reference feed produced by a source analyzer",
    )
    tui_parser.add_argument(
        "--strict",
        action="store_true",
        help="Only consider each workspace's own dependencies",
    )
    _add_verbose_argument(tui_parser)
    tui_parser.set_defaults(func=cmd_tui)

    args = parser.parse_args(argv)
    setup_logging(verbose=args.verbose)

    # Default to TUI if no command specified
    if args.command is None:
        return cmd_tui(argparse.Namespace(root=".", references=None, strict=False))

    try:
        return args.func(args)
    except DepsettleError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
