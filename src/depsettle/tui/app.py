"""Textual TUI for browsing a dependency report."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container, Vertical
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Input, LoadingIndicator, Static, Tree
from textual.widgets.tree import TreeNode
from textual.worker import Worker, WorkerState

from depsettle.api import analyze_project, load_references
from depsettle.core.constants import ISSUE_TITLES, ISSUE_TYPES
from depsettle.core.models import ConfigurationHint, Issue, Report

# Limits to keep huge monorepos responsive
MAX_SYMBOLS_PER_WORKSPACE = 200
EXPAND_DEPTH_DEFAULT = 2

COLOR_HEADER = "bold magenta"
COLOR_CATEGORY = {
    "dependencies": "bold red",
    "devDependencies": "bold yellow",
    "optionalPeerDependencies": "bold cyan",
    "unlisted": "bold magenta",
    "binaries": "bold blue",
}
COLOR_HINTS = "bold green"
COLOR_WORKSPACE = "white"
COLOR_STATS = "cyan"
COLOR_PATH = "dim"


def _group_issues(issues: list[Issue]) -> dict[str, list[Issue]]:
    """Group issues by workspace, workspaces sorted, root first."""
    grouped: dict[str, list[Issue]] = {}
    for issue in sorted(issues, key=lambda i: (i.workspace != ".", i.workspace, i.symbol)):
        grouped.setdefault(issue.workspace, []).append(issue)
    return grouped


def _summary_line(report: Report) -> str:
    """One-line recap of issue counts per category."""
    parts = [
        f"{ISSUE_TITLES[category]}: {len(report.issues.get(category, []))}"
        for category in ISSUE_TYPES
        if report.issues.get(category)
    ]
    if report.hints:
        parts.append(f"Hints: {len(report.hints)}")
    return "  ·  ".join(parts) if parts else "No issues"


def _format_issue(issue: Issue) -> str:
    title = ISSUE_TITLES.get(issue.category, issue.category)
    return "\n".join(
        [
            f"[{COLOR_HEADER}]{title}[/]",
            f"  [{COLOR_WORKSPACE}]{issue.symbol}[/]",
            "",
            f"[{COLOR_HEADER}]Workspace[/]",
            f"  {issue.workspace}",
            "",
            f"[{COLOR_HEADER}]File[/]",
            f"  [{COLOR_PATH}]{issue.file_path or '(n/a)'}[/]",
        ]
    )


def _format_hint(hint: ConfigurationHint) -> str:
    return "\n".join(
        [
            f"[{COLOR_HEADER}]Configuration hint[/]",
            f"  Remove [{COLOR_WORKSPACE}]{hint.identifier}[/] from [bold]{hint.kind}[/]",
            "",
            f"[{COLOR_HEADER}]Workspace[/]",
            f"  {hint.workspace}",
        ]
    )


def _populate_report_tree(root: TreeNode, report: Report) -> None:
    """Add category -> workspace -> symbol nodes, then the hints section."""
    for category in ISSUE_TYPES:
        issues = report.issues.get(category, [])
        if not issues:
            continue
        color = COLOR_CATEGORY.get(category, "white")
        section = root.add(f"[{color}]{ISSUE_TITLES[category]} ({len(issues)})[/]", expand=True)
        for workspace, items in _group_issues(issues).items():
            ws_node = section.add(f"[{COLOR_WORKSPACE}]{workspace}[/] [dim]({len(items)})[/]")
            for issue in items[:MAX_SYMBOLS_PER_WORKSPACE]:
                ws_node.add_leaf(issue.symbol, data=issue)
            if len(items) > MAX_SYMBOLS_PER_WORKSPACE:
                ws_node.add_leaf(f"[dim]… and {len(items) - MAX_SYMBOLS_PER_WORKSPACE} more[/]")
    if report.hints:
        section = root.add(f"[{COLOR_HINTS}]Configuration hints ({len(report.hints)})[/]")
        for hint in report.hints:
            section.add_leaf(f"{hint.workspace}: {hint.identifier} [dim]({hint.kind})[/]", data=hint)


def _expand_to_depth(tn: TreeNode, depth: int, current: int = 0) -> None:
    """Expand tree nodes up to given depth (0 = root only)."""
    if current >= depth:
        return
    tn.expand()
    for child in tn.children:
        _expand_to_depth(child, depth, current + 1)


class SearchScreen(ModalScreen[str | None]):
    """Modal to search for a dependency or workspace in the report. Keyboard-only."""

    BINDINGS = [
        Binding("escape", "cancel", "Cancel", show=True),
    ]

    DEFAULT_CSS = """
    SearchScreen {
        align: center middle;
        padding: 2 4;
    }
    SearchScreen #search_title {
        text-align: center;
        padding-bottom: 1;
    }
    SearchScreen #search_input {
        width: 60;
        margin: 1 0;
    }
    """

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._input: Input | None = None

    def compose(self) -> ComposeResult:
        with Vertical():
            yield Static(
                "[bold cyan]Search[/]\n\nType a dependency, binary or workspace name.",
                id="search_title",
                markup=True,
            )
            yield Input(placeholder="name...", id="search_input")

    def on_mount(self) -> None:
        self._input = self.query_one("#search_input", Input)
        self._input.focus()

    def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id != "search_input":
            return
        value = self._input.value.strip() if self._input else ""
        self.dismiss(value if value else None)

    def action_cancel(self) -> None:
        self.dismiss(None)


class ReportApp(App[None]):
    """Terminal UI to browse unused, unlisted and misclassified dependencies."""

    TITLE = "depsettle"
    BINDINGS = [
        Binding("/", "search", "Search"),
        Binding("n", "next_match", "Next match", show=False),
        Binding("N", "prev_match", "Prev match", show=False),
        Binding("d", "toggle_details", "Details"),
        Binding("r", "refresh", "Refresh"),
        Binding("e", "expand_all", "Expand all"),
        Binding("c", "collapse_all", "Collapse"),
        Binding("q", "quit", "Quit"),
    ]

    DEFAULT_CSS = """
    #loading {
        height: auto;
        display: none;
    }
    #loading.loading {
        display: block;
    }
    #details {
        padding: 1 2;
        border: solid $primary;
        height: auto;
        min-height: 6;
    }
    """

    def __init__(
        self,
        root: Path = Path("."),
        references_path: Path | None = None,
        strict: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self._root = root
        self._references_path = references_path
        self._strict = strict
        self._report: Report | None = None
        self._search_matches: list[TreeNode] = []
        self._search_index: int = 0
        self._details_visible: bool = True

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)
        with Container(id="main_container"):
            with Container(id="loading"):
                yield LoadingIndicator()
            yield Tree("Dependency report", id="report_tree")
            yield Static("[dim]Analyzing…[/]", id="details", markup=True)
        yield Footer()

    def on_mount(self) -> None:
        self.sub_title = str(self._root.resolve())
        self._start_analysis()

    def _start_analysis(self) -> None:
        self.query_one("#loading").add_class("loading")
        self.run_worker(self._analysis_worker, thread=True, exclusive=True)

    def _analysis_worker(self) -> Report:
        """Worker that runs the analysis in a background thread."""
        references = load_references(self._references_path) if self._references_path else None
        return analyze_project(
            self._root,
            references=references,
            strict=True if self._strict else None,
        )

    def on_worker_state_changed(self, event: Worker.StateChanged) -> None:
        """Handle worker completion."""
        if event.state == WorkerState.SUCCESS:
            self._report = event.worker.result
            self.query_one("#loading").remove_class("loading")
            self._load_report()
        elif event.state == WorkerState.ERROR:
            self.query_one("#loading").remove_class("loading")
            self._set_details(f"[red]Error: {event.worker.error!s}[/]")

    def _load_report(self) -> None:
        tree = self.query_one("#report_tree", Tree)
        tree.clear()
        report = self._report
        if report is None:
            return
        tree.root.label = f"[{COLOR_HEADER}]Dependency report[/] [dim]({report.issue_count} issues)[/]"
        if report.issue_count == 0 and not report.hints:
            tree.root.add_leaf("[green]No dependency issues found[/]")
        _populate_report_tree(tree.root, report)
        _expand_to_depth(tree.root, EXPAND_DEPTH_DEFAULT)
        self._set_details(
            f"[{COLOR_HEADER}]Summary[/]\n\n"
            f"[{COLOR_STATS}]{_summary_line(report)}[/]\n"
            f"Reference units: [{COLOR_STATS}]{report.counters.get('processed', 0)}[/]  ·  "
            f"Declared dependencies: [{COLOR_STATS}]{report.counters.get('total', 0)}[/]"
        )
        tree.focus()

    def _set_details(self, text: str) -> None:
        self.query_one("#details", Static).update(text)

    def on_tree_node_selected(self, event: Tree.NodeSelected) -> None:
        data = event.node.data
        if isinstance(data, Issue):
            self._set_details(_format_issue(data))
        elif isinstance(data, ConfigurationHint):
            self._set_details(_format_hint(data))

    def action_refresh(self) -> None:
        self._search_matches = []
        self._start_analysis()

    def action_expand_all(self) -> None:
        self.query_one("#report_tree", Tree).root.expand_all()

    def action_collapse_all(self) -> None:
        tree = self.query_one("#report_tree", Tree)
        tree.root.collapse_all()
        tree.root.expand()

    def action_search(self) -> None:
        self.push_screen(SearchScreen(), self._on_search_done)

    def _on_search_done(self, query: str | None) -> None:
        if not query:
            return
        tree = self.query_one("#report_tree", Tree)
        self._search_matches = []
        self._search_index = 0
        self._collect_matches(tree.root, query.lower())
        if not self._search_matches:
            self.notify(f"No matches for '{query}'", severity="warning", timeout=2)
            return
        self._goto_match(0)

    def _collect_matches(self, node: TreeNode, query: str) -> None:
        """Recursively collect nodes whose label matches the search query."""
        if query in str(node.label).lower():
            self._search_matches.append(node)
        for child in node.children:
            self._collect_matches(child, query)

    def _goto_match(self, index: int) -> None:
        if not self._search_matches:
            return
        self._search_index = index % len(self._search_matches)
        match_node = self._search_matches[self._search_index]
        parent = match_node.parent
        while parent is not None:
            parent.expand()
            parent = parent.parent
        tree = self.query_one("#report_tree", Tree)
        tree.select_node(match_node)
        tree.scroll_to_node(match_node)
        self.notify(
            f"Match {self._search_index + 1}/{len(self._search_matches)}: {match_node.label}",
            timeout=2,
        )

    def action_next_match(self) -> None:
        """Go to next search match."""
        if not self._search_matches:
            self.notify("No active search. Press / to search.", timeout=2)
            return
        self._goto_match(self._search_index + 1)

    def action_prev_match(self) -> None:
        """Go to previous search match."""
        if not self._search_matches:
            self.notify("No active search. Press / to search.", timeout=2)
            return
        self._goto_match(self._search_index - 1)

    def action_toggle_details(self) -> None:
        """Toggle visibility of the details panel."""
        self._details_visible = not self._details_visible
        details = self.query_one("#details", Static)
        details.styles.display = "block" if self._details_visible else "none"

    def action_quit(self) -> None:
        self.exit()


def main() -> None:
    """Entry point for the depsettle TUI."""
    root = Path(sys.argv[1]) if len(sys.argv) > 1 else Path(".")
    ReportApp(root=root).run()


if __name__ == "__main__":
    main()
