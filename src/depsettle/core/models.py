"""Records exchanged between the manifest store, the reconciler and the reporting layer."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from depsettle.core.constants import ISSUE_TYPES, ROOT_WORKSPACE_NAME


@dataclass(frozen=True)
class Workspace:
    """One package of a multi-package repository. Ancestors are ordered nearest first."""

    name: str
    dir: Path
    manifest_path: Path
    pkg_name: str = ""
    ancestors: tuple[str, ...] = ()
    ignore_dependencies: tuple[str, ...] = ()
    ignore_binaries: tuple[str, ...] = ()

    @property
    def is_root(self) -> bool:
        return self.name == ROOT_WORKSPACE_NAME

    def to_dict(self) -> dict:
        """Serialize to dict for JSON output."""
        return {
            "name": self.name,
            "dir": str(self.dir),
            "manifest_path": str(self.manifest_path),
            "pkg_name": self.pkg_name,
            "ancestors": list(self.ancestors),
            "ignore_dependencies": list(self.ignore_dependencies),
            "ignore_binaries": list(self.ignore_binaries),
        }


@dataclass(frozen=True)
class ManifestRecord:
    """Dependency-category lists of one workspace, as registered in the ManifestStore."""

    workspace_dir: Path
    manifest_path: Path
    ignore_dependencies: tuple[str, ...] = ()
    ignore_binaries: tuple[str, ...] = ()
    scripts: tuple[str, ...] = ()
    dependencies: tuple[str, ...] = ()
    dev_dependencies: tuple[str, ...] = ()
    peer_dependencies: tuple[str, ...] = ()
    optional_dependencies: tuple[str, ...] = ()
    optional_peer_dependencies: tuple[str, ...] = ()

    @property
    def all_dependencies(self) -> tuple[str, ...]:
        return (
            self.dependencies
            + self.dev_dependencies
            + self.peer_dependencies
            + self.optional_dependencies
        )


@dataclass(frozen=True, order=True)
class Issue:
    """One finding: an unused, misclassified or unlisted dependency or binary."""

    category: str
    workspace: str
    file_path: str
    symbol: str

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "workspace": self.workspace,
            "file_path": self.file_path,
            "symbol": self.symbol,
        }


@dataclass(frozen=True, order=True)
class ConfigurationHint:
    """A suggestion to drop `identifier` from the `kind` ignore list of `workspace`."""

    workspace: str
    identifier: str
    kind: str

    def to_dict(self) -> dict:
        return {"workspace": self.workspace, "identifier": self.identifier, "kind": self.kind}


@dataclass
class DependencyIssues:
    """Result of reconciling declared dependencies against references."""

    dependency_issues: list[Issue] = field(default_factory=list)
    dev_dependency_issues: list[Issue] = field(default_factory=list)
    optional_peer_dependency_issues: list[Issue] = field(default_factory=list)


def init_counters() -> dict[str, int]:
    """Zeroed counters: one per issue type plus processed/total."""
    counters = {issue_type: 0 for issue_type in ISSUE_TYPES}
    counters["processed"] = 0
    counters["total"] = 0
    return counters


@dataclass
class Report:
    """Everything an analysis run produces, ready for rendering."""

    issues: dict[str, list[Issue]] = field(
        default_factory=lambda: {issue_type: [] for issue_type in ISSUE_TYPES}
    )
    hints: list[ConfigurationHint] = field(default_factory=list)
    counters: dict[str, int] = field(default_factory=init_counters)

    @property
    def issue_count(self) -> int:
        return sum(len(items) for items in self.issues.values())

    def add_issue(self, issue: Issue) -> None:
        self.issues.setdefault(issue.category, []).append(issue)
        self.counters[issue.category] = self.counters.get(issue.category, 0) + 1

    def to_dict(self) -> dict:
        """Serialize to a JSON-friendly dict."""
        return {
            "issues": {
                category: [i.to_dict() for i in items] for category, items in self.issues.items()
            },
            "hints": [h.to_dict() for h in self.hints],
            "counters": dict(self.counters),
        }
