"""Public API: use depsettle from Python or from other tools."""

from __future__ import annotations

import json
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from pathlib import Path

import structlog

from depsettle.config import ProjectConfig, load_config
from depsettle.core.constants import ROOT_WORKSPACE_NAME
from depsettle.core.finder import DEFAULT_MAX_DEPTH, find_workspaces
from depsettle.core.hints import get_configuration_hints
from depsettle.core.installed import scan_installed
from depsettle.core.models import Issue, Report, Workspace
from depsettle.core.modules import get_package_name_from_specifier
from depsettle.core.reconcile import settle_dependency_issues
from depsettle.core.scripts import get_binaries_from_script
from depsettle.core.store import DependencyStore
from depsettle.errors import ConfigError

log = structlog.get_logger("depsettle.api")


@dataclass
class FileReferences:
    """External names one source file (or manifest) references, as found by an analyzer."""

    workspace: str
    file: str
    dependencies: list[str] = field(default_factory=list)
    binaries: list[str] = field(default_factory=list)


def load_references(path: Path) -> list[FileReferences]:
    """
    Load a reference feed: a JSON list of
    {"workspace": ".", "file": "src/index.ts", "dependencies": [...], "binaries": [...]}.

    Raises:
        ConfigError: If the file is unreadable or malformed.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read references {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in references {path}: {e}") from e
    if not isinstance(data, list):
        raise ConfigError(f"{path}: expected a JSON list of file references")

    units: list[FileReferences] = []
    for i, entry in enumerate(data):
        if not isinstance(entry, dict):
            raise ConfigError(f"{path}: entry {i} must be an object")
        names = {}
        for key in ("dependencies", "binaries"):
            value = entry.get(key, [])
            if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
                raise ConfigError(f"{path}: entry {i} '{key}' must be a list of strings")
            names[key] = value
        units.append(
            FileReferences(
                workspace=str(entry.get("workspace", ROOT_WORKSPACE_NAME)),
                file=str(entry.get("file", "")),
                dependencies=names["dependencies"],
                binaries=names["binaries"],
            )
        )
    return units


def build_store(
    root: Path,
    config: ProjectConfig,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> DependencyStore:
    """Discover workspaces under `root` and fill manifests and host data for one run."""
    store = DependencyStore(is_strict=config.strict)
    store.manifests.set_ignored(list(config.ignore_binaries), list(config.ignore_dependencies))

    discovered = find_workspaces(root, config, max_depth=max_depth)
    dirs = {workspace.name: workspace.dir for workspace, _manifest in discovered}
    for workspace, manifest in discovered:
        store.add_workspace(workspace, manifest)
        search_dirs = [workspace.dir, *(dirs[a] for a in workspace.ancestors if a in dirs)]
        installed = scan_installed(manifest, search_dirs)
        store.hosts.add_host_dependencies(workspace.name, installed.hosts)
        store.hosts.set_installed_binaries(workspace.name, installed.binaries)
        store.hosts.set_types_included(workspace.name, installed.types_included)
    return store


def collect_script_references(store: DependencyStore) -> list[FileReferences]:
    """One reference unit per workspace: the binaries its manifest scripts invoke."""
    units: list[FileReferences] = []
    for name, record in store.manifests.items():
        binaries: list[str] = []
        for script in record.scripts:
            for binary in get_binaries_from_script(script):
                if binary not in binaries:
                    binaries.append(binary)
        if binaries:
            units.append(FileReferences(name, str(record.manifest_path), binaries=binaries))
    return units


def _feed_unit(store: DependencyStore, unit: FileReferences) -> list[Issue]:
    workspace = store.get_workspace(unit.workspace)
    if workspace is None:
        log.warning("api.unknown_workspace", workspace=unit.workspace, file=unit.file)
        return []

    issues: list[Issue] = []
    for specifier in unit.dependencies:
        package_name = get_package_name_from_specifier(specifier)
        if package_name is None:
            continue
        if not store.references.maybe_add_referenced_external_dependency(workspace, package_name):
            issues.append(Issue("unlisted", workspace.name, unit.file, package_name))
    for binary in unit.binaries:
        if not store.references.maybe_add_referenced_binary(workspace, binary):
            issues.append(Issue("binaries", workspace.name, unit.file, binary))
    return issues


def feed_references(
    store: DependencyStore,
    units: list[FileReferences],
    *,
    jobs: int = 1,
    cancel: threading.Event | None = None,
) -> tuple[list[Issue], int]:
    """
    Feed reference units into the store, one unit of work per file.

    Units may run concurrently (`jobs` > 1); insertions commute, so the
    order does not matter. Once `cancel` is set, units not yet started are
    skipped and the partial snapshot stands.

    Returns:
        (unlisted issues found, number of units processed).
    """

    def run(unit: FileReferences) -> list[Issue] | None:
        if cancel is not None and cancel.is_set():
            return None
        return _feed_unit(store, unit)

    if jobs > 1:
        with ThreadPoolExecutor(max_workers=jobs) as pool:
            results = list(pool.map(run, units))
    else:
        results = [run(unit) for unit in units]

    issues: set[Issue] = set()
    processed = 0
    for result in results:
        if result is None:
            continue
        processed += 1
        issues.update(result)
    if processed < len(units):
        log.warning("api.feed_cancelled", processed=processed, total=len(units))
    return sorted(issues), processed


def settle(store: DependencyStore, report: Report | None = None) -> Report:
    """Reconcile the store's final state into a report (issues, hints, counters)."""
    if report is None:
        report = Report()
    settled = settle_dependency_issues(store)
    for issue in (
        settled.dependency_issues
        + settled.dev_dependency_issues
        + settled.optional_peer_dependency_issues
    ):
        report.add_issue(issue)
    report.hints = get_configuration_hints(store)
    report.counters["total"] = sum(
        len(record.dependencies) + len(record.dev_dependencies) for _, record in store.manifests.items()
    )
    return report


def analyze_project(
    root: Path,
    *,
    references: list[FileReferences] | None = None,
    strict: bool | None = None,
    config_path: Path | None = None,
    jobs: int = 1,
    cancel: threading.Event | None = None,
) -> Report:
    """
    Analyze a repository and report unused, unlisted and misclassified dependencies.

    Args:
        root: Repository root (directory containing the root package.json).
        references: Reference units from a source analyzer; script binaries
            from every manifest are always added.
        strict: Override strict mode from the config.
        config_path: Explicit config file; defaults to depsettle.json or the
            "depsettle" key of package.json.
        jobs: Number of threads used to feed references.
        cancel: Stops feeding; the partial result is still reconciled.

    Returns:
        Report with issues, configuration hints and counters.
    """
    root = Path(root).resolve()
    config = load_config(root, config_path)
    if strict is not None and strict != config.strict:
        config = replace(config, strict=strict)

    store = build_store(root, config)
    units = collect_script_references(store) + list(references or [])
    unlisted, processed = feed_references(store, units, jobs=jobs, cancel=cancel)

    report = Report()
    for issue in unlisted:
        report.add_issue(issue)
    report.counters["processed"] = processed
    settle(store, report)
    log.info("api.analysis_complete", root=str(root), issues=report.issue_count)
    return report


def list_workspaces(root: Path, *, config_path: Path | None = None) -> list[Workspace]:
    """List the workspaces of the repository at `root`, root first."""
    root = Path(root).resolve()
    config = load_config(root, config_path)
    return [workspace for workspace, _manifest in find_workspaces(root, config)]
