"""Read installed dependencies from node_modules: binaries, peer hosts and bundled types."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import structlog

from depsettle.core.manifest import PackageManifest, parse_package_json

log = structlog.get_logger("depsettle.installed")


@dataclass
class InstalledPackages:
    """What a workspace's declared dependencies provide once installed."""

    binaries: dict[str, set[str]] = field(default_factory=dict)
    hosts: dict[str, set[str]] = field(default_factory=dict)
    types_included: set[str] = field(default_factory=set)
    missing: list[str] = field(default_factory=list)


def _find_installed_manifest(dependency: str, search_dirs: list[Path]) -> Path | None:
    """Locate node_modules/<dependency>/package.json, nearest directory first (hoisting)."""
    for base in search_dirs:
        candidate = base / "node_modules" / dependency / "package.json"
        if candidate.is_file():
            return candidate
    return None


def scan_installed(
    manifest: PackageManifest,
    search_dirs: list[Path],
) -> InstalledPackages:
    """
    Inspect the installed copy of every dependency declared in `manifest`.

    Args:
        manifest: The workspace manifest whose dependencies are inspected.
        search_dirs: Directories holding node_modules, nearest first
            (the workspace dir, then ancestor workspace dirs).

    Returns:
        InstalledPackages; dependencies that are not installed are listed
        in `missing` and otherwise skipped.
    """
    result = InstalledPackages()
    declared = dict.fromkeys(
        [
            *manifest.dependencies,
            *manifest.dev_dependencies,
            *manifest.peer_dependencies,
            *manifest.optional_dependencies,
        ]
    )
    for dependency in declared:
        path = _find_installed_manifest(dependency, search_dirs)
        if path is None:
            result.missing.append(dependency)
            continue
        installed = parse_package_json(path)
        if installed is None:
            log.warning("installed.unreadable_manifest", dependency=dependency, path=str(path))
            continue

        for binary in installed.bin:
            result.binaries.setdefault(binary, set()).add(dependency)
        for peer in installed.peer_dependencies:
            result.hosts.setdefault(peer, set()).add(dependency)
        if installed.has_types:
            result.types_included.add(dependency)

    if result.missing:
        log.debug("installed.not_installed", workspace=str(manifest.path.parent), count=len(result.missing))
    return result
