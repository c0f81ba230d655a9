"""Discover the workspaces of a repository from the root package.json."""

from __future__ import annotations

from pathlib import Path

import structlog

from depsettle.config import ProjectConfig
from depsettle.core.constants import MANIFEST_FILE, ROOT_WORKSPACE_NAME
from depsettle.core.manifest import PackageManifest, parse_package_json
from depsettle.core.models import Workspace
from depsettle.errors import ManifestError

log = structlog.get_logger("depsettle.finder")

DEFAULT_MAX_DEPTH = 8


def _workspace_name(root: Path, directory: Path) -> str:
    if directory == root:
        return ROOT_WORKSPACE_NAME
    return directory.relative_to(root).as_posix()


def _expand_globs(root: Path, patterns: list[str], max_depth: int) -> list[Path]:
    """Directories matched by workspace globs; `!pattern` excludes."""
    included: set[Path] = set()
    excluded: set[Path] = set()
    for pattern in patterns:
        negate = pattern.startswith("!")
        pattern = pattern.lstrip("!").strip().rstrip("/")
        if pattern.startswith("./"):
            pattern = pattern[2:]
        if not pattern or pattern.startswith(("/", "..")):
            continue
        try:
            matches = list(root.glob(pattern))
        except ValueError:
            log.warning("finder.invalid_glob", pattern=pattern)
            continue
        for match in matches:
            if not match.is_dir():
                continue
            rel = match.relative_to(root)
            if "node_modules" in rel.parts or any(p.startswith(".") for p in rel.parts):
                continue
            if len(rel.parts) > max_depth:
                continue
            (excluded if negate else included).add(match.resolve())
    return sorted(included - excluded)


def _ancestors(directory: Path, others: dict[Path, str]) -> tuple[str, ...]:
    """Names of workspaces containing `directory`, nearest first."""
    containing = [
        (len(other.parts), name)
        for other, name in others.items()
        if other != directory and directory.is_relative_to(other)
    ]
    return tuple(name for _depth, name in sorted(containing, reverse=True))


def find_workspaces(
    root: Path,
    config: ProjectConfig,
    *,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> list[tuple[Workspace, PackageManifest]]:
    """
    Find the root workspace and every workspace listed in its manifest.

    Args:
        root: Repository root containing package.json.
        config: Project configuration supplying per-workspace ignore lists.
        max_depth: Maximum directory depth of workspace matches; negative
            values are treated as zero (root only).

    Returns:
        (Workspace, PackageManifest) pairs, root first, then by name.

    Raises:
        ManifestError: If the root package.json is missing or unreadable.
    """
    root = Path(root).resolve()
    max_depth = max(0, max_depth)
    root_manifest = parse_package_json(root / MANIFEST_FILE)
    if root_manifest is None:
        raise ManifestError(f"No readable {MANIFEST_FILE} in {root}")

    manifests: dict[Path, PackageManifest] = {root: root_manifest}
    for directory in _expand_globs(root, root_manifest.workspaces, max_depth):
        if directory in manifests:
            continue
        manifest = parse_package_json(directory / MANIFEST_FILE)
        if manifest is None:
            log.debug("finder.skip_directory", path=str(directory))
            continue
        manifests[directory] = manifest

    names = {directory: _workspace_name(root, directory) for directory in manifests}
    result: list[tuple[Workspace, PackageManifest]] = []
    for directory in sorted(manifests, key=lambda d: (d != root, names[d])):
        name = names[directory]
        ws_config = config.for_workspace(name)
        workspace = Workspace(
            name=name,
            dir=directory,
            manifest_path=directory / MANIFEST_FILE,
            pkg_name=manifests[directory].name,
            ancestors=_ancestors(directory, names),
            ignore_dependencies=ws_config.ignore_dependencies,
            ignore_binaries=ws_config.ignore_binaries,
        )
        result.append((workspace, manifests[directory]))

    log.info("finder.workspaces_found", root=str(root), count=len(result))
    return result
