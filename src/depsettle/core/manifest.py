"""Parse package.json manifests and keep per-workspace dependency lists."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

import structlog

from depsettle.core.models import ManifestRecord, Workspace

log = structlog.get_logger("depsettle.manifest")


@dataclass
class PackageManifest:
    """Fields of a package.json relevant to dependency reconciliation."""

    name: str
    version: str
    path: Path
    scripts: dict[str, str] = field(default_factory=dict)
    dependencies: dict[str, str] = field(default_factory=dict)
    dev_dependencies: dict[str, str] = field(default_factory=dict)
    peer_dependencies: dict[str, str] = field(default_factory=dict)
    optional_dependencies: dict[str, str] = field(default_factory=dict)
    peer_dependencies_meta: dict[str, dict] = field(default_factory=dict)
    workspaces: list[str] = field(default_factory=list)
    bin: dict[str, str] = field(default_factory=dict)
    has_types: bool = False

    @property
    def optional_peer_dependencies(self) -> list[str]:
        """Peer dependencies flagged `optional: true` in peerDependenciesMeta."""
        return [
            name
            for name in self.peer_dependencies
            if self.peer_dependencies_meta.get(name, {}).get("optional") is True
        ]


def _str_map(value: object) -> dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {str(k): str(v) for k, v in value.items()}


def _workspace_globs(value: object) -> list[str]:
    # npm/yarn: ["packages/*"]; yarn classic also allows {"packages": [...]}
    if isinstance(value, dict):
        value = value.get("packages", [])
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if isinstance(v, str) and v.strip()]


def _bin_map(name: str, value: object) -> dict[str, str]:
    if isinstance(value, str):
        # A single string bin is exposed under the unscoped package name.
        return {name.rsplit("/", 1)[-1]: value} if name else {}
    return _str_map(value)


def parse_package_json(path: Path) -> PackageManifest | None:
    """
    Parse a package.json file.

    Returns None if the file cannot be read or is not a JSON object.
    """
    if not path.exists() or not path.is_file():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError, OSError):
        log.warning("manifest.parse_failed", path=str(path))
        return None
    if not isinstance(data, dict):
        return None

    name = data.get("name") if isinstance(data.get("name"), str) else ""
    meta = data.get("peerDependenciesMeta")
    if not isinstance(meta, dict):
        meta = {}
    return PackageManifest(
        name=name,
        version=str(data.get("version", "")),
        path=path.resolve(),
        scripts=_str_map(data.get("scripts")),
        dependencies=_str_map(data.get("dependencies")),
        dev_dependencies=_str_map(data.get("devDependencies")),
        peer_dependencies=_str_map(data.get("peerDependencies")),
        optional_dependencies=_str_map(data.get("optionalDependencies")),
        peer_dependencies_meta={str(k): v for k, v in meta.items() if isinstance(v, dict)},
        workspaces=_workspace_globs(data.get("workspaces")),
        bin=_bin_map(name, data.get("bin")),
        has_types=bool(data.get("types") or data.get("typings")),
    )


class ManifestStore:
    """Per-workspace dependency lists, plus the configured global ignore lists."""

    def __init__(self, *, is_strict: bool = False) -> None:
        self.is_strict = is_strict
        self._manifests: dict[str, ManifestRecord] = {}
        self.ignore_binaries: tuple[str, ...] = ()
        self.ignore_dependencies: tuple[str, ...] = ()

    def add_workspace(self, workspace: Workspace, manifest: PackageManifest) -> ManifestRecord:
        """Register (or replace) the record for `workspace.name`."""
        record = ManifestRecord(
            workspace_dir=workspace.dir,
            manifest_path=workspace.manifest_path,
            ignore_dependencies=tuple(workspace.ignore_dependencies),
            ignore_binaries=tuple(workspace.ignore_binaries),
            scripts=tuple(manifest.scripts.values()),
            dependencies=tuple(manifest.dependencies),
            dev_dependencies=tuple(manifest.dev_dependencies),
            peer_dependencies=tuple(manifest.peer_dependencies),
            optional_dependencies=tuple(manifest.optional_dependencies),
            optional_peer_dependencies=tuple(manifest.optional_peer_dependencies),
        )
        self._manifests[workspace.name] = record
        log.debug(
            "manifest.workspace_added",
            workspace=workspace.name,
            dependencies=len(record.all_dependencies),
        )
        return record

    def set_ignored(self, ignore_binaries: list[str], ignore_dependencies: list[str]) -> None:
        self.ignore_binaries = tuple(ignore_binaries)
        self.ignore_dependencies = tuple(ignore_dependencies)

    def get(self, workspace_name: str) -> ManifestRecord | None:
        return self._manifests.get(workspace_name)

    def items(self) -> list[tuple[str, ManifestRecord]]:
        return list(self._manifests.items())

    def workspace_names(self) -> list[str]:
        return list(self._manifests)

    def get_production_dependencies(self, workspace_name: str) -> list[str]:
        # Strict mode never falls back to ancestors, so peers must be satisfied here.
        record = self._manifests.get(workspace_name)
        if record is None:
            return []
        if self.is_strict:
            return [*record.dependencies, *record.peer_dependencies]
        return list(record.dependencies)

    def get_dev_dependencies(self, workspace_name: str) -> list[str]:
        record = self._manifests.get(workspace_name)
        return list(record.dev_dependencies) if record else []

    def get_peer_dependencies(self, workspace_name: str) -> list[str]:
        record = self._manifests.get(workspace_name)
        return list(record.peer_dependencies) if record else []

    def get_optional_peer_dependencies(self, workspace_name: str) -> list[str]:
        record = self._manifests.get(workspace_name)
        return list(record.optional_peer_dependencies) if record else []

    def is_in_dependencies(self, workspace_name: str, package_name: str) -> bool:
        record = self._manifests.get(workspace_name)
        if record is None:
            return False
        if self.is_strict:
            return package_name in self.get_production_dependencies(workspace_name)
        return package_name in record.all_dependencies
