"""The state of one analysis run, shared by setup, scanning and reconciliation."""

from __future__ import annotations

from dataclasses import dataclass, field

from depsettle.core.hosts import HostIndex
from depsettle.core.manifest import ManifestStore, PackageManifest
from depsettle.core.models import Workspace
from depsettle.core.references import ReferenceTracker


@dataclass
class DependencyStore:
    """
    Bundles the manifest store, host index and reference tracker of one run.

    Build a fresh store per analysis and pass it explicitly; nothing here is
    shared between runs.
    """

    is_strict: bool = False
    manifests: ManifestStore = field(init=False)
    hosts: HostIndex = field(init=False)
    references: ReferenceTracker = field(init=False)
    workspaces: dict[str, Workspace] = field(init=False, default_factory=dict)

    def __post_init__(self) -> None:
        self.manifests = ManifestStore(is_strict=self.is_strict)
        self.hosts = HostIndex()
        self.references = ReferenceTracker(self.manifests, self.hosts)

    def add_workspace(self, workspace: Workspace, manifest: PackageManifest) -> None:
        self.workspaces[workspace.name] = workspace
        self.manifests.add_workspace(workspace, manifest)

    def get_workspace(self, name: str) -> Workspace | None:
        return self.workspaces.get(name)
