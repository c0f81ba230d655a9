"""Record dependencies and binaries observed while scanning, and decide if they are handled."""

from __future__ import annotations

import threading

import structlog

from depsettle.core.constants import IGNORED_GLOBAL_BINARIES
from depsettle.core.hosts import HostIndex
from depsettle.core.manifest import ManifestStore
from depsettle.core.models import Workspace
from depsettle.core.modules import get_definitely_typed_for, is_builtin, is_definitely_typed

log = structlog.get_logger("depsettle.references")


class ReferenceTracker:
    """
    Referenced dependency and binary names, per workspace.

    Sets only grow. Each insertion holds the workspace's lock, so feeders on
    several threads may insert concurrently in any order.
    """

    def __init__(self, manifests: ManifestStore, hosts: HostIndex) -> None:
        self._manifests = manifests
        self._hosts = hosts
        self._dependencies: dict[str, set[str]] = {}
        self._binaries: dict[str, set[str]] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, workspace_name: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(workspace_name)
            if lock is None:
                lock = self._locks[workspace_name] = threading.Lock()
            return lock

    def add_referenced_dependency(self, workspace_name: str, package_name: str) -> None:
        with self._lock_for(workspace_name):
            self._dependencies.setdefault(workspace_name, set()).add(package_name)

    def add_referenced_binary(self, workspace_name: str, binary_name: str) -> None:
        with self._lock_for(workspace_name):
            self._binaries.setdefault(workspace_name, set()).add(binary_name)

    def get_referenced_dependencies(self, workspace_name: str) -> frozenset[str]:
        with self._lock_for(workspace_name):
            return frozenset(self._dependencies.get(workspace_name, ()))

    def get_referenced_binaries(self, workspace_name: str) -> frozenset[str]:
        with self._lock_for(workspace_name):
            return frozenset(self._binaries.get(workspace_name, ()))

    def _candidate_workspaces(self, workspace: Workspace) -> list[str]:
        if self._manifests.is_strict:
            return [workspace.name]
        return [workspace.name, *workspace.ancestors]

    def _closest(self, candidates: list[str], package_name: str) -> str | None:
        return next(
            (name for name in candidates if self._manifests.is_in_dependencies(name, package_name)),
            None,
        )

    def maybe_add_referenced_external_dependency(
        self, workspace: Workspace, package_name: str
    ) -> bool:
        """
        Record an external package reference found in `workspace`.

        Returns True when the reference is handled (built-in, self-import,
        declared in this workspace or an ancestor, or ignored). False means
        the caller should report it as unlisted.
        """
        if is_builtin(package_name):
            return True

        if workspace.pkg_name and package_name == workspace.pkg_name:
            return True

        candidates = self._candidate_workspaces(workspace)
        closest = self._closest(candidates, package_name)

        # A reference to `pkg` also keeps a declared `@types/pkg` in use.
        types_package_name = None
        closest_for_types = None
        if not is_definitely_typed(package_name):
            types_package_name = get_definitely_typed_for(package_name)
            closest_for_types = self._closest(candidates, types_package_name)

        if closest or closest_for_types:
            if closest:
                self.add_referenced_dependency(closest, package_name)
            if closest_for_types and types_package_name:
                self.add_referenced_dependency(closest_for_types, types_package_name)
            return True

        self.add_referenced_dependency(workspace.name, package_name)

        record = self._manifests.get(workspace.name)
        if record and package_name in record.ignore_dependencies:
            return True
        if package_name in self._manifests.ignore_dependencies:
            return True

        log.debug("references.unlisted_dependency", workspace=workspace.name, name=package_name)
        return False

    def maybe_add_referenced_binary(self, workspace: Workspace, binary_name: str) -> bool:
        """
        Record a binary invoked from `workspace` (e.g. in a script).

        Dependencies backing an installed binary are marked referenced, so a
        package that only ships a CLI is not reported unused.
        """
        self.add_referenced_binary(workspace.name, binary_name)

        if binary_name in IGNORED_GLOBAL_BINARIES:
            return True

        for name in self._candidate_workspaces(workspace):
            providers = self._hosts.get_installed_binaries(name).get(binary_name)
            if providers:
                for dependency in sorted(providers):
                    self.add_referenced_dependency(name, dependency)
                return True

        record = self._manifests.get(workspace.name)
        if record and binary_name in record.ignore_binaries:
            return True
        if binary_name in self._manifests.ignore_binaries:
            return True

        log.debug("references.unlisted_binary", workspace=workspace.name, name=binary_name)
        return False
