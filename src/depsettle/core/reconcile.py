"""Classify declared dependencies as used or unused once scanning is complete."""

from __future__ import annotations

import structlog

from depsettle.core.constants import (
    IGNORE_DEFINITELY_TYPED,
    IGNORED_DEPENDENCIES,
    IGNORED_GLOBAL_BINARIES,
)
from depsettle.core.models import DependencyIssues, Issue
from depsettle.core.modules import get_package_from_definitely_typed, split_types_package
from depsettle.core.store import DependencyStore

log = structlog.get_logger("depsettle.reconcile")


def is_referenced_dependency(
    store: DependencyStore,
    workspace_name: str,
    dependency: str,
    is_peer: bool = False,
    active_path: set[str] | None = None,
) -> bool:
    """
    Decide whether `dependency` counts as used in `workspace_name`.

    A dependency that is not referenced directly is still used when one of
    its hosts (a package declaring it as a peer) is used, recursively.
    `active_path` holds the names currently being resolved; a peer already
    on the path resolves to False, which ends circular peer declarations.
    """
    if active_path is None:
        active_path = set()

    referenced = store.references.get_referenced_dependencies(workspace_name)
    if dependency in referenced:
        return True

    if is_peer and dependency in active_path:
        return False

    typed = split_types_package(dependency)
    if typed is not None:
        typed_package_name = get_package_from_definitely_typed(typed)

        # The package ships its own types, so `@types/pkg` is redundant.
        if typed_package_name in store.hosts.get_types_included(workspace_name):
            return False

        if typed_package_name in IGNORE_DEFINITELY_TYPED:
            return True

        hosts = [
            *store.hosts.get_host_dependencies_for(workspace_name, dependency),
            *store.hosts.get_host_dependencies_for(workspace_name, typed_package_name),
        ]
        if hosts:
            return _any_host_referenced(store, workspace_name, dependency, hosts, active_path)

        return typed_package_name in referenced

    hosts = store.hosts.get_host_dependencies_for(workspace_name, dependency)
    return _any_host_referenced(store, workspace_name, dependency, hosts, active_path)


def _any_host_referenced(
    store: DependencyStore,
    workspace_name: str,
    dependency: str,
    hosts: list[str],
    active_path: set[str],
) -> bool:
    if not hosts:
        return False
    pushed = dependency not in active_path
    active_path.add(dependency)
    try:
        return any(
            is_referenced_dependency(store, workspace_name, host, True, active_path)
            for host in hosts
        )
    finally:
        if pushed:
            active_path.discard(dependency)


def get_excluded(store: DependencyStore, workspace_name: str) -> tuple[set[str], set[str]]:
    """Ignored (dependencies, binaries) for a workspace: built-in, configured and own lists."""
    record = store.manifests.get(workspace_name)
    own_dependencies = record.ignore_dependencies if record else ()
    own_binaries = record.ignore_binaries if record else ()
    ignore_dependencies = {
        *IGNORED_DEPENDENCIES,
        *store.manifests.ignore_dependencies,
        *own_dependencies,
    }
    ignore_binaries = {*IGNORED_GLOBAL_BINARIES, *store.manifests.ignore_binaries, *own_binaries}
    return ignore_dependencies, ignore_binaries


def settle_dependency_issues(store: DependencyStore) -> DependencyIssues:
    """Report unused (dev) dependencies and optional peers that are in fact referenced."""
    result = DependencyIssues()

    for workspace_name, record in store.manifests.items():
        ignore_dependencies, ignore_binaries = get_excluded(store, workspace_name)
        file_path = str(record.manifest_path)

        installed = store.hosts.get_installed_binaries(workspace_name)

        def is_not_excluded(package_name: str) -> bool:
            if package_name in ignore_dependencies:
                return False
            # Only a binary named after the package itself exempts it.
            return not (
                package_name in ignore_binaries
                and package_name in installed.get(package_name, ())
            )

        def is_referenced(package_name: str) -> bool:
            return is_referenced_dependency(store, workspace_name, package_name)

        for symbol in store.manifests.get_production_dependencies(workspace_name):
            if is_not_excluded(symbol) and not is_referenced(symbol):
                result.dependency_issues.append(
                    Issue("dependencies", workspace_name, file_path, symbol)
                )

        for symbol in store.manifests.get_dev_dependencies(workspace_name):
            if is_not_excluded(symbol) and not is_referenced(symbol):
                result.dev_dependency_issues.append(
                    Issue("devDependencies", workspace_name, file_path, symbol)
                )

        for symbol in store.manifests.get_optional_peer_dependencies(workspace_name):
            if is_not_excluded(symbol) and is_referenced(symbol):
                result.optional_peer_dependency_issues.append(
                    Issue("optionalPeerDependencies", workspace_name, file_path, symbol)
                )

    log.debug(
        "reconcile.settled",
        dependencies=len(result.dependency_issues),
        dev_dependencies=len(result.dev_dependency_issues),
        optional_peer_dependencies=len(result.optional_peer_dependency_issues),
    )
    return result
