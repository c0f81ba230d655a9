"""Suggest ignore-list entries that no longer do anything."""

from __future__ import annotations

from depsettle.core.constants import (
    IGNORED_DEPENDENCIES,
    IGNORED_GLOBAL_BINARIES,
    ROOT_WORKSPACE_NAME,
)
from depsettle.core.models import ConfigurationHint
from depsettle.core.store import DependencyStore

IGNORE_DEPENDENCIES = "ignoreDependencies"
IGNORE_BINARIES = "ignoreBinaries"


def get_configuration_hints(store: DependencyStore) -> list[ConfigurationHint]:
    """
    Hints to drop ignore entries that are redundant or dead.

    Per workspace, an entry is redundant when it repeats a built-in ignore,
    repeats the configured global list (outside root), or names something
    that is declared and referenced anyway. Peer dependencies are exempt from
    that last rule since they may legitimately need ignoring. At root, a
    configured global entry is dead when nothing anywhere references,
    declares or installs it.
    """
    hints: set[ConfigurationHint] = set()
    manifests = store.manifests

    global_binary_refs = dict.fromkeys(manifests.ignore_binaries, 0)
    global_dependency_refs = dict.fromkeys(manifests.ignore_dependencies, 0)
    installed_anywhere: set[str] = set()
    declared_anywhere: set[str] = set()

    for workspace_name, record in manifests.items():
        referenced_dependencies = store.references.get_referenced_dependencies(workspace_name)
        referenced_binaries = store.references.get_referenced_binaries(workspace_name)
        installed = store.hosts.get_installed_binaries(workspace_name)
        installed_anywhere.update(installed)
        declared_anywhere.update(record.all_dependencies)

        for name in referenced_dependencies:
            if name in global_dependency_refs:
                global_dependency_refs[name] += 1
        for name in referenced_binaries:
            if name in global_binary_refs:
                global_binary_refs[name] += 1

        dependencies = {
            *manifests.get_production_dependencies(workspace_name),
            *manifests.get_dev_dependencies(workspace_name),
        }
        peer_dependencies = set(manifests.get_peer_dependencies(workspace_name))
        is_root = workspace_name == ROOT_WORKSPACE_NAME

        for name in record.ignore_dependencies:
            if (
                name in IGNORED_DEPENDENCIES
                or (not is_root and name in manifests.ignore_dependencies)
                or (
                    name not in peer_dependencies
                    and name in referenced_dependencies
                    and name in dependencies
                )
            ):
                hints.add(ConfigurationHint(workspace_name, name, IGNORE_DEPENDENCIES))

        for name in record.ignore_binaries:
            if (
                name in IGNORED_GLOBAL_BINARIES
                or (not is_root and name in manifests.ignore_binaries)
                or (name in referenced_binaries and name in installed)
            ):
                hints.add(ConfigurationHint(workspace_name, name, IGNORE_BINARIES))

    root_installed = store.hosts.get_installed_binaries(ROOT_WORKSPACE_NAME)
    root_peer_dependencies = set(manifests.get_peer_dependencies(ROOT_WORKSPACE_NAME))

    for name, count in global_binary_refs.items():
        if (
            name in IGNORED_GLOBAL_BINARIES
            or (count == 0 and name not in installed_anywhere)
            or (count > 0 and name in root_installed)
        ):
            hints.add(ConfigurationHint(ROOT_WORKSPACE_NAME, name, IGNORE_BINARIES))

    for name, count in global_dependency_refs.items():
        if name in IGNORED_DEPENDENCIES or (
            count == 0 and name not in root_peer_dependencies and name not in declared_anywhere
        ):
            hints.add(ConfigurationHint(ROOT_WORKSPACE_NAME, name, IGNORE_DEPENDENCIES))

    return sorted(hints)
