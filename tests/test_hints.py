"""Tests for depsettle.core.hints."""

from __future__ import annotations

from depsettle.core.hints import IGNORE_BINARIES, IGNORE_DEPENDENCIES, get_configuration_hints
from depsettle.core.models import ConfigurationHint
from depsettle.core.store import DependencyStore


class TestWorkspaceHints:
    """Hints for the per-workspace ignore lists."""

    def test_no_ignores_no_hints(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["lodash"])
        assert get_configuration_hints(store) == []

    def test_builtin_entries_are_redundant(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(
            store,
            "packages/a",
            ancestors=(".",),
            ignore_dependencies=("typescript",),
            ignore_binaries=("node",),
        )
        assert get_configuration_hints(store) == [
            ConfigurationHint("packages/a", "node", IGNORE_BINARIES),
            ConfigurationHint("packages/a", "typescript", IGNORE_DEPENDENCIES),
        ]

    def test_repeats_global_list_outside_root(self, add_workspace) -> None:
        store = DependencyStore()
        store.manifests.set_ignored(["docker"], ["left-pad"])
        add_workspace(
            store,
            "packages/a",
            ancestors=(".",),
            ignore_dependencies=("left-pad",),
            ignore_binaries=("docker",),
        )
        store.references.add_referenced_dependency("packages/a", "left-pad")
        store.references.add_referenced_binary("packages/a", "docker")
        hints = get_configuration_hints(store)
        assert ConfigurationHint("packages/a", "left-pad", IGNORE_DEPENDENCIES) in hints
        assert ConfigurationHint("packages/a", "docker", IGNORE_BINARIES) in hints

    def test_declared_and_referenced_dependency(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["lodash"], ignore_dependencies=("lodash",))
        store.references.add_referenced_dependency(".", "lodash")
        assert get_configuration_hints(store) == [
            ConfigurationHint(".", "lodash", IGNORE_DEPENDENCIES)
        ]

    def test_ignored_but_unreferenced_dependency_is_kept(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["lodash"], ignore_dependencies=("lodash",))
        assert get_configuration_hints(store) == []

    def test_peer_dependency_is_exempt(self, add_workspace) -> None:
        store = DependencyStore(is_strict=True)
        add_workspace(store, peer_dependencies=["react"], ignore_dependencies=("react",))
        store.references.add_referenced_dependency(".", "react")
        assert get_configuration_hints(store) == []

    def test_referenced_and_installed_binary(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dev_dependencies=["eslint"], ignore_binaries=("eslint",))
        store.hosts.set_installed_binaries(".", {"eslint": {"eslint"}})
        store.references.add_referenced_binary(".", "eslint")
        assert get_configuration_hints(store) == [
            ConfigurationHint(".", "eslint", IGNORE_BINARIES)
        ]

    def test_referenced_but_not_installed_binary_is_kept(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, ignore_binaries=("docker",))
        store.references.add_referenced_binary(".", "docker")
        assert get_configuration_hints(store) == []


class TestRootHints:
    """Hints for the configured global ignore lists, reported against root."""

    def test_dead_global_binary(self, add_workspace) -> None:
        store = DependencyStore()
        store.manifests.set_ignored(["docker"], [])
        add_workspace(store)
        assert get_configuration_hints(store) == [
            ConfigurationHint(".", "docker", IGNORE_BINARIES)
        ]

    def test_referenced_global_binary_is_kept(self, add_workspace) -> None:
        store = DependencyStore()
        store.manifests.set_ignored(["docker"], [])
        add_workspace(store)
        store.references.add_referenced_binary(".", "docker")
        assert get_configuration_hints(store) == []

    def test_unreferenced_but_installed_global_binary_is_kept(self, add_workspace) -> None:
        store = DependencyStore()
        store.manifests.set_ignored(["tsc"], [])
        add_workspace(store, "packages/a", ancestors=(".",))
        store.hosts.set_installed_binaries("packages/a", {"tsc": {"typescript"}})
        assert get_configuration_hints(store) == []

    def test_referenced_global_binary_installed_at_root(self, add_workspace) -> None:
        store = DependencyStore()
        store.manifests.set_ignored(["eslint"], [])
        add_workspace(store, dev_dependencies=["eslint"])
        store.hosts.set_installed_binaries(".", {"eslint": {"eslint"}})
        store.references.add_referenced_binary(".", "eslint")
        assert get_configuration_hints(store) == [
            ConfigurationHint(".", "eslint", IGNORE_BINARIES)
        ]

    def test_builtin_global_binary(self, add_workspace) -> None:
        store = DependencyStore()
        store.manifests.set_ignored(["git"], [])
        add_workspace(store)
        store.references.add_referenced_binary(".", "git")
        assert get_configuration_hints(store) == [ConfigurationHint(".", "git", IGNORE_BINARIES)]

    def test_dead_global_dependency(self, add_workspace) -> None:
        store = DependencyStore()
        store.manifests.set_ignored([], ["left-pad"])
        add_workspace(store)
        assert get_configuration_hints(store) == [
            ConfigurationHint(".", "left-pad", IGNORE_DEPENDENCIES)
        ]

    def test_declared_global_dependency_is_kept(self, add_workspace) -> None:
        store = DependencyStore()
        store.manifests.set_ignored([], ["left-pad"])
        add_workspace(store)
        add_workspace(store, "packages/a", ancestors=(".",), dependencies=["left-pad"])
        assert get_configuration_hints(store) == []

    def test_root_peer_global_dependency_is_kept(self, add_workspace) -> None:
        store = DependencyStore()
        store.manifests.set_ignored([], ["react"])
        add_workspace(store, peer_dependencies=["react"])
        assert get_configuration_hints(store) == []

    def test_builtin_global_dependency(self, add_workspace) -> None:
        store = DependencyStore()
        store.manifests.set_ignored([], ["typescript"])
        add_workspace(store, dev_dependencies=["typescript"])
        assert get_configuration_hints(store) == [
            ConfigurationHint(".", "typescript", IGNORE_DEPENDENCIES)
        ]

    def test_hints_are_unique_and_sorted(self, add_workspace) -> None:
        store = DependencyStore()
        store.manifests.set_ignored(["node", "docker"], [])
        add_workspace(store, ignore_binaries=("node",))
        hints = get_configuration_hints(store)
        assert hints == sorted(set(hints))
        assert hints.count(ConfigurationHint(".", "node", IGNORE_BINARIES)) == 1
