"""Tests for depsettle.core.reconcile."""

from __future__ import annotations

from depsettle.core.reconcile import get_excluded, is_referenced_dependency, settle_dependency_issues
from depsettle.core.store import DependencyStore


def _symbols(issues) -> list[str]:
    return [issue.symbol for issue in issues]


class TestIsReferencedDependency:
    """Tests for the is_referenced_dependency predicate."""

    def test_directly_referenced(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["lodash"])
        store.references.add_referenced_dependency(".", "lodash")
        assert is_referenced_dependency(store, ".", "lodash") is True
        assert is_referenced_dependency(store, ".", "lodash", True, {"lodash"}) is True

    def test_unknown_workspace(self) -> None:
        store = DependencyStore()
        assert is_referenced_dependency(store, "nope", "lodash") is False

    def test_peer_of_referenced_host(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["next", "react-dom"])
        store.hosts.add_host_dependencies(".", {"react-dom": {"next"}})
        store.references.add_referenced_dependency(".", "next")
        assert is_referenced_dependency(store, ".", "react-dom") is True

    def test_peer_of_unreferenced_host(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["next", "react-dom"])
        store.hosts.add_host_dependencies(".", {"react-dom": {"next"}})
        assert is_referenced_dependency(store, ".", "react-dom") is False

    def test_transitive_hosts(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["a", "b", "c"])
        store.hosts.add_host_dependencies(".", {"a": {"b"}, "b": {"c"}})
        store.references.add_referenced_dependency(".", "c")
        assert is_referenced_dependency(store, ".", "a") is True

    def test_peer_cycle_terminates(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["a", "b", "c"])
        store.hosts.add_host_dependencies(".", {"a": {"b"}, "b": {"c"}, "c": {"a"}})
        assert is_referenced_dependency(store, ".", "a") is False
        assert is_referenced_dependency(store, ".", "b") is False

    def test_self_host_terminates(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["a"])
        store.hosts.add_host_dependencies(".", {"a": {"a"}})
        assert is_referenced_dependency(store, ".", "a") is False

    def test_cycle_with_referenced_member(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["a", "b", "c"])
        store.hosts.add_host_dependencies(".", {"a": {"b"}, "b": {"c"}, "c": {"a"}})
        store.references.add_referenced_dependency(".", "c")
        assert is_referenced_dependency(store, ".", "a") is True

    def test_active_path_restored(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["a", "b"])
        store.hosts.add_host_dependencies(".", {"a": {"b"}})
        active: set[str] = set()
        is_referenced_dependency(store, ".", "a", False, active)
        assert active == set()

    def test_types_included_always_unused(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["foo"], dev_dependencies=["@types/foo"])
        store.hosts.set_types_included(".", {"foo"})
        store.references.add_referenced_dependency(".", "foo")
        store.hosts.add_host_dependencies(".", {"@types/foo": {"foo"}})
        assert is_referenced_dependency(store, ".", "@types/foo") is False

    def test_types_allow_list(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dev_dependencies=["@types/node"])
        assert is_referenced_dependency(store, ".", "@types/node") is True

    def test_types_without_hosts_follow_package(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["lodash"], dev_dependencies=["@types/lodash"])
        assert is_referenced_dependency(store, ".", "@types/lodash") is False
        store.references.add_referenced_dependency(".", "lodash")
        assert is_referenced_dependency(store, ".", "@types/lodash") is True

    def test_scoped_types_follow_package(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dev_dependencies=["@types/babel__core"])
        store.references.add_referenced_dependency(".", "@babel/core")
        assert is_referenced_dependency(store, ".", "@types/babel__core") is True

    def test_types_with_hosts_use_hosts(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["next"], dev_dependencies=["@types/react-dom"])
        store.hosts.add_host_dependencies(".", {"react-dom": {"next"}})
        # With hosts present, the package itself being referenced is not consulted
        store.references.add_referenced_dependency(".", "react-dom")
        assert is_referenced_dependency(store, ".", "@types/react-dom") is False
        store.references.add_referenced_dependency(".", "next")
        assert is_referenced_dependency(store, ".", "@types/react-dom") is True


class TestGetExcluded:
    def test_union_of_builtin_configured_and_own(self, add_workspace) -> None:
        store = DependencyStore()
        store.manifests.set_ignored(["make"], ["left-pad"])
        add_workspace(store, ignore_dependencies=("is-odd",), ignore_binaries=("docker",))
        dependencies, binaries = get_excluded(store, ".")
        assert {"typescript", "left-pad", "is-odd"} <= dependencies
        assert {"node", "make", "docker"} <= binaries


class TestSettleDependencyIssues:
    """Tests for settle_dependency_issues."""

    def test_nothing_referenced(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["lodash"], dev_dependencies=["jest"])
        result = settle_dependency_issues(store)
        assert _symbols(result.dependency_issues) == ["lodash"]
        assert _symbols(result.dev_dependency_issues) == ["jest"]
        assert result.optional_peer_dependency_issues == []
        issue = result.dependency_issues[0]
        assert issue.category == "dependencies"
        assert issue.workspace == "."
        assert issue.file_path.endswith("package.json")

    def test_referenced_optional_peer_is_reported(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, optional_peer_dependencies=["react"])
        store.references.add_referenced_dependency(".", "react")
        result = settle_dependency_issues(store)
        assert _symbols(result.optional_peer_dependency_issues) == ["react"]

    def test_unreferenced_optional_peer_is_fine(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, optional_peer_dependencies=["react"])
        result = settle_dependency_issues(store)
        assert result.optional_peer_dependency_issues == []

    def test_binary_backed_dependency_is_used(self, add_workspace) -> None:
        store = DependencyStore()
        ws = add_workspace(store, dependencies=["typescript-cli"], dev_dependencies=["typescript"])
        store.hosts.set_installed_binaries(".", {"tsc": {"typescript"}})
        store.references.maybe_add_referenced_binary(ws, "tsc")
        result = settle_dependency_issues(store)
        assert "typescript" not in _symbols(result.dev_dependency_issues)
        assert _symbols(result.dependency_issues) == ["typescript-cli"]

    def test_binary_backed_dependency_non_builtin(self, add_workspace) -> None:
        store = DependencyStore()
        ws = add_workspace(store, dev_dependencies=["eslint"])
        store.hosts.set_installed_binaries(".", {"eslint": {"eslint"}})
        store.references.maybe_add_referenced_binary(ws, "eslint")
        result = settle_dependency_issues(store)
        assert result.dev_dependency_issues == []

    def test_ignored_dependencies_are_exempt(self, add_workspace) -> None:
        store = DependencyStore()
        store.manifests.set_ignored([], ["left-pad"])
        add_workspace(
            store,
            dependencies=["left-pad", "is-odd", "typescript", "lodash"],
            ignore_dependencies=("is-odd",),
        )
        result = settle_dependency_issues(store)
        assert _symbols(result.dependency_issues) == ["lodash"]

    def test_dependency_named_after_ignored_binary_is_exempt(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dev_dependencies=["eslint"], ignore_binaries=("eslint",))
        store.hosts.set_installed_binaries(".", {"eslint": {"eslint"}})
        result = settle_dependency_issues(store)
        assert result.dev_dependency_issues == []

    def test_wrapper_shipping_ignored_binary_is_still_reported(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dev_dependencies=["eslint-wrapper"], ignore_binaries=("eslint",))
        store.hosts.set_installed_binaries(".", {"eslint": {"eslint-wrapper"}})
        result = settle_dependency_issues(store)
        assert _symbols(result.dev_dependency_issues) == ["eslint-wrapper"]

    def test_ignored_binary_not_installed_does_not_exempt(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dev_dependencies=["docker"], ignore_binaries=("docker",))
        result = settle_dependency_issues(store)
        assert _symbols(result.dev_dependency_issues) == ["docker"]

    def test_strict_mode_reports_unreferenced_peers_as_production(self, add_workspace) -> None:
        store = DependencyStore(is_strict=True)
        add_workspace(store, dependencies=["lodash"], peer_dependencies=["react"])
        store.references.add_referenced_dependency(".", "lodash")
        result = settle_dependency_issues(store)
        assert _symbols(result.dependency_issues) == ["react"]

    def test_per_workspace(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, ".", dev_dependencies=["jest"])
        add_workspace(store, "packages/a", ancestors=(".",), dependencies=["lodash"])
        store.references.add_referenced_dependency(".", "jest")
        result = settle_dependency_issues(store)
        assert [(i.workspace, i.symbol) for i in result.dependency_issues] == [
            ("packages/a", "lodash")
        ]
        assert result.dev_dependency_issues == []

    def test_idempotent(self, add_workspace) -> None:
        store = DependencyStore()
        add_workspace(store, dependencies=["a", "b"], dev_dependencies=["c"])
        store.hosts.add_host_dependencies(".", {"a": {"b"}, "b": {"a"}})
        first = settle_dependency_issues(store)
        second = settle_dependency_issues(store)
        assert first == second
