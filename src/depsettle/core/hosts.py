"""Per-workspace peer-host edges, installed binaries and types-included packages."""

from __future__ import annotations

from collections.abc import Mapping


class HostIndex:
    """
    Lookup tables filled once per workspace at setup.

    - hosts: peer dependency name -> packages that declare it as a peer
    - installed binaries: binary name -> dependencies providing it
    - types included: dependencies that ship their own type declarations
    """

    def __init__(self) -> None:
        self._hosts: dict[str, dict[str, set[str]]] = {}
        self._installed_binaries: dict[str, dict[str, set[str]]] = {}
        self._types_included: dict[str, frozenset[str]] = {}

    def add_host_dependencies(self, workspace_name: str, hosts: Mapping[str, set[str]]) -> None:
        self._hosts[workspace_name] = {peer: set(h) for peer, h in hosts.items()}

    def get_host_dependencies_for(self, workspace_name: str, dependency: str) -> list[str]:
        """Hosts declaring `dependency` as a peer; the edges of the peer graph."""
        return sorted(self._hosts.get(workspace_name, {}).get(dependency, ()))

    def set_installed_binaries(
        self, workspace_name: str, installed: Mapping[str, set[str]]
    ) -> None:
        self._installed_binaries[workspace_name] = {b: set(d) for b, d in installed.items()}

    def get_installed_binaries(self, workspace_name: str) -> dict[str, set[str]]:
        return self._installed_binaries.get(workspace_name, {})

    def set_types_included(self, workspace_name: str, names: set[str]) -> None:
        self._types_included[workspace_name] = frozenset(names)

    def get_types_included(self, workspace_name: str) -> frozenset[str]:
        return self._types_included.get(workspace_name, frozenset())
