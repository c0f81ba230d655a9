"""Shared fixtures: in-memory stores and on-disk monorepos."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Callable

import pytest

from depsettle.core.manifest import PackageManifest
from depsettle.core.models import Workspace
from depsettle.core.store import DependencyStore


def _manifest(
    path: Path,
    *,
    name: str = "",
    dependencies: list[str] | None = None,
    dev_dependencies: list[str] | None = None,
    peer_dependencies: list[str] | None = None,
    optional_peer_dependencies: list[str] | None = None,
    optional_dependencies: list[str] | None = None,
    scripts: dict[str, str] | None = None,
) -> PackageManifest:
    peers = list(peer_dependencies or []) + list(optional_peer_dependencies or [])
    return PackageManifest(
        name=name,
        version="1.0.0",
        path=path,
        scripts=dict(scripts or {}),
        dependencies={d: "*" for d in dependencies or []},
        dev_dependencies={d: "*" for d in dev_dependencies or []},
        peer_dependencies={d: "*" for d in peers},
        optional_dependencies={d: "*" for d in optional_dependencies or []},
        peer_dependencies_meta={d: {"optional": True} for d in optional_peer_dependencies or []},
    )


@pytest.fixture
def add_workspace() -> Callable[..., Workspace]:
    """Register a workspace with the given dependency lists in a store; returns the Workspace."""

    def _add(
        store: DependencyStore,
        name: str = ".",
        *,
        pkg_name: str = "",
        ancestors: tuple[str, ...] = (),
        ignore_dependencies: tuple[str, ...] = (),
        ignore_binaries: tuple[str, ...] = (),
        **lists: object,
    ) -> Workspace:
        directory = Path("/repo") / name
        workspace = Workspace(
            name=name,
            dir=directory,
            manifest_path=directory / "package.json",
            pkg_name=pkg_name,
            ancestors=ancestors,
            ignore_dependencies=ignore_dependencies,
            ignore_binaries=ignore_binaries,
        )
        store.add_workspace(workspace, _manifest(workspace.manifest_path, name=pkg_name, **lists))
        return workspace

    return _add


@pytest.fixture
def write_package(tmp_path: Path) -> Callable[..., Path]:
    """Write `<tmp_path>/<rel>/package.json` with the given content; returns its directory."""

    def _write(rel: str, data: dict) -> Path:
        directory = tmp_path / rel if rel != "." else tmp_path
        directory.mkdir(parents=True, exist_ok=True)
        (directory / "package.json").write_text(json.dumps(data, indent=2))
        return directory

    return _write


@pytest.fixture
def sample_repo(tmp_path: Path, write_package) -> Path:
    """
    A two-workspace repository with installed tools:

    - root: lodash, eslint (used by the lint script), jest (unused)
    - packages/app: react (+ @types/react), zod (unused), optional peer react-dom
    """
    write_package(
        ".",
        {
            "name": "acme",
            "private": True,
            "workspaces": ["packages/*"],
            "scripts": {"lint": "eslint ."},
            "dependencies": {"lodash": "^4.17.21"},
            "devDependencies": {"eslint": "^9.0.0", "jest": "^29.0.0"},
        },
    )
    write_package("node_modules/eslint", {"name": "eslint", "bin": {"eslint": "bin/eslint.js"}})
    write_package("node_modules/jest", {"name": "jest", "bin": {"jest": "bin/jest.js"}})
    write_package("node_modules/lodash", {"name": "lodash"})
    write_package(
        "packages/app",
        {
            "name": "@acme/app",
            "dependencies": {"react": "^18", "zod": "^3"},
            "devDependencies": {"@types/react": "^18"},
            "peerDependencies": {"react-dom": "^18"},
            "peerDependenciesMeta": {"react-dom": {"optional": True}},
        },
    )
    return tmp_path


@pytest.fixture
def sample_references(tmp_path: Path) -> Path:
    """Reference feed for `sample_repo`, as a source analyzer would write it."""
    path = tmp_path / "references.json"
    path.write_text(
        json.dumps(
            [
                {
                    "workspace": "packages/app",
                    "file": "src/index.ts",
                    "dependencies": ["react", "lodash/fp", "./local", "fs", "chalk"],
                },
                {"workspace": ".", "file": "scripts/deploy.js", "binaries": ["docker"]},
            ]
        )
    )
    return path
