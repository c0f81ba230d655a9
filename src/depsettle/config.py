"""Load depsettle configuration from depsettle.json or the "depsettle" key of package.json."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from depsettle.core.constants import CONFIG_FILE, MANIFEST_FILE
from depsettle.errors import ConfigError

STRICT_ENV_VAR = "DEPSETTLE_STRICT"


@dataclass(frozen=True)
class WorkspaceConfig:
    """Ignore lists for one workspace."""

    ignore_dependencies: tuple[str, ...] = ()
    ignore_binaries: tuple[str, ...] = ()


@dataclass(frozen=True)
class ProjectConfig:
    """Validated, immutable project configuration."""

    ignore_dependencies: tuple[str, ...] = ()
    ignore_binaries: tuple[str, ...] = ()
    strict: bool = False
    workspaces: dict[str, WorkspaceConfig] = field(default_factory=dict)
    source: Path | None = None

    def for_workspace(self, name: str) -> WorkspaceConfig:
        return self.workspaces.get(name, WorkspaceConfig())


def _string_list(data: dict, key: str, where: str) -> tuple[str, ...]:
    value = data.get(key, [])
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"{where}: '{key}' must be a list of strings")
    return tuple(value)


def parse_config(data: object, source: Path | None = None) -> ProjectConfig:
    """Validate raw config data and build a ProjectConfig."""
    where = str(source) if source else "config"
    if not isinstance(data, dict):
        raise ConfigError(f"{where}: expected a JSON object")

    strict = data.get("strict", False)
    if not isinstance(strict, bool):
        raise ConfigError(f"{where}: 'strict' must be true or false")

    raw_workspaces = data.get("workspaces", {})
    if not isinstance(raw_workspaces, dict):
        raise ConfigError(f"{where}: 'workspaces' must be an object")
    workspaces: dict[str, WorkspaceConfig] = {}
    for name, ws_data in raw_workspaces.items():
        if not isinstance(ws_data, dict):
            raise ConfigError(f"{where}: workspace '{name}' must be an object")
        ws_where = f"{where} (workspace '{name}')"
        workspaces[name] = WorkspaceConfig(
            ignore_dependencies=_string_list(ws_data, "ignoreDependencies", ws_where),
            ignore_binaries=_string_list(ws_data, "ignoreBinaries", ws_where),
        )

    return ProjectConfig(
        ignore_dependencies=_string_list(data, "ignoreDependencies", where),
        ignore_binaries=_string_list(data, "ignoreBinaries", where),
        strict=strict,
        workspaces=workspaces,
        source=source,
    )


def _read_json(path: Path) -> object:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e


def _env_strict() -> bool:
    return os.environ.get(STRICT_ENV_VAR, "").strip().lower() in ("1", "true", "yes", "on")


def load_config(root: Path, config_path: Path | None = None) -> ProjectConfig:
    """
    Load configuration for the project at `root`.

    Priority: explicit `config_path`, then `<root>/depsettle.json`, then the
    "depsettle" key of `<root>/package.json`. No config yields defaults.
    DEPSETTLE_STRICT=1 forces strict mode.
    """
    config: ProjectConfig
    if config_path is not None:
        if not config_path.is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        config = parse_config(_read_json(config_path), config_path)
    elif (root / CONFIG_FILE).is_file():
        path = root / CONFIG_FILE
        config = parse_config(_read_json(path), path)
    else:
        config = ProjectConfig()
        manifest_path = root / MANIFEST_FILE
        if manifest_path.is_file():
            manifest = _read_json(manifest_path)
            if isinstance(manifest, dict) and "depsettle" in manifest:
                config = parse_config(manifest["depsettle"], manifest_path)

    if _env_strict() and not config.strict:
        config = replace(config, strict=True)
    return config
