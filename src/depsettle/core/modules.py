"""Package-name helpers: built-ins, specifiers and DefinitelyTyped (@types) names."""

from __future__ import annotations

from depsettle.core.constants import NODE_BUILTIN_MODULES, TYPES_SCOPE


def is_builtin(name: str) -> bool:
    """True for Node.js core modules, with or without the `node:` protocol."""
    if name.startswith("node:"):
        return True
    return name in NODE_BUILTIN_MODULES


def get_package_name_from_specifier(specifier: str) -> str | None:
    """
    Reduce an import specifier to the package name it resolves to.

    `lodash/fp` -> `lodash`, `@scope/pkg/sub` -> `@scope/pkg`.
    Returns None for relative/absolute paths and empty input.
    """
    specifier = specifier.strip()
    if not specifier or specifier.startswith((".", "/", "#")):
        return None
    if is_builtin(specifier):
        return specifier
    parts = specifier.split("/")
    if specifier.startswith("@"):
        if len(parts) < 2 or not parts[1]:
            return None
        return f"{parts[0]}/{parts[1]}"
    return parts[0]


def is_definitely_typed(name: str) -> bool:
    return name.startswith(f"{TYPES_SCOPE}/")


def get_definitely_typed_for(name: str) -> str:
    """`pkg` -> `@types/pkg`, `@scope/pkg` -> `@types/scope__pkg`."""
    if name.startswith("@"):
        return f"{TYPES_SCOPE}/{name[1:].replace('/', '__')}"
    return f"{TYPES_SCOPE}/{name}"


def get_package_from_definitely_typed(typed_name: str) -> str:
    """Inverse of the mangling: `scope__pkg` -> `@scope/pkg`, `pkg` -> `pkg`."""
    if "__" in typed_name:
        scope, _, name = typed_name.partition("__")
        return f"@{scope}/{name}"
    return typed_name


def split_types_package(name: str) -> str | None:
    """Return the unscoped typed segment of an `@types/x` name, else None."""
    scope, sep, typed = name.partition("/")
    if scope == TYPES_SCOPE and sep and typed:
        return typed
    return None
