"""Extract invoked binary names from package.json script commands."""

from __future__ import annotations

import re
import shlex

# Command separators: &&, ||, ;, | and a background &; `2>&1` and `&>` are redirections.
_SEPARATORS = re.compile(r"\s*(?:&&|\|\||;|\||(?<![<>])&(?!>))\s*")
_ENV_ASSIGNMENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*=")
# `>`, `2>>log`, `<in`, `2>&1`, `&>out`; group 1 is an attached target, if any.
_REDIRECT = re.compile(r"^(?:\d*|&)(?:>>|>|<)(?!=)&?(.*)$")

# Runners that execute the binary named in the next argument.
_RUNNERS = {"npx", "bunx", "pnpx"}
_SUBCOMMAND_RUNNERS = {
    "pnpm": ("exec", "dlx"),
    "yarn": ("run", "exec", "dlx"),
    "npm": ("exec",),
}
# Package-manager subcommands that are not binaries.
_PM_COMMANDS = {
    "add",
    "audit",
    "build",
    "ci",
    "dedupe",
    "install",
    "link",
    "publish",
    "rebuild",
    "remove",
    "run",
    "start",
    "test",
    "uninstall",
    "version",
    "workspace",
    "workspaces",
}


# Runner options whose value is the next argument, not the binary.
_VALUE_FLAGS = {
    "-p",
    "--package",
    "-c",
    "--call",
    "-C",
    "--dir",
    "--cwd",
    "-F",
    "--filter",
    "-w",
    "--workspace",
}


def _first_positional(tokens: list[str]) -> int | None:
    """Index of the first argument that is neither an option nor an option's value."""
    skip = False
    for i, token in enumerate(tokens):
        if skip:
            skip = False
            continue
        if token.startswith("-"):
            skip = token in _VALUE_FLAGS
            continue
        return i
    return None


def _strip_redirections(tokens: list[str]) -> list[str]:
    result: list[str] = []
    skip_target = False
    for token in tokens:
        if skip_target:
            skip_target = False
            continue
        match = _REDIRECT.match(token)
        if match:
            skip_target = not match.group(1)
            continue
        result.append(token)
    return result


def _binary_for_command(tokens: list[str]) -> list[str]:
    tokens = _strip_redirections(tokens)
    while tokens and _ENV_ASSIGNMENT.match(tokens[0]):
        tokens = tokens[1:]
    if not tokens:
        return []

    head, rest = tokens[0], tokens[1:]
    if head in _RUNNERS:
        target = _first_positional(rest)
        return [head] + ([rest[target]] if target is not None else [])
    if head in _SUBCOMMAND_RUNNERS:
        sub_index = _first_positional(rest)
        sub = rest[sub_index] if sub_index is not None else None
        if sub_index is not None and sub in _SUBCOMMAND_RUNNERS[head]:
            args = rest[sub_index + 1 :]
            target = _first_positional(args)
            return [head] + ([args[target]] if target is not None else [])
        # `yarn eslint` runs the eslint binary
        if head == "yarn" and sub and sub not in _PM_COMMANDS:
            return [head, sub]
        return [head]
    return [head]


def get_binaries_from_script(script: str) -> list[str]:
    """
    Binary names invoked by a script command, in order of appearance.

    `NODE_ENV=test npx jest && tsc -p .` -> ["npx", "jest", "tsc"].
    Unbalanced quoting yields no binaries.
    """
    binaries: list[str] = []
    for command in _SEPARATORS.split(script.strip()):
        if not command:
            continue
        try:
            tokens = shlex.split(command)
        except ValueError:
            return []
        for name in _binary_for_command(tokens):
            # Local paths (./bin/x) and scoped package specs are not binaries.
            if name.startswith((".", "/", "$", "@")):
                continue
            if name not in binaries:
                binaries.append(name)
    return binaries
