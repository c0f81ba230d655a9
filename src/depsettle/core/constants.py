"""Built-in names shared by the manifest, reference and reconciliation layers."""

from __future__ import annotations

ROOT_WORKSPACE_NAME = "."

MANIFEST_FILE = "package.json"

CONFIG_FILE = "depsettle.json"

# Binaries expected on every host; never reported and never need a dependency.
IGNORED_GLOBAL_BINARIES = (
    "bun",
    "bunx",
    "deno",
    "git",
    "node",
    "npm",
    "npx",
    "pnpm",
    "yarn",
)

IGNORED_DEPENDENCIES = ("depsettle", "typescript")

# @types/* packages with no installable counterpart.
IGNORE_DEFINITELY_TYPED = ("node", "bun")

TYPES_SCOPE = "@types"

ISSUE_TYPES = (
    "dependencies",
    "devDependencies",
    "optionalPeerDependencies",
    "unlisted",
    "binaries",
)

ISSUE_TITLES = {
    "dependencies": "Unused dependencies",
    "devDependencies": "Unused devDependencies",
    "optionalPeerDependencies": "Referenced optional peerDependencies",
    "unlisted": "Unlisted dependencies",
    "binaries": "Unlisted binaries",
}

# Node.js core modules (as listed by `require("module").builtinModules`).
NODE_BUILTIN_MODULES = frozenset(
    {
        "assert",
        "assert/strict",
        "async_hooks",
        "buffer",
        "child_process",
        "cluster",
        "console",
        "constants",
        "crypto",
        "dgram",
        "diagnostics_channel",
        "dns",
        "dns/promises",
        "domain",
        "events",
        "fs",
        "fs/promises",
        "http",
        "http2",
        "https",
        "inspector",
        "module",
        "net",
        "os",
        "path",
        "path/posix",
        "path/win32",
        "perf_hooks",
        "process",
        "punycode",
        "querystring",
        "readline",
        "readline/promises",
        "repl",
        "stream",
        "stream/consumers",
        "stream/promises",
        "stream/web",
        "string_decoder",
        "sys",
        "timers",
        "timers/promises",
        "tls",
        "trace_events",
        "tty",
        "url",
        "util",
        "util/types",
        "v8",
        "vm",
        "wasi",
        "worker_threads",
        "zlib",
    }
)
