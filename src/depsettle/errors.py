"""Exceptions raised for invalid user input (config, reference feeds, project roots)."""

from __future__ import annotations


class DepsettleError(Exception):
    """Base class for errors the CLI reports to the user."""


class ConfigError(DepsettleError, ValueError):
    """A config file or reference feed is unreadable or has the wrong shape."""


class ManifestError(DepsettleError):
    """The project root has no readable package.json."""
