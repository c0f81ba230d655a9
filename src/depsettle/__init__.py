"""depsettle: find unused, unlisted and misclassified dependencies in JS monorepos."""

from importlib.metadata import version, PackageNotFoundError

from depsettle.api import (
    analyze_project,
    build_store,
    feed_references,
    list_workspaces,
    load_references,
    settle,
    FileReferences,
)
from depsettle.core.models import ConfigurationHint, Issue, Report, Workspace

__all__ = [
    "analyze_project",
    "build_store",
    "feed_references",
    "list_workspaces",
    "load_references",
    "settle",
    "FileReferences",
    "ConfigurationHint",
    "Issue",
    "Report",
    "Workspace",
    "__version__",
]

try:
    __version__ = version("depsettle")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed as package
