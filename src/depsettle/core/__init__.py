"""Core library: manifest store, reference tracking, peer-host index, reconciliation, hints."""

from depsettle.core.hints import get_configuration_hints
from depsettle.core.hosts import HostIndex
from depsettle.core.manifest import ManifestStore, PackageManifest, parse_package_json
from depsettle.core.models import (
    ConfigurationHint,
    DependencyIssues,
    Issue,
    ManifestRecord,
    Report,
    Workspace,
)
from depsettle.core.reconcile import is_referenced_dependency, settle_dependency_issues
from depsettle.core.references import ReferenceTracker
from depsettle.core.store import DependencyStore

__all__ = [
    "get_configuration_hints",
    "HostIndex",
    "ManifestStore",
    "PackageManifest",
    "parse_package_json",
    "ConfigurationHint",
    "DependencyIssues",
    "Issue",
    "ManifestRecord",
    "Report",
    "Workspace",
    "is_referenced_dependency",
    "settle_dependency_issues",
    "ReferenceTracker",
    "DependencyStore",
]
