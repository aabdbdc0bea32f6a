"""Scanner layer: package discovery and export tables."""

from __future__ import annotations

from pathlib import Path

from workspace_convert.models import Package
from workspace_convert.scanner.export_keys import (
    DEFAULT_CONVENTION,
    ExportKeyConvention,
    export_key,
    qualified_specifier,
)
from workspace_convert.scanner.exports import build_export_table, populate_exports
from workspace_convert.scanner.packages import discover_packages, is_package_dir_name


def scan_workspace(
    root: Path,
    convention: ExportKeyConvention = DEFAULT_CONVENTION,
    manifest_name: str = "deno.json",
) -> list[Package]:
    """Discover packages under ``root`` and build each export table."""
    packages = discover_packages(root)
    populate_exports(packages, convention, manifest_name)
    return packages


__all__ = [
    "ExportKeyConvention",
    "build_export_table",
    "discover_packages",
    "export_key",
    "is_package_dir_name",
    "populate_exports",
    "qualified_specifier",
    "scan_workspace",
]
