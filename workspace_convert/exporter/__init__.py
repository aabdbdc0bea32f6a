"""Exporter layer."""

from workspace_convert.exporter.manifest_generator import (
    apply_workspace,
    load_manifest,
    package_manifest,
    sync_exports,
    write_json,
    write_package_manifests,
)

__all__ = [
    "apply_workspace",
    "load_manifest",
    "package_manifest",
    "sync_exports",
    "write_json",
    "write_package_manifests",
]
