"""Export table builder: walks a package and lists its public modules."""

from __future__ import annotations

import logging

from workspace_convert.errors import DuplicateExportError
from workspace_convert.models import ExportEntry, Package
from workspace_convert.scanner.base import relative_posix, walk_files
from workspace_convert.scanner.export_keys import (
    DEFAULT_CONVENTION,
    ExportKeyConvention,
    key_from_stem,
)

logger = logging.getLogger(__name__)

_FIXTURE_DIRS = {"example", "testdata"}


def build_export_table(
    package: Package,
    convention: ExportKeyConvention = DEFAULT_CONVENTION,
    manifest_name: str = "deno.json",
) -> list[ExportEntry]:
    """Return the package's export entries sorted by key."""
    by_key: dict[str, str] = {}

    for file_path in walk_files(package.root):
        rel = relative_posix(file_path, package.root)
        stem = convention.strip_extension(rel)
        if stem is None:
            continue
        if _is_excluded(rel, stem, manifest_name):
            logger.debug("Not exported: %s/%s", package.name, rel)
            continue

        key = key_from_stem(stem, convention)
        path = "./" + rel
        if key in by_key:
            raise DuplicateExportError(package.name, key, by_key[key], path)
        by_key[key] = path

    # sorted() on str compares code points, independent of the locale
    return [ExportEntry(key=key, path=by_key[key]) for key in sorted(by_key)]


def populate_exports(
    packages: list[Package],
    convention: ExportKeyConvention = DEFAULT_CONVENTION,
    manifest_name: str = "deno.json",
) -> None:
    for package in packages:
        package.exports = build_export_table(package, convention, manifest_name)
        logger.debug("%s: %d exports", package.name, len(package.exports))


def _is_excluded(rel: str, stem: str, manifest_name: str) -> bool:
    parts = rel.split("/")
    if any(part.startswith((".", "_")) for part in parts):
        return True
    if parts[-1] == manifest_name:
        return True

    basename = stem.split("/")[-1]
    if basename == "test" or basename.endswith("_test"):
        return True
    if basename.endswith("_example"):
        return True
    return any(part in _FIXTURE_DIRS for part in parts[:-1])
