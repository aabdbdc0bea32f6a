"""Generate per-package manifests and update the root workspace manifest."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from workspace_convert.errors import DiscoveryError
from workspace_convert.models import Package
from workspace_convert.scanner.export_keys import DEFAULT_CONVENTION, ExportKeyConvention
from workspace_convert.scanner.exports import build_export_table

logger = logging.getLogger(__name__)


def package_manifest(package: Package, scope: str, version: str) -> dict[str, Any]:
    """Return ``{name, version, exports}`` for one package.

    ``exports`` collapses to the entry path when the package only exports
    its root module.
    """
    exports: str | dict[str, str]
    if package.has_single_root_export():
        exports = package.exports[0].path
    else:
        exports = package.export_map()
    return {
        "name": f"{scope}/{package.name}",
        "version": version,
        "exports": exports,
    }


def write_package_manifests(
    packages: list[Package],
    scope: str,
    version: str,
    manifest_name: str = "deno.json",
    dry_run: bool = False,
) -> list[Path]:
    written: list[Path] = []
    for package in packages:
        path = package.root / manifest_name
        if not dry_run:
            write_json(path, package_manifest(package, scope, version))
        written.append(path)
    return written


def load_manifest(path: Path) -> dict[str, Any]:
    """Read a JSON object manifest, raising DiscoveryError when unusable."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise DiscoveryError(f"Cannot read manifest {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise DiscoveryError(f"Invalid JSON in manifest {path}: {e}") from e
    if not isinstance(data, dict):
        raise DiscoveryError(f"Manifest {path} is not a JSON object")
    return data


def apply_workspace(
    manifest: dict[str, Any],
    order: list[str],
    packages: list[Package],
    scope: str,
    registry: str,
    version: str,
) -> dict[str, Any]:
    """Return a copy of the root manifest with workspace members and import map."""
    updated = dict(manifest)
    updated["workspaces"] = [f"./{name}" for name in order]

    imports = dict(updated.get("imports") or {})
    for package in packages:
        name = f"{scope}/{package.name}"
        imports[name] = f"{registry}:{name}@^{version}"
        imports[f"{name}/"] = f"{registry}:/{name}@^{version}/"
    updated["imports"] = imports
    return updated


def sync_exports(
    package_dir: Path,
    convention: ExportKeyConvention = DEFAULT_CONVENTION,
    manifest_name: str = "deno.json",
    dry_run: bool = False,
) -> dict[str, Any]:
    """Rebuild one package's ``exports`` field in its existing manifest."""
    package_dir = package_dir.resolve()
    package = Package(name=package_dir.name, root=package_dir)
    package.exports = build_export_table(package, convention, manifest_name)

    manifest_path = package_dir / manifest_name
    manifest = load_manifest(manifest_path)
    manifest["exports"] = package.export_map()
    if not dry_run:
        write_json(manifest_path, manifest)
    logger.info("%s: %d exports", manifest_path, len(package.exports))
    return manifest


def write_json(path: Path, data: dict[str, Any]) -> None:
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
