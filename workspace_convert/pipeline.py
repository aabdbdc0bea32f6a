"""Conversion pipeline: discover -> exports -> module graph -> order -> rewrite -> manifests."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from workspace_convert.analysis import (
    DependencyGraphBuilder,
    ModuleGraphLoader,
    SubprocessModuleGraphLoader,
    topological_order,
)
from workspace_convert.config import ConversionConfig, resolve_version
from workspace_convert.exporter import (
    apply_workspace,
    load_manifest,
    write_json,
    write_package_manifests,
)
from workspace_convert.models import ConversionResult, Package
from workspace_convert.rewriter import ImportRewriter, iter_rewrite_targets, rewrite_imports
from workspace_convert.scanner import scan_workspace

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[str, int, int], None]


def default_loader(config: ConversionConfig) -> ModuleGraphLoader:
    manifest = config.root_manifest.resolve()
    return SubprocessModuleGraphLoader(
        command=config.analyzer_command,
        config_file=manifest if manifest.exists() else None,
        cwd=config.root.resolve(),
        timeout=config.analyzer_timeout,
    )


def export_files(packages: list[Package]) -> list[Path]:
    return [
        (package.root / entry.path).resolve()
        for package in packages
        for entry in package.exports
    ]


def analyze_workspace(
    config: ConversionConfig,
    loader: ModuleGraphLoader | None = None,
    progress: ProgressCallback | None = None,
) -> ConversionResult:
    """Read-only stages: packages, exports, package graph and order."""
    root = config.root.resolve()

    if progress:
        progress("Scanning", 0, 1)
    packages = scan_workspace(root, config.key_convention, config.manifest_name)
    if progress:
        progress("Scanning", 1, 1)

    if progress:
        progress("Analyzing", 0, 1)
    loader = loader or default_loader(config)
    edges = loader(export_files(packages))
    graph = DependencyGraphBuilder().build(packages, edges)
    order = topological_order(graph, allow_cycles=config.allow_cycles)
    if progress:
        progress("Analyzing", 1, 1)

    return ConversionResult(
        root=root,
        packages=packages,
        graph=graph,
        order=order,
    )


def run_conversion(
    config: ConversionConfig,
    loader: ModuleGraphLoader | None = None,
    progress: ProgressCallback | None = None,
) -> ConversionResult:
    """Run the full conversion against ``config.root``."""
    version = resolve_version(config)
    result = analyze_workspace(config, loader, progress)
    result.version = version
    root_manifest_path = result.root / config.manifest_name
    root_manifest = load_manifest(root_manifest_path)

    # Rewrite
    rewriter = ImportRewriter(
        result.root,
        result.packages,
        scope=config.scope,
        legacy_url_prefix=config.legacy_url_prefix,
        convention=config.key_convention,
    )
    files = list(iter_rewrite_targets(
        result.root, config.rewrite_suffixes, config.rewrite_skip_dirs,
    ))
    if progress:
        progress("Rewriting", 0, len(files))
    result.rewritten_files = rewrite_imports(rewriter, files, dry_run=config.dry_run)
    if progress:
        progress("Rewriting", len(files), len(files))

    # Manifests
    if progress:
        progress("Writing manifests", 0, 1)
    result.manifests_written = write_package_manifests(
        result.packages, config.scope, result.version, config.manifest_name, config.dry_run,
    )
    updated = apply_workspace(
        root_manifest, result.order, result.packages,
        config.scope, config.registry, result.version,
    )
    if not config.dry_run:
        write_json(root_manifest_path, updated)
    result.manifests_written.append(root_manifest_path)
    if progress:
        progress("Writing manifests", 1, 1)

    logger.info(
        "Converted %d packages (%d files rewritten)",
        len(result.packages), len(result.rewritten_files),
    )
    return result
