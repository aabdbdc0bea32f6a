"""Rewrite relative and legacy absolute imports into workspace specifiers."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterator

from workspace_convert.analysis.dependency_graph import PackageLocator
from workspace_convert.errors import DiscoveryError, ResolutionError
from workspace_convert.models import (
    IDENTITY_KEY,
    ImportKind,
    ImportReference,
    Package,
    RewrittenFile,
)
from workspace_convert.rewriter.import_scanner import compile_import_pattern, find_specifiers
from workspace_convert.scanner.base import relative_posix, walk_files
from workspace_convert.scanner.export_keys import (
    DEFAULT_CONVENTION,
    ExportKeyConvention,
    export_key,
    qualified_specifier,
)

logger = logging.getLogger(__name__)


class ImportRewriter:
    """Resolve every import specifier in a file and compute its replacement."""

    def __init__(
        self,
        root: Path,
        packages: list[Package],
        scope: str = "@std",
        legacy_url_prefix: str = "https://deno.land/std@$STD_VERSION/",
        convention: ExportKeyConvention = DEFAULT_CONVENTION,
    ):
        self.root = root.resolve()
        self.packages = {p.name: p for p in packages}
        self.scope = scope
        self.legacy_url_prefix = legacy_url_prefix
        self.convention = convention
        self._locator = PackageLocator(packages)
        self._pattern = compile_import_pattern(legacy_url_prefix)

    def scan(self, file_path: Path, text: str) -> list[ImportReference]:
        """Return the resolved import references of one file, in text order."""
        current_group = self._group_of(file_path)
        refs: list[ImportReference] = []

        for match in find_specifiers(text, self._pattern):
            if match.legacy:
                rel = match.specifier[len(self.legacy_url_prefix):]
                target = Path(os.path.normpath(self.root / rel))
            else:
                target = Path(os.path.normpath(file_path.parent / match.specifier))

            target_pkg = self._locator.package_of(target)
            same_group = (
                current_group is not None and self._group_of(target) == current_group
            )
            if not match.legacy and same_group:
                kind = ImportKind.RELATIVE_SAME_PACKAGE
                replacement = _relative_specifier(file_path.parent, target)
            elif target_pkg is None:
                raise ResolutionError(file_path, match.specifier)
            else:
                kind = (
                    ImportKind.LEGACY_ABSOLUTE if match.legacy
                    else ImportKind.RELATIVE_CROSS_PACKAGE
                )
                replacement = self._qualify(file_path, match.specifier, target_pkg, target)

            refs.append(ImportReference(
                specifier=match.specifier,
                start=match.start,
                end=match.end,
                kind=kind,
                package=target_pkg,
                target=target,
                replacement=replacement,
            ))
        return refs

    def rewrite_text(self, file_path: Path, text: str) -> tuple[str, list[ImportReference]]:
        refs = self.scan(file_path, text)
        return apply_references(text, refs), refs

    def _group_of(self, path: Path) -> str | None:
        """Owning package, else the unpublished top-level directory holding ``path``.

        Root-level files belong to no group.
        """
        package = self._locator.package_of(path)
        if package is not None:
            return package
        if not path.is_relative_to(self.root):
            return None
        parts = path.relative_to(self.root).parts
        return parts[0] if len(parts) > 1 else None

    def _qualify(self, file_path: Path, specifier: str, package_name: str, target: Path) -> str:
        package = self.packages[package_name]
        rel = relative_posix(target, package.root)
        key = IDENTITY_KEY if rel == "." else export_key(rel, self.convention)
        if key is None:
            # Documents and other non-module files keep their path.
            logger.warning("%s links %s, which is not a module", file_path, specifier)
            key = "./" + rel
        elif key not in package.export_map():
            logger.warning(
                "%s imports %s, which %s does not export", file_path, specifier, package_name,
            )
        return qualified_specifier(self.scope, package_name, key)


def apply_references(text: str, refs: list[ImportReference]) -> str:
    """Splice each replacement over its recorded span."""
    parts: list[str] = []
    cursor = 0
    for ref in sorted(refs, key=lambda r: r.start):
        parts.append(text[cursor:ref.start])
        parts.append(ref.replacement)
        cursor = ref.end
    parts.append(text[cursor:])
    return "".join(parts)


def resolve_qualified(specifier: str, packages: list[Package], scope: str = "@std") -> Path | None:
    """Resolve ``@scope/pkg[/frag]`` through the package's export map."""
    prefix = scope + "/"
    if not specifier.startswith(prefix):
        return None
    name, _, fragment = specifier[len(prefix):].partition("/")
    key = "./" + fragment if fragment else IDENTITY_KEY
    for package in packages:
        if package.name == name:
            path = package.export_map().get(key)
            return None if path is None else Path(os.path.normpath(package.root / path))
    return None


def iter_rewrite_targets(
    root: Path,
    suffixes: tuple[str, ...] = (".ts", ".md"),
    skip_dirs: list[str] | None = None,
) -> Iterator[Path]:
    """Yield every file below ``root`` that may hold imports.

    Hidden directories and those matching ``skip_dirs`` are not descended.
    """
    skip = [".*"] + list(skip_dirs or [])
    for file_path in walk_files(root.resolve(), skip):
        if file_path.name.endswith(suffixes):
            yield file_path


def rewrite_imports(
    rewriter: ImportRewriter,
    files: list[Path],
    dry_run: bool = False,
) -> list[RewrittenFile]:
    """Rewrite imports in ``files``; every file is resolved before any is written."""
    planned: list[tuple[Path, str, list[ImportReference]]] = []
    for file_path in files:
        # Bytes, so line endings survive untouched.
        try:
            text = file_path.read_bytes().decode("utf-8")
        except UnicodeDecodeError as e:
            raise DiscoveryError(f"Cannot decode {file_path} as UTF-8: {e}") from e
        except OSError as e:
            raise DiscoveryError(f"Cannot read {file_path}: {e}") from e
        new_text, refs = rewriter.rewrite_text(file_path, text)
        if new_text != text:
            planned.append((file_path, new_text, refs))

    if not dry_run:
        for file_path, new_text, _ in planned:
            file_path.write_bytes(new_text.encode("utf-8"))

    logger.info(
        "%s imports in %d of %d files",
        "Would rewrite" if dry_run else "Rewrote", len(planned), len(files),
    )
    return [RewrittenFile(path=path, references=refs) for path, _, refs in planned]


def _relative_specifier(from_dir: Path, target: Path) -> str:
    rel = Path(os.path.relpath(target, from_dir)).as_posix()
    if not rel.startswith("../"):
        rel = "./" + rel
    return rel
