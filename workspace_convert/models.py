"""Data models for the workspace conversion pipeline."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path

IDENTITY_KEY = "."


class EdgeKind(enum.Enum):
    CODE = "code"
    TYPE = "types"


class ImportKind(enum.Enum):
    RELATIVE_SAME_PACKAGE = "relative_same_package"
    RELATIVE_CROSS_PACKAGE = "relative_cross_package"
    LEGACY_ABSOLUTE = "legacy_absolute"


@dataclass(frozen=True)
class ExportEntry:
    """A public export: key (``"."`` or ``"./frag"``) -> ``./``-prefixed path."""
    key: str
    path: str


@dataclass
class Package:
    """Result from the discovery stage."""
    name: str
    root: Path
    exports: list[ExportEntry] = field(default_factory=list)

    def export_map(self) -> dict[str, str]:
        return {entry.key: entry.path for entry in self.exports}

    def has_single_root_export(self) -> bool:
        return len(self.exports) == 1 and self.exports[0].key == IDENTITY_KEY


@dataclass(frozen=True)
class ModuleGraphEdge:
    """File-level dependency reported by the module analyzer."""
    source: Path
    target: Path
    kind: EdgeKind


@dataclass
class PackageDependencyGraph:
    packages: list[str] = field(default_factory=list)  # discovery order
    edges: set[tuple[str, str]] = field(default_factory=set)  # (from, to)

    def dependencies_of(self, name: str) -> list[str]:
        return sorted(to for frm, to in self.edges if frm == name)

    def add_edge(self, source: str, target: str) -> None:
        if source == target:
            return
        self.edges.add((source, target))


@dataclass
class ImportReference:
    """One import specifier found in a file, with its rewrite."""
    specifier: str
    start: int
    end: int
    kind: ImportKind
    package: str | None
    target: Path
    replacement: str


@dataclass
class RewrittenFile:
    path: Path
    references: list[ImportReference] = field(default_factory=list)


@dataclass
class ConversionResult:
    """Result of a full conversion run."""
    root: Path
    version: str = ""
    packages: list[Package] = field(default_factory=list)
    graph: PackageDependencyGraph = field(default_factory=PackageDependencyGraph)
    order: list[str] = field(default_factory=list)
    rewritten_files: list[RewrittenFile] = field(default_factory=list)
    manifests_written: list[Path] = field(default_factory=list)
