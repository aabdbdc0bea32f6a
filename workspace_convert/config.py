"""Configuration for a conversion run."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

from workspace_convert.errors import DiscoveryError
from workspace_convert.scanner.export_keys import DEFAULT_CONVENTION, ExportKeyConvention

VERSION_PLACEHOLDER = "$STD_VERSION"

_VERSION_RE = re.compile(r"""export\s+const\s+VERSION\s*=\s*["']([^"']+)["']""")


@dataclass
class ConversionConfig:
    """Configuration for the conversion pipeline."""
    root: Path = field(default_factory=lambda: Path("."))
    scope: str = "@std"
    registry: str = "jsr"
    version: str | None = None
    version_file: str = "version.ts"
    manifest_name: str = "deno.json"
    key_convention: ExportKeyConvention = DEFAULT_CONVENTION
    rewrite_suffixes: tuple[str, ...] = (".ts", ".md")
    rewrite_skip_dirs: list[str] = field(default_factory=lambda: ["_tools", "testdata"])
    legacy_url_prefix: str = f"https://deno.land/std@{VERSION_PLACEHOLDER}/"
    analyzer_command: list[str] = field(default_factory=lambda: ["deno", "info", "--json"])
    analyzer_timeout: float | None = None
    allow_cycles: bool = False
    dry_run: bool = False

    @property
    def root_manifest(self) -> Path:
        return self.root / self.manifest_name


def resolve_version(config: ConversionConfig) -> str:
    """Return the explicit version or the one declared in the version file."""
    if config.version:
        return config.version

    path = config.root / config.version_file
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DiscoveryError(f"Cannot read version file {path}: {e}") from e

    m = _VERSION_RE.search(text)
    if not m:
        raise DiscoveryError(f"No VERSION constant found in {path}")
    return m.group(1)
