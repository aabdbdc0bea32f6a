"""Top-level package discovery."""

from __future__ import annotations

import logging
from pathlib import Path

from workspace_convert.errors import DiscoveryError
from workspace_convert.models import Package

logger = logging.getLogger(__name__)


def is_package_dir_name(name: str) -> bool:
    return not name.startswith((".", "_"))


def discover_packages(root: Path) -> list[Package]:
    """Return one Package per qualifying top-level directory, sorted by name."""
    root = root.resolve()
    try:
        entries = list(root.iterdir())
    except OSError as e:
        raise DiscoveryError(f"Cannot list workspace root {root}: {e}") from e

    packages = [
        Package(name=entry.name, root=entry)
        for entry in entries
        if entry.is_dir() and is_package_dir_name(entry.name)
    ]
    packages.sort(key=lambda p: p.name)
    logger.info("Discovered %d packages", len(packages))
    return packages
