"""Shared file walking for the scanner and rewriter stages."""

from __future__ import annotations

import fnmatch
import os
from pathlib import Path
from typing import Iterator

from workspace_convert.errors import DiscoveryError


def _raise_unreadable(error: OSError) -> None:
    raise DiscoveryError(f"Cannot read {error.filename}: {error.strerror}") from error


def walk_files(directory: Path, skip_dirs: list[str] | None = None) -> Iterator[Path]:
    """Yield every file below ``directory`` in sorted order.

    Directories whose name matches a ``skip_dirs`` glob are not descended.
    An unreadable directory raises DiscoveryError.
    """
    skip_dirs = skip_dirs or []
    for dirpath, dirnames, filenames in os.walk(directory, onerror=_raise_unreadable):
        dirnames[:] = sorted(d for d in dirnames if not _should_skip(d, skip_dirs))
        for name in sorted(filenames):
            yield Path(dirpath) / name


def _should_skip(part: str, skip_dirs: list[str]) -> bool:
    return any(fnmatch.fnmatch(part, pattern) for pattern in skip_dirs)


def relative_posix(path: Path, base: Path) -> str:
    return path.relative_to(base).as_posix()
