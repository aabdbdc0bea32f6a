"""Export key naming convention: file path within a package -> public key."""

from __future__ import annotations

from dataclasses import dataclass

from workspace_convert.models import IDENTITY_KEY


@dataclass(frozen=True)
class ExportKeyConvention:
    module_root: str = "mod"
    # Longest first: ".d.ts" must be tried before ".ts".
    source_extensions: tuple[str, ...] = (".d.ts", ".ts")
    data_extensions: tuple[str, ...] = (".json",)

    def strip_extension(self, path: str) -> str | None:
        """Return ``path`` without its source extension, or None if unrecognized.

        Data files keep their extension; anything else is not exportable.
        """
        for ext in self.source_extensions:
            if path.endswith(ext):
                return path[: -len(ext)]
        if path.endswith(self.data_extensions):
            return path
        return None


DEFAULT_CONVENTION = ExportKeyConvention()


def export_key(relative_path: str, convention: ExportKeyConvention = DEFAULT_CONVENTION) -> str | None:
    """Map a ``/``-separated path inside a package to its export key.

    >>> export_key("mod.ts")
    '.'
    >>> export_key("unstable/mod.ts")
    './unstable'
    >>> export_key("concat.d.ts")
    './concat'
    """
    name = convention.strip_extension(relative_path.lstrip("/"))
    if name is None:
        return None
    return key_from_stem(name, convention)


def key_from_stem(stem: str, convention: ExportKeyConvention = DEFAULT_CONVENTION) -> str:
    """Collapse a trailing module-root basename and prefix the key with ``./``."""
    parts = stem.split("/")
    if parts[-1] == convention.module_root:
        parts = parts[:-1]
    if not parts:
        return IDENTITY_KEY
    return "./" + "/".join(parts)


def qualified_specifier(scope: str, package: str, key: str) -> str:
    """``@scope/pkg`` for the identity key, ``@scope/pkg/frag`` otherwise."""
    if key == IDENTITY_KEY:
        return f"{scope}/{package}"
    return f"{scope}/{package}/{key[2:]}"
