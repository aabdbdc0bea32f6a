"""Module graph loader: runs the external analyzer over every export.

The analyzer is given one synthetic entry module that imports each exported
file by absolute ``file://`` URL, and must print a JSON document of the form::

    {"modules": [{"specifier": "file:///...",
                  "dependencies": [{"code": {"specifier": "..."},
                                    "types": {"specifier": "..."}}]}]}

Only ``file://`` modules take part in the graph.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Callable, Iterable
from urllib.parse import unquote, urlparse

from pydantic import BaseModel, ValidationError

from workspace_convert.errors import AnalyzerError
from workspace_convert.models import EdgeKind, ModuleGraphEdge

logger = logging.getLogger(__name__)

ModuleGraphLoader = Callable[[list[Path]], frozenset[ModuleGraphEdge]]


class SpecifierRef(BaseModel):
    specifier: str | None = None


class ModuleDependency(BaseModel):
    code: SpecifierRef | None = None
    types: SpecifierRef | None = None


class ModuleInfo(BaseModel):
    specifier: str
    dependencies: list[ModuleDependency] | None = None


class ModuleGraphDocument(BaseModel):
    modules: list[ModuleInfo]


def build_entry_module(files: Iterable[Path]) -> str:
    """Return a ``data:`` URL for a module importing every file."""
    imports = "".join(f'import "{path.as_uri()}";' for path in sorted(files))
    return "data:application/javascript," + imports


def file_url_to_path(specifier: str) -> Path | None:
    parsed = urlparse(specifier)
    if parsed.scheme != "file":
        return None
    return Path(unquote(parsed.path))


def parse_module_graph(raw: str | bytes) -> frozenset[ModuleGraphEdge]:
    """Validate analyzer output and flatten it into file-level edges."""
    try:
        document = ModuleGraphDocument.model_validate_json(raw)
    except ValidationError as e:
        raise AnalyzerError(f"Malformed module graph output: {e}") from e

    edges: set[ModuleGraphEdge] = set()
    for module in document.modules:
        source = file_url_to_path(module.specifier)
        if source is None:
            continue
        for dep in module.dependencies or []:
            for ref, kind in ((dep.code, EdgeKind.CODE), (dep.types, EdgeKind.TYPE)):
                if ref is None or ref.specifier is None:
                    continue
                target = file_url_to_path(ref.specifier)
                if target is not None:
                    edges.add(ModuleGraphEdge(source=source, target=target, kind=kind))
    return frozenset(edges)


class SubprocessModuleGraphLoader:
    """Run ``<command> [--config <manifest>] <entry>`` and parse its stdout."""

    def __init__(
        self,
        command: list[str],
        config_file: Path | None = None,
        cwd: Path | None = None,
        timeout: float | None = None,
    ):
        self.command = command
        self.config_file = config_file
        self.cwd = cwd
        self.timeout = timeout

    def build_args(self, files: list[Path]) -> list[str]:
        args = list(self.command)
        if self.config_file is not None:
            args += ["--config", str(self.config_file)]
        args.append(build_entry_module(files))
        return args

    def __call__(self, files: list[Path]) -> frozenset[ModuleGraphEdge]:
        args = self.build_args(files)
        logger.debug("Running analyzer: %s ... (%d modules)", " ".join(args[:-1]), len(files))
        try:
            proc = subprocess.run(
                args,
                cwd=self.cwd,
                capture_output=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise AnalyzerError(f"Analyzer executable not found: {args[0]}") from e
        except OSError as e:
            raise AnalyzerError(f"Cannot run analyzer {args[0]}: {e}") from e
        except subprocess.TimeoutExpired as e:
            raise AnalyzerError(f"Analyzer timed out after {self.timeout}s") from e

        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace").strip()
            raise AnalyzerError(f"Analyzer exited with status {proc.returncode}: {stderr}")

        edges = parse_module_graph(proc.stdout)
        logger.info("Module graph: %d file-level edges", len(edges))
        return edges
