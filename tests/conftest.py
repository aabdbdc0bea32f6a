"""Shared fixtures: tree builder and an in-process module graph loader."""

import json
import os
import re
from pathlib import Path

import pytest

from workspace_convert.models import EdgeKind, ModuleGraphEdge

_IMPORT_RE = re.compile(r"""from\s+["'](\.\.?/[^"']+)["']""")


def write_tree(root: Path, files: dict) -> Path:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, dict):
            content = json.dumps(content, indent=2) + "\n"
        path.write_text(content, encoding="utf-8")
    return root


def regex_loader(files):
    """Follow relative ``from`` imports transitively, like a tiny analyzer."""
    edges = set()
    seen = set()
    queue = [Path(f) for f in files]
    while queue:
        current = queue.pop()
        if current in seen or not current.is_file():
            continue
        seen.add(current)
        for spec in _IMPORT_RE.findall(current.read_text(encoding="utf-8")):
            target = Path(os.path.normpath(current.parent / spec))
            edges.add(ModuleGraphEdge(current, target, EdgeKind.CODE))
            queue.append(target)
    return frozenset(edges)


@pytest.fixture
def make_tree(tmp_path):
    def _make(files: dict) -> Path:
        root = tmp_path / "std"
        root.mkdir(exist_ok=True)
        return write_tree(root, files).resolve()
    return _make


@pytest.fixture
def std_tree(make_tree):
    """Two packages where ``b`` depends on ``a``, plus an internal directory."""
    return make_tree({
        "deno.json": {"imports": {"foo": "npm:foo"}},
        "version.ts": 'export const VERSION = "0.210.0";\n',
        "README.md": 'import { a } from "./a/mod.ts";\n',
        "a/mod.ts": 'export * from "./util.ts";\n',
        "a/util.ts": "export const a = 1;\n",
        "a/util_test.ts": 'import { a } from "./util.ts";\n',
        "b/mod.ts": 'import { a } from "../a/mod.ts";\nexport const b = a;\n',
        "_internal/helper.ts": "export const h = 1;\n",
        "_tools/convert.ts": 'import { a } from "../a/mod.ts";\n',
    })


@pytest.fixture
def loader():
    return regex_loader
