"""Tests for the click CLI."""

import json
import shlex
import sys

import pytest
from click.testing import CliRunner

from workspace_convert.cli import cli


@pytest.fixture
def analyzer(tmp_path):
    """An analyzer command that reports ``b/mod.ts -> a/mod.ts``."""
    script = tmp_path / "fake_analyzer.py"
    script.write_text(
        "import json, sys\n"
        "from pathlib import Path\n"
        "root = Path.cwd()\n"
        "graph = {'modules': [{\n"
        "    'specifier': (root / 'b' / 'mod.ts').as_uri(),\n"
        "    'dependencies': [{'code': {'specifier': (root / 'a' / 'mod.ts').as_uri()}}],\n"
        "}]}\n"
        "print(json.dumps(graph))\n",
        encoding="utf-8",
    )
    return f"{shlex.quote(sys.executable)} {shlex.quote(str(script))}"


def test_convert(std_tree, analyzer):
    runner = CliRunner()
    result = runner.invoke(cli, ["convert", str(std_tree), "--analyzer", analyzer])
    assert result.exit_code == 0, result.output
    assert "2 package(s) at version 0.210.0" in result.output
    assert result.output.rstrip().endswith("./a\n  ./b")

    root_manifest = json.loads((std_tree / "deno.json").read_text())
    assert root_manifest["workspaces"] == ["./a", "./b"]


def test_convert_dry_run(std_tree, analyzer):
    before = (std_tree / "b" / "mod.ts").read_text()
    result = CliRunner().invoke(cli, ["convert", str(std_tree), "--analyzer", analyzer, "--dry-run"])
    assert result.exit_code == 0, result.output
    assert "(dry run)" in result.output
    assert (std_tree / "b" / "mod.ts").read_text() == before


def test_convert_custom_scope(std_tree, analyzer):
    result = CliRunner().invoke(cli, [
        "convert", str(std_tree), "--analyzer", analyzer,
        "--scope", "@lib", "--version-string", "2.0.0",
    ])
    assert result.exit_code == 0, result.output
    assert (std_tree / "b" / "mod.ts").read_text().startswith('import { a } from "@lib/a";')
    manifest = json.loads((std_tree / "b" / "deno.json").read_text())
    assert manifest["name"] == "@lib/b"
    assert manifest["version"] == "2.0.0"


def test_convert_analyzer_failure(std_tree):
    result = CliRunner().invoke(cli, ["convert", str(std_tree), "--analyzer", "no-such-analyzer-xyz"])
    assert result.exit_code != 0
    assert "Analyzer executable not found" in result.output


def test_graph(std_tree, analyzer):
    result = CliRunner().invoke(cli, ["graph", str(std_tree), "--analyzer", analyzer])
    assert result.exit_code == 0, result.output
    lines = result.output.splitlines()
    assert lines[0].startswith("a")
    assert lines[1].startswith("b")
    assert lines[2] == "  -> a"
    assert not (std_tree / "a" / "deno.json").exists()


def test_exports(make_tree):
    root = make_tree({
        "fs/deno.json": {"name": "@std/fs", "version": "0.1.0", "exports": {}},
        "fs/mod.ts": "",
        "fs/walk.ts": "",
    })
    result = CliRunner().invoke(cli, ["exports", str(root / "fs")])
    assert result.exit_code == 0, result.output
    assert "./walk" in result.output
    assert json.loads((root / "fs" / "deno.json").read_text())["exports"] == {
        ".": "./mod.ts",
        "./walk": "./walk.ts",
    }


def test_exports_missing_manifest(make_tree):
    root = make_tree({"fs/mod.ts": ""})
    result = CliRunner().invoke(cli, ["exports", str(root / "fs")])
    assert result.exit_code != 0
    assert "Cannot read manifest" in result.output
