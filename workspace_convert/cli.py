"""Click CLI with convert, graph, and exports subcommands."""

from __future__ import annotations

import logging
import shlex
from pathlib import Path

import click

from workspace_convert import __version__
from workspace_convert.analysis import DependencyGraphBuilder
from workspace_convert.config import ConversionConfig
from workspace_convert.errors import ConversionError
from workspace_convert.exporter import sync_exports
from workspace_convert.pipeline import analyze_workspace, run_conversion

_ROOT = click.Path(exists=True, file_okay=False, path_type=Path)


def _progress(stage: str, current: int, total: int):
    if total > 0:
        click.echo(f"  {stage}: {current}/{total}", nl=(current == total))
    else:
        click.echo(f"  {stage}...")


@click.group()
@click.version_option(version=__version__)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """workspace-convert: Split a flat module tree into a package workspace."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


@cli.command()
@click.argument("root", type=_ROOT, default=".")
@click.option("--scope", default="@std", show_default=True, help="Package scope prefix")
@click.option("--registry", default="jsr", show_default=True, help="Registry used in the import map")
@click.option("--version-string", "version", help="Workspace version (default: read version.ts)")
@click.option("--legacy-prefix", help="Legacy absolute import URL prefix to rewrite")
@click.option("--analyzer", help="Module graph analyzer command, e.g. 'deno info --json'")
@click.option("--allow-cycles", is_flag=True, help="Order packages even if dependencies are cyclic")
@click.option("--dry-run", is_flag=True, help="Compute everything but write nothing")
def convert(
    root: Path,
    scope: str,
    registry: str,
    version: str | None,
    legacy_prefix: str | None,
    analyzer: str | None,
    allow_cycles: bool,
    dry_run: bool,
):
    """Convert ROOT into a workspace of packages."""
    config = ConversionConfig(
        root=root,
        scope=scope,
        registry=registry,
        version=version,
        allow_cycles=allow_cycles,
        dry_run=dry_run,
    )
    if legacy_prefix:
        config.legacy_url_prefix = legacy_prefix
    if analyzer:
        config.analyzer_command = shlex.split(analyzer)

    click.echo(f"Converting {root}{' (dry run)' if dry_run else ''}\n")
    try:
        result = run_conversion(config, progress=_progress)
    except ConversionError as e:
        raise click.ClickException(str(e))

    click.echo(
        f"\nDone! {len(result.packages)} package(s) at version {result.version}, "
        f"{len(result.rewritten_files)} file(s) rewritten"
    )
    click.echo("Workspace order:")
    for name in result.order:
        click.echo(f"  ./{name}")


@cli.command()
@click.argument("root", type=_ROOT, default=".")
@click.option("--analyzer", help="Module graph analyzer command")
@click.option("--allow-cycles", is_flag=True, help="Order packages even if dependencies are cyclic")
def graph(root: Path, analyzer: str | None, allow_cycles: bool):
    """Print packages in dependency order without changing anything."""
    config = ConversionConfig(root=root, allow_cycles=allow_cycles)
    if analyzer:
        config.analyzer_command = shlex.split(analyzer)

    try:
        result = analyze_workspace(config)
    except ConversionError as e:
        raise click.ClickException(str(e))

    export_counts = {p.name: len(p.exports) for p in result.packages}
    for name in result.order:
        deps = result.graph.dependencies_of(name)
        click.echo(
            f"{click.style(name, fg='cyan')}  "
            f"{click.style(f'{export_counts[name]} exports', dim=True)}"
        )
        for dep in deps:
            click.echo(f"  -> {dep}")

    for cycle in DependencyGraphBuilder().detect_cycles(result.graph):
        click.echo(click.style("cycle: " + " -> ".join(cycle), fg="red"))


@cli.command()
@click.argument("package_dir", type=_ROOT)
@click.option("--dry-run", is_flag=True, help="Print exports without writing the manifest")
def exports(package_dir: Path, dry_run: bool):
    """Regenerate the exports field of PACKAGE_DIR's manifest."""
    try:
        manifest = sync_exports(package_dir, dry_run=dry_run)
    except ConversionError as e:
        raise click.ClickException(str(e))

    for key, path in manifest["exports"].items():
        click.echo(f"  {key:<40} {path}")


if __name__ == "__main__":
    cli()
