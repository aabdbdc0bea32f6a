from workspace_convert.cli import cli

cli()
