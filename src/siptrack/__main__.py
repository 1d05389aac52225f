from siptrack.ui.cli import cli

cli()
