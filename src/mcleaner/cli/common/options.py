"""Common CLI options for the CLI."""

import typer

ExplainOpt = typer.Option(
    False,
    "--explain",
    "-e",
    help="Log how each owner was (or was not) attributed",
)

AppRootOpt = typer.Option(
    [],
    "--app-root",
    help="Application root to scan (repeatable, replaces the defaults)",
    show_default=False,
)

NoBrewOpt = typer.Option(
    False,
    "--no-brew",
    help="Skip Homebrew formulae and casks",
)

ExecPathOpt = typer.Option(
    None,
    "--exec-path",
    "-x",
    help="Program path of the launchd item (ProgramArguments[0])",
)

ListOpt = typer.Option(
    False,
    "--list",
    "-l",
    help="Also print every index key",
)
