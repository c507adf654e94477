"""CLI application for macOS installed-software ownership checks."""

import typer

from mcleaner.cli.commands.inventory import inventory, lookup
from mcleaner.cli.commands.owner import owner, path
from mcleaner.cli.common.context import build_inventory_context
from mcleaner.cli.common.log_setup import configure_logging
from mcleaner.cli.common.options import AppRootOpt, ExplainOpt, NoBrewOpt

app = typer.Typer(
    help="mcleaner - attribute macOS files and launchd labels to installed software",
    no_args_is_help=True,
)


@app.callback()
def _init(
    ctx: typer.Context,
    explain: bool = ExplainOpt,
    app_root: list[str] = AppRootOpt,
    no_brew: bool = NoBrewOpt,
):
    """Build the inventory once per invocation (inspection only, nothing is moved)."""
    if ctx.resilient_parsing:
        return
    configure_logging(explain)
    ctx.obj = build_inventory_context(app_roots=app_root or None, no_brew=no_brew)


app.command(name="inventory")(inventory)
app.command(name="lookup")(lookup)
app.command(name="owner")(owner)
app.command(name="path")(path)


if __name__ == "__main__":
    app()
