"""Commands for inspecting the installed software inventory."""

import typer

from mcleaner.cli.common.context import InventoryAppContext
from mcleaner.cli.common.exits import die, warn_exit
from mcleaner.cli.common.options import ListOpt
from mcleaner.cli.common.output import out


def inventory(
    ctx: typer.Context,
    list_index: bool = ListOpt,
):
    """
    Show what the inventory found (apps, Homebrew formulae and casks).
    """
    appctx: InventoryAppContext = ctx.obj

    out.inventory_summary(appctx.inventory.counts())

    if list_index:
        if not len(appctx.inventory):
            warn_exit("Inventory index is empty", code=0)
        out.index_table(appctx.inventory.entries, title="Index keys")


def lookup(
    ctx: typer.Context,
    key: str = typer.Argument(..., help="Exact index key (bundle id, name, path:..., package:...)"),
):
    """
    Look up an exact inventory index key.
    """
    appctx: InventoryAppContext = ctx.obj

    entry = appctx.inventory.lookup(key)
    if entry is None:
        die(f"Key not in inventory: {key}", code=1)

    out.index_table([entry], title="Index entry")
