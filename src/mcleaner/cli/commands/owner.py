"""Commands for attributing labels and paths to installed software."""

import typer

from mcleaner.cli.common.context import InventoryAppContext
from mcleaner.cli.common.options import ExecPathOpt
from mcleaner.cli.common.output import out


def owner(
    ctx: typer.Context,
    label: str = typer.Argument(..., help="Launchd / login item label or bundle id"),
    exec_path: str | None = ExecPathOpt,
):
    """
    Attribute a launchd or login-item label to its owner.
    """
    appctx: InventoryAppContext = ctx.obj

    attribution = appctx.resolver.resolve(label, exec_path)
    out.attribution_table(label, attribution, title="Label owner")


def path(
    ctx: typer.Context,
    target: str = typer.Argument(..., metavar="PATH", help="Filesystem path to attribute"),
):
    """
    Attribute a filesystem path (bundle, container, cache folder) to its owner.
    """
    appctx: InventoryAppContext = ctx.obj

    attribution = appctx.resolver.resolve_path(target)
    out.attribution_table(target, attribution, title="Path owner")
    if not attribution.installed and not attribution.is_unknown:
        out.warn("Owner could not be confirmed as installed")
