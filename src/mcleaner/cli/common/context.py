"""Application context management for the CLI."""

from dataclasses import dataclass

from mcleaner.cli.common.output import out
from mcleaner.core.adapters.apps import AppScanner
from mcleaner.core.adapters.homebrew import HomebrewAdapter
from mcleaner.core.config import InventoryConfig, load_config
from mcleaner.core.inventory import Inventory, build_inventory
from mcleaner.core.resolver import OwnerResolver


@dataclass
class InventoryAppContext:
    """Application context holding the run's configuration, inventory and resolver."""

    config: InventoryConfig
    inventory: Inventory
    resolver: OwnerResolver


def build_inventory_context(
    *,
    app_roots: list[str] | None = None,
    no_brew: bool = False,
) -> InventoryAppContext:
    """Scan the system once and return the shared context for this invocation.

    Args:
        app_roots: Optional application roots replacing the configured ones.
        no_brew: Skip Homebrew scanning when True.

    Returns:
        InventoryAppContext: Context with the immutable inventory and a resolver.
    """
    config = load_config().with_overrides(app_roots=app_roots, no_brew=no_brew)
    packages = (
        HomebrewAdapter(timeout=config.brew_timeout) if config.brew_enabled else None
    )

    with out.status("Building installed software inventory..."):
        inventory = build_inventory(AppScanner(config.app_roots), packages)

    resolver = OwnerResolver(inventory, memoize=True, cache_roots=config.cache_roots)
    return InventoryAppContext(config=config, inventory=inventory, resolver=resolver)
