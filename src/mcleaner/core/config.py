"""Inventory configuration.

Defaults describe a stock macOS install. Environment variables can replace
the application roots, disable Homebrew scanning or change the subprocess
timeout; CLI options override both.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Mapping

from mcleaner.core.heuristics import default_cache_roots
from mcleaner.core.models import OwnerSource

# Resolved targets under these roots are system apps wherever they were found.
SYSTEM_APP_ROOTS: tuple[str, ...] = (
    "/System/Applications",
    "/System/Cryptexes/App/System/Applications",
)


@dataclass(frozen=True)
class AppRoot:
    """An application root directory and the source its apps default to."""

    path: str
    source: OwnerSource = OwnerSource.USER_APP


def is_system_path(path: str) -> bool:
    """True when `path` lies under a system application root."""
    return any(path == root or path.startswith(root + "/") for root in SYSTEM_APP_ROOTS)


def default_app_roots() -> list[AppRoot]:
    """Return the scan roots in tie-break order: system, global, per-user."""
    return [
        AppRoot("/System/Applications", OwnerSource.SYSTEM_APP),
        AppRoot("/Applications", OwnerSource.USER_APP),
        AppRoot(str(Path.home() / "Applications"), OwnerSource.USER_APP),
    ]


def app_root_for(path: str) -> AppRoot:
    """Build an AppRoot for a plain path, classifying system roots."""
    source = OwnerSource.SYSTEM_APP if is_system_path(path) else OwnerSource.USER_APP
    return AppRoot(path, source)


@dataclass(frozen=True)
class InventoryConfig:
    """
    Settings for building the inventory.

    Attributes:
        app_roots: Application roots, scanned in order.
        brew_enabled: Whether Homebrew formulae/casks are scanned.
        brew_timeout: Timeout in seconds for each `brew` invocation.
        cache_roots: User cache roots used by path attribution.
    """

    app_roots: tuple[AppRoot, ...] = field(default_factory=lambda: tuple(default_app_roots()))
    brew_enabled: bool = True
    brew_timeout: int = 60
    cache_roots: tuple[str, ...] = field(default_factory=lambda: tuple(default_cache_roots()))

    _APP_ROOTS_ENV = "MCLEANER_APP_ROOTS"
    _BREW_DISABLE_ENV = "MCLEANER_BREW_DISABLE"
    _BREW_TIMEOUT_ENV = "MCLEANER_BREW_TIMEOUT"
    _DEFAULT_BREW_TIMEOUT = 60

    def with_overrides(
        self,
        *,
        app_roots: list[str] | None = None,
        no_brew: bool = False,
    ) -> InventoryConfig:
        """Return a copy with CLI overrides applied."""
        cfg = self
        if app_roots:
            cfg = replace(cfg, app_roots=tuple(app_root_for(p) for p in app_roots))
        if no_brew:
            cfg = replace(cfg, brew_enabled=False)
        return cfg


def _brew_timeout(raw: str | None) -> int:
    """Parse the timeout override, falling back to the default."""
    if raw is None:
        return InventoryConfig._DEFAULT_BREW_TIMEOUT
    try:
        value = int(raw)
    except ValueError:
        return InventoryConfig._DEFAULT_BREW_TIMEOUT
    return value if value > 0 else InventoryConfig._DEFAULT_BREW_TIMEOUT


def load_config(env: Mapping[str, str] | None = None) -> InventoryConfig:
    """
    Load the inventory configuration from the environment.

    - MCLEANER_APP_ROOTS: `os.pathsep`-separated roots replacing the defaults.
    - MCLEANER_BREW_DISABLE: `1`, `true` or `yes` skips Homebrew.
    - MCLEANER_BREW_TIMEOUT: positive integer seconds (default 60).
    """
    env = os.environ if env is None else env

    cfg = InventoryConfig()
    raw_roots = env.get(InventoryConfig._APP_ROOTS_ENV, "").strip()
    if raw_roots:
        roots = [p for p in raw_roots.split(os.pathsep) if p.strip()]
        cfg = cfg.with_overrides(app_roots=roots)

    disabled = env.get(InventoryConfig._BREW_DISABLE_ENV, "").strip().lower()
    return replace(
        cfg,
        brew_enabled=disabled not in {"1", "true", "yes"},
        brew_timeout=_brew_timeout(env.get(InventoryConfig._BREW_TIMEOUT_ENV)),
    )
