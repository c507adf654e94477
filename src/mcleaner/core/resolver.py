"""Owner resolution entry points.

`resolve_owner` attributes a launchd/login-item label (optionally with its
program path) to an installed owner by running the tiered strategies in
`mcleaner.core.strategies`. `resolve_owner_from_path` does the same for
concrete filesystem paths found by cache, disk and leftovers scans.

Both functions are total: they return an `OwnerAttribution` for any
input, including empty strings, an empty inventory or malformed paths.
"Unknown" is a valid result, not an error.
"""

from __future__ import annotations

import functools
import logging
from typing import Iterable, Sequence

from mcleaner.core.heuristics import (
    app_bundle_path,
    applications_bundle_key,
    bundle_key_variants,
    container_key,
    display_key,
)
from mcleaner.core.inventory import Inventory
from mcleaner.core.models import (
    Confidence,
    IndexEntry,
    KeyKind,
    MatchMethod,
    OwnerAttribution,
)
from mcleaner.core.strategies import (
    DEFAULT_STRATEGIES,
    OwnerQuery,
    OwnerStrategy,
    name_match,
    prefix_match,
)

log = logging.getLogger(__name__)


def _as_inventory(inventory: Inventory | Iterable[IndexEntry] | None) -> Inventory:
    """Accept an Inventory or a plain sequence of index entries."""
    if inventory is None:
        return Inventory.empty()
    if isinstance(inventory, Inventory):
        return inventory
    return Inventory.from_entries(inventory)


class OwnerResolver:
    """
    Resolves owners against one inventory with a fixed strategy order.

    Results can optionally be memoized by exact input in an LRU cache of
    `memo_size` entries; resolution is a pure function of its inputs, so
    memoization never changes a result.
    """

    def __init__(
        self,
        inventory: Inventory | Iterable[IndexEntry] | None,
        strategies: Sequence[OwnerStrategy] = DEFAULT_STRATEGIES,
        *,
        memoize: bool = False,
        memo_size: int = 1024,
        cache_roots: Iterable[str] | None = None,
    ) -> None:
        self.inventory = _as_inventory(inventory)
        self.strategies = tuple(strategies)
        self.cache_roots = list(cache_roots) if cache_roots is not None else None
        self._resolve_cached = (
            functools.lru_cache(maxsize=memo_size)(self._resolve_uncached)
            if memoize
            else None
        )

    def resolve(self, label: str | None, exec_path: str | None = None) -> OwnerAttribution:
        """Attribute a label (and optional program path) to an owner."""
        if self._resolve_cached is not None:
            return self._resolve_cached(label or "", exec_path or "")
        return self._resolve_uncached(label or "", exec_path or "")

    def _resolve_uncached(self, label: str, exec_path: str) -> OwnerAttribution:
        return self._run(OwnerQuery(label=label, exec_path=exec_path or None))

    def cache_info(self):
        """Return the memo statistics, or None when memoization is off."""
        if self._resolve_cached is None:
            return None
        return self._resolve_cached.cache_info()

    def _run(self, query: OwnerQuery) -> OwnerAttribution:
        for strategy in self.strategies:
            hit = strategy.resolve(query, self.inventory)
            if hit is not None:
                log.debug(
                    "owner: %s (conf=%s) | label=%s | owner=%s",
                    hit.match_method.value,
                    hit.confidence.value,
                    query.label,
                    hit.owner_name,
                )
                return hit
        log.debug("owner: none | label=%s", query.label)
        return OwnerAttribution.unknown()

    def resolve_path(self, path: str | None) -> OwnerAttribution:
        """Attribute a filesystem path to an owner."""
        return resolve_owner_from_path(path, self.inventory, cache_roots=self.cache_roots)


def resolve_owner(
    label: str | None,
    exec_path: str | None = None,
    inventory: Inventory | Iterable[IndexEntry] | None = None,
) -> OwnerAttribution:
    """
    Attribute a launchd/login-item label to its owning software.

    Tiers, first success wins: Apple short-circuit, exact bundle id, program
    path, normalized name, package service, reverse-DNS prefix, static vendor
    prefix map. Anything else is Unknown with LOW confidence.

    Args:
        label: Label or bundle-id-like identifier.
        exec_path: Program path of the item, if known.
        inventory: Inventory (or index entries) built for this run.

    Returns:
        The owner attribution; never raises for unmatched input.
    """
    return OwnerResolver(inventory).resolve(label, exec_path)


def _lookup_exact(variants: list[str], inventory: Inventory) -> OwnerAttribution | None:
    for variant in variants:
        entry = inventory.lookup(variant)
        if entry is None:
            continue
        if entry.kind == KeyKind.BUNDLE_ID:
            return OwnerAttribution.from_entry(entry, MatchMethod.BUNDLE_ID, Confidence.HIGH)
        if entry.kind == KeyKind.NAME:
            return OwnerAttribution.from_entry(
                entry, MatchMethod.NORMALIZED_NAME, Confidence.MEDIUM
            )
    return None


def resolve_owner_from_path(
    path: str | None,
    inventory: Inventory | Iterable[IndexEntry] | None = None,
    *,
    cache_roots: Iterable[str] | None = None,
) -> OwnerAttribution:
    """
    Attribute a filesystem path to its owning software.

    1. Paths inside (or equal to) a `.app` bundle resolve through the
       bundle's `path:` key.
    2. Otherwise a key is derived from `Containers/<key>`,
       `Group Containers/<key>` or `<cache root>/<key>`, falling back to the
       normalized name of an `/Applications/<Name>.app` bundle.
    3. The key and its Team-ID/`group.`-stripped variants are tried as exact
       keys, then as normalized names, then through the prefix search.
    4. With no match the derived key itself is returned as a best-effort
       display name (`installed=False`); with no derivable key, Unknown.

    Args:
        path: Absolute filesystem path.
        inventory: Inventory (or index entries) built for this run.
        cache_roots: User cache roots; defaults to `~/Library/Caches`.

    Returns:
        The owner attribution; never raises for unmatched input.
    """
    inv = _as_inventory(inventory)
    path = path or ""

    bundle = app_bundle_path(path)
    if bundle:
        entry = inv.lookup_path(bundle)
        if entry is not None:
            return OwnerAttribution.from_entry(entry, MatchMethod.PATH, Confidence.HIGH)

    key = container_key(path, cache_roots) or applications_bundle_key(path)
    if not key:
        return OwnerAttribution.unknown()

    variants = bundle_key_variants(key)
    hit = _lookup_exact(variants, inv)
    if hit is None:
        hit = next(
            (a for a in (name_match(v, inv) for v in variants) if a is not None),
            None,
        )
    if hit is None:
        hit = prefix_match(key, inv)
    if hit is not None:
        return hit

    log.debug("owner: not installed | path=%s | key=%s", path, key)
    return OwnerAttribution(
        owner_name=display_key(key),
        match_method=MatchMethod.NONE,
        confidence=Confidence.LOW,
        key=key,
        installed=False,
    )
