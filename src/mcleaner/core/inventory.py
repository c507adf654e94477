"""Inventory index construction and lookup.

The inventory is built once per run from the app and package scans and is
never mutated afterwards. It denormalizes every record into several lookup
keys (path, bundle id, normalized name, package-namespaced key) so that
callers can attribute files and labels to an installed owner with a single
dictionary lookup.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Protocol

from mcleaner.core.heuristics import normalize_app_name
from mcleaner.core.models import (
    PACKAGE_KEY_PREFIX,
    PATH_KEY_PREFIX,
    IndexEntry,
    InventoryRecord,
    KeyKind,
    OwnerSource,
    RecordKind,
)

log = logging.getLogger(__name__)

_PACKAGE_NAMESPACE = {
    RecordKind.BREW_FORMULA: "formula",
    RecordKind.BREW_CASK: "cask",
}


def path_key(path: str) -> str:
    """Return the index key for an absolute filesystem path."""
    return f"{PATH_KEY_PREFIX}{path}"


def package_key(kind: RecordKind, name: str) -> str:
    """Return the namespaced index key for a formula or cask."""
    return f"{PACKAGE_KEY_PREFIX}{_PACKAGE_NAMESPACE[kind]}:{name}"


def _record_entries(record: InventoryRecord) -> list[IndexEntry]:
    """Project one record onto its index entries, in build order."""
    if record.kind in _PACKAGE_NAMESPACE:
        return [
            IndexEntry(
                key=package_key(record.kind, record.package_id or record.name),
                owner_name=record.name,
                owner_source=record.source,
                kind=KeyKind.PACKAGE,
            )
        ]

    def entry(key: str, kind: KeyKind) -> IndexEntry:
        return IndexEntry(
            key=key,
            owner_name=record.name,
            owner_source=record.source,
            owner_path=record.path,
            kind=kind,
        )

    entries = [entry(path_key(record.path or ""), KeyKind.PATH)]
    if record.target_path and record.target_path != record.path:
        entries.append(entry(path_key(record.target_path), KeyKind.PATH))
    if record.bundle_id:
        entries.append(entry(record.bundle_id, KeyKind.BUNDLE_ID))
    normalized = normalize_app_name(record.name)
    if normalized:
        entries.append(entry(normalized, KeyKind.NAME))
    return entries


def build_index(records: Iterable[InventoryRecord]) -> list[IndexEntry]:
    """
    Build the deduplicated inventory index from scanned records.

    For each app: `path:<path>` (plus `path:<target>` for symlinked
    bundles), the bare bundle id when known, and the normalized name.
    For each package: `package:formula:<name>` or `package:cask:<name>`.

    Only the first occurrence of a key is kept. Records arrive in scan
    order (system roots first), so system apps win ties against user-level
    copies of the same name.

    Args:
        records: Inventory records in scan order.

    Returns:
        Index entries in build order, one per key.
    """
    seen: set[str] = set()
    index: list[IndexEntry] = []
    for record in records:
        for entry in _record_entries(record):
            if not entry.key or entry.key in seen:
                continue
            seen.add(entry.key)
            index.append(entry)
    return index


@dataclass(frozen=True)
class InventoryCounts:
    """Summary counts of a built inventory."""

    system_apps: int = 0
    user_apps: int = 0
    formulae: int = 0
    casks: int = 0
    index_keys: int = 0
    package_binaries: int = 0


@dataclass(frozen=True)
class Inventory:
    """
    Immutable, multi-keyed lookup table of installed software.

    Build it with `from_records` (or `from_entries` when only index rows
    are at hand) and pass it by reference to every resolver call.
    """

    records: tuple[InventoryRecord, ...] = ()
    entries: tuple[IndexEntry, ...] = ()
    package_binaries: frozenset[str] = frozenset()
    _by_key: Mapping[str, IndexEntry] = field(
        default_factory=dict, repr=False, compare=False
    )
    _dotted: tuple[IndexEntry, ...] = field(default=(), repr=False, compare=False)

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[IndexEntry],
        *,
        records: Iterable[InventoryRecord] = (),
        package_binaries: Iterable[str] = (),
    ) -> Inventory:
        """Wrap index entries, keeping the first entry for duplicate keys."""
        by_key: dict[str, IndexEntry] = {}
        for entry in entries:
            if entry.key and entry.key not in by_key:
                by_key[entry.key] = entry
        kept = tuple(by_key.values())
        dotted = tuple(
            e
            for e in kept
            if e.kind in (KeyKind.BUNDLE_ID, KeyKind.NAME)
            and "." in e.key
            and not e.key.startswith((PATH_KEY_PREFIX, PACKAGE_KEY_PREFIX))
        )
        return cls(
            records=tuple(records),
            entries=kept,
            package_binaries=frozenset(b for b in package_binaries if b),
            _by_key=by_key,
            _dotted=dotted,
        )

    @classmethod
    def from_records(
        cls,
        records: Iterable[InventoryRecord],
        *,
        package_binaries: Iterable[str] = (),
    ) -> Inventory:
        """Build the index for `records` and wrap it."""
        records = tuple(records)
        return cls.from_entries(
            build_index(records),
            records=records,
            package_binaries=package_binaries,
        )

    @classmethod
    def empty(cls) -> Inventory:
        """Return an inventory with no entries."""
        return cls.from_entries(())

    def lookup(self, key: str | None) -> IndexEntry | None:
        """Return the entry for an exact key, or None."""
        if not key:
            return None
        return self._by_key.get(key)

    def has_key(self, key: str | None) -> bool:
        """True when `key` is present in the index."""
        return self.lookup(key) is not None

    def lookup_path(self, path: str | None) -> IndexEntry | None:
        """Return the entry indexed under `path:<path>`, or None."""
        if not path:
            return None
        return self.lookup(path_key(path))

    def lookup_package(self, kind: RecordKind, name: str) -> IndexEntry | None:
        """Return the entry for an installed formula or cask, or None."""
        if not name:
            return None
        return self.lookup(package_key(kind, name))

    def dotted_entries(self) -> tuple[IndexEntry, ...]:
        """Bundle-id-shaped entries (no path or package keys), in build order."""
        return self._dotted

    def is_package_binary(self, name: str) -> bool:
        """True when `name` is an executable provided by the package manager."""
        return bool(name) and name in self.package_binaries

    def counts(self) -> InventoryCounts:
        """Return summary counts for logging and display."""
        apps = [r for r in self.records if r.kind == RecordKind.APP]
        return InventoryCounts(
            system_apps=sum(1 for r in apps if r.source == OwnerSource.SYSTEM_APP),
            user_apps=sum(1 for r in apps if r.source != OwnerSource.SYSTEM_APP),
            formulae=sum(1 for r in self.records if r.kind == RecordKind.BREW_FORMULA),
            casks=sum(1 for r in self.records if r.kind == RecordKind.BREW_CASK),
            index_keys=len(self.entries),
            package_binaries=len(self.package_binaries),
        )

    def __len__(self) -> int:
        return len(self.entries)


class AppSource(Protocol):
    """Interface for discovering installed application bundles."""

    def scan(self) -> list[InventoryRecord]:
        """Return app records in root order."""
        ...


class PackageSource(Protocol):
    """Interface for listing package-manager installs."""

    def scan_packages(self) -> list[InventoryRecord]:
        """Return formula and cask records."""
        ...

    def binaries(self) -> list[str]:
        """Return executable basenames provided by the package manager."""
        ...


def build_inventory(
    app_source: AppSource,
    package_source: PackageSource | None = None,
) -> Inventory:
    """
    Scan apps and packages and build the run's inventory.

    Apps are scanned before packages so that app keys are indexed first.
    Scanners degrade to empty results on absence or permission problems,
    so this never fails because of the host system's state.

    Args:
        app_source: Application scanner.
        package_source: Package scanner, or None to skip packages.

    Returns:
        The immutable Inventory for this run.
    """
    records = list(app_source.scan())
    binaries: list[str] = []
    if package_source is not None:
        records.extend(package_source.scan_packages())
        binaries = package_source.binaries()

    inventory = Inventory.from_records(records, package_binaries=binaries)
    c = inventory.counts()
    log.info(
        "Inventory: apps system=%d user=%d; brew formulae=%d casks=%d; index_keys=%d",
        c.system_apps,
        c.user_apps,
        c.formulae,
        c.casks,
        c.index_keys,
    )
    return inventory
